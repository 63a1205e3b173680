"""Persistent storage for folder trust rules.

Rules live in ~/.wsgate/trusted_folders.json as a mapping of absolute
path to trust level:

    {
      "/home/me/src": "TRUST_FOLDER",
      "/home/me/src/project/child": "TRUST_PARENT",
      "/tmp/downloads": "DO_NOT_TRUST"
    }
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from wsgate.engine.errors import TrustPersistError

if TYPE_CHECKING:
    from wsgate.engine.config import SessionConfig

logger = logging.getLogger(__name__)

GLOBAL_DIR = Path.home() / ".wsgate"
FILENAME = "trusted_folders.json"


class TrustVerdict(Enum):
    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"
    UNKNOWN = "unknown"


class TrustLevel(Enum):
    TRUST_FOLDER = "TRUST_FOLDER"
    TRUST_PARENT = "TRUST_PARENT"
    DO_NOT_TRUST = "DO_NOT_TRUST"


def _is_within(location: str, root: str) -> bool:
    """Whether *location* equals *root* or sits below it."""
    try:
        rel = os.path.relpath(location, root)
    except ValueError:
        # Different drives on Windows
        return False
    if rel == os.curdir:
        return True
    return not (
        rel == os.pardir
        or rel.startswith(os.pardir + os.sep)
        or os.path.isabs(rel)
    )


class TrustedFolders:
    """Load and save folder trust rules."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or GLOBAL_DIR / FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def rules(self) -> dict[str, TrustLevel]:
        """Load all rules from disk.

        Read on every call so changes made by another session are seen
        by the next admission batch.
        """
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError):
            logger.warning("Failed to load %s", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", self._path)
            return {}
        rules: dict[str, TrustLevel] = {}
        for folder, level in data.items():
            try:
                rules[os.path.normpath(folder)] = TrustLevel(level)
            except ValueError:
                logger.warning(
                    "Ignoring unknown trust level %r for %s", level, folder
                )
        return rules

    def is_path_trusted(self, location: str) -> TrustVerdict:
        """Classify a normalized path against the stored rules."""
        location = os.path.normpath(location)
        rules = self.rules()
        trusted_roots: list[str] = []
        untrusted: list[str] = []
        for folder, level in rules.items():
            if level is TrustLevel.TRUST_FOLDER:
                trusted_roots.append(folder)
            elif level is TrustLevel.TRUST_PARENT:
                trusted_roots.append(os.path.dirname(folder))
            else:
                untrusted.append(folder)

        if any(_is_within(location, root) for root in trusted_roots):
            verdict = TrustVerdict.TRUSTED
        elif location in untrusted:
            verdict = TrustVerdict.UNTRUSTED
        else:
            verdict = TrustVerdict.UNKNOWN
        logger.debug("Trust verdict for %s: %s", location, verdict.value)
        return verdict

    def set_value(self, location: str, level: TrustLevel) -> None:
        """Store a rule for *location* (create the file if needed).

        Raises TrustPersistError when the rule file cannot be written.
        """
        existing = {
            folder: rule.value for folder, rule in self.rules().items()
        }
        existing[os.path.normpath(location)] = level.value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(existing, indent=2, sort_keys=True) + "\n"
            )
        except OSError as exc:
            logger.warning("Failed to write %s: %s", self._path, exc)
            raise TrustPersistError(str(self._path), str(exc)) from exc


def is_workspace_trusted(
    config: SessionConfig,
    store: TrustedFolders,
) -> bool | None:
    """Trust status of the session's working directory.

    Returns True when folder trust is disabled, None while no rule
    covers the working directory yet.
    """
    if not config.folder_trust_enabled:
        return True
    verdict = store.is_path_trusted(os.path.abspath(config.working_dir))
    if verdict is TrustVerdict.TRUSTED:
        return True
    if verdict is TrustVerdict.UNTRUSTED:
        return False
    return None
