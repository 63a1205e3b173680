"""Admission controller: decides which requested directories join the workspace.

Each batch of requested paths is normalized and, when folder trust is
enforced, partitioned by trust verdict:

- trusted:   added to the workspace immediately
- untrusted: rejected with one combined error for the whole batch
- unknown:   held back until the user decides (see decision.py)

Nothing here raises for a bad path. Failures become message strings in
the batch so the caller can report the full outcome in one pass.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from wsgate.engine.errors import WorkspaceAddError
from wsgate.workspace.context import WorkspaceContext
from wsgate.workspace.paths import expand_home_dir
from wsgate.workspace.trust_store import TrustedFolders, TrustVerdict

logger = logging.getLogger(__name__)


def bullet_list(paths: Iterable[str]) -> str:
    """Render paths the way every user-facing message lists them."""
    return "- " + "\n- ".join(paths)


def untrusted_message(paths: Sequence[str]) -> str:
    return (
        "The following directories are explicitly untrusted and cannot be "
        f"added to a trusted workspace:\n{bullet_list(paths)}\n"
        "Please use the permissions command to modify their trust level."
    )


def add_error_message(path: str, exc: BaseException) -> str:
    return f"Error adding '{path}': {exc}"


def split_path_argument(args: str) -> list[str]:
    """Split a comma-separated /directory add argument, dropping blanks."""
    return [p for p in args.split(",") if p.strip()]


@dataclass
class AdmissionResult:
    """Directories added and errors collected so far.

    Both lists only ever grow while a batch is being processed.
    """

    added: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class AdmissionBatch(AdmissionResult):
    """Outcome of one admission request."""

    untrusted: list[str] = field(default_factory=list)
    pending_unknown: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    trust_checked: bool = False

    @property
    def needs_decision(self) -> bool:
        return bool(self.pending_unknown)


class AdmissionController:
    """Sole writer of the workspace directory set."""

    def __init__(
        self,
        workspace: WorkspaceContext,
        trust_store: TrustedFolders,
    ) -> None:
        self._workspace = workspace
        self._trust_store = trust_store

    @property
    def workspace(self) -> WorkspaceContext:
        return self._workspace

    @property
    def trust_store(self) -> TrustedFolders:
        return self._trust_store

    def normalize(self, path: str) -> str:
        """Absolute form of *path*; relative paths hang off the working dir.

        The same string is used for the trust lookup, the workspace add
        and the ``added`` list.
        """
        return expand_home_dir(path, self._workspace.working_dir)

    def admit(
        self,
        paths: Sequence[str],
        *,
        is_workspace_trusted: bool | None,
        trust_feature_enabled: bool,
    ) -> AdmissionBatch:
        """Admit *paths*, classifying them only when trust is enforced.

        Trust lookups happen only when the feature is enabled and the
        main workspace itself is trusted. Otherwise every path is added
        directly.
        """
        batch = AdmissionBatch()
        requested = [p.strip() for p in paths]

        if not trust_feature_enabled or is_workspace_trusted is not True:
            logger.debug(
                "Admitting %d path(s) without trust checks "
                "(feature_enabled=%s, workspace_trusted=%s)",
                len(requested), trust_feature_enabled, is_workspace_trusted,
            )
            self.add_paths(requested, batch)
            return batch

        batch.trust_checked = True
        trusted: list[str] = []
        for path in requested:
            verdict = self._trust_store.is_path_trusted(self.normalize(path))
            if verdict is TrustVerdict.UNTRUSTED:
                batch.untrusted.append(path)
            elif verdict is TrustVerdict.UNKNOWN:
                batch.pending_unknown.append(path)
            else:
                trusted.append(path)

        if batch.untrusted:
            batch.errors.append(untrusted_message(batch.untrusted))

        self.add_paths(trusted, batch)
        logger.info(
            "Admission batch: %d added, %d failed, %d untrusted, %d pending",
            len(batch.added), len(batch.failed),
            len(batch.untrusted), len(batch.pending_unknown),
        )
        return batch

    def add_paths(
        self,
        paths: Iterable[str],
        result: AdmissionResult,
    ) -> None:
        """Add each path, recording successes and per-path errors.

        A failing path never stops the rest of the batch.
        """
        for path in paths:
            normalized = self.normalize(path)
            try:
                self._workspace.add_directory(normalized)
            except (WorkspaceAddError, OSError) as exc:
                logger.debug("Workspace rejected %s: %s", path, exc)
                result.errors.append(add_error_message(path, exc))
                if isinstance(result, AdmissionBatch):
                    result.failed.append(path)
                continue
            result.added.append(normalized)
