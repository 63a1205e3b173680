"""Session configuration loaded from environment variables.

All settings have sensible defaults. Override via WSGATE_* env vars,
then settings YAML files, then command-line flags.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_FILE_NAMES = ["AGENTS.md"]
DEFAULT_IGNORE_DIRS = [
    ".git", "node_modules", ".venv", "venv", "__pycache__", "dist", "build",
]
IMPORT_FORMATS = ("tree", "flat")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.lower() in {"1", "true", "yes"}


def _env_list(name: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, "").split(",") if p.strip()]


@dataclass
class FileFilteringOptions:
    """Which directories memory discovery skips."""

    respect_git_ignore: bool = True
    ignore_dirs: list[str] = field(
        default_factory=lambda: list(DEFAULT_IGNORE_DIRS)
    )


@dataclass
class SessionConfig:
    """Workspace session configuration."""

    working_dir: str = "."
    debug_mode: bool = False

    # Folder trust enforcement. When disabled, no trust lookups happen
    # and every requested directory is admitted directly.
    folder_trust_enabled: bool = True

    # Sandbox profile name; profiles starting with "restrictive-" forbid
    # adding directories at runtime.
    sandbox_profile: str | None = None

    # Memory discovery
    load_memory_from_include_directories: bool = False
    import_format: str = "tree"  # "tree" or "flat"
    discovery_max_dirs: int = 200
    memory_file_names: list[str] = field(
        default_factory=lambda: list(DEFAULT_MEMORY_FILE_NAMES)
    )
    file_filtering: FileFilteringOptions = field(
        default_factory=FileFilteringOptions
    )

    # Directories requested at startup, admitted once workspace trust
    # is known.
    include_directories: list[str] = field(default_factory=list)

    log_level: str = "INFO"

    def validate(self) -> None:
        """Clamp values into their allowed ranges."""
        if self.import_format not in IMPORT_FORMATS:
            logger.warning(
                "Unknown import format %r; falling back to 'tree'",
                self.import_format,
            )
            self.import_format = "tree"
        if self.discovery_max_dirs < 1:
            self.discovery_max_dirs = 1
        if not self.memory_file_names:
            self.memory_file_names = list(DEFAULT_MEMORY_FILE_NAMES)

    @classmethod
    def from_env(cls) -> SessionConfig:
        """Load configuration from WSGATE_* environment variables."""
        env_vars = {
            k: v for k, v in os.environ.items() if k.startswith("WSGATE_")
        }
        if env_vars:
            logger.info(
                "SessionConfig.from_env: WSGATE_* env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(env_vars.items())),
            )
        else:
            logger.debug("SessionConfig.from_env: no WSGATE_* env vars set, using defaults")

        config = cls(
            working_dir=os.getenv("WSGATE_WORKING_DIR", cls.working_dir),
            debug_mode=_env_flag("WSGATE_DEBUG", cls.debug_mode),
            folder_trust_enabled=_env_flag(
                "WSGATE_FOLDER_TRUST", cls.folder_trust_enabled
            ),
            sandbox_profile=os.getenv("WSGATE_SANDBOX") or None,
            load_memory_from_include_directories=_env_flag(
                "WSGATE_LOAD_MEMORY_FROM_INCLUDE_DIRS",
                cls.load_memory_from_include_directories,
            ),
            import_format=os.getenv(
                "WSGATE_IMPORT_FORMAT", cls.import_format
            ),
            discovery_max_dirs=int(os.getenv(
                "WSGATE_DISCOVERY_MAX_DIRS", str(cls.discovery_max_dirs)
            )),
            memory_file_names=(
                _env_list("WSGATE_MEMORY_FILE_NAMES")
                or list(DEFAULT_MEMORY_FILE_NAMES)
            ),
            include_directories=_env_list("WSGATE_INCLUDE_DIRECTORIES"),
            log_level=os.getenv("WSGATE_LOG_LEVEL", cls.log_level),
        )
        config.validate()
        logger.info(
            "SessionConfig.from_env: cwd=%s folder_trust=%s sandbox=%s",
            config.working_dir, config.folder_trust_enabled,
            config.sandbox_profile,
        )
        return config
