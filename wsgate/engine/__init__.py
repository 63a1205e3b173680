"""Session engine: configuration, settings, memory loading and errors."""
from .config import FileFilteringOptions, SessionConfig
from .errors import (
    ConfigurationUnavailableError,
    DecisionResolvedError,
    DecisionStateError,
    DirectoryNotFoundError,
    MemoryReloadError,
    PathNotDirectoryError,
    SettingsError,
    TrustPersistError,
    WorkspaceAddError,
    WorkspaceGateError,
)
from .memory import HierarchicalMemoryLoader, MemoryLoadResult

__all__ = [
    "ConfigurationUnavailableError",
    "DecisionResolvedError",
    "DecisionStateError",
    "DirectoryNotFoundError",
    "FileFilteringOptions",
    "HierarchicalMemoryLoader",
    "MemoryLoadResult",
    "MemoryReloadError",
    "PathNotDirectoryError",
    "SessionConfig",
    "SettingsError",
    "TrustPersistError",
    "WorkspaceAddError",
    "WorkspaceGateError",
]
