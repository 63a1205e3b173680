"""Exception hierarchy for workspace admission.

Specific exceptions for each failure mode. The admission layer converts
all of them except DecisionResolvedError into user-visible messages.
"""
from __future__ import annotations


class WorkspaceGateError(Exception):
    """Base exception for all workspace admission errors."""


class ConfigurationUnavailableError(WorkspaceGateError):
    """The session has no active configuration."""
    def __init__(self) -> None:
        super().__init__("Configuration is not available.")


class SettingsError(WorkspaceGateError):
    """A settings file exists but could not be parsed."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid settings file {path}: {reason}")


class WorkspaceAddError(WorkspaceGateError):
    """The workspace refused a directory."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class DirectoryNotFoundError(WorkspaceAddError):
    """Requested directory does not exist."""
    def __init__(self, path: str):
        super().__init__(path, f"Directory does not exist: {path}")


class PathNotDirectoryError(WorkspaceAddError):
    """Requested path exists but is not a directory."""
    def __init__(self, path: str):
        super().__init__(path, f"Path is not a directory: {path}")


class MemoryReloadError(WorkspaceGateError):
    """Hierarchical memory could not be reloaded."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")


class DecisionStateError(WorkspaceGateError):
    """A trust decision was driven through a transition it does not allow."""
    def __init__(self, folders: list[str], state: str):
        self.folders = folders
        self.state = state
        super().__init__(
            f"Trust decision for {', '.join(folders)} is {state}"
        )


class DecisionResolvedError(DecisionStateError):
    """A trust decision was resolved more than once."""
    def __init__(self, folders: list[str]):
        super().__init__(folders, "already resolved")


class TrustPersistError(WorkspaceGateError):
    """A folder trust rule could not be written."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)
