"""Workspace context: the session's set of active directories."""
from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable

from wsgate.engine.errors import DirectoryNotFoundError, PathNotDirectoryError

logger = logging.getLogger(__name__)

DirectoriesChangedListener = Callable[[list[str]], None]


class WorkspaceContext:
    """Ordered, duplicate-free set of workspace directories.

    The working directory is always the first entry. Relative paths are
    resolved against it. Only the admission layer adds directories;
    anything may read them.
    """

    def __init__(
        self,
        working_dir: str,
        directories: Iterable[str] = (),
    ) -> None:
        self._working_dir = os.path.abspath(working_dir)
        self._directories: list[str] = [self._working_dir]
        self._listeners: list[DirectoriesChangedListener] = []
        for directory in directories:
            self.add_directory(directory)

    @property
    def working_dir(self) -> str:
        return self._working_dir

    def _resolve(self, path: str) -> str:
        if not os.path.isabs(path):
            path = os.path.join(self._working_dir, path)
        return os.path.normpath(path)

    def add_directory(self, path: str) -> bool:
        """Add *path* to the workspace.

        Returns False if the directory was already present. Raises
        DirectoryNotFoundError or PathNotDirectoryError when the path
        cannot be a workspace directory.
        """
        resolved = self._resolve(path)
        if not os.path.exists(resolved):
            raise DirectoryNotFoundError(resolved)
        if not os.path.isdir(resolved):
            raise PathNotDirectoryError(resolved)
        if resolved in self._directories:
            logger.debug("Workspace already contains %s", resolved)
            return False
        self._directories.append(resolved)
        logger.info("Added workspace directory %s", resolved)
        self._notify()
        return True

    def get_directories(self) -> list[str]:
        return list(self._directories)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self._resolve(path) in self._directories

    def on_directories_changed(
        self,
        listener: DirectoriesChangedListener,
    ) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.get_directories()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Workspace directory listener failed")
