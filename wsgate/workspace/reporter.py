"""Completion reporter: side effects that follow an admission pass.

After directories are added (immediately, or once a trust dialog is
answered) the reporter refreshes hierarchical memory, tells the active
content session that its directory context changed, and emits the
success and error messages for the batch.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from wsgate.engine.config import FileFilteringOptions
from wsgate.engine.memory import MemoryLoadResult
from wsgate.shared.messages import MessageHistory
from wsgate.workspace.admission import bullet_list

if TYPE_CHECKING:
    from wsgate.engine.session import WorkspaceSession

logger = logging.getLogger(__name__)


class MemoryReloader(Protocol):
    def reload(
        self,
        working_dir: str,
        directories: Sequence[str],
        debug_mode: bool = False,
        import_format: str = "tree",
        filtering: FileFilteringOptions | None = None,
        max_dirs: int = 200,
    ) -> MemoryLoadResult: ...


class CompletionReporter:
    """Finishes an admission pass. Never raises."""

    def __init__(
        self,
        session: WorkspaceSession,
        history: MessageHistory,
        memory_reloader: MemoryReloader | None = None,
        on_memory_file_count: Callable[[int], None] | None = None,
    ) -> None:
        self._session = session
        self._history = history
        self._memory_reloader = memory_reloader
        self._on_memory_file_count = on_memory_file_count

    async def finish(
        self,
        added: Sequence[str],
        errors: Sequence[str],
        *,
        silent: bool,
    ) -> list[str]:
        """Run post-admission side effects and report the outcome.

        *silent* suppresses success messages only; errors always show.
        Returns the final error list, including reload failures.
        """
        added = list(added)
        errors = list(errors)

        if added and self._session.config.load_memory_from_include_directories:
            self._reload_memory(added, errors, silent)

        if added:
            client = self._session.client
            if client is not None:
                try:
                    await client.add_directory_context()
                except Exception as exc:
                    logger.warning("Directory context update failed: %s", exc)
                    errors.append(f"Error updating directory context: {exc}")
            if not silent:
                self._history.info(
                    f"Successfully added directories:\n{bullet_list(added)}"
                )

        if errors:
            self._history.error("\n".join(errors))
        return errors

    def _reload_memory(
        self,
        added: list[str],
        errors: list[str],
        silent: bool,
    ) -> None:
        if self._memory_reloader is None:
            logger.debug("No memory reloader configured; skipping refresh")
            return
        config = self._session.config
        try:
            result = self._memory_reloader.reload(
                self._session.workspace.working_dir,
                self._session.workspace.get_directories(),
                config.debug_mode,
                config.import_format,
                config.file_filtering,
                config.discovery_max_dirs,
            )
        except Exception as exc:
            # Directories already added stay added.
            logger.warning("Memory refresh failed: %s", exc)
            errors.append(f"Error refreshing memory: {exc}")
            return

        self._session.user_memory = result.content
        self._session.memory_file_count = result.file_count
        self._session.memory_paths = list(result.paths)
        if self._on_memory_file_count is not None:
            try:
                self._on_memory_file_count(result.file_count)
            except Exception:
                logger.exception("Memory file count listener failed")
        if not silent:
            self._history.info(
                "Successfully loaded memory files from the following "
                f"directories if there are:\n{bullet_list(added)}"
            )
