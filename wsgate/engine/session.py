"""Runtime session: the state that admission reads and mutates."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from wsgate.engine.config import SessionConfig
from wsgate.workspace.context import WorkspaceContext
from wsgate.workspace.pending import PendingQueue
from wsgate.workspace.trust_store import TrustedFolders

logger = logging.getLogger(__name__)


class DirectoryContextClient(Protocol):
    """Content-generation session that must learn about new directories."""

    async def add_directory_context(self) -> None: ...


class ConversationContext:
    """Tracks the environment note sent with the next model turn.

    Each call to add_directory_context() queues a note listing the
    current workspace directories.
    """

    def __init__(self, workspace: WorkspaceContext) -> None:
        self._workspace = workspace
        self.pending_notes: list[str] = []

    async def add_directory_context(self) -> None:
        dirs = self._workspace.get_directories()
        note = (
            "The workspace now includes the following directories:\n"
            + "\n".join(f"- {d}" for d in dirs)
        )
        self.pending_notes.append(note)
        logger.debug("Queued directory context note for %d dir(s)", len(dirs))


@dataclass
class WorkspaceSession:
    """Everything the directory workflow needs from a running session."""

    config: SessionConfig
    workspace: WorkspaceContext
    trust_store: TrustedFolders
    pending_queue: PendingQueue
    client: DirectoryContextClient | None = None
    user_memory: str = ""
    memory_file_count: int = 0
    memory_paths: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        config: SessionConfig,
        trust_store: TrustedFolders | None = None,
        with_client: bool = True,
    ) -> WorkspaceSession:
        """Build a session whose include directories wait in the queue."""
        workspace = WorkspaceContext(str(Path(config.working_dir).resolve()))
        session = cls(
            config=config,
            workspace=workspace,
            trust_store=trust_store or TrustedFolders(),
            pending_queue=PendingQueue(config.include_directories),
        )
        if with_client:
            session.client = ConversationContext(workspace)
        return session

    def is_restrictive_sandbox(self) -> bool:
        profile = self.config.sandbox_profile or ""
        return profile.startswith("restrictive-")
