"""Startup admission of --include-directories.

Directories given at launch wait in the session's PendingQueue until
the main workspace's trust status is known. The first determined
status drains the queue exactly once.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wsgate.workspace.admission import AdmissionController
from wsgate.workspace.decision import PendingTrustDecision
from wsgate.workspace.reporter import CompletionReporter

if TYPE_CHECKING:
    from wsgate.engine.session import WorkspaceSession

logger = logging.getLogger(__name__)


class IncludeDirsTrust:
    """Drains pending include directories once workspace trust resolves."""

    def __init__(
        self,
        session: WorkspaceSession,
        controller: AdmissionController,
        reporter: CompletionReporter,
    ) -> None:
        self._session = session
        self._controller = controller
        self._reporter = reporter
        self._checked = False

    @property
    def checked(self) -> bool:
        return self._checked

    async def on_workspace_trust(
        self,
        is_trusted: bool | None,
    ) -> PendingTrustDecision | None:
        """React to the main workspace's trust status.

        Returns an opened decision when some directories need the user's
        answer; the caller must present it. Startup admissions are
        reported silently: only errors are shown.
        """
        # Wait until the trust status is determined, and run only once.
        if is_trusted is None or self._checked:
            return None
        self._checked = True

        queue = self._session.pending_queue
        pending = queue.drain()
        if not pending:
            return None

        config = self._session.config
        batch = self._controller.admit(
            pending,
            is_workspace_trusted=is_trusted,
            trust_feature_enabled=config.folder_trust_enabled,
        )

        if batch.needs_decision:
            decision = PendingTrustDecision(
                batch,
                self._controller,
                self._reporter,
                silent=True,
                on_complete=queue.clear,
            )
            return decision.open()

        try:
            if batch.added or batch.errors:
                await self._reporter.finish(
                    batch.added, batch.errors, silent=True,
                )
        finally:
            queue.clear()
        return None
