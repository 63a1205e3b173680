"""Pending trust decision for directories with no trust rule yet.

When an admission batch leaves directories whose trust is unknown, the
batch is parked in a PendingTrustDecision. The UI presents the folders,
and the user's answer resumes the batch with a single resolve() call:

    IDLE ──open()──▶ AWAITING_DECISION ──resolve()──▶ RESOLVED

Directories added before the dialog opened, and errors collected so
far, are carried forward and reported together with the outcome of the
decision.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from enum import Enum

from wsgate.engine.errors import (
    DecisionResolvedError,
    DecisionStateError,
    WorkspaceGateError,
)
from wsgate.workspace.admission import (
    AdmissionBatch,
    AdmissionController,
    AdmissionResult,
    bullet_list,
)
from wsgate.workspace.reporter import CompletionReporter
from wsgate.workspace.trust_store import TrustLevel

logger = logging.getLogger(__name__)


class DecisionState(Enum):
    IDLE = "idle"
    AWAITING_DECISION = "awaiting_decision"
    RESOLVED = "resolved"


class TrustChoice(Enum):
    YES = "yes"
    YES_AND_REMEMBER = "yes_and_remember"
    NO = "no"


def rejected_message(folders: list[str]) -> str:
    return (
        "The following directories were not added because they were not "
        f"trusted:\n{bullet_list(folders)}"
    )


def save_error_message(folder: str, exc: BaseException) -> str:
    return f"Error saving trust for '{folder}': {exc}"


class PendingTrustDecision:
    """A suspended admission batch waiting for the user's trust answer."""

    def __init__(
        self,
        batch: AdmissionBatch,
        controller: AdmissionController,
        reporter: CompletionReporter,
        *,
        silent: bool,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self.folders = list(batch.pending_unknown)
        self.silent = silent
        self.state = DecisionState.IDLE
        self._result = AdmissionResult(
            added=list(batch.added), errors=list(batch.errors),
        )
        self._controller = controller
        self._reporter = reporter
        self._on_complete = on_complete
        self._resolved = asyncio.Event()

    @property
    def result(self) -> AdmissionResult:
        return self._result

    def open(self) -> PendingTrustDecision:
        """Move to AWAITING_DECISION; the UI shows ``folders`` next."""
        if self.state is not DecisionState.IDLE:
            raise DecisionStateError(self.folders, self.state.value)
        if not self.folders:
            raise DecisionStateError(self.folders, "empty")
        self.state = DecisionState.AWAITING_DECISION
        logger.info("Awaiting trust decision for %d folder(s)", len(self.folders))
        return self

    def _choices_for(
        self,
        choice: TrustChoice | Mapping[str, TrustChoice],
    ) -> dict[str, TrustChoice]:
        if isinstance(choice, TrustChoice):
            return {folder: choice for folder in self.folders}
        unexpected = set(choice) - set(self.folders)
        if unexpected:
            logger.warning(
                "Ignoring choices for folders outside this decision: %s",
                ", ".join(sorted(unexpected)),
            )
        # Folders without an answer are not trusted.
        return {f: choice.get(f, TrustChoice.NO) for f in self.folders}

    async def resolve(
        self,
        choice: TrustChoice | Mapping[str, TrustChoice],
    ) -> AdmissionResult:
        """Apply the user's answer, in bulk or per folder.

        Accepted folders join the workspace now. Runs the completion
        report with everything carried forward, then ``on_complete``.
        """
        if self.state is DecisionState.RESOLVED:
            raise DecisionResolvedError(self.folders)
        if self.state is not DecisionState.AWAITING_DECISION:
            raise DecisionStateError(self.folders, self.state.value)
        self.state = DecisionState.RESOLVED

        choices = self._choices_for(choice)
        accepted = [f for f in self.folders if choices[f] is not TrustChoice.NO]
        rejected = [f for f in self.folders if choices[f] is TrustChoice.NO]
        logger.info(
            "Trust decision resolved: %d accepted, %d rejected",
            len(accepted), len(rejected),
        )

        try:
            for folder in accepted:
                if choices[folder] is TrustChoice.YES_AND_REMEMBER:
                    self._remember(folder)
            self._controller.add_paths(accepted, self._result)
            if rejected:
                self._result.errors.append(rejected_message(rejected))
            self._result.errors = await self._reporter.finish(
                self._result.added, self._result.errors, silent=self.silent,
            )
        finally:
            if self._on_complete is not None:
                self._on_complete()
            self._resolved.set()
        return self._result

    def _remember(self, folder: str) -> None:
        # The folder is still added for this session when the rule cannot be saved.
        try:
            self._controller.trust_store.set_value(
                self._controller.normalize(folder), TrustLevel.TRUST_FOLDER,
            )
        except (WorkspaceGateError, OSError) as exc:
            logger.warning("Could not remember trust for %s: %s", folder, exc)
            self._result.errors.append(save_error_message(folder, exc))

    async def wait(self) -> AdmissionResult:
        """Block until resolve() has finished."""
        await self._resolved.wait()
        return self._result
