"""Slash-command handler.

Handles /directory (alias /dir) and /help on behalf of MainScreen,
keeping the screen focused on layout and dialogs. Output goes to the
message history; a command that needs a trust answer hands back an
opened PendingTrustDecision for the screen to present.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from wsgate.engine.errors import ConfigurationUnavailableError
from wsgate.shared.commands import (
    COMMAND_ALIASES,
    COMMAND_HELP,
    DIRECTORY_SUBCOMMANDS,
)
from wsgate.shared.messages import MessageHistory
from wsgate.workspace.admission import AdmissionController, split_path_argument
from wsgate.workspace.decision import PendingTrustDecision
from wsgate.workspace.reporter import CompletionReporter, MemoryReloader
from wsgate.workspace.trust_store import is_workspace_trusted

if TYPE_CHECKING:
    from wsgate.engine.session import WorkspaceSession

logger = logging.getLogger(__name__)

NO_PATHS_MESSAGE = "Please provide at least one path to add."
RESTRICTIVE_SANDBOX_MESSAGE = (
    "The /directory add command is not supported in restrictive sandbox "
    "profiles. Please use --include-directories when starting the session "
    "instead."
)


@dataclass
class CommandOutcome:
    """What the screen must do after a command ran."""

    handled: bool = True
    decision: PendingTrustDecision | None = None


class CommandHandler:
    """Processes slash commands for one session."""

    def __init__(
        self,
        history: MessageHistory,
        session: WorkspaceSession | None,
        memory_reloader: MemoryReloader | None = None,
        on_memory_file_count: Callable[[int], None] | None = None,
    ) -> None:
        self._history = history
        self._session = session
        self._controller: AdmissionController | None = None
        self._reporter: CompletionReporter | None = None
        if session is not None:
            self._controller = AdmissionController(
                session.workspace, session.trust_store,
            )
            self._reporter = CompletionReporter(
                session, history,
                memory_reloader=memory_reloader,
                on_memory_file_count=on_memory_file_count,
            )

    @property
    def controller(self) -> AdmissionController | None:
        return self._controller

    @property
    def reporter(self) -> CompletionReporter | None:
        return self._reporter

    # ── public entry point ──────────────────────────────────────────

    async def handle_command(self, name: str, arg_text: str = "") -> CommandOutcome:
        """Dispatch a slash command."""
        name = COMMAND_ALIASES.get(name.lower(), name.lower())

        if name == "help":
            self._cmd_help()
            return CommandOutcome()
        if name == "directory":
            return await self._cmd_directory(arg_text)

        self._history.error(
            f"Unknown command: /{name}. Type /help for available commands."
        )
        return CommandOutcome(handled=False)

    # ── individual commands ─────────────────────────────────────────

    def _cmd_help(self) -> None:
        lines = ["Available commands:"]
        for cmd, desc in COMMAND_HELP.items():
            lines.append(f"  /{cmd} -- {desc}")
        self._history.info("\n".join(lines))

    def _directory_usage(self) -> str:
        lines = ["Usage: /directory <subcommand>"]
        for sub, desc in DIRECTORY_SUBCOMMANDS.items():
            lines.append(f"  {sub} -- {desc}")
        return "\n".join(lines)

    async def _cmd_directory(self, arg_text: str) -> CommandOutcome:
        sub, _, rest = arg_text.strip().partition(" ")
        sub = sub.lower()
        if sub == "add":
            return await self._cmd_directory_add(rest)
        if sub == "show":
            self._cmd_directory_show()
            return CommandOutcome()
        self._history.error(self._directory_usage())
        return CommandOutcome(handled=False)

    async def _cmd_directory_add(self, args: str) -> CommandOutcome:
        session = self._session
        if session is None or self._controller is None or self._reporter is None:
            self._history.error(str(ConfigurationUnavailableError()))
            return CommandOutcome()

        paths = split_path_argument(args)
        if not paths:
            self._history.error(NO_PATHS_MESSAGE)
            return CommandOutcome()

        if session.is_restrictive_sandbox():
            logger.info(
                "Refusing /directory add in sandbox profile %s",
                session.config.sandbox_profile,
            )
            self._history.error(RESTRICTIVE_SANDBOX_MESSAGE)
            return CommandOutcome()

        config = session.config
        batch = self._controller.admit(
            paths,
            is_workspace_trusted=is_workspace_trusted(config, session.trust_store),
            trust_feature_enabled=config.folder_trust_enabled,
        )
        if batch.needs_decision:
            decision = PendingTrustDecision(
                batch, self._controller, self._reporter, silent=False,
            )
            return CommandOutcome(decision=decision.open())

        await self._reporter.finish(batch.added, batch.errors, silent=False)
        return CommandOutcome()

    def _cmd_directory_show(self) -> None:
        session = self._session
        if session is None:
            self._history.error(str(ConfigurationUnavailableError()))
            return
        directory_list = "\n".join(
            f"- {d}" for d in session.workspace.get_directories()
        )
        self._history.info(f"Current workspace directories:\n{directory_list}")
