"""Main screen: message log plus command input."""

from __future__ import annotations

import logging

from textual import work
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Footer, Header, Input, Static

from wsgate.engine.errors import TrustPersistError
from wsgate.engine.session import WorkspaceSession
from wsgate.shared.commands import parse_command
from wsgate.shared.messages import MessageHistory
from wsgate.tui.handlers.command_handler import CommandHandler
from wsgate.tui.widgets.message_log import MessageLog
from wsgate.workspace.decision import PendingTrustDecision, TrustChoice
from wsgate.workspace.include_dirs import IncludeDirsTrust
from wsgate.workspace.reporter import MemoryReloader
from wsgate.workspace.trust_store import TrustLevel, is_workspace_trusted

logger = logging.getLogger(__name__)


class MainScreen(Screen):
    """Workspace session screen."""

    DEFAULT_CSS = """
    MainScreen #message-log {
        height: 1fr;
        border: round $primary;
    }
    MainScreen #status-line {
        height: 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        session: WorkspaceSession,
        history: MessageHistory,
        memory_reloader: MemoryReloader | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.history = history
        self.command_handler = CommandHandler(
            history,
            session,
            memory_reloader=memory_reloader,
            on_memory_file_count=self._update_status,
        )
        self.include_dirs = IncludeDirsTrust(
            session,
            self.command_handler.controller,
            self.command_handler.reporter,
        )
        self.active_decision: PendingTrustDecision | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield MessageLog(id="message-log")
        yield Static(self._status_text(), id="status-line")
        yield Input(
            placeholder="/directory add PATH[,PATH...]  •  /directory show  •  /help",
            id="command-input",
        )
        yield Footer()

    def on_mount(self) -> None:
        log = self.query_one("#message-log", MessageLog)
        for item in self.history.items:
            log.write_item(item)
        self.history.subscribe(log.write_item)
        self.query_one("#command-input", Input).focus()
        self._check_workspace_trust()

    # ── status ──────────────────────────────────────────────────────

    def _status_text(self) -> str:
        dirs = len(self.session.workspace.get_directories())
        return (
            f"{dirs} workspace director{'y' if dirs == 1 else 'ies'} • "
            f"{self.session.memory_file_count} memory file(s)"
        )

    def _update_status(self, _count: int | None = None) -> None:
        try:
            self.query_one("#status-line", Static).update(self._status_text())
        except Exception:
            pass

    # ── workspace trust ─────────────────────────────────────────────

    def _check_workspace_trust(self) -> None:
        trusted = is_workspace_trusted(self.session.config, self.session.trust_store)
        if trusted is not None:
            self._run_include_dirs(trusted)
            return

        from wsgate.tui.screens.workspace_trust import WorkspaceTrustScreen

        def on_dismiss(level: TrustLevel | None) -> None:
            level = level or TrustLevel.DO_NOT_TRUST
            try:
                self.session.trust_store.set_value(
                    self.session.workspace.working_dir, level,
                )
            except TrustPersistError as exc:
                self.history.error(f"Error saving workspace trust: {exc}")
            self._run_include_dirs(level is not TrustLevel.DO_NOT_TRUST)

        self.app.push_screen(
            WorkspaceTrustScreen(self.session.workspace.working_dir),
            callback=on_dismiss,
        )

    @work(name="include-dirs")
    async def _run_include_dirs(self, trusted: bool) -> None:
        decision = await self.include_dirs.on_workspace_trust(trusted)
        if decision is not None:
            self.present_decision(decision)
        self._update_status()

    # ── trust decisions ─────────────────────────────────────────────

    def present_decision(self, decision: PendingTrustDecision) -> None:
        """Show the folder trust dialog; its answer resolves *decision*."""
        from wsgate.tui.screens.folder_trust import MultiFolderTrustScreen

        self.active_decision = decision

        def on_dismiss(choice: TrustChoice | None) -> None:
            self._resolve_decision(decision, choice or TrustChoice.NO)

        self.app.push_screen(
            MultiFolderTrustScreen(decision.folders), callback=on_dismiss,
        )

    @work(name="resolve-trust")
    async def _resolve_decision(
        self,
        decision: PendingTrustDecision,
        choice: TrustChoice,
    ) -> None:
        await decision.resolve(choice)
        if self.active_decision is decision:
            self.active_decision = None
        self._update_status()

    # ── input ───────────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        event.input.value = ""
        if not text:
            return
        parsed = parse_command(text)
        if parsed is None:
            self.history.error(
                "Only slash commands are supported here. Type /help for available commands."
            )
            return
        self._run_command(parsed.name, parsed.arg_text)

    @work(name="command")
    async def _run_command(self, name: str, arg_text: str) -> None:
        outcome = await self.command_handler.handle_command(name, arg_text)
        if outcome.decision is not None:
            self.present_decision(outcome.decision)
        self._update_status()
