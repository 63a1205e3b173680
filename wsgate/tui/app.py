"""wsgate TUI: Textual application class."""

from __future__ import annotations

from textual.app import App

from wsgate.engine.session import WorkspaceSession
from wsgate.shared.messages import MessageHistory
from wsgate.tui.screens.main import MainScreen
from wsgate.workspace.reporter import MemoryReloader


class WsgateApp(App):
    """Terminal UI for managing an agent's workspace directories."""

    TITLE = "wsgate"
    SUB_TITLE = "Workspace Directories"

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+e", "focus_input", "Input"),
    ]

    def __init__(
        self,
        session: WorkspaceSession,
        history: MessageHistory | None = None,
        memory_reloader: MemoryReloader | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.history = history or MessageHistory()
        self.memory_reloader = memory_reloader

    def on_mount(self) -> None:
        self.push_screen(
            MainScreen(self.session, self.history, self.memory_reloader)
        )

    def action_focus_input(self) -> None:
        from textual.widgets import Input
        try:
            self.screen.query_one("#command-input", Input).focus()
        except Exception:
            pass
