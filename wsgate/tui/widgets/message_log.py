"""Message log: RichLog panel for command output and admission reports."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import RichLog

from wsgate.shared.messages import HistoryItem, MessageType


class MessageLog(RichLog):
    """Scrolling log of INFO and ERROR history items."""

    def __init__(self, **kwargs) -> None:
        super().__init__(
            auto_scroll=True,
            wrap=True,
            markup=True,
            highlight=False,
            max_lines=5000,
            **kwargs,
        )

    def write_item(self, item: HistoryItem) -> None:
        stamp = item.timestamp.astimezone().strftime("%H:%M:%S")
        if item.type is MessageType.ERROR:
            label = "[bold red]Error[/bold red]"
        else:
            label = "[bold cyan]Info[/bold cyan]"
        # Message text is user-controlled (paths); never interpret markup.
        self.write(f"[dim]{stamp}[/dim] {label}")
        for line in item.text.splitlines() or [""]:
            self.write(f"  {escape(line)}")
