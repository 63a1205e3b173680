"""Folder trust modal: asks whether unknown directories may join the workspace.

Shown when /directory add, or the startup include-directories pass,
hits directories with no trust rule. The answer applies to every listed
folder:

- yes:              add the folders for this session
- yes_and_remember: add them and store a TRUST_FOLDER rule for each
- no:               leave them out (Escape also means no)

Returns a TrustChoice.
"""
from __future__ import annotations

import time

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from wsgate.workspace.decision import TrustChoice

# Map button IDs to results
_RESULT_MAP = {
    "btn-trust-yes": TrustChoice.YES,
    "btn-trust-remember": TrustChoice.YES_AND_REMEMBER,
    "btn-trust-no": TrustChoice.NO,
}

# Button ordering for arrow-key navigation
_BUTTON_ORDER = ["btn-trust-yes", "btn-trust-remember", "btn-trust-no"]


class MultiFolderTrustScreen(ModalScreen[TrustChoice]):
    """Modal dialog listing folders whose trust is not yet known."""

    BINDINGS = [
        ("escape", "select_no", "No"),
        ("y", "select_yes", "Yes"),
        ("r", "select_remember", "Remember"),
        ("n", "select_no", "No"),
    ]

    _MOUNT_GUARD_SECONDS = 0.3

    CSS = """
    MultiFolderTrustScreen {
        align: center middle;
    }
    MultiFolderTrustScreen > Vertical {
        width: 80;
        height: auto;
        max-height: 30;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }
    MultiFolderTrustScreen Label {
        width: 100%;
        text-align: center;
        margin-bottom: 1;
    }
    MultiFolderTrustScreen #folder-trust-list {
        margin-bottom: 1;
    }
    MultiFolderTrustScreen Button {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, folders: list[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.folders = list(folders)

    def compose(self) -> ComposeResult:
        folder_lines = "\n".join(f"- {escape(f)}" for f in self.folders)
        with Vertical(id="folder-trust-dialog"):
            yield Label("[bold $warning]Do you trust these folders?[/bold $warning]")
            yield Static(
                "Adding a folder lets the agent read and run files in it. "
                "Only trust folders whose contents you know.",
                classes="info-text",
            )
            yield Static(folder_lines, id="folder-trust-list", markup=True)
            yield Button("[y] Yes", id="btn-trust-yes", variant="success")
            yield Button(
                "[r] Yes, and remember",
                id="btn-trust-remember",
                variant="warning",
            )
            yield Button("[n] No", id="btn-trust-no", variant="error")

    def on_mount(self) -> None:
        self._mount_time = time.monotonic()
        try:
            self.query_one("#btn-trust-yes", Button).focus()
        except Exception:
            pass

    def _is_guarded(self) -> bool:
        elapsed = time.monotonic() - getattr(self, "_mount_time", 0)
        return elapsed < self._MOUNT_GUARD_SECONDS

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if self._is_guarded():
            return
        self.dismiss(_RESULT_MAP.get(event.button.id, TrustChoice.NO))

    def key_up(self) -> None:
        self._move_focus(-1)

    def key_down(self) -> None:
        self._move_focus(1)

    def _move_focus(self, direction: int) -> None:
        focused = self.focused
        if focused is None or focused.id not in _BUTTON_ORDER:
            try:
                self.query_one(f"#{_BUTTON_ORDER[0]}", Button).focus()
            except Exception:
                pass
            return
        idx = (_BUTTON_ORDER.index(focused.id) + direction) % len(_BUTTON_ORDER)
        self.query_one(f"#{_BUTTON_ORDER[idx]}", Button).focus()

    def _select(self, choice: TrustChoice) -> None:
        if self._is_guarded():
            return
        self.dismiss(choice)

    def action_select_yes(self) -> None:
        self._select(TrustChoice.YES)

    def action_select_remember(self) -> None:
        self._select(TrustChoice.YES_AND_REMEMBER)

    def action_select_no(self) -> None:
        self._select(TrustChoice.NO)
