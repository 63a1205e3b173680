"""Workspace trust modal: asks once whether the working directory is trusted.

Returns the TrustLevel to store for the working directory. Include
directories from the command line wait until this is answered.
"""

from __future__ import annotations

import os
import time

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from wsgate.workspace.trust_store import TrustLevel

_RESULT_MAP = {
    "btn-trust-folder": TrustLevel.TRUST_FOLDER,
    "btn-trust-parent": TrustLevel.TRUST_PARENT,
    "btn-do-not-trust": TrustLevel.DO_NOT_TRUST,
}

# Button ordering for arrow-key navigation
_BUTTON_ORDER = ["btn-trust-folder", "btn-trust-parent", "btn-do-not-trust"]


class WorkspaceTrustScreen(ModalScreen[TrustLevel]):
    """Modal dialog for the main workspace trust decision."""

    BINDINGS = [
        ("escape", "select_level('DO_NOT_TRUST')", "Don't trust"),
        ("t", "select_level('TRUST_FOLDER')", "Trust folder"),
        ("p", "select_level('TRUST_PARENT')", "Trust parent"),
        ("d", "select_level('DO_NOT_TRUST')", "Don't trust"),
    ]

    _MOUNT_GUARD_SECONDS = 0.3

    CSS = """
    WorkspaceTrustScreen {
        align: center middle;
    }
    WorkspaceTrustScreen > Vertical {
        width: 90;
        height: auto;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }
    WorkspaceTrustScreen Horizontal {
        height: auto;
    }
    """

    def __init__(self, working_dir: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.working_dir = working_dir

    def compose(self) -> ComposeResult:
        parent = os.path.basename(os.path.dirname(self.working_dir)) or "/"
        with Vertical(id="workspace-trust-dialog"):
            yield Static(
                "[bold $warning]Do you trust this folder?[/bold $warning]",
                id="workspace-trust-title",
            )
            yield Static(escape(self.working_dir), id="workspace-trust-path")
            with Horizontal(id="workspace-trust-buttons"):
                yield Button("[t] Trust folder", variant="success", id="btn-trust-folder")
                yield Button(
                    f"[p] Trust parent ({escape(parent)})",
                    variant="warning",
                    id="btn-trust-parent",
                )
                yield Button("[d] Don't trust", variant="error", id="btn-do-not-trust")

    def on_mount(self) -> None:
        self._mount_time = time.monotonic()
        try:
            self.query_one("#btn-trust-folder", Button).focus()
        except Exception:
            pass

    def _is_guarded(self) -> bool:
        elapsed = time.monotonic() - getattr(self, "_mount_time", 0)
        return elapsed < self._MOUNT_GUARD_SECONDS

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if self._is_guarded():
            return
        self.dismiss(_RESULT_MAP.get(event.button.id, TrustLevel.DO_NOT_TRUST))

    def key_left(self) -> None:
        self._move_focus(-1)

    def key_right(self) -> None:
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

    def action_select_level(self, level: str) -> None:
        if self._is_guarded():
            return
        self.dismiss(TrustLevel[level])
