"""Tests for the trust modals and the main screen command flow."""

from __future__ import annotations

import asyncio
from pathlib import Path

from textual.widgets import Input

from wsgate.engine.config import SessionConfig
from wsgate.engine.session import WorkspaceSession
from wsgate.shared.messages import MessageHistory
from wsgate.workspace.decision import TrustChoice
from wsgate.workspace.trust_store import TrustedFolders, TrustLevel, TrustVerdict


def _session(tmp_path: Path, trust_workspace: bool = True, include=()) -> WorkspaceSession:
    work = tmp_path / "work"
    work.mkdir(exist_ok=True)
    store = TrustedFolders(tmp_path / "trust.json")
    if trust_workspace:
        store.set_value(str(work), TrustLevel.TRUST_FOLDER)
    config = SessionConfig(working_dir=str(work), include_directories=list(include))
    return WorkspaceSession.create(config, trust_store=store, with_client=False)


async def _wait_for_screen(app, pilot, screen_type, attempts: int = 20) -> None:
    for _ in range(attempts):
        if isinstance(app.screen, screen_type):
            return
        await pilot.pause(0.05)
    raise AssertionError(f"{screen_type.__name__} was never shown")


def test_folder_trust_keys_ignored_during_mount_guard(tmp_path: Path):
    async def _run() -> None:
        from wsgate.tui.app import WsgateApp
        from wsgate.tui.screens.folder_trust import MultiFolderTrustScreen

        app = WsgateApp(_session(tmp_path))
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()

            result_holder: list[TrustChoice | None] = []
            screen = MultiFolderTrustScreen(["/srv/a", "/srv/b"])
            app.push_screen(screen, callback=lambda r: result_holder.append(r))
            await pilot.pause()

            await pilot.press("y")
            await pilot.pause()
            assert result_holder == []
            assert isinstance(app.screen, MultiFolderTrustScreen)

            await pilot.pause(0.35)
            await pilot.press("r")
            await pilot.pause()

            assert result_holder == [TrustChoice.YES_AND_REMEMBER]

    asyncio.run(_run())


def test_folder_trust_escape_means_no(tmp_path: Path):
    async def _run() -> None:
        from wsgate.tui.app import WsgateApp
        from wsgate.tui.screens.folder_trust import MultiFolderTrustScreen

        app = WsgateApp(_session(tmp_path))
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()

            result_holder: list[TrustChoice | None] = []
            app.push_screen(
                MultiFolderTrustScreen(["/srv/[a]"]),
                callback=lambda r: result_holder.append(r),
            )
            await pilot.pause(0.35)
            await pilot.press("escape")
            await pilot.pause()

            assert result_holder == [TrustChoice.NO]

    asyncio.run(_run())


def test_directory_add_prompts_for_unknown_folder(tmp_path: Path):
    async def _run() -> None:
        from wsgate.tui.app import WsgateApp
        from wsgate.tui.screens.folder_trust import MultiFolderTrustScreen
        from wsgate.tui.screens.main import MainScreen

        session = _session(tmp_path)
        history = MessageHistory()
        extra = tmp_path / "extra"
        extra.mkdir()

        app = WsgateApp(session, history)
        async with app.run_test(size=(120, 40)) as pilot:
            await _wait_for_screen(app, pilot, MainScreen)

            command_input = app.screen.query_one("#command-input", Input)
            command_input.value = f"/directory add {extra}"
            command_input.focus()
            await pilot.press("enter")

            await _wait_for_screen(app, pilot, MultiFolderTrustScreen)
            assert app.screen.folders == [str(extra)]

            await pilot.pause(0.35)
            await pilot.press("y")
            await app.workers.wait_for_complete()
            await pilot.pause()

        assert str(extra) in session.workspace.get_directories()
        assert session.trust_store.is_path_trusted(str(extra)) is TrustVerdict.UNKNOWN
        assert history.texts() == [f"Successfully added directories:\n- {extra}"]

    asyncio.run(_run())


def test_unknown_workspace_asks_before_include_directories(tmp_path: Path):
    async def _run() -> None:
        from wsgate.tui.app import WsgateApp
        from wsgate.tui.screens.workspace_trust import WorkspaceTrustScreen

        extra = tmp_path / "extra"
        extra.mkdir()
        session = _session(tmp_path, trust_workspace=False, include=[str(extra)])

        app = WsgateApp(session)
        async with app.run_test(size=(120, 40)) as pilot:
            await _wait_for_screen(app, pilot, WorkspaceTrustScreen)
            assert len(session.pending_queue) == 1

            await pilot.pause(0.35)
            await pilot.click("#btn-do-not-trust")
            await app.workers.wait_for_complete()
            await pilot.pause()

        # An untrusted workspace admits include directories without checks.
        assert str(extra) in session.workspace.get_directories()
        assert len(session.pending_queue) == 0
        assert session.trust_store.is_path_trusted(
            session.workspace.working_dir
        ) is TrustVerdict.UNTRUSTED

    asyncio.run(_run())


def test_workspace_trust_keys_ignored_during_mount_guard(tmp_path: Path):
    async def _run() -> None:
        from wsgate.tui.app import WsgateApp
        from wsgate.tui.screens.workspace_trust import WorkspaceTrustScreen

        app = WsgateApp(_session(tmp_path))
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause()

            result_holder: list[TrustLevel | None] = []
            app.push_screen(
                WorkspaceTrustScreen(str(tmp_path / "work")),
                callback=lambda r: result_holder.append(r),
            )
            await pilot.pause()

            await pilot.press("enter")
            await pilot.press("d")
            await pilot.pause()
            assert result_holder == []
            assert isinstance(app.screen, WorkspaceTrustScreen)

            await pilot.pause(0.35)
            await pilot.press("right")
            await pilot.press("enter")
            await pilot.pause()

            assert result_holder == [TrustLevel.TRUST_PARENT]

    asyncio.run(_run())
