"""wsgate: main application entry point."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from wsgate.engine.config import SessionConfig
from wsgate.engine.errors import SettingsError
from wsgate.engine.memory import HierarchicalMemoryLoader
from wsgate.engine.session import WorkspaceSession
from wsgate.engine.yaml_config import load_settings
from wsgate.shared.messages import MessageHistory, MessageType
from wsgate.workspace.admission import AdmissionController, split_path_argument
from wsgate.workspace.decision import TrustChoice
from wsgate.workspace.include_dirs import IncludeDirsTrust
from wsgate.workspace.reporter import CompletionReporter
from wsgate.workspace.trust_store import is_workspace_trusted

logger = logging.getLogger(__name__)

LOG_DIR = Path.home() / ".wsgate" / "logs"


def configure_logging(level: str | None = None, log_dir: Path | None = None) -> Path:
    """Send all logging to a rotating file; the TUI owns the terminal."""
    log_level = (level or os.getenv("WSGATE_LOG_LEVEL", "INFO")).upper()
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "wsgate.log"

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.handlers.clear()
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"
    )
    file_handler = RotatingFileHandler(
        log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    return log_file


def build_config(args) -> SessionConfig:
    """Resolve configuration: env vars, then settings files, then flags."""
    config = SessionConfig.from_env()
    if args.cwd:
        config.working_dir = args.cwd
    load_settings(config, args.config)
    for value in args.include_directories or []:
        config.include_directories.extend(split_path_argument(value))
    if args.sandbox:
        config.sandbox_profile = args.sandbox
    if args.no_folder_trust:
        config.folder_trust_enabled = False
    if args.debug:
        config.debug_mode = True
    config.validate()
    return config


async def _list_dirs(session: WorkspaceSession, loader: HierarchicalMemoryLoader) -> int:
    """Admit include directories without prompting, then print the workspace.

    Directories with unknown trust cannot be confirmed here and are
    left out.
    """
    history = MessageHistory()
    controller = AdmissionController(session.workspace, session.trust_store)
    reporter = CompletionReporter(session, history, memory_reloader=loader)
    flow = IncludeDirsTrust(session, controller, reporter)

    trusted = is_workspace_trusted(session.config, session.trust_store)
    if trusted is None:
        print(
            "Workspace trust is not set; include directories were not added.",
            file=sys.stderr,
        )
    else:
        decision = await flow.on_workspace_trust(trusted)
        if decision is not None:
            await decision.resolve(TrustChoice.NO)

    for item in history.items:
        stream = sys.stderr if item.type is MessageType.ERROR else sys.stdout
        print(item.text, file=stream)
    for directory in session.workspace.get_directories():
        print(directory)
    return 1 if history.texts(MessageType.ERROR) else 0


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        prog="wsgate",
        description="wsgate: workspace directory trust and admission",
    )
    parser.add_argument(
        "--include-directories", metavar="PATHS", action="append",
        help="Comma-separated directories to add once workspace trust is known "
             "(repeatable)",
    )
    parser.add_argument(
        "--sandbox", metavar="PROFILE",
        help="Sandbox profile; restrictive-* profiles disable /directory add",
    )
    parser.add_argument(
        "--no-folder-trust", action="store_true",
        help="Disable folder trust checks for this session",
    )
    parser.add_argument(
        "--cwd", metavar="PATH",
        help="Working directory (default: current directory)",
    )
    parser.add_argument(
        "--config", metavar="PATH",
        help="YAML settings file, applied over user and workspace settings",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable debug logging and memory discovery tracing",
    )
    parser.add_argument(
        "--list-dirs", action="store_true",
        help="Admit include directories without prompting, print the "
             "workspace and exit (no TUI)",
    )
    args = parser.parse_args()

    log_file = configure_logging("DEBUG" if args.debug else None)
    try:
        config = build_config(args)
    except SettingsError as exc:
        print(f"wsgate: {exc}", file=sys.stderr)
        sys.exit(2)
    logger.info(
        "Starting wsgate cwd=%s include=%s sandbox=%s log=%s",
        config.working_dir,
        config.include_directories,
        config.sandbox_profile or "<none>",
        log_file,
    )

    session = WorkspaceSession.create(config)
    loader = HierarchicalMemoryLoader(config.memory_file_names)

    if args.list_dirs:
        sys.exit(asyncio.run(_list_dirs(session, loader)))

    from wsgate.tui.app import WsgateApp

    app = WsgateApp(session, memory_reloader=loader)
    app.run()


if __name__ == "__main__":
    main()
