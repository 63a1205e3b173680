"""Slash command parser and help table."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ParsedCommand:
    """A parsed slash command."""

    name: str
    args: list[str]
    raw: str
    # Everything after the command name, spacing preserved.
    arg_text: str = ""


def parse_command(text: str) -> ParsedCommand | None:
    """Parse a /command from input text.

    Returns None if text does not start with '/'.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None
    parts = stripped.split()
    name = parts[0][1:]  # remove leading '/'
    args = parts[1:] if len(parts) > 1 else []
    arg_text = stripped[len(parts[0]):].strip()
    return ParsedCommand(name=name, args=args, raw=stripped, arg_text=arg_text)


COMMAND_ALIASES: dict[str, str] = {
    "dir": "directory",
}

COMMAND_HELP: dict[str, str] = {
    "directory": "/directory add PATH[,PATH...]|show: manage workspace directories (alias /dir)",
    "help": "Show this help message",
}

DIRECTORY_SUBCOMMANDS: dict[str, str] = {
    "add": "Add directories to the workspace. Use comma to separate multiple paths",
    "show": "Show all directories in the workspace",
}
