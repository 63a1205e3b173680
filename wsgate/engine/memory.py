"""Hierarchical memory: instruction files gathered across the workspace.

Memory files (AGENTS.md by default) are collected from:

1. The working directory and its ancestors, up to the home directory or
   the filesystem root (outermost first).
2. Every workspace directory, breadth-first, bounded by ``max_dirs``.

A line of the form ``@relative/path.md`` imports another markdown file.
With the ``tree`` format the import is inlined where it appears; with
``flat`` each imported file is appended once after its importer.
"""
from __future__ import annotations

import fnmatch
import logging
import os
import re
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config import DEFAULT_MEMORY_FILE_NAMES, FileFilteringOptions
from .errors import MemoryReloadError

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r"^\s*@(\S+\.md)\s*$")
_MAX_IMPORT_DEPTH = 5


@dataclass
class MemoryLoadResult:
    content: str
    file_count: int
    paths: list[str] = field(default_factory=list)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MemoryReloadError(str(path), str(exc)) from exc


def _gitignore_patterns(root: Path) -> list[str]:
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return []
    patterns: list[str] = []
    for line in _read(gitignore).splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        patterns.append(line.strip("/"))
    return patterns


class HierarchicalMemoryLoader:
    """Discovers and concatenates memory files for a workspace."""

    def __init__(self, memory_file_names: Sequence[str] | None = None) -> None:
        self.memory_file_names = list(
            memory_file_names or DEFAULT_MEMORY_FILE_NAMES
        )

    def reload(
        self,
        working_dir: str,
        directories: Sequence[str],
        debug_mode: bool = False,
        import_format: str = "tree",
        filtering: FileFilteringOptions | None = None,
        max_dirs: int = 200,
    ) -> MemoryLoadResult:
        filtering = filtering or FileFilteringOptions()
        log = logger.info if debug_mode else logger.debug
        cwd = Path(working_dir).resolve()

        found: list[Path] = []
        for path in self._upward(cwd):
            if path not in found:
                found.append(path)
        for directory in directories:
            for path in self._downward(Path(directory), filtering, max_dirs):
                if path not in found:
                    found.append(path)

        blocks: list[str] = []
        for path in found:
            log("Loading memory file %s", path)
            body = self._render(path, import_format)
            label = self._label(path, cwd)
            blocks.append(
                f"--- Context from: {label} ---\n"
                f"{body.strip()}\n"
                f"--- End of Context from: {label} ---"
            )
        log("Loaded %d memory file(s) for %d director(ies)", len(found), len(directories))
        return MemoryLoadResult(
            content="\n\n".join(blocks),
            file_count=len(found),
            paths=[str(p) for p in found],
        )

    # ── discovery ───────────────────────────────────────────────────

    def _memory_files_in(self, directory: Path) -> list[Path]:
        return [
            directory / name
            for name in self.memory_file_names
            if (directory / name).is_file()
        ]

    def _upward(self, cwd: Path) -> list[Path]:
        home = Path.home().resolve()
        chain: list[Path] = []
        current = cwd
        while True:
            chain.append(current)
            if current == home or current.parent == current:
                break
            current = current.parent
        files: list[Path] = []
        for directory in reversed(chain):
            files.extend(self._memory_files_in(directory))
        return files

    def _downward(
        self,
        root: Path,
        filtering: FileFilteringOptions,
        max_dirs: int,
    ) -> list[Path]:
        root = root.resolve()
        if not root.is_dir():
            return []
        ignored = list(filtering.ignore_dirs)
        if filtering.respect_git_ignore:
            ignored.extend(_gitignore_patterns(root))

        files: list[Path] = []
        queue: deque[Path] = deque([root])
        visited = 0
        while queue and visited < max_dirs:
            directory = queue.popleft()
            visited += 1
            files.extend(self._memory_files_in(directory))
            try:
                children = sorted(
                    p for p in directory.iterdir()
                    if p.is_dir() and not p.is_symlink()
                )
            except OSError:
                logger.debug("Cannot list %s", directory)
                continue
            for child in children:
                if any(fnmatch.fnmatch(child.name, pat) for pat in ignored):
                    continue
                queue.append(child)
        return files

    # ── imports ─────────────────────────────────────────────────────

    def _render(self, path: Path, import_format: str) -> str:
        if import_format == "flat":
            body, imported = self._strip_imports(path, [path.resolve()], 0)
            parts = [body.rstrip()]
            for imp, imp_body in imported:
                parts.append(
                    f"<!-- Imported from: {imp.name} -->\n"
                    f"{imp_body.strip()}\n"
                    f"<!-- End of import from: {imp.name} -->"
                )
            return "\n\n".join(parts)
        return self._inline_imports(path, [path.resolve()], 0)

    def _inline_imports(self, path: Path, stack: list[Path], depth: int) -> str:
        lines: list[str] = []
        for line in _read(path).splitlines():
            match = _IMPORT_RE.match(line)
            if not match:
                lines.append(line)
                continue
            ref = match.group(1)
            target = (path.parent / ref).resolve()
            if target in stack or depth >= _MAX_IMPORT_DEPTH:
                lines.append(f"<!-- Import skipped: {ref} -->")
            elif not target.is_file():
                lines.append(f"<!-- Import failed: {ref} not found -->")
            else:
                inner = self._inline_imports(target, stack + [target], depth + 1)
                lines.append(f"<!-- Imported from: {ref} -->")
                lines.append(inner.strip())
                lines.append(f"<!-- End of import from: {ref} -->")
        return "\n".join(lines)

    def _strip_imports(
        self,
        path: Path,
        seen: list[Path],
        depth: int,
    ) -> tuple[str, list[tuple[Path, str]]]:
        """Remove import lines, returning the body and files to append."""
        lines: list[str] = []
        imported: list[tuple[Path, str]] = []
        for line in _read(path).splitlines():
            match = _IMPORT_RE.match(line)
            if not match:
                lines.append(line)
                continue
            target = (path.parent / match.group(1)).resolve()
            if target in seen or depth >= _MAX_IMPORT_DEPTH or not target.is_file():
                continue
            seen.append(target)
            nested_body, nested = self._strip_imports(target, seen, depth + 1)
            imported.append((target, nested_body))
            imported.extend(nested)
        return "\n".join(lines), imported

    @staticmethod
    def _label(path: Path, cwd: Path) -> str:
        try:
            return os.path.relpath(path, cwd) if path.is_relative_to(cwd) else str(path)
        except ValueError:
            return str(path)
