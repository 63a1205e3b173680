"""Path normalization for requested workspace directories."""
from __future__ import annotations

import os
from pathlib import Path

_USERPROFILE_TOKEN = "%userprofile%"


def expand_home_dir(raw: str, base_dir: str | None = None) -> str:
    """Expand home-directory shorthand and normalize *raw*.

    Handles ``~``, ``~/...`` and a leading ``%USERPROFILE%`` (any case).
    When *base_dir* is given, a path that is still relative after home
    expansion is joined onto it, so the result is absolute. Collapses
    ``.``/``..`` segments and separators but never touches the
    filesystem, so symlinks are kept and missing paths are fine.

    Returns an empty string for empty or blank input.
    """
    if not raw or not raw.strip():
        return ""
    raw = raw.strip()
    expanded = raw
    if raw.lower().startswith(_USERPROFILE_TOKEN):
        expanded = str(Path.home()) + raw[len(_USERPROFILE_TOKEN):]
    elif raw == "~" or raw.startswith("~/") or raw.startswith("~" + os.sep):
        expanded = str(Path.home()) + raw[1:]
    if base_dir is not None and not os.path.isabs(expanded):
        expanded = os.path.join(base_dir, expanded)
    return os.path.normpath(expanded)


normalize = expand_home_dir
