"""YAML settings loader.

Settings are merged from the user file and the workspace file, then an
optional explicit ``--config`` file. Later files win per key.

Example YAML:
    security:
      folder_trust: true

    tools:
      sandbox: restrictive-open

    context:
      import_format: tree
      discovery_max_dirs: 200
      load_memory_from_include_directories: true
      memory_file_names: [AGENTS.md]
      include_directories:
        - ~/src/shared-lib
        - ../docs

    file_filtering:
      respect_git_ignore: true
      ignore_dirs: [.git, node_modules]
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .config import FileFilteringOptions, SessionConfig
from .errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_DIRNAME = ".wsgate"
SETTINGS_FILENAME = "settings.yaml"


def user_settings_path() -> Path:
    """Return the user settings path (~/.wsgate/settings.yaml)."""
    return Path.home() / SETTINGS_DIRNAME / SETTINGS_FILENAME


def workspace_settings_path(working_dir: str | Path) -> Path:
    """Return the workspace settings path (<cwd>/.wsgate/settings.yaml)."""
    return Path(working_dir) / SETTINGS_DIRNAME / SETTINGS_FILENAME


def _load_settings_yaml(path: Path, label: str) -> dict[str, Any]:
    """Load one settings file.

    A missing file yields an empty dict so callers can merge
    unconditionally. A file that does not parse raises SettingsError.
    """
    if not path.is_file():
        logger.debug("_load_settings_yaml: %s not found at %s", label, path)
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        logger.error("_load_settings_yaml: YAML parse error in %s: %s", path, exc)
        raise SettingsError(str(path), str(exc)) from exc
    except OSError as exc:
        logger.error("_load_settings_yaml: cannot read %s: %s", path, exc)
        raise SettingsError(str(path), str(exc)) from exc
    if not isinstance(data, dict):
        raise SettingsError(str(path), "top level must be a mapping")
    logger.info(
        "_load_settings_yaml: loaded %s from %s (sections: %s)",
        label, path, ", ".join(sorted(data)) or "empty",
    )
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsError(name, f"section '{name}' must be a mapping")
    return value


def _string_list(value: Any, name: str) -> list[str]:
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, list):
        return [str(p) for p in value if str(p).strip()]
    raise SettingsError(name, f"'{name}' must be a list of strings")


def apply_settings(config: SessionConfig, raw: dict[str, Any]) -> SessionConfig:
    """Apply a merged settings mapping onto *config* in place."""
    security = _section(raw, "security")
    if "folder_trust" in security:
        config.folder_trust_enabled = bool(security["folder_trust"])

    tools = _section(raw, "tools")
    if tools.get("sandbox"):
        config.sandbox_profile = str(tools["sandbox"])

    context = _section(raw, "context")
    if "import_format" in context:
        config.import_format = str(context["import_format"])
    if "discovery_max_dirs" in context:
        config.discovery_max_dirs = int(context["discovery_max_dirs"])
    if "load_memory_from_include_directories" in context:
        config.load_memory_from_include_directories = bool(
            context["load_memory_from_include_directories"]
        )
    if "memory_file_names" in context:
        config.memory_file_names = _string_list(
            context["memory_file_names"], "memory_file_names"
        )
    if "include_directories" in context:
        # Settings entries come first; env-supplied entries are kept.
        config.include_directories = _string_list(
            context["include_directories"], "include_directories"
        ) + config.include_directories

    filtering = _section(raw, "file_filtering")
    if filtering:
        config.file_filtering = FileFilteringOptions(
            respect_git_ignore=bool(filtering.get(
                "respect_git_ignore", config.file_filtering.respect_git_ignore
            )),
            ignore_dirs=_string_list(
                filtering.get("ignore_dirs", config.file_filtering.ignore_dirs),
                "ignore_dirs",
            ),
        )

    config.validate()
    return config


def load_settings(
    config: SessionConfig,
    explicit_path: str | Path | None = None,
) -> SessionConfig:
    """Merge user, workspace and explicit settings into *config*.

    Precedence (lowest → highest):
      1. ~/.wsgate/settings.yaml
      2. <working_dir>/.wsgate/settings.yaml
      3. explicit --config file
    """
    raw = _load_settings_yaml(user_settings_path(), "user settings")
    raw = _merge(raw, _load_settings_yaml(
        workspace_settings_path(config.working_dir), "workspace settings",
    ))
    if explicit_path:
        path = Path(explicit_path)
        if not path.is_file():
            raise SettingsError(str(path), "file not found")
        raw = _merge(raw, _load_settings_yaml(path, "explicit config"))
    return apply_settings(config, raw)
