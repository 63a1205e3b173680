from __future__ import annotations

import json
from pathlib import Path

import pytest

from wsgate.engine.config import SessionConfig
from wsgate.engine.errors import TrustPersistError
from wsgate.workspace.trust_store import (
    TrustedFolders,
    TrustLevel,
    TrustVerdict,
    is_workspace_trusted,
)


def _store(tmp_path: Path, rules: dict[str, str] | None = None) -> TrustedFolders:
    path = tmp_path / "trusted_folders.json"
    if rules is not None:
        path.write_text(json.dumps(rules))
    return TrustedFolders(path)


def test_missing_file_means_every_path_is_unknown(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.rules() == {}
    assert store.is_path_trusted("/anything") is TrustVerdict.UNKNOWN


def test_trust_folder_covers_descendants(tmp_path: Path) -> None:
    store = _store(tmp_path, {"/src": "TRUST_FOLDER"})
    assert store.is_path_trusted("/src") is TrustVerdict.TRUSTED
    assert store.is_path_trusted("/src/app/lib") is TrustVerdict.TRUSTED
    assert store.is_path_trusted("/srcfoo") is TrustVerdict.UNKNOWN


def test_trust_parent_covers_siblings(tmp_path: Path) -> None:
    store = _store(tmp_path, {"/work/project": "TRUST_PARENT"})
    assert store.is_path_trusted("/work/other") is TrustVerdict.TRUSTED
    assert store.is_path_trusted("/elsewhere") is TrustVerdict.UNKNOWN


def test_do_not_trust_matches_exact_path_only(tmp_path: Path) -> None:
    store = _store(tmp_path, {"/tmp/downloads": "DO_NOT_TRUST"})
    assert store.is_path_trusted("/tmp/downloads") is TrustVerdict.UNTRUSTED
    assert store.is_path_trusted("/tmp/downloads/x") is TrustVerdict.UNKNOWN


def test_trusted_rule_wins_over_untrusted_child(tmp_path: Path) -> None:
    store = _store(tmp_path, {
        "/src": "TRUST_FOLDER",
        "/src/vendor": "DO_NOT_TRUST",
    })
    assert store.is_path_trusted("/src/vendor") is TrustVerdict.TRUSTED


def test_malformed_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "trusted_folders.json"
    path.write_text("{not json")
    assert TrustedFolders(path).is_path_trusted("/src") is TrustVerdict.UNKNOWN


def test_unknown_levels_are_skipped(tmp_path: Path) -> None:
    store = _store(tmp_path, {"/a": "MAYBE", "/b": "TRUST_FOLDER"})
    assert store.rules() == {"/b": TrustLevel.TRUST_FOLDER}


def test_set_value_persists_and_is_reread(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "trusted_folders.json"
    store = TrustedFolders(path)
    store.set_value("/repo/", TrustLevel.TRUST_FOLDER)

    assert json.loads(path.read_text()) == {"/repo": "TRUST_FOLDER"}
    assert TrustedFolders(path).is_path_trusted("/repo/sub") is TrustVerdict.TRUSTED


def test_workspace_trust_status(tmp_path: Path) -> None:
    cwd = tmp_path / "project"
    cwd.mkdir()
    config = SessionConfig(working_dir=str(cwd))
    store = _store(tmp_path)

    assert is_workspace_trusted(config, store) is None

    store.set_value(str(cwd), TrustLevel.DO_NOT_TRUST)
    assert is_workspace_trusted(config, store) is False

    store.set_value(str(cwd), TrustLevel.TRUST_FOLDER)
    assert is_workspace_trusted(config, store) is True


def test_workspace_is_trusted_when_feature_disabled(tmp_path: Path) -> None:
    config = SessionConfig(working_dir=str(tmp_path), folder_trust_enabled=False)
    assert is_workspace_trusted(config, _store(tmp_path)) is True


def test_set_value_reports_unwritable_store(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = TrustedFolders(blocker / "trusted_folders.json")

    with pytest.raises(TrustPersistError):
        store.set_value("/repo", TrustLevel.TRUST_FOLDER)
