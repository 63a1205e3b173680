from __future__ import annotations

from pathlib import Path

import pytest

from wsgate.engine.errors import DirectoryNotFoundError
from wsgate.workspace.admission import (
    AdmissionController,
    split_path_argument,
    untrusted_message,
)
from wsgate.workspace.context import WorkspaceContext
from wsgate.workspace.trust_store import TrustedFolders, TrustLevel, TrustVerdict


class FakeWorkspace:
    def __init__(self, missing: tuple[str, ...] = (), working_dir: str = "/work") -> None:
        self.working_dir = working_dir
        self.dirs: list[str] = []
        self.missing = set(missing)
        self.calls: list[str] = []

    def add_directory(self, path: str) -> bool:
        self.calls.append(path)
        if path in self.missing:
            raise DirectoryNotFoundError(path)
        if path in self.dirs:
            return False
        self.dirs.append(path)
        return True

    def get_directories(self) -> list[str]:
        return list(self.dirs)


class FakeTrustStore:
    def __init__(self, verdicts: dict[str, TrustVerdict] | None = None) -> None:
        self.verdicts = verdicts or {}
        self.lookups: list[str] = []
        self.saved: dict[str, TrustLevel] = {}

    def is_path_trusted(self, path: str) -> TrustVerdict:
        self.lookups.append(path)
        return self.verdicts.get(path, TrustVerdict.UNKNOWN)

    def set_value(self, path: str, level: TrustLevel) -> None:
        self.saved[path] = level
        self.verdicts[path] = (
            TrustVerdict.UNTRUSTED
            if level is TrustLevel.DO_NOT_TRUST
            else TrustVerdict.TRUSTED
        )


def _admit(controller: AdmissionController, paths: list[str], **kwargs):
    kwargs.setdefault("is_workspace_trusted", True)
    kwargs.setdefault("trust_feature_enabled", True)
    return controller.admit(paths, **kwargs)


def test_mixed_batch_is_partitioned_by_verdict() -> None:
    workspace = FakeWorkspace()
    store = FakeTrustStore({
        "/trusted1": TrustVerdict.TRUSTED,
        "/untrusted1": TrustVerdict.UNTRUSTED,
        "/unknown1": TrustVerdict.UNKNOWN,
    })
    controller = AdmissionController(workspace, store)

    batch = _admit(controller, ["/trusted1", "/untrusted1", "/unknown1"])

    assert batch.added == ["/trusted1"]
    assert batch.pending_unknown == ["/unknown1"]
    assert batch.untrusted == ["/untrusted1"]
    assert len(batch.errors) == 1
    assert "/untrusted1" in batch.errors[0]
    assert batch.needs_decision
    assert workspace.dirs == ["/trusted1"]


def test_untrusted_paths_share_one_message_in_request_order() -> None:
    store = FakeTrustStore({
        "/b": TrustVerdict.UNTRUSTED,
        "/a": TrustVerdict.UNTRUSTED,
    })
    batch = _admit(AdmissionController(FakeWorkspace(), store), ["/b", "/a"])

    assert batch.errors == [
        "The following directories are explicitly untrusted and cannot be "
        "added to a trusted workspace:\n- /b\n- /a\n"
        "Please use the permissions command to modify their trust level."
    ]
    assert batch.errors == [untrusted_message(["/b", "/a"])]


def test_workspace_failure_is_isolated_per_path() -> None:
    workspace = FakeWorkspace(missing=("/missing",))
    store = FakeTrustStore({
        "/missing": TrustVerdict.TRUSTED,
        "/ok": TrustVerdict.TRUSTED,
    })
    batch = _admit(AdmissionController(workspace, store), ["/missing", "/ok"])

    assert batch.added == ["/ok"]
    assert batch.failed == ["/missing"]
    assert batch.errors == [
        "Error adding '/missing': Directory does not exist: /missing"
    ]


def test_untrusted_error_precedes_add_errors() -> None:
    workspace = FakeWorkspace(missing=("/gone",))
    store = FakeTrustStore({
        "/gone": TrustVerdict.TRUSTED,
        "/bad": TrustVerdict.UNTRUSTED,
    })
    batch = _admit(AdmissionController(workspace, store), ["/gone", "/bad"])

    assert batch.errors[0].startswith("The following directories are explicitly untrusted")
    assert batch.errors[1].startswith("Error adding '/gone'")


def test_trust_disabled_adds_everything_without_lookups() -> None:
    workspace = FakeWorkspace()
    store = FakeTrustStore({"/a": TrustVerdict.UNTRUSTED})
    batch = _admit(
        AdmissionController(workspace, store), ["/a", "/b"],
        trust_feature_enabled=False,
    )

    assert batch.added == ["/a", "/b"]
    assert store.lookups == []
    assert not batch.trust_checked


@pytest.mark.parametrize("workspace_trusted", [False, None])
def test_untrusted_or_pending_workspace_skips_trust_checks(workspace_trusted) -> None:
    workspace = FakeWorkspace()
    store = FakeTrustStore()
    batch = _admit(
        AdmissionController(workspace, store), ["/a"],
        is_workspace_trusted=workspace_trusted,
    )

    assert batch.added == ["/a"]
    assert batch.pending_unknown == []
    assert store.lookups == []


def test_paths_are_trimmed_and_home_expanded(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    expected = str(tmp_path / "proj")
    workspace = FakeWorkspace()
    store = FakeTrustStore({expected: TrustVerdict.TRUSTED})

    batch = _admit(AdmissionController(workspace, store), ["  ~/proj  "])

    assert store.lookups == [expected]
    assert batch.added == [expected]


@pytest.mark.parametrize("verdict_cycle", [
    [TrustVerdict.TRUSTED, TrustVerdict.UNTRUSTED, TrustVerdict.UNKNOWN, TrustVerdict.TRUSTED],
    [TrustVerdict.UNKNOWN] * 3,
    [TrustVerdict.TRUSTED] * 5,
])
def test_every_path_is_classified_exactly_once(verdict_cycle) -> None:
    paths = [f"/p{i}" for i in range(len(verdict_cycle))]
    workspace = FakeWorkspace(missing=(paths[-1],))
    store = FakeTrustStore(dict(zip(paths, verdict_cycle)))

    batch = _admit(AdmissionController(workspace, store), paths)

    total = (
        len(batch.added) + len(batch.untrusted)
        + len(batch.pending_unknown) + len(batch.failed)
    )
    assert total == len(paths)


def test_readding_existing_directory_is_not_an_error(tmp_path: Path) -> None:
    extra = tmp_path / "extra"
    extra.mkdir()
    workspace = WorkspaceContext(str(tmp_path))
    controller = AdmissionController(workspace, FakeTrustStore())

    first = _admit(controller, [str(extra)], trust_feature_enabled=False)
    second = _admit(controller, [str(extra)], trust_feature_enabled=False)

    assert first.errors == [] and second.errors == []
    assert second.added == [str(extra)]
    assert workspace.get_directories().count(str(extra)) == 1


def test_real_workspace_reports_missing_directory(tmp_path: Path) -> None:
    workspace = WorkspaceContext(str(tmp_path))
    missing = str(tmp_path / "nope")
    batch = _admit(
        AdmissionController(workspace, FakeTrustStore()), [missing],
        trust_feature_enabled=False,
    )

    assert batch.added == []
    assert batch.errors == [f"Error adding '{missing}': Directory does not exist: {missing}"]


def test_split_path_argument_drops_blank_entries() -> None:
    assert split_path_argument("/a,, ,/b") == ["/a", "/b"]
    assert split_path_argument("") == []
    assert split_path_argument(" , ") == []


def test_relative_spelling_of_untrusted_folder_is_refused(tmp_path: Path, monkeypatch) -> None:
    work = tmp_path / "work"
    evil = work / "evil"
    evil.mkdir(parents=True)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    # The process cwd differs from the session's working directory.
    monkeypatch.chdir(elsewhere)
    store = TrustedFolders(tmp_path / "trust.json")
    store.set_value(str(evil), TrustLevel.DO_NOT_TRUST)
    workspace = WorkspaceContext(str(work))

    batch = _admit(AdmissionController(workspace, store), ["./evil", "sub/../evil"])

    assert batch.untrusted == ["./evil", "sub/../evil"]
    assert batch.pending_unknown == []
    assert batch.added == []
    assert str(evil) not in workspace.get_directories()


def test_relative_path_is_checked_and_added_under_working_dir(tmp_path: Path) -> None:
    work = tmp_path / "work"
    (work / "lib").mkdir(parents=True)
    expected = str(work / "lib")
    store = FakeTrustStore({expected: TrustVerdict.TRUSTED})
    workspace = WorkspaceContext(str(work))

    batch = _admit(AdmissionController(workspace, store), ["lib"])

    assert store.lookups == [expected]
    assert batch.added == [expected]
    assert workspace.get_directories() == [str(work), expected]
