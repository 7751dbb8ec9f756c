"""Tests for SessionRegistry listing and lookup."""

from pathlib import Path

import pytest

from s_eval.storage.infrastructure.errors import (
    AmbiguousRunError,
    RunNotFoundError,
    StorageError,
)
from s_eval.storage.infrastructure.recorder import JsonRunRecorder
from s_eval.storage.infrastructure.session_registry import SessionRegistry
from tests.storage.builders import make_run
from tests.storage.fake_observer import FakeStorageObserver


def _populate(tmp_path: Path) -> None:
    recorder = JsonRunRecorder(results_dir=tmp_path, observer=FakeStorageObserver())
    recorder.record(make_run(run_name="late", run_id="cccc3333", minutes=30))
    recorder.record(make_run(run_name="early", run_id="aaaa1111", minutes=0))
    recorder.record(make_run(run_name="early", run_id="bbbb2222", minutes=10))
    recorder.record(make_run(session_name="adhoc", run_name="solo", run_id="dddd4444"))


def _registry(tmp_path: Path) -> tuple[SessionRegistry, FakeStorageObserver]:
    observer = FakeStorageObserver()
    return SessionRegistry(results_dir=tmp_path, observer=observer), observer


class TestListing:
    def test_sessions_are_sorted_by_name(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        assert [s.name for s in registry.list_sessions()] == ["adhoc", "nightly"]

    def test_runs_are_ordered_by_creation_time(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        runs = registry.list_runs("nightly")

        assert [r.run_id for r in runs] == ["aaaa1111", "bbbb2222", "cccc3333"]
        assert runs[0].total_evaluations == 1

    def test_missing_results_dir_has_no_sessions(self, tmp_path: Path) -> None:
        registry, _ = _registry(tmp_path / "missing")

        assert registry.list_sessions() == []

    def test_unknown_session_raises(self, tmp_path: Path) -> None:
        registry, _ = _registry(tmp_path)

        with pytest.raises(RunNotFoundError):
            registry.list_runs("nope")

    def test_corrupt_artifact_is_skipped_with_event(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        (tmp_path / "nightly" / "broken_eeee5555.json").write_text("{", encoding="utf-8")
        registry, observer = _registry(tmp_path)

        runs = registry.list_runs("nightly")

        assert len(runs) == 3
        assert observer.skipped[0].path.endswith("broken_eeee5555.json")


class TestFind:
    def test_run_id_matches(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        assert registry.find("nightly", "bbbb2222").run_id == "bbbb2222"

    def test_run_name_matches_latest(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        assert registry.find("nightly", "early").run_id == "bbbb2222"

    def test_unknown_ref_raises(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        with pytest.raises(RunNotFoundError, match="in session 'nightly'"):
            registry.find("nightly", "solo")


class TestResolve:
    def test_searches_all_sessions(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)

        assert registry.resolve("solo").session_name == "adhoc"

    def test_accepts_artifact_path(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        registry, _ = _registry(tmp_path)
        path = tmp_path / "adhoc" / "solo_dddd4444.json"

        ref = registry.resolve(str(path))

        assert ref.run_id == "dddd4444"
        assert ref.path == path

    def test_ambiguous_across_sessions(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        recorder = JsonRunRecorder(results_dir=tmp_path, observer=FakeStorageObserver())
        recorder.record(make_run(session_name="adhoc", run_name="late", run_id="ffff6666"))
        registry, _ = _registry(tmp_path)

        with pytest.raises(AmbiguousRunError):
            registry.resolve("late")

    def test_load_invalid_file_raises_storage_error(self, tmp_path: Path) -> None:
        path = tmp_path / "junk.json"
        path.write_text('{"not": "a run"}', encoding="utf-8")
        registry, _ = _registry(tmp_path)

        with pytest.raises(StorageError, match="invalid run artifact"):
            registry.load(path)
