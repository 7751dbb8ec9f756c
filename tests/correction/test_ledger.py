"""Tests for the correction ledger."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from s_eval.correction.application.ledger import (
    CorrectionLedger,
    correct,
    original_value,
)
from s_eval.correction.domain.errors import CorrectionError
from s_eval.correction.domain.field import parse_field
from s_eval.evaluation.domain.result import EvalResult
from s_eval.evaluation.domain.run import Run
from s_eval.grading.domain.score import Score
from s_eval.storage.infrastructure.artifacts import read_run
from s_eval.storage.infrastructure.recorder import JsonRunRecorder
from s_eval.storage.infrastructure.session_registry import SessionRegistry
from tests.storage.builders import make_entry, make_run
from tests.storage.fake_observer import FakeStorageObserver

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _two_task_run() -> Run:
    return make_run(
        results=[
            make_entry("add", passed=False, case_id="c1"),
            make_entry("sub", passed=True),
        ]
    )


class TestFieldPath:
    def test_key_may_contain_dots(self) -> None:
        path = parse_field("scores.judge.v2.value")

        assert (path.key, path.attribute) == ("judge.v2", "value")

    @pytest.mark.parametrize(
        "field", ["output", "scores.pass", "scores..passed", "scores.pass.latency"]
    )
    def test_unsupported_fields_raise(self, field: str) -> None:
        with pytest.raises(CorrectionError, match="unsupported field"):
            parse_field(field)


class TestCorrect:
    def test_override_appends_history_and_recomputes_totals(self) -> None:
        run = _two_task_run()

        amended = correct(run, "add@c1", "scores.pass.passed", "true", now=_NOW)

        result = amended.results[0].result
        assert result.score("pass").passed is True  # type: ignore[union-attr]
        (entry,) = result.correction_history
        assert (entry.field, entry.before, entry.after) == ("scores.pass.passed", False, True)
        assert entry.timestamp == _NOW
        assert amended.total_passed == 2
        assert run.total_passed == 1

    def test_successive_corrections_are_append_only(self) -> None:
        run = correct(_two_task_run(), "add@c1", "scores.pass.passed", True, now=_NOW)
        run = correct(run, "add@c1", "scores.pass.passed", False, now=_NOW)

        history = run.results[0].result.correction_history
        assert [(h.before, h.after) for h in history] == [(False, True), (True, False)]

    def test_original_value_is_first_before(self) -> None:
        run = correct(_two_task_run(), "add@c1", "scores.pass.passed", True)
        run = correct(run, "add@c1", "scores.pass.passed", False)

        result = run.results[0].result
        assert original_value(result, "scores.pass.passed") is False

    def test_original_value_without_history_is_current(self) -> None:
        result = _two_task_run().results[1].result

        assert original_value(result, "scores.pass.passed") is True

    def test_missing_score_key_is_created(self) -> None:
        amended = correct(_two_task_run(), "sub", "scores.human.value", "0.8")

        result = amended.results[1].result
        assert result.score("human").value == 0.8  # type: ignore[union-attr]
        assert result.correction_history[0].before is None

    def test_notes_on_missing_key_is_rejected(self) -> None:
        with pytest.raises(CorrectionError, match="invalid score"):
            correct(_two_task_run(), "sub", "scores.human.notes", "looks fine")

    def test_clearing_the_only_outcome_is_rejected(self) -> None:
        with pytest.raises(CorrectionError, match="invalid score"):
            correct(_two_task_run(), "sub", "scores.pass.passed", "null")

    def test_unparseable_boolean_is_rejected(self) -> None:
        with pytest.raises(CorrectionError, match="boolean"):
            correct(_two_task_run(), "sub", "scores.pass.passed", "maybe")

    def test_unknown_task_is_rejected(self) -> None:
        with pytest.raises(CorrectionError, match="no result"):
            correct(_two_task_run(), "mul", "scores.pass.passed", True)

    def test_address_in_two_datasets_needs_dataset(self) -> None:
        run = make_run(
            results=[make_entry("add", dataset="a"), make_entry("add", dataset="b")]
        )

        with pytest.raises(CorrectionError, match="specify a dataset"):
            correct(run, "add", "scores.pass.passed", False)

        amended = correct(run, "add", "scores.pass.passed", False, dataset="b")
        assert amended.results[1].result.score("pass").passed is False  # type: ignore[union-attr]
        assert amended.results[0].result.score("pass").passed is True  # type: ignore[union-attr]

    def test_totals_use_the_run_primary_score_key(self) -> None:
        entry = make_entry("add", passed=None).model_copy(
            update={
                "result": EvalResult(
                    scores=[
                        Score(key="accuracy", passed=True),
                        Score(key="style", passed=False),
                    ]
                )
            }
        )
        run = make_run(results=[entry], primary_score_key="accuracy")
        assert run.total_passed == 1

        amended = correct(run, "add", "scores.style.notes", "ok")

        assert amended.primary_score_key == "accuracy"
        assert amended.total_passed == 1

    def test_correcting_the_primary_key_changes_totals(self) -> None:
        entry = make_entry("add", passed=None, value=0.2)
        run = make_run(results=[entry], primary_score_key="quality")

        amended = correct(run, "add", "scores.quality.passed", "pass")

        assert (run.total_passed, amended.total_passed) == (0, 1)

    def test_full_task_id_is_accepted(self) -> None:
        amended = correct(_two_task_run(), "math::add@c1", "scores.pass.notes", "reviewed")

        assert amended.results[0].result.score("pass").notes == "reviewed"  # type: ignore[union-attr]


class TestCorrectionLedger:
    def test_apply_persists_amended_run(self, tmp_path: Path) -> None:
        observer = FakeStorageObserver()
        recorder = JsonRunRecorder(results_dir=tmp_path, observer=observer)
        registry = SessionRegistry(results_dir=tmp_path, observer=observer)
        ref = recorder.record(_two_task_run())
        ledger = CorrectionLedger(recorder=recorder, registry=registry)

        ledger.apply(
            path=ref.path,
            task_address="add@c1",
            field="scores.pass.passed",
            value="true",
        )

        stored = read_run(ref.path)
        assert stored.total_passed == 2
        assert len(stored.results[0].result.correction_history) == 1
        assert observer.saved == ["aaaa1111"]
