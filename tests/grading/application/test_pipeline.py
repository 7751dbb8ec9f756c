"""Tests for GradingPipeline.

PYTEST_DONT_REWRITE: checks defined here must raise plain AssertionErrors,
as they would outside pytest.
"""

import asyncio
import math

import pytest

from s_eval.evaluation.domain.trial import Trial, TrialError
from s_eval.grading.application.pipeline import GradingPipeline, normalize_outcome
from s_eval.grading.domain.grader import GradingInput
from s_eval.grading.domain.score import Score
from s_eval.selection.domain.task import Task, TaskId
from tests.evaluation.fake_observer import FakeEvaluationObserver


def _make_task(**overrides: object) -> Task:
    fields: dict[str, object] = {
        "id": TaskId(dataset="math", function="add", case_id="c1"),
        "target": lambda x: x,
        "input": {"a": 2, "b": 2},
        "reference": 4,
    }
    fields.update(overrides)
    return Task(**fields)  # type: ignore[arg-type]


def _make_trial(output: object = 4, error: TrialError | None = None) -> Trial:
    return Trial(
        trial_index=0,
        input={"a": 2, "b": 2},
        reference=4,
        output=output,
        error=error,
        latency=0.01,
    )


async def _grade(task: Task, trial: Trial | None = None) -> tuple[Trial, FakeEvaluationObserver]:
    observer = FakeEvaluationObserver()
    graded = await GradingPipeline(observer=observer).grade(
        task=task, trial=trial or _make_trial()
    )
    return graded, observer


def _matches_reference(g: GradingInput) -> bool:
    return g.output == g.reference


class TestNormalizeOutcome:
    def test_none_produces_nothing(self) -> None:
        assert normalize_outcome(None) == []

    def test_bool_becomes_pass_score(self) -> None:
        assert normalize_outcome(False) == [Score(key="pass", passed=False)]

    def test_number_becomes_value_score(self) -> None:
        assert normalize_outcome(3) == [Score(key="pass", value=3.0)]

    def test_mapping_defaults_key(self) -> None:
        assert normalize_outcome({"value": 0.5}) == [Score(key="pass", value=0.5)]

    def test_list_is_flattened(self) -> None:
        scores = normalize_outcome([True, Score(key="len", value=2.0)])

        assert [s.key for s in scores] == ["pass", "len"]

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(TypeError):
            normalize_outcome(object())


class TestChecks:
    async def test_no_checks_yields_implicit_pass(self) -> None:
        graded, _ = await _grade(_make_task())

        assert graded.scores == [Score(key="pass", passed=True)]

    async def test_true_check_passes(self) -> None:
        graded, _ = await _grade(_make_task(checks=(_matches_reference,)))

        assert graded.score("pass") == Score(key="pass", passed=True)

    async def test_false_check_fails_default_key(self) -> None:
        graded, _ = await _grade(
            _make_task(checks=(_matches_reference,)), _make_trial(output=5)
        )

        assert graded.score("pass").passed is False  # type: ignore[union-attr]

    async def test_assertion_error_becomes_failing_score_with_message(self) -> None:
        def must_be_even(g: GradingInput) -> None:
            assert g.output % 2 == 0, "output is odd"

        graded, observer = await _grade(
            _make_task(checks=(must_be_even,)), _make_trial(output=5)
        )

        score = graded.score("pass")
        assert score is not None
        assert score.passed is False
        assert score.notes == "output is odd"
        assert observer.gradings_failed == []

    async def test_named_scores_do_not_suppress_implicit_pass(self) -> None:
        graded, _ = await _grade(
            _make_task(checks=(lambda g: Score(key="length", value=1.0),))
        )

        assert [s.key for s in graded.scores] == ["length", "pass"]

    async def test_failure_dominates_later_pass_on_same_key(self) -> None:
        graded, _ = await _grade(
            _make_task(checks=(lambda g: False, lambda g: True))
        )

        assert graded.score("pass").passed is False  # type: ignore[union-attr]

    async def test_short_circuit_stops_after_first_failure(self) -> None:
        calls: list[str] = []

        def first(g: GradingInput) -> bool:
            calls.append("first")
            return False

        def second(g: GradingInput) -> bool:
            calls.append("second")
            return True

        await _grade(_make_task(checks=(first, second), short_circuit=True))

        assert calls == ["first"]

    async def test_without_short_circuit_all_checks_run(self) -> None:
        calls: list[str] = []

        def first(g: GradingInput) -> bool:
            calls.append("first")
            return False

        def second(g: GradingInput) -> bool:
            calls.append("second")
            return True

        await _grade(_make_task(checks=(first, second)))

        assert calls == ["first", "second"]

    async def test_crashing_check_records_grading_error(self) -> None:
        def explode(g: GradingInput) -> bool:
            raise KeyError("missing")

        graded, observer = await _grade(_make_task(checks=(explode,)))

        score = graded.score("explode")
        assert score is not None
        assert score.passed is False
        assert score.grading_error is not None
        assert "KeyError" in score.grading_error
        assert observer.gradings_failed[0].grader == "explode"
        assert observer.gradings_failed[0].task == "math::add@c1"


class TestErroredTrial:
    async def test_checks_are_skipped_and_pass_fails(self) -> None:
        calls: list[str] = []
        error = TrialError(kind="Execution", message="boom", exception_type="ValueError")

        graded, _ = await _grade(
            _make_task(checks=(lambda g: calls.append("check") or True,)),
            _make_trial(output=None, error=error),
        )

        assert calls == []
        score = graded.score("pass")
        assert score is not None
        assert score.passed is False
        assert score.notes == "Execution: ValueError: boom"

    async def test_evaluator_can_override_failing_pass(self) -> None:
        def expected_failure(trial: Trial) -> Score:
            return Score(key="pass", passed=trial.error is not None, notes="expected")

        graded, _ = await _grade(
            _make_task(evaluators=(expected_failure,)),
            _make_trial(output=None, error=TrialError(kind="Timeout", message="slow")),
        )

        assert graded.score("pass") == Score(key="pass", passed=True, notes="expected")


class TestEvaluators:
    async def test_evaluator_sees_scores_so_far(self) -> None:
        seen: list[list[str]] = []

        def inspect_scores(trial: Trial) -> None:
            seen.append([s.key for s in trial.scores])

        await _grade(_make_task(checks=(_matches_reference,), evaluators=(inspect_scores,)))

        assert seen == [["pass"]]

    async def test_async_evaluator_is_awaited(self) -> None:
        async def judge(trial: Trial) -> dict[str, object]:
            await asyncio.sleep(0)
            return {"key": "quality", "value": 0.9}

        graded, _ = await _grade(_make_task(evaluators=(judge,)))

        assert graded.score("quality") == Score(key="quality", value=0.9)

    async def test_evaluator_replaces_score_with_same_key(self) -> None:
        graded, _ = await _grade(
            _make_task(
                checks=(lambda g: Score(key="quality", value=0.1),),
                evaluators=(lambda t: Score(key="quality", value=0.8),),
            )
        )

        assert graded.score("quality").value == 0.8  # type: ignore[union-attr]

    async def test_crashing_evaluator_is_non_fatal(self) -> None:
        def broken(trial: Trial) -> Score:
            raise RuntimeError("judge offline")

        def healthy(trial: Trial) -> Score:
            return Score(key="healthy", passed=True)

        graded, observer = await _grade(_make_task(evaluators=(broken, healthy)))

        assert graded.score("broken").grading_error == "RuntimeError: judge offline"  # type: ignore[union-attr]
        assert graded.score("healthy").passed is True  # type: ignore[union-attr]
        assert len(observer.gradings_failed) == 1

    async def test_evaluator_returning_garbage_is_a_grading_error(self) -> None:
        def garbage(trial: Trial) -> object:
            return object()

        graded, _ = await _grade(_make_task(evaluators=(garbage,)))

        assert graded.score("garbage").grading_error is not None  # type: ignore[union-attr]

    async def test_evaluator_returning_nan_is_a_grading_error(self) -> None:
        def unstable(trial: Trial) -> float:
            return math.nan

        graded, observer = await _grade(_make_task(evaluators=(unstable,)))

        score = graded.score("unstable")
        assert score is not None
        assert score.grading_error is not None
        assert score.value is None
        assert observer.gradings_failed[0].grader == "unstable"
