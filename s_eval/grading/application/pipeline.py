"""GradingPipeline — runs inline checks, then post-hoc evaluators, against a trial."""

import asyncio
import inspect
from collections.abc import Mapping
from typing import Any

from s_eval.evaluation.domain.trial import Trial
from s_eval.grading.domain.grader import (
    Check,
    Evaluator,
    GradingInput,
    callable_name,
    is_async_callable,
)
from s_eval.grading.domain.observer import GradingObserver
from s_eval.grading.domain.score import DEFAULT_SCORE_KEY, Score
from s_eval.selection.domain.task import Task


def normalize_outcome(outcome: Any) -> list[Score]:
    """Turn whatever a check or evaluator returned into a list of Scores.

    Accepts None, bool, int/float, Score, a mapping of Score fields, or a
    list/tuple of those. Anything else raises TypeError.
    """
    if outcome is None:
        return []
    if isinstance(outcome, Score):
        return [outcome]
    if isinstance(outcome, bool):
        return [Score(key=DEFAULT_SCORE_KEY, passed=outcome)]
    if isinstance(outcome, int | float):
        return [Score(key=DEFAULT_SCORE_KEY, value=float(outcome))]
    if isinstance(outcome, Mapping):
        return [Score.model_validate({"key": DEFAULT_SCORE_KEY, **outcome})]
    if isinstance(outcome, list | tuple):
        return [score for item in outcome for score in normalize_outcome(item)]
    raise TypeError(f"cannot interpret {type(outcome).__name__} as a score")


def _combine(existing: Score, new: Score) -> Score:
    """Merge two check scores sharing a key; a failure dominates a pass."""
    if existing.passed is None or new.passed is None:
        passed = existing.passed if new.passed is None else new.passed
    else:
        passed = existing.passed and new.passed
    notes = "; ".join(n for n in (existing.notes, new.notes) if n) or None
    return existing.model_copy(
        update={
            "passed": passed,
            "value": new.value if new.value is not None else existing.value,
            "notes": notes,
            "grading_error": new.grading_error or existing.grading_error,
        }
    )


def _upsert(scores: list[Score], score: Score, *, replace: bool) -> None:
    for i, existing in enumerate(scores):
        if existing.key == score.key:
            scores[i] = score if replace else _combine(existing, score)
            return
    scores.append(score)


def _grading_error_score(grader: str, exc: BaseException) -> Score:
    reason = f"{type(exc).__name__}: {exc}"
    return Score(
        key=grader,
        passed=False,
        notes=f"grader '{grader}' raised an error",
        grading_error=reason,
    )


class GradingPipeline:
    """Grades one finished trial.

    Checks run first, in declaration order, and may short-circuit when the task
    asks for it. Evaluators run next and see the trial with the scores produced
    so far; a score they return replaces any existing score with the same key.
    Errors raised by graders are recorded on a score and never propagate.
    """

    def __init__(self, observer: GradingObserver) -> None:
        self._observer = observer

    async def grade(self, task: Task, trial: Trial) -> Trial:
        """Return *trial* with its scores filled in."""
        scores: list[Score] = []

        if trial.error is None:
            self._run_checks(task=task, trial=trial, scores=scores)
        else:
            scores.append(
                Score(
                    key=DEFAULT_SCORE_KEY,
                    passed=False,
                    notes=trial.error.describe(),
                )
            )

        for evaluator in task.evaluators:
            await self._run_evaluator(
                task=task, trial=trial, evaluator=evaluator, scores=scores
            )

        return trial.model_copy(update={"scores": scores})

    def _run_checks(self, task: Task, trial: Trial, scores: list[Score]) -> None:
        grading_input = GradingInput(
            input=trial.input,
            output=trial.output,
            reference=trial.reference,
            metadata=trial.metadata,
            trace_data=trial.trace_data,
        )
        failed = False
        for check in task.checks:
            name = callable_name(check)
            try:
                produced = self._call_check(check=check, grading_input=grading_input)
            except AssertionError as exc:
                produced = [
                    Score(
                        key=DEFAULT_SCORE_KEY,
                        passed=False,
                        notes=str(exc) or f"assertion failed in '{name}'",
                    )
                ]
            except Exception as exc:
                self._report(task=task, trial=trial, grader=name, exc=exc)
                _upsert(scores, _grading_error_score(grader=name, exc=exc), replace=True)
                continue

            for score in produced:
                _upsert(scores, score, replace=False)
            if any(score.passed is False for score in produced):
                failed = True
                if task.short_circuit:
                    break

        if not failed and not any(s.key == DEFAULT_SCORE_KEY for s in scores):
            scores.append(Score(key=DEFAULT_SCORE_KEY, passed=True))

    def _call_check(self, check: Check, grading_input: GradingInput) -> list[Score]:
        return normalize_outcome(check(grading_input))

    async def _run_evaluator(
        self,
        task: Task,
        trial: Trial,
        evaluator: Evaluator,
        scores: list[Score],
    ) -> None:
        name = callable_name(evaluator)
        snapshot = trial.model_copy(update={"scores": list(scores)})
        try:
            if is_async_callable(evaluator):
                outcome = await evaluator(snapshot)
            else:
                outcome = await asyncio.to_thread(evaluator, snapshot)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            produced = normalize_outcome(outcome)
        except Exception as exc:
            self._report(task=task, trial=trial, grader=name, exc=exc)
            _upsert(scores, _grading_error_score(grader=name, exc=exc), replace=True)
            return

        for score in produced:
            _upsert(scores, score, replace=True)

    def _report(self, task: Task, trial: Trial, grader: str, exc: Exception) -> None:
        self._observer.grading_failed(
            task=str(task.id),
            trial_index=trial.trial_index,
            grader=grader,
            reason=f"{type(exc).__name__}: {exc}",
        )
