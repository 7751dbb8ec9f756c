"""Correction ledger — audited, append-only human overrides of grader scores."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from s_eval.correction.domain.entry import CorrectionEntry
from s_eval.correction.domain.errors import CorrectionError
from s_eval.correction.domain.field import coerce_value, parse_field
from s_eval.evaluation.application.aggregator import summarize
from s_eval.evaluation.domain.result import EvalResult, ResultEntry
from s_eval.evaluation.domain.run import Run
from s_eval.grading.domain.score import Score
from s_eval.storage.infrastructure.recorder import JsonRunRecorder
from s_eval.storage.infrastructure.session_registry import SessionRegistry


def _address(entry: ResultEntry) -> str:
    return entry.task_id.address


def _find_entry(run: Run, task_address: str, dataset: str | None) -> int:
    matches = [
        i
        for i, entry in enumerate(run.results)
        if (_address(entry) == task_address or str(entry.task_id) == task_address)
        and (dataset is None or entry.dataset == dataset)
    ]
    if not matches:
        raise CorrectionError(f"no result for task '{task_address}' in run {run.run_id}")
    if len(matches) > 1:
        datasets = ", ".join(sorted({run.results[i].dataset for i in matches}))
        raise CorrectionError(
            f"task '{task_address}' exists in datasets {datasets}; specify a dataset"
        )
    return matches[0]


def current_value(result: EvalResult, field: str) -> Any:
    path = parse_field(field)
    score = result.score(path.key)
    if score is None:
        return None
    return getattr(score, path.attribute)


def original_value(result: EvalResult, field: str) -> Any:
    """The value the automated grader produced, before any correction."""
    for entry in result.correction_history:
        if entry.field == field:
            return entry.before
    return current_value(result=result, field=field)


def _corrected_scores(
    scores: list[Score], key: str, attribute: str, value: Any
) -> list[Score]:
    updated: list[Score] = []
    found = False
    for score in scores:
        if score.key == key:
            found = True
            data = score.model_dump()
            data[attribute] = value
            updated.append(Score.model_validate(data))
        else:
            updated.append(score)
    if not found:
        updated.append(Score.model_validate({"key": key, attribute: value}))
    return updated


def correct(
    run: Run,
    task_address: str,
    field: str,
    value: Any,
    dataset: str | None = None,
    now: datetime | None = None,
) -> Run:
    """Return an amended copy of *run* with one score field overridden.

    The before/after pair is appended to the result's correction history and
    the run's summary counters are recomputed on the primary score key the
    run was recorded with. A missing score key is created, provided the
    resulting Score is valid.

    Raises:
        CorrectionError: if the task or field is unknown, the value cannot be
            interpreted, or the amended Score would be invalid.
    """
    path = parse_field(field)
    after = coerce_value(path=path, raw=value)
    index = _find_entry(run=run, task_address=task_address, dataset=dataset)
    entry = run.results[index]
    before = current_value(result=entry.result, field=str(path))

    try:
        scores = _corrected_scores(
            scores=entry.result.scores,
            key=path.key,
            attribute=path.attribute,
            value=after,
        )
    except ValidationError as exc:
        raise CorrectionError(f"{path} = {after!r} yields an invalid score: {exc}") from exc

    history = [
        *entry.result.correction_history,
        CorrectionEntry(
            field=str(path),
            before=before,
            after=after,
            timestamp=now or datetime.now(UTC),
        ),
    ]
    amended = entry.model_copy(
        update={
            "result": entry.result.model_copy(
                update={"scores": scores, "correction_history": history}
            )
        }
    )
    results = list(run.results)
    results[index] = amended
    totals = summarize(results=results, primary_key=run.primary_score_key)
    return run.model_copy(
        update={
            "results": results,
            "total_evaluations": totals.total_evaluations,
            "total_passed": totals.total_passed,
            "total_errors": totals.total_errors,
        }
    )


class CorrectionLedger:
    """Loads a stored run, applies one correction, and saves it back atomically."""

    def __init__(
        self,
        recorder: JsonRunRecorder,
        registry: SessionRegistry,
    ) -> None:
        self._recorder = recorder
        self._registry = registry

    def apply(
        self,
        path: Path,
        task_address: str,
        field: str,
        value: Any,
        dataset: str | None = None,
    ) -> Run:
        run = self._registry.load(path)
        amended = correct(
            run=run,
            task_address=task_address,
            field=field,
            value=value,
            dataset=dataset,
        )
        self._recorder.save(run=amended, path=path)
        return amended
