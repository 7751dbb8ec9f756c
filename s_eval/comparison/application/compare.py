"""Comparison engine — joins runs on (dataset, function, case_id)."""

from s_eval.comparison.domain.comparison import Comparison, ComparisonRow, ScoreDelta
from s_eval.comparison.domain.errors import ComparisonError
from s_eval.evaluation.domain.result import ResultEntry
from s_eval.evaluation.domain.run import Run
from s_eval.selection.domain.task import TaskId


def _score_deltas(cells: list[ResultEntry | None]) -> list[ScoreDelta]:
    keys: list[str] = []
    for cell in cells:
        if cell is None:
            continue
        for score in cell.result.scores:
            if score.key not in keys:
                keys.append(score.key)

    deltas: list[ScoreDelta] = []
    for key in keys:
        values: list[float | None] = []
        for cell in cells:
            score = cell.result.score(key) if cell is not None else None
            values.append(score.numeric if score is not None else None)
        present = [v for v in values if v is not None]
        if len(present) < 2:
            continue
        baseline = present[0]
        deltas.append(
            ScoreDelta(
                key=key,
                values=values,
                deltas=[v - baseline if v is not None else None for v in values],
            )
        )
    return deltas


def compare(runs: list[Run]) -> Comparison:
    """Align the results of two or more runs by task identity.

    Rows appear in first-seen order, walking the runs in argument order. A
    task absent from a run gets None in that run's cell; task sets need not
    match.

    Raises:
        ComparisonError: if fewer than two runs are given.
    """
    if len(runs) < 2:
        raise ComparisonError(f"need at least two runs, got {len(runs)}")

    order: list[TaskId] = []
    by_run: list[dict[TaskId, ResultEntry]] = []
    for run in runs:
        index: dict[TaskId, ResultEntry] = {}
        for entry in run.results:
            index.setdefault(entry.task_id, entry)
            if entry.task_id not in order:
                order.append(entry.task_id)
        by_run.append(index)

    rows: list[ComparisonRow] = []
    for task_id in order:
        cells = [index.get(task_id) for index in by_run]
        rows.append(
            ComparisonRow(task_id=task_id, cells=cells, deltas=_score_deltas(cells))
        )

    return Comparison(
        run_ids=[run.run_id for run in runs],
        run_names=[run.run_name for run in runs],
        rows=rows,
    )
