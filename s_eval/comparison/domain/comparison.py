"""Comparison value objects — results of several runs aligned by task identity."""

from pydantic import BaseModel

from s_eval.evaluation.domain.result import ResultEntry
from s_eval.selection.domain.task import TaskId


class ScoreDelta(BaseModel, frozen=True):
    """One score key across aligned results.

    ``values[i]`` is run i's numeric score (``value``, or ``passed`` as 1.0/0.0)
    and ``deltas[i]`` its difference from the first present value; both are
    None where run i lacks the key.
    """

    key: str
    values: list[float | None]
    deltas: list[float | None]


class ComparisonRow(BaseModel, frozen=True):
    task_id: TaskId
    cells: list[ResultEntry | None]
    deltas: list[ScoreDelta]

    @property
    def missing(self) -> list[int]:
        """Indices of the runs that have no result for this task."""
        return [i for i, cell in enumerate(self.cells) if cell is None]


class Comparison(BaseModel, frozen=True):
    run_ids: list[str]
    run_names: list[str]
    rows: list[ComparisonRow]
