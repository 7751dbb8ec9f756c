"""EvalResult and ResultEntry — the task-level outcome recorded in a Run."""

from typing import Any

from pydantic import BaseModel, Field

from s_eval.correction.domain.entry import CorrectionEntry
from s_eval.grading.domain.score import Score
from s_eval.selection.domain.task import TaskId


class EvalResult(BaseModel, frozen=True):
    """Externally visible outcome of one task across its trials."""

    input: Any = None
    output: Any = None
    reference: Any = None
    scores: list[Score] = Field(default_factory=list)
    error: str | None = None
    latency: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    trace_data: dict[str, Any] | None = None
    correction_history: list[CorrectionEntry] = Field(default_factory=list)

    def score(self, key: str) -> Score | None:
        for score in self.scores:
            if score.key == key:
                return score
        return None


class ResultEntry(BaseModel, frozen=True):
    """A Result together with the identity of the task that produced it."""

    function: str
    dataset: str
    case_id: str | None = None
    labels: list[str] = Field(default_factory=list)
    result: EvalResult

    @property
    def task_id(self) -> TaskId:
        return TaskId(dataset=self.dataset, function=self.function, case_id=self.case_id)
