"""Run — an immutable snapshot of one execution pass."""

from datetime import datetime

from pydantic import BaseModel, Field

from s_eval.evaluation.domain.result import ResultEntry
from s_eval.grading.domain.score import DEFAULT_SCORE_KEY

type RunId = str


class Run(BaseModel, frozen=True):
    """Immutable record of a completed (or interrupted) run.

    ``partial`` is True when the run was stopped before every task was
    dispatched; ``results`` then holds only the tasks that finished a trial.
    ``primary_score_key`` is the score the pass counters were computed on;
    corrections recount with it.
    """

    session_name: str = Field(min_length=1)
    run_name: str = Field(min_length=1)
    run_id: RunId = Field(min_length=1)
    created_at: datetime
    partial: bool = False
    primary_score_key: str = Field(default=DEFAULT_SCORE_KEY, min_length=1)
    total_evaluations: int = Field(ge=0)
    total_passed: int = Field(ge=0)
    total_errors: int = Field(ge=0)
    results: list[ResultEntry]

    @property
    def artifact_name(self) -> str:
        return f"{self.run_name}_{self.run_id}"
