"""Execution configuration models."""

from pydantic import BaseModel, Field

from s_eval.evaluation.domain.reduction import TrialReduction
from s_eval.grading.domain.score import DEFAULT_SCORE_KEY


class ExecutionConfig(BaseModel, frozen=True):
    concurrency: int = Field(default=1, ge=1)
    timeout_seconds: float | None = Field(default=None, gt=0)
    reduction: TrialReduction = TrialReduction.FIRST
    primary_score_key: str = Field(default=DEFAULT_SCORE_KEY, min_length=1)
