"""Trial — one execution of a Task, finalized once grading completes."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from s_eval.grading.domain.score import Score

type ErrorKind = Literal["Execution", "Timeout", "Cancelled"]


class TrialError(BaseModel, frozen=True):
    """Why a trial produced no output."""

    kind: ErrorKind
    message: str
    exception_type: str | None = None

    def describe(self) -> str:
        if self.exception_type:
            return f"{self.kind}: {self.exception_type}: {self.message}"
        return f"{self.kind}: {self.message}"


class Trial(BaseModel, frozen=True):
    """Immutable record of one trial: what went in, what came out, how it scored.

    Evaluators receive this object after checks have run; ``scores`` holds
    whatever grading has produced so far.
    """

    trial_index: int = Field(ge=0)
    input: Any = None
    reference: Any = None
    output: Any = None
    error: TrialError | None = None
    latency: float = Field(default=0.0, ge=0.0)
    trace_data: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    scores: list[Score] = Field(default_factory=list)

    def score(self, key: str) -> Score | None:
        """Return the score with the given key, or None."""
        for score in self.scores:
            if score.key == key:
                return score
        return None
