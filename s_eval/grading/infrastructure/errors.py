"""Error types raised by graders."""

from s_eval.core.errors import SEvalError


class GradingError(SEvalError):
    """Raised when an evaluator or judge cannot produce a score.

    The grading pipeline captures it as a grading error on the affected score;
    it never aborts the trial.
    """

    def __init__(self, reason: str, retriable: bool = False) -> None:
        super().__init__(f"Failed to grade trial: {reason}", retriable=retriable)
