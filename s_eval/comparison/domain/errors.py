"""Error types raised by the comparison engine."""

from s_eval.core.errors import SEvalError


class ComparisonError(SEvalError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to compare runs: {reason}")
