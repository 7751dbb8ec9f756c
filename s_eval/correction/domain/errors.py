"""Error types raised by the correction ledger."""

from s_eval.core.errors import SEvalError


class CorrectionError(SEvalError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to apply correction: {reason}")
