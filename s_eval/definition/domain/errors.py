"""Error types raised while declaring eval definitions."""

from s_eval.core.errors import SEvalError


class EvalDefinitionError(SEvalError):
    """Raised when an eval definition is malformed or registered twice."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to register eval: {reason}")
