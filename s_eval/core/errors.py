"""Base exception class for all s-eval-specific errors."""


class SEvalError(Exception):
    """Base class for all s-eval errors."""

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
