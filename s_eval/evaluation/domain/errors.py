"""Trial-level failures. They are recorded on the trial and never abort a run."""

from s_eval.core.errors import SEvalError


class ExecutionError(SEvalError):
    """The target raised or crashed while running one trial."""

    def __init__(self, task: str, reason: str) -> None:
        self.task = task
        super().__init__(f"Failed to execute '{task}': {reason}")


class TrialTimeoutError(SEvalError):
    """One trial exceeded its time bound and was cancelled."""

    def __init__(self, task: str, timeout_seconds: float) -> None:
        self.task = task
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Failed to execute '{task}': timed out after {timeout_seconds:g}s",
            retriable=True,
        )
