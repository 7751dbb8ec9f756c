"""Observer port for the evaluation domain — defines events in domain language."""

from typing import Protocol


class EvaluationObserver(Protocol):
    """Observer port emitting structured events during an evaluation run.

    Implementations may log to structlog, render progress, or record for tests.
    """

    def run_started(
        self,
        run_id: str,
        session_name: str,
        run_name: str,
        total_tasks: int,
        total_trials: int,
        datasets: dict[str, int],
        concurrency: int,
    ) -> None: ...

    def run_completed(
        self,
        run_id: str,
        total_evaluations: int,
        total_passed: int,
        total_errors: int,
        elapsed_seconds: float,
    ) -> None: ...

    def run_stopped(self, run_id: str, skipped_trials: int) -> None: ...

    def trial_started(
        self, run_id: str, task: str, dataset: str, trial_index: int
    ) -> None: ...

    def trial_completed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        passed: bool,
        latency: float,
    ) -> None: ...

    def trial_failed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        kind: str,
        reason: str,
    ) -> None: ...

    def evaluation_progress(
        self, run_id: str, dataset: str, completed: int, total: int
    ) -> None: ...

    def grading_failed(
        self, task: str, trial_index: int, grader: str, reason: str
    ) -> None: ...
