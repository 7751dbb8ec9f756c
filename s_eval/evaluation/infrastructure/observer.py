"""StructlogEvaluationObserver — production observer that delegates to structlog."""

import structlog


class StructlogEvaluationObserver:
    """Logs evaluation domain events to structlog.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def run_started(
        self,
        run_id: str,
        session_name: str,
        run_name: str,
        total_tasks: int,
        total_trials: int,
        datasets: dict[str, int],
        concurrency: int,
    ) -> None:
        self._log.info(
            "evaluation.run.started",
            run_id=run_id,
            session_name=session_name,
            run_name=run_name,
            total_tasks=total_tasks,
            total_trials=total_trials,
            datasets=sorted(datasets),
            concurrency=concurrency,
        )

    def run_completed(
        self,
        run_id: str,
        total_evaluations: int,
        total_passed: int,
        total_errors: int,
        elapsed_seconds: float,
    ) -> None:
        self._log.info(
            "evaluation.run.completed",
            run_id=run_id,
            total_evaluations=total_evaluations,
            total_passed=total_passed,
            total_errors=total_errors,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def run_stopped(self, run_id: str, skipped_trials: int) -> None:
        self._log.warning(
            "evaluation.run.stopped",
            run_id=run_id,
            skipped_trials=skipped_trials,
        )

    def trial_started(
        self, run_id: str, task: str, dataset: str, trial_index: int
    ) -> None:
        self._log.debug(
            "evaluation.trial.started",
            run_id=run_id,
            task=task,
            trial_index=trial_index,
        )

    def trial_completed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        passed: bool,
        latency: float,
    ) -> None:
        self._log.info(
            "evaluation.trial.completed",
            run_id=run_id,
            task=task,
            trial_index=trial_index,
            passed=passed,
            latency=round(latency, 3),
        )

    def trial_failed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        kind: str,
        reason: str,
    ) -> None:
        self._log.error(
            "evaluation.trial.failed",
            run_id=run_id,
            task=task,
            trial_index=trial_index,
            kind=kind,
            reason=reason,
        )

    def evaluation_progress(
        self, run_id: str, dataset: str, completed: int, total: int
    ) -> None:
        self._log.debug(
            "evaluation.progress",
            run_id=run_id,
            dataset=dataset,
            completed=completed,
            total=total,
            percent=round(100.0 * completed / total, 1) if total else 0.0,
        )

    def grading_failed(
        self, task: str, trial_index: int, grader: str, reason: str
    ) -> None:
        self._log.warning(
            "grading.failed",
            task=task,
            trial_index=trial_index,
            grader=grader,
            reason=reason,
        )
