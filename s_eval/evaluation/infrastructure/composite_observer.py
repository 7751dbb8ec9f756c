"""CompositeEvaluationObserver — fans out all events to a list of observers."""

from s_eval.evaluation.domain.observer import EvaluationObserver


class CompositeEvaluationObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[EvaluationObserver]) -> None:
        self._observers = observers

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
        for obs in self._observers:
            obs.run_started(
                run_id=run_id,
                session_name=session_name,
                run_name=run_name,
                total_tasks=total_tasks,
                total_trials=total_trials,
                datasets=datasets,
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
        for obs in self._observers:
            obs.run_completed(
                run_id=run_id,
                total_evaluations=total_evaluations,
                total_passed=total_passed,
                total_errors=total_errors,
                elapsed_seconds=elapsed_seconds,
            )

    def run_stopped(self, run_id: str, skipped_trials: int) -> None:
        for obs in self._observers:
            obs.run_stopped(run_id=run_id, skipped_trials=skipped_trials)

    def trial_started(
        self, run_id: str, task: str, dataset: str, trial_index: int
    ) -> None:
        for obs in self._observers:
            obs.trial_started(
                run_id=run_id, task=task, dataset=dataset, trial_index=trial_index
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
        for obs in self._observers:
            obs.trial_completed(
                run_id=run_id,
                task=task,
                dataset=dataset,
                trial_index=trial_index,
                passed=passed,
                latency=latency,
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
        for obs in self._observers:
            obs.trial_failed(
                run_id=run_id,
                task=task,
                dataset=dataset,
                trial_index=trial_index,
                kind=kind,
                reason=reason,
            )

    def evaluation_progress(
        self, run_id: str, dataset: str, completed: int, total: int
    ) -> None:
        for obs in self._observers:
            obs.evaluation_progress(
                run_id=run_id, dataset=dataset, completed=completed, total=total
            )

    def grading_failed(
        self, task: str, trial_index: int, grader: str, reason: str
    ) -> None:
        for obs in self._observers:
            obs.grading_failed(
                task=task, trial_index=trial_index, grader=grader, reason=reason
            )
