"""TaskExecutor — runs resolved tasks under a bounded concurrency policy."""

import asyncio
import time
from collections import Counter
from datetime import UTC, datetime

from s_eval.config.domain.execution import ExecutionConfig
from s_eval.definition.domain.target import as_target
from s_eval.evaluation.application.aggregator import reduce_trials, summarize
from s_eval.evaluation.domain.errors import ExecutionError, TrialTimeoutError
from s_eval.evaluation.domain.observer import EvaluationObserver
from s_eval.evaluation.domain.result import ResultEntry
from s_eval.evaluation.domain.run import Run
from s_eval.evaluation.domain.trial import Trial, TrialError
from s_eval.grading.application.pipeline import GradingPipeline
from s_eval.selection.domain.task import Task
from s_eval.storage.domain.naming import generate_run_name, new_run_id, slugify


class TaskExecutor:
    """Executes every trial of every task and assembles the Run.

    The executor receives its configuration, grading pipeline and observer
    explicitly, so that a run's lifecycle is scoped to one ``run()`` call.
    Failures inside a trial (target errors, timeouts, grader errors) are
    recorded on that trial and never escape.
    """

    def __init__(
        self,
        config: ExecutionConfig,
        pipeline: GradingPipeline,
        observer: EvaluationObserver,
    ) -> None:
        self._config = config
        self._pipeline = pipeline
        self._observer = observer
        self._stopping = False

    def request_stop(self) -> None:
        """Stop dispatching new trials; in-flight trials finish or time out."""
        self._stopping = True

    async def run(
        self,
        tasks: list[Task],
        session_name: str,
        run_name: str | None = None,
        run_id: str | None = None,
    ) -> Run:
        """Execute all (task, trial_index) pairs and return the resulting Run.

        Results follow the order of *tasks*, not completion order. If a stop is
        requested mid-run, the Run is marked partial and holds only the tasks
        that finished at least one trial. A stop requested before the run
        starts skips every trial; the request is cleared when the run ends.
        """
        run_id = run_id or new_run_id()
        run_name = slugify(run_name) if run_name else generate_run_name()
        trials_per_dataset: Counter[str] = Counter()
        for task in tasks:
            trials_per_dataset[task.id.dataset] += task.trials

        self._observer.run_started(
            run_id=run_id,
            session_name=session_name,
            run_name=run_name,
            total_tasks=len(tasks),
            total_trials=sum(trials_per_dataset.values()),
            datasets=dict(trials_per_dataset),
            concurrency=self._config.concurrency,
        )
        started_at = time.monotonic()

        finished: dict[int, list[Trial]] = {i: [] for i in range(len(tasks))}
        sem = asyncio.Semaphore(self._config.concurrency)
        # Shared across concurrent trials; only touched while holding the lock.
        completed: Counter[str] = Counter()
        skipped: list[int] = [0]
        lock = asyncio.Lock()

        try:
            async with asyncio.TaskGroup() as tg:
                for position, task in enumerate(tasks):
                    for trial_index in range(task.trials):
                        tg.create_task(
                            self._run_one_trial(
                                sem=sem,
                                lock=lock,
                                run_id=run_id,
                                task=task,
                                position=position,
                                trial_index=trial_index,
                                finished=finished,
                                completed=completed,
                                skipped=skipped,
                                total=trials_per_dataset[task.id.dataset],
                            )
                        )
        finally:
            self._stopping = False

        results: list[ResultEntry] = []
        for position, task in enumerate(tasks):
            trials = finished[position]
            if not trials:
                continue
            policy = task.reduction or self._config.reduction
            results.append(
                ResultEntry(
                    function=task.id.function,
                    dataset=task.id.dataset,
                    case_id=task.id.case_id,
                    labels=list(task.labels),
                    result=reduce_trials(
                        task=task,
                        trials=trials,
                        policy=policy,
                        primary_key=self._config.primary_score_key,
                    ),
                )
            )

        totals = summarize(results=results, primary_key=self._config.primary_score_key)
        if skipped[0]:
            self._observer.run_stopped(run_id=run_id, skipped_trials=skipped[0])
        self._observer.run_completed(
            run_id=run_id,
            total_evaluations=totals.total_evaluations,
            total_passed=totals.total_passed,
            total_errors=totals.total_errors,
            elapsed_seconds=time.monotonic() - started_at,
        )
        return Run(
            session_name=session_name,
            run_name=run_name,
            run_id=run_id,
            created_at=datetime.now(UTC),
            partial=skipped[0] > 0,
            primary_score_key=self._config.primary_score_key,
            total_evaluations=totals.total_evaluations,
            total_passed=totals.total_passed,
            total_errors=totals.total_errors,
            results=results,
        )

    async def _run_one_trial(
        self,
        sem: asyncio.Semaphore,
        lock: asyncio.Lock,
        run_id: str,
        task: Task,
        position: int,
        trial_index: int,
        finished: dict[int, list[Trial]],
        completed: Counter[str],
        skipped: list[int],
        total: int,
    ) -> None:
        """Execute and grade one trial while holding a worker slot."""
        async with sem:
            if self._stopping:
                async with lock:
                    skipped[0] += 1
                return

            self._observer.trial_started(
                run_id=run_id,
                task=str(task.id),
                dataset=task.id.dataset,
                trial_index=trial_index,
            )
            trial = await self._execute(task=task, trial_index=trial_index)
            trial = await self._pipeline.grade(task=task, trial=trial)

        async with lock:
            finished[position].append(trial)
            completed[task.id.dataset] += 1
            if trial.error is not None:
                self._observer.trial_failed(
                    run_id=run_id,
                    task=str(task.id),
                    dataset=task.id.dataset,
                    trial_index=trial_index,
                    kind=trial.error.kind,
                    reason=trial.error.message,
                )
            else:
                primary = trial.score(self._config.primary_score_key)
                self._observer.trial_completed(
                    run_id=run_id,
                    task=str(task.id),
                    dataset=task.id.dataset,
                    trial_index=trial_index,
                    passed=primary is not None and primary.passed is True,
                    latency=trial.latency,
                )
            self._observer.evaluation_progress(
                run_id=run_id,
                dataset=task.id.dataset,
                completed=completed[task.id.dataset],
                total=total,
            )

    async def _execute(self, task: Task, trial_index: int) -> Trial:
        """Invoke the target under the trial's time bound.

        The task-level timeout overrides the run-level default.
        """
        timeout = task.timeout if task.timeout is not None else self._config.timeout_seconds
        target = as_target(task.target)
        deadline = asyncio.timeout(timeout)
        started = time.monotonic()
        try:
            async with deadline:
                produced = await target.invoke(task.input)
        except TimeoutError as exc:
            latency = time.monotonic() - started
            if deadline.expired() and timeout is not None:
                timed_out = TrialTimeoutError(task=str(task.id), timeout_seconds=timeout)
                error = TrialError(kind="Timeout", message=str(timed_out))
            else:
                error = self._execution_error(task=task, exc=exc)
            return self._failed_trial(task, trial_index, error, latency)
        except Exception as exc:
            latency = time.monotonic() - started
            error = self._execution_error(task=task, exc=exc)
            return self._failed_trial(task, trial_index, error, latency)

        return Trial(
            trial_index=trial_index,
            input=task.input,
            reference=task.reference,
            output=produced.output,
            latency=time.monotonic() - started,
            trace_data=produced.trace_data,
            metadata=dict(produced.metadata),
        )

    def _execution_error(self, task: Task, exc: Exception) -> TrialError:
        wrapped = ExecutionError(task=str(task.id), reason=str(exc) or type(exc).__name__)
        return TrialError(
            kind="Execution",
            message=str(wrapped),
            exception_type=type(exc).__name__,
        )

    def _failed_trial(
        self, task: Task, trial_index: int, error: TrialError, latency: float
    ) -> Trial:
        return Trial(
            trial_index=trial_index,
            input=task.input,
            reference=task.reference,
            error=error,
            latency=latency,
        )
