"""Score aggregation — trials into a Result, Results into run counters."""

import statistics
from dataclasses import dataclass

from s_eval.evaluation.domain.reduction import TrialReduction
from s_eval.evaluation.domain.result import EvalResult, ResultEntry
from s_eval.evaluation.domain.trial import Trial
from s_eval.grading.domain.score import Score
from s_eval.selection.domain.task import Task


@dataclass(frozen=True)
class RunTotals:
    total_evaluations: int
    total_passed: int
    total_errors: int


def _trial_passed(trial: Trial, primary_key: str) -> bool:
    score = trial.score(primary_key)
    return score is not None and score.passed is True


def representative_trial(
    trials: list[Trial], policy: TrialReduction, primary_key: str
) -> Trial:
    """Pick the trial whose output/error stands for the task.

    ``first`` uses trial 0; ``pass_at_k`` the first passing trial;
    ``pass_all_k`` the first failing trial. Falls back to trial 0.
    """
    ordered = sorted(trials, key=lambda t: t.trial_index)
    if policy is TrialReduction.PASS_AT_K:
        chosen = next((t for t in ordered if _trial_passed(t, primary_key)), None)
    elif policy is TrialReduction.PASS_ALL_K:
        chosen = next((t for t in ordered if not _trial_passed(t, primary_key)), None)
    else:
        chosen = None
    return chosen or ordered[0]


def _reduce_passed(
    flags: list[bool], policy: TrialReduction, representative: bool | None
) -> bool | None:
    if not flags:
        return None
    if policy is TrialReduction.PASS_AT_K:
        return any(flags)
    if policy is TrialReduction.PASS_ALL_K:
        return all(flags)
    return representative if representative is not None else flags[0]


def reduce_scores(
    trials: list[Trial], policy: TrialReduction, representative: Trial
) -> list[Score]:
    """Reduce per-trial scores key by key.

    Booleans follow *policy*; numeric values are the arithmetic mean of the
    trials that carry one. Notes come from the representative trial.
    """
    keys: list[str] = []
    for trial in sorted(trials, key=lambda t: t.trial_index):
        for score in trial.scores:
            if score.key not in keys:
                keys.append(score.key)

    reduced: list[Score] = []
    for key in keys:
        per_trial = [s for t in trials if (s := t.score(key)) is not None]
        rep = representative.score(key) or per_trial[0]
        values = [s.value for s in per_trial if s.value is not None]
        flags = [s.passed for s in per_trial if s.passed is not None]
        reduced.append(
            Score(
                key=key,
                value=statistics.mean(values) if values else None,
                passed=_reduce_passed(flags, policy, rep.passed),
                notes=rep.notes,
                grading_error=rep.grading_error,
            )
        )
    return reduced


def reduce_trials(
    task: Task,
    trials: list[Trial],
    policy: TrialReduction,
    primary_key: str,
) -> EvalResult:
    """Collapse a task's finished trials into its Result."""
    representative = representative_trial(
        trials=trials, policy=policy, primary_key=primary_key
    )
    metadata = dict(task.metadata)
    metadata.update(representative.metadata)
    if len(trials) > 1:
        metadata["reduction"] = {
            "policy": policy.value,
            "trials": len(trials),
            "passed_trials": sum(_trial_passed(t, primary_key) for t in trials),
            "numeric": "mean",
        }
    return EvalResult(
        input=task.input,
        output=representative.output,
        reference=task.reference,
        scores=reduce_scores(
            trials=trials, policy=policy, representative=representative
        ),
        error=representative.error.describe() if representative.error else None,
        latency=statistics.mean(t.latency for t in trials),
        metadata=metadata,
        trace_data=representative.trace_data,
    )


def result_passed(result: EvalResult, primary_key: str) -> bool:
    score = result.score(primary_key)
    return score is not None and score.passed is True


def summarize(results: list[ResultEntry], primary_key: str) -> RunTotals:
    """Run-level counters: total, passed on the primary key, errored."""
    return RunTotals(
        total_evaluations=len(results),
        total_passed=sum(result_passed(e.result, primary_key) for e in results),
        total_errors=sum(e.result.error is not None for e in results),
    )
