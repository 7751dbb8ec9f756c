"""Run builders shared by storage, comparison and correction tests."""

from datetime import UTC, datetime, timedelta

from s_eval.evaluation.domain.result import EvalResult, ResultEntry
from s_eval.evaluation.domain.run import Run
from s_eval.grading.domain.score import Score

_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


def make_entry(
    function: str,
    passed: bool | None = True,
    value: float | None = None,
    dataset: str = "math",
    case_id: str | None = None,
    error: str | None = None,
    labels: list[str] | None = None,
    output: object = None,
) -> ResultEntry:
    scores: list[Score] = []
    if passed is not None:
        scores.append(Score(key="pass", passed=passed))
    if value is not None:
        scores.append(Score(key="quality", value=value))
    return ResultEntry(
        function=function,
        dataset=dataset,
        case_id=case_id,
        labels=labels or [],
        result=EvalResult(
            input={"q": function},
            output=output,
            scores=scores,
            error=error,
            latency=0.1,
        ),
    )


def make_run(
    results: list[ResultEntry] | None = None,
    session_name: str = "nightly",
    run_name: str = "baseline",
    run_id: str = "aaaa1111",
    minutes: int = 0,
    primary_score_key: str = "pass",
) -> Run:
    entries = results if results is not None else [make_entry("add")]
    return Run(
        session_name=session_name,
        run_name=run_name,
        run_id=run_id,
        created_at=_EPOCH + timedelta(minutes=minutes),
        primary_score_key=primary_score_key,
        total_evaluations=len(entries),
        total_passed=sum(
            1
            for e in entries
            if (s := e.result.score(primary_score_key)) is not None and s.passed is True
        ),
        total_errors=sum(1 for e in entries if e.result.error is not None),
        results=entries,
    )
