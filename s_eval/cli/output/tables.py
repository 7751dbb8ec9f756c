"""Rich renderers for runs, sessions and comparisons."""

from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from s_eval.comparison.domain.comparison import Comparison, ComparisonRow
from s_eval.evaluation.application.aggregator import result_passed
from s_eval.evaluation.domain.result import EvalResult
from s_eval.evaluation.domain.run import Run
from s_eval.grading.domain.score import Score
from s_eval.storage.domain.run_ref import Session

_MAX_CELL = 60


def format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _truncate(value: object, max_len: int = _MAX_CELL) -> str:
    text = "" if value is None else str(value)
    text = text.replace("\n", " ")
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"


def _format_score(score: Score) -> Text:
    parts: list[str] = []
    if score.passed is not None:
        parts.append("pass" if score.passed else "fail")
    if score.value is not None:
        parts.append(f"{score.value:.3g}")
    style = "green" if score.passed else "red" if score.passed is False else "default"
    if score.grading_error:
        parts.append("grading error")
        style = "yellow"
    return Text(f"{score.key}={'/'.join(parts)}", style=style)


def _format_scores(result: EvalResult) -> Text:
    return Text(" ").join(_format_score(s) for s in result.scores)


def _status(result: EvalResult, primary_key: str) -> Text:
    if result.error is not None:
        return Text("ERROR", style="bold yellow")
    if result_passed(result, primary_key):
        return Text("PASS", style="bold green")
    return Text("FAIL", style="bold red")


def print_run_summary(
    console: Console,
    run: Run,
    primary_key: str,
    elapsed_seconds: float | None = None,
    path: Path | None = None,
) -> None:
    """Print run metadata followed by one row per result."""
    header = Table.grid(padding=(0, 2))
    header.add_column(style="dim")
    header.add_column()
    header.add_row("Session", run.session_name)
    header.add_row("Run", f"{run.run_name} ({run.run_id})")
    header.add_row(
        "Results",
        f"{run.total_passed}/{run.total_evaluations} passed, {run.total_errors} errors",
    )
    if run.partial:
        header.add_row("Status", Text("partial (stopped early)", style="yellow"))
    if elapsed_seconds is not None:
        header.add_row("Elapsed", format_elapsed(elapsed_seconds))
    if path is not None:
        header.add_row("Artifact", str(path))
    console.print(header)
    console.print(results_table(run=run, primary_key=primary_key))


def results_table(run: Run, primary_key: str) -> Table:
    table = Table(title=f"{run.session_name}/{run.run_name}", show_lines=False)
    table.add_column("Task", overflow="fold")
    table.add_column("Status")
    table.add_column("Scores", overflow="fold")
    table.add_column("Latency", justify="right")
    table.add_column("Output / Error", overflow="fold")
    for entry in run.results:
        result = entry.result
        detail = result.error if result.error is not None else result.output
        latency = f"{result.latency:.2f}s" if result.latency is not None else "-"
        table.add_row(
            str(entry.task_id),
            _status(result, primary_key),
            _format_scores(result),
            latency,
            _truncate(detail),
        )
    return table


def sessions_table(sessions: list[Session]) -> Table:
    table = Table(title="Sessions")
    table.add_column("Session")
    table.add_column("Run")
    table.add_column("Run ID")
    table.add_column("Created")
    table.add_column("Passed", justify="right")
    table.add_column("Errors", justify="right")
    for session in sessions:
        if not session.runs:
            table.add_row(session.name, "-", "-", "-", "-", "-")
        for ref in session.runs:
            table.add_row(
                session.name,
                ref.run_name,
                ref.run_id,
                ref.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                f"{ref.total_passed}/{ref.total_evaluations}",
                str(ref.total_errors),
            )
    return table


def _comparison_cell(row: ComparisonRow, index: int) -> Text:
    cell = row.cells[index]
    if cell is None:
        return Text("missing", style="dim")
    parts: list[Text] = []
    for delta in row.deltas:
        value = delta.values[index]
        change = delta.deltas[index]
        if value is None:
            continue
        text = Text(f"{delta.key}={value:.3g}")
        if change:
            style = "green" if change > 0 else "red"
            text.append(f" ({change:+.3g})", style=style)
        parts.append(text)
    if not parts:
        return Text("error" if cell.result.error else "-", style="dim")
    return Text(" ").join(parts)


def comparison_table(comparison: Comparison) -> Table:
    table = Table(title="Comparison")
    table.add_column("Task", overflow="fold")
    for name, run_id in zip(comparison.run_names, comparison.run_ids, strict=True):
        table.add_column(f"{name}\n{run_id}", overflow="fold")
    for row in comparison.rows:
        table.add_row(
            str(row.task_id),
            *(_comparison_cell(row, i) for i in range(len(comparison.run_ids))),
        )
    return table
