"""ProgressEvaluationObserver — renders per-dataset Rich progress bars to stderr."""

from __future__ import annotations

import sys

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

_DATASET_COLORS: list[str] = ["cyan", "green", "yellow", "magenta", "blue"]

_OVERALL = "Overall"

# (glyph, style) per segment: succeeded, failed, in flight, waiting.
_SEGMENTS: tuple[tuple[str, str], ...] = (
    ("█", "bright_green"),
    ("█", "red"),
    ("▒", "grey50"),
    ("░", "dim white"),
)


def _counts(task: Task) -> tuple[int, int, int, int]:
    """(succeeded, failed, inflight, total) for one progress row."""
    done = int(task.fields.get("done", 0))
    failed = min(int(task.fields.get("failed", 0)), done)
    return done - failed, failed, int(task.fields.get("inflight", 0)), int(task.total or 0)


class _CountsColumn(ProgressColumn):
    """``done+inflight/total``, then the failure count when there is one."""

    def render(self, task: Task) -> Text:
        succeeded, failed, inflight, total = _counts(task)
        text = Text(f"{succeeded + failed}", style="bright_green")
        text.append(f"+{inflight}", style="grey50")
        text.append(f"/{total}")
        if failed:
            text.append(f"  {failed} failed", style="red")
        return text


class _SegmentedBarColumn(ProgressColumn):
    """Bar split into succeeded, failed, in-flight and waiting trials."""

    def __init__(self, width: int = 40) -> None:
        super().__init__()
        self.width = width

    def render(self, task: Task) -> Text:
        succeeded, failed, inflight, total = _counts(task)
        if total <= 0:
            return Text(_SEGMENTS[-1][0] * self.width, style=_SEGMENTS[-1][1])

        cells: list[int] = []
        used = 0
        for count in (succeeded, failed, inflight):
            n = min(count * self.width // total, self.width - used)
            cells.append(n)
            used += n
        cells.append(self.width - used)

        bar = Text()
        for (glyph, style), n in zip(_SEGMENTS, cells, strict=True):
            bar.append(glyph * n, style=style)
        return bar


def _make_progress(console: Console) -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        _SegmentedBarColumn(width=40),
        _CountsColumn(),
        TimeElapsedColumn(),
        console=console,
        refresh_per_second=10,
        transient=False,
    )


class ProgressEvaluationObserver:
    """Renders one progress row per dataset plus an Overall row on stderr.

    Pass ``disabled=True`` to keep the bookkeeping without terminal output
    (useful in tests).

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._done: dict[str, int] = {}
        self._inflight: dict[str, int] = {}
        self._failed: dict[str, int] = {}
        self._task_ids: dict[str, TaskID] = {}
        self._progress: Progress | None = None
        self._live: Live | None = None

    @property
    def done(self) -> dict[str, int]:
        return dict(self._done)

    @property
    def inflight(self) -> dict[str, int]:
        return dict(self._inflight)

    @property
    def failed(self) -> dict[str, int]:
        return dict(self._failed)

    def _describe(self, name: str, index: int, pad_width: int) -> str:
        if name == _OVERALL:
            return f"[bold]{_OVERALL:<{pad_width}}[/bold]"
        if sys.stderr.isatty():
            color = _DATASET_COLORS[index % len(_DATASET_COLORS)]
            return f"[{color}]{name:<{pad_width}}[/{color}]"
        return f"{name:<{pad_width}}"

    def _bump(self, counter: dict[str, int], key: str, delta: int) -> None:
        for name in (key, _OVERALL):
            if name in counter:
                counter[name] = max(0, counter[name] + delta)

    def _refresh(self, key: str) -> None:
        if self._progress is None:
            return
        for name in (key, _OVERALL):
            task_id = self._task_ids.get(name)
            if task_id is None:
                continue
            self._progress.update(
                task_id,
                completed=self._done.get(name, 0),
                done=self._done.get(name, 0),
                inflight=self._inflight.get(name, 0),
                failed=self._failed.get(name, 0),
            )

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
        names = list(datasets)
        for name in names + [_OVERALL]:
            self._done[name] = 0
            self._inflight[name] = 0
            self._failed[name] = 0
        self._task_ids = {}

        if self._disabled:
            return

        pad_width = max((len(n) for n in names + [_OVERALL]), default=len(_OVERALL))
        console = Console(stderr=True)
        self._progress = _make_progress(console=console)
        self._task_ids[_OVERALL] = self._progress.add_task(
            description=self._describe(name=_OVERALL, index=0, pad_width=pad_width),
            total=float(total_trials),
            done=0,
            inflight=0,
            failed=0,
        )
        for i, name in enumerate(names):
            self._task_ids[name] = self._progress.add_task(
                description=self._describe(name=name, index=i, pad_width=pad_width),
                total=float(datasets[name]),
                done=0,
                inflight=0,
                failed=0,
            )

        header = Text.assemble(
            ("  s-eval ", "bold"),
            (f"{session_name}/{run_name}", "cyan"),
            (f"  concurrency={concurrency}", "dim white"),
        )
        self._live = Live(
            Group(header, Text(""), self._progress),
            console=console,
            refresh_per_second=10,
        )
        self._live.start()

    def run_completed(
        self,
        run_id: str,
        total_evaluations: int,
        total_passed: int,
        total_errors: int,
        elapsed_seconds: float,
    ) -> None:
        if self._live is not None:
            self._live.stop()
        self._live = None
        self._progress = None

    def run_stopped(self, run_id: str, skipped_trials: int) -> None:
        pass

    def trial_started(
        self, run_id: str, task: str, dataset: str, trial_index: int
    ) -> None:
        self._bump(self._inflight, dataset, 1)
        self._refresh(dataset)

    def trial_completed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        passed: bool,
        latency: float,
    ) -> None:
        pass

    def trial_failed(
        self,
        run_id: str,
        task: str,
        dataset: str,
        trial_index: int,
        kind: str,
        reason: str,
    ) -> None:
        self._bump(self._failed, dataset, 1)

    def evaluation_progress(
        self, run_id: str, dataset: str, completed: int, total: int
    ) -> None:
        self._bump(self._done, dataset, 1)
        self._bump(self._inflight, dataset, -1)
        self._refresh(dataset)

    def grading_failed(
        self, task: str, trial_index: int, grader: str, reason: str
    ) -> None:
        pass
