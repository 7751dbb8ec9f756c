"""CLI entrypoint for s-eval — typer app for running, browsing and amending runs."""

import asyncio
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any, NoReturn

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from s_eval.cli.output.tables import (
    comparison_table,
    print_run_summary,
    sessions_table,
)
from s_eval.comparison.application.compare import compare as compare_runs
from s_eval.config.domain.config import EngineConfig
from s_eval.config.domain.storage import DEFAULT_RESULTS_DIR
from s_eval.config.infrastructure.errors import ConfigValidationError
from s_eval.config.infrastructure.observer import StructlogConfigObserver
from s_eval.config.infrastructure.yaml_loader import YamlConfigLoader
from s_eval.core.errors import SEvalError
from s_eval.correction.application.ledger import CorrectionLedger
from s_eval.definition.infrastructure.module_loader import PythonEvalSource
from s_eval.evaluation.application.executor import TaskExecutor
from s_eval.evaluation.domain.observer import EvaluationObserver
from s_eval.evaluation.domain.run import Run
from s_eval.evaluation.infrastructure.composite_observer import (
    CompositeEvaluationObserver,
)
from s_eval.evaluation.infrastructure.observer import StructlogEvaluationObserver
from s_eval.evaluation.infrastructure.progress_observer import (
    ProgressEvaluationObserver,
)
from s_eval.grading.application.pipeline import GradingPipeline
from s_eval.query.application.query import filter_results
from s_eval.query.domain.filters import PassedFilter, ResultFilter, ScoreFilter
from s_eval.selection.application.resolver import SelectorResolver
from s_eval.selection.domain.task import Task
from s_eval.storage.infrastructure.errors import StorageError
from s_eval.storage.infrastructure.observer import StructlogStorageObserver
from s_eval.storage.infrastructure.recorder import JsonRunRecorder
from s_eval.storage.infrastructure.session_registry import SessionRegistry

app = typer.Typer(add_completion=False)


def _configure_structlog(log_format: str, verbose: bool = False) -> None:
    """Configure structlog based on the requested format and verbosity."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _load_config(config_path: Path | None) -> EngineConfig:
    if config_path is None:
        return EngineConfig()
    loader = YamlConfigLoader(observer=StructlogConfigObserver())
    return loader.load(path=config_path)


def _apply_overrides(config: EngineConfig, overrides: dict[str, Any]) -> EngineConfig:
    """Merge CLI overrides (``section.key`` -> value, None = unset) into *config*."""
    data = config.model_dump()
    for dotted, value in overrides.items():
        if value is None or value == []:
            continue
        section, _, key = dotted.partition(".")
        if key:
            data[section][key] = value
        else:
            data[section] = value
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _registry(results_dir: Path) -> SessionRegistry:
    return SessionRegistry(results_dir=results_dir, observer=StructlogStorageObserver())


def _recorder(results_dir: Path) -> JsonRunRecorder:
    return JsonRunRecorder(results_dir=results_dir, observer=StructlogStorageObserver())


async def _execute(
    executor: TaskExecutor,
    tasks: list[Task],
    session_name: str,
    run_name: str | None,
) -> Run:
    """Run *tasks*, turning SIGINT into a graceful stop that yields a partial Run."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, executor.request_stop)
        handler_installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        # Not available on this platform or outside the main thread.
        handler_installed = False
    try:
        return await executor.run(
            tasks=tasks, session_name=session_name, run_name=run_name
        )
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


def _parse_score_filter(raw: str) -> ScoreFilter:
    """Parse ``key:op:value``, e.g. ``accuracy:gte:0.8``."""
    key, op, value = (raw.split(":") + ["", ""])[:3]
    try:
        return ScoreFilter.model_validate({"key": key, "op": op, "value": value})
    except ValidationError as exc:
        raise typer.BadParameter(
            f"invalid score filter {raw!r}; expected key:op:value with op in "
            "gt, gte, lt, lte, eq, neq"
        ) from exc


def _fail(exc: BaseException) -> NoReturn:
    typer.echo(str(exc))
    sys.exit(1)


@app.command()
def run(
    selector: str = typer.Argument(
        ..., help="path[::func[@case],...] selecting the tasks to run"
    ),
    root: Path | None = typer.Option(
        None, "--root", help="Directory that selector paths are relative to"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to engine config YAML"
    ),
    session: str | None = typer.Option(None, "--session", "-s", help="Session name"),
    run_name: str | None = typer.Option(None, "--run-name", "-n", help="Run name"),
    concurrency: int | None = typer.Option(
        None, "--concurrency", "-j", help="Maximum trials executing at once"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Default per-trial timeout in seconds"
    ),
    reduction: str | None = typer.Option(
        None, "--reduction", help="first, pass_at_k or pass_all_k"
    ),
    results_dir: Path | None = typer.Option(
        None, "--results-dir", help="Directory holding session folders"
    ),
    no_save: bool = typer.Option(False, "--no-save", help="Do not persist the run"),
    dataset: list[str] | None = typer.Option(None, "--dataset", help="Only these datasets"),
    exclude_dataset: list[str] | None = typer.Option(
        None, "--exclude-dataset", help="Skip these datasets"
    ),
    label: list[str] | None = typer.Option(
        None, "--label", help="Only tasks carrying any of these labels"
    ),
    exclude_label: list[str] | None = typer.Option(
        None, "--exclude-label", help="Skip tasks carrying any of these labels"
    ),
    limit: int | None = typer.Option(None, "--limit", help="Run at most N tasks"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Resolve SELECTOR, execute its tasks, and record the run."""
    try:
        config = _load_config(config_path=config_path)
        config = _apply_overrides(
            config,
            {
                "session_name": session,
                "verbose": verbose or None,
                "execution.concurrency": concurrency,
                "execution.timeout_seconds": timeout,
                "execution.reduction": reduction,
                "storage.results_dir": results_dir,
                "storage.save": False if no_save else None,
                "filters.datasets": dataset,
                "filters.exclude_datasets": exclude_dataset,
                "filters.labels": label,
                "filters.exclude_labels": exclude_label,
                "filters.limit": limit,
            },
        )
        _configure_structlog(log_format=log_format, verbose=config.verbose)

        resolver = SelectorResolver(source=PythonEvalSource(), root=root)
        tasks = resolver.resolve(selector=selector, filters=config.filters)
        if not tasks:
            typer.echo("No tasks matched the selector and filters.")
            sys.exit(1)

        observers: list[EvaluationObserver] = [StructlogEvaluationObserver()]
        if log_format != "json":
            observers.append(ProgressEvaluationObserver())
        evaluation_observer = CompositeEvaluationObserver(observers=observers)
        executor = TaskExecutor(
            config=config.execution,
            pipeline=GradingPipeline(observer=evaluation_observer),
            observer=evaluation_observer,
        )

        started_at = time.monotonic()
        result: Run = asyncio.run(
            _execute(
                executor=executor,
                tasks=tasks,
                session_name=config.session_name,
                run_name=run_name,
            )
        )
        elapsed_seconds = time.monotonic() - started_at

        console = Console()
        storage_failure: StorageError | None = None
        artifact: Path | None = None
        if config.storage.save:
            try:
                ref = _recorder(config.storage.results_dir).record(run=result)
                artifact = ref.path
                result = result.model_copy(
                    update={"run_id": ref.run_id, "run_name": ref.run_name}
                )
            except StorageError as exc:
                storage_failure = exc

        print_run_summary(
            console=console,
            run=result,
            primary_key=config.execution.primary_score_key,
            elapsed_seconds=elapsed_seconds,
            path=artifact,
        )
        if storage_failure is not None:
            _fail(storage_failure)
        if result.partial:
            typer.echo("Run interrupted; partial results recorded.")
            sys.exit(1)

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        typer.echo("Evaluation interrupted.")
        sys.exit(1)
    except SEvalError as exc:
        _fail(exc)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)


@app.command()
def sessions(
    results_dir: Path = typer.Option(
        DEFAULT_RESULTS_DIR, "--results-dir", help="Directory holding session folders"
    ),
) -> None:
    """List sessions and the runs they contain."""
    _configure_structlog(log_format="console")
    try:
        found = _registry(results_dir).list_sessions()
    except SEvalError as exc:
        _fail(exc)
    if not found:
        typer.echo(f"No sessions in {results_dir}.")
        return
    Console().print(sessions_table(found))


@app.command()
def show(
    ref: str = typer.Argument(..., help="Run artifact path, run id, or run name"),
    session: str | None = typer.Option(None, "--session", "-s", help="Session name"),
    results_dir: Path = typer.Option(
        DEFAULT_RESULTS_DIR, "--results-dir", help="Directory holding session folders"
    ),
    dataset: list[str] | None = typer.Option(None, "--dataset", help="Only these datasets"),
    label: list[str] | None = typer.Option(None, "--label", help="Only these labels"),
    search: str | None = typer.Option(None, "--search", help="Case-insensitive text search"),
    errors: bool | None = typer.Option(
        None, "--errors/--no-errors", help="Only errored / non-errored results"
    ),
    passed: bool | None = typer.Option(
        None, "--passed/--failed", help="Filter on the primary score"
    ),
    score: list[str] | None = typer.Option(
        None, "--score", help="Score filter key:op:value (repeatable)"
    ),
    primary_key: str | None = typer.Option(
        None, "--primary-key", help="Primary score key (default: the one the run used)"
    ),
) -> None:
    """Print the results of a stored run."""
    _configure_structlog(log_format="console")
    try:
        registry = _registry(results_dir)
        run_ref = registry.resolve(ref=ref, session_name=session)
        stored = registry.load(run_ref.path)
        primary_key = primary_key or stored.primary_score_key
        result_filter = ResultFilter(
            datasets=dataset or [],
            labels=label or [],
            search=search,
            has_error=errors,
            score_filters=[_parse_score_filter(s) for s in score or []],
            passed_filters=(
                [PassedFilter(key=primary_key, passed=passed)]
                if passed is not None
                else []
            ),
        )
    except SEvalError as exc:
        _fail(exc)

    selected = filter_results(run=stored, result_filter=result_filter)
    print_run_summary(
        console=Console(),
        run=stored.model_copy(update={"results": selected}),
        primary_key=primary_key,
        path=run_ref.path,
    )


@app.command()
def rename(
    run_id: str = typer.Argument(..., help="Id of the run to rename"),
    new_name: str = typer.Argument(..., help="New run name"),
    session: str | None = typer.Option(None, "--session", "-s", help="Session name"),
    results_dir: Path = typer.Option(
        DEFAULT_RESULTS_DIR, "--results-dir", help="Directory holding session folders"
    ),
) -> None:
    """Rename a stored run; its results are untouched."""
    _configure_structlog(log_format="console")
    try:
        ref = _recorder(results_dir).rename(
            run_id=run_id, new_name=new_name, session_name=session
        )
    except SEvalError as exc:
        _fail(exc)
    typer.echo(f"Renamed {ref.run_id} to {ref.run_name}: {ref.path}")


@app.command()
def compare(
    refs: list[str] = typer.Argument(..., help="Two or more run paths, ids, or names"),
    session: str | None = typer.Option(None, "--session", "-s", help="Session name"),
    results_dir: Path = typer.Option(
        DEFAULT_RESULTS_DIR, "--results-dir", help="Directory holding session folders"
    ),
) -> None:
    """Align several runs by task and show per-score deltas."""
    _configure_structlog(log_format="console")
    try:
        registry = _registry(results_dir)
        runs = [
            registry.load(registry.resolve(ref=ref, session_name=session).path)
            for ref in refs
        ]
        comparison = compare_runs(runs)
    except SEvalError as exc:
        _fail(exc)
    Console().print(comparison_table(comparison))


@app.command()
def correct(
    ref: str = typer.Argument(..., help="Run artifact path, run id, or run name"),
    address: str = typer.Argument(..., help="Task address: func or func@case"),
    field: str = typer.Argument(..., help="scores.<key>.passed|value|notes"),
    value: str = typer.Argument(..., help="New value"),
    session: str | None = typer.Option(None, "--session", "-s", help="Session name"),
    dataset: str | None = typer.Option(
        None, "--dataset", help="Dataset, when the address exists in several"
    ),
    results_dir: Path = typer.Option(
        DEFAULT_RESULTS_DIR, "--results-dir", help="Directory holding session folders"
    ),
) -> None:
    """Override one score field of a stored result, keeping an audit trail."""
    _configure_structlog(log_format="console")
    try:
        registry = _registry(results_dir)
        run_ref = registry.resolve(ref=ref, session_name=session)
        ledger = CorrectionLedger(
            recorder=_recorder(results_dir),
            registry=registry,
        )
        amended = ledger.apply(
            path=run_ref.path,
            task_address=address,
            field=field,
            value=value,
            dataset=dataset,
        )
    except SEvalError as exc:
        _fail(exc)
    typer.echo(
        f"Corrected {address} {field} = {value} in {amended.run_name} "
        f"({amended.total_passed}/{amended.total_evaluations} passed)"
    )


if __name__ == "__main__":
    app()
