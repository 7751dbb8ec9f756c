"""SelectorResolver — turns a selector string into an ordered list of Tasks."""

from pathlib import Path
from typing import Any

from s_eval.config.domain.filters import SelectionFilters
from s_eval.definition.domain.case import Case
from s_eval.definition.domain.definition import EvalDefinition
from s_eval.definition.domain.source import EvalFile, EvalSource
from s_eval.selection.domain.errors import SelectorResolutionError
from s_eval.selection.domain.selector import Identifier, parse_selector
from s_eval.selection.domain.task import Task, TaskId


def _merge_input(template: Any, case_input: Any) -> Any:
    """Case input is layered over a mapping template, otherwise it replaces it."""
    if isinstance(template, dict) and isinstance(case_input, dict):
        return {**template, **case_input}
    if case_input is None:
        return template
    return case_input


def _dedupe(labels: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(labels))


def build_task(definition: EvalDefinition, case: Case | None) -> Task:
    """Materialize one Task from a definition and (optionally) one of its cases."""
    dataset = definition.dataset or "default"
    if case is None:
        return Task(
            id=TaskId(dataset=dataset, function=definition.function),
            target=definition.target,
            input=definition.input,
            reference=definition.reference,
            labels=_dedupe(definition.labels),
            metadata=dict(definition.metadata),
            trials=definition.trials,
            timeout=definition.timeout,
            checks=definition.checks,
            evaluators=definition.evaluators,
            short_circuit=definition.short_circuit,
            reduction=definition.reduction,
        )
    return Task(
        id=TaskId(dataset=dataset, function=definition.function, case_id=case.id),
        target=definition.target,
        input=_merge_input(definition.input, case.input),
        reference=case.reference
        if case.reference is not None
        else definition.reference,
        labels=_dedupe(definition.labels + tuple(case.labels)),
        metadata={**definition.metadata, **case.metadata},
        trials=definition.trials,
        timeout=definition.timeout,
        checks=definition.checks,
        evaluators=definition.evaluators,
        short_circuit=definition.short_circuit,
        reduction=definition.reduction,
    )


def _expand(definition: EvalDefinition) -> list[Task]:
    if not definition.cases:
        return [build_task(definition=definition, case=None)]
    return [build_task(definition=definition, case=case) for case in definition.cases]


def apply_filters(tasks: list[Task], filters: SelectionFilters) -> list[Task]:
    """Apply dataset/label filters and the limit, preserving order."""
    selected: list[Task] = []
    for task in tasks:
        if filters.datasets and task.id.dataset not in filters.datasets:
            continue
        if task.id.dataset in filters.exclude_datasets:
            continue
        if filters.labels and not set(filters.labels) & set(task.labels):
            continue
        if set(filters.exclude_labels) & set(task.labels):
            continue
        selected.append(task)
    if filters.limit is not None:
        selected = selected[: filters.limit]
    return selected


class SelectorResolver:
    """Resolves selectors against eval files loaded through an EvalSource.

    Resolution is pure parse-and-lookup: eval files are imported, but no
    target is invoked.
    """

    def __init__(self, source: EvalSource, root: Path | None = None) -> None:
        self._source = source
        self._root = root

    def resolve(
        self,
        selector: str,
        filters: SelectionFilters | None = None,
    ) -> list[Task]:
        """Return the deduplicated, ordered tasks addressed by *selector*.

        Raises:
            SelectorResolutionError: listing every unknown, ambiguous, or
                malformed identifier. Nothing is returned partially.
        """
        parsed = parse_selector(selector=selector, root=self._root)
        files = self._source.load(parsed.path)

        if parsed.identifiers is None:
            tasks = [
                task
                for file in files
                for definition in file.registry.definitions()
                for task in _expand(definition)
            ]
        else:
            tasks = self._resolve_identifiers(
                files=files, identifiers=parsed.identifiers
            )

        unique: dict[TaskId, Task] = {}
        for task in tasks:
            unique.setdefault(task.id, task)
        ordered = list(unique.values())
        if filters is not None:
            ordered = apply_filters(tasks=ordered, filters=filters)
        return ordered

    def _resolve_identifiers(
        self,
        files: list[EvalFile],
        identifiers: tuple[Identifier, ...],
    ) -> list[Task]:
        invalid: list[str] = []
        tasks: list[Task] = []
        for identifier in identifiers:
            matches = [
                definition
                for file in files
                if (definition := file.registry.get(identifier.function)) is not None
            ]
            if len(matches) != 1:
                # Unknown (no match) or ambiguous across files (several).
                invalid.append(str(identifier))
                continue
            definition = matches[0]
            if identifier.case_id is None:
                tasks.extend(_expand(definition))
                continue
            case = definition.case(identifier.case_id)
            if case is None:
                invalid.append(str(identifier))
                continue
            tasks.append(build_task(definition=definition, case=case))

        if invalid:
            raise SelectorResolutionError(invalid=invalid)
        return tasks
