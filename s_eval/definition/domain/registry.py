"""EvalRegistry — explicit mapping from function name to EvalDefinition."""

import dataclasses
from collections.abc import Callable, Iterable
from typing import Any

from s_eval.definition.domain.case import Case
from s_eval.definition.domain.definition import EvalDefinition
from s_eval.definition.domain.errors import EvalDefinitionError
from s_eval.evaluation.domain.reduction import TrialReduction
from s_eval.grading.domain.grader import Check, Evaluator


def _validate(definition: EvalDefinition) -> None:
    if not definition.function or any(c in definition.function for c in ",@: "):
        raise EvalDefinitionError(
            f"invalid function name {definition.function!r}"
        )
    if definition.trials < 1:
        raise EvalDefinitionError(
            f"'{definition.function}' must declare at least one trial"
        )
    if definition.timeout is not None and definition.timeout <= 0:
        raise EvalDefinitionError(
            f"'{definition.function}' timeout must be positive"
        )
    seen: set[str] = set()
    for case in definition.cases:
        if case.id in seen:
            raise EvalDefinitionError(
                f"'{definition.function}' declares case '{case.id}' more than once"
            )
        seen.add(case.id)


class EvalRegistry:
    """Holds eval definitions in declaration order.

    Populated explicitly by eval files, either through ``add`` or through the
    ``eval`` decorator; nothing is registered as an import side effect on any
    global object.
    """

    def __init__(self, dataset: str | None = None) -> None:
        self._dataset = dataset
        self._definitions: dict[str, EvalDefinition] = {}

    def add(self, definition: EvalDefinition) -> EvalDefinition:
        """Register a definition.

        Raises:
            EvalDefinitionError: if the function name is already registered or
                the definition is malformed.
        """
        _validate(definition)
        if definition.function in self._definitions:
            raise EvalDefinitionError(
                f"function '{definition.function}' is already registered"
            )
        if definition.dataset is None and self._dataset is not None:
            definition = dataclasses.replace(definition, dataset=self._dataset)
        self._definitions[definition.function] = definition
        return definition

    def eval(
        self,
        *,
        name: str | None = None,
        dataset: str | None = None,
        input: Any = None,
        reference: Any = None,
        cases: Iterable[Case | dict[str, Any]] = (),
        labels: Iterable[str] = (),
        metadata: dict[str, Any] | None = None,
        trials: int = 1,
        timeout: float | None = None,
        checks: Iterable[Check] = (),
        evaluators: Iterable[Evaluator] = (),
        short_circuit: bool = False,
        reduction: TrialReduction | str | None = None,
    ) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator registering the decorated callable as an eval target.

        The callable is returned unchanged.
        """

        def decorator(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.add(
                EvalDefinition(
                    function=name or fn.__name__,
                    target=fn,
                    dataset=dataset,
                    input=input,
                    reference=reference,
                    cases=tuple(
                        c if isinstance(c, Case) else Case.model_validate(c)
                        for c in cases
                    ),
                    labels=tuple(labels),
                    metadata=dict(metadata or {}),
                    trials=trials,
                    timeout=timeout,
                    checks=tuple(checks),
                    evaluators=tuple(evaluators),
                    short_circuit=short_circuit,
                    reduction=TrialReduction(reduction) if reduction else None,
                )
            )
            return fn

        return decorator

    def get(self, function: str) -> EvalDefinition | None:
        return self._definitions.get(function)

    def definitions(self) -> list[EvalDefinition]:
        return list(self._definitions.values())

    def with_default_dataset(self, dataset: str) -> "EvalRegistry":
        """Return a copy in which definitions without a dataset use *dataset*."""
        registry = EvalRegistry(dataset=self._dataset or dataset)
        for definition in self._definitions.values():
            registry.add(definition)
        return registry

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, function: object) -> bool:
        return function in self._definitions
