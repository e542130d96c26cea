"""Dependency-ordered construction of named resource steps."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from graphlib import CycleError, TopologicalSorter
from typing import Any

logger: logging.Logger = logging.getLogger(__name__)

StepBuilder = Callable[[Mapping[str, Any]], Any]


class DuplicateStepError(ValueError):
    """Raised when a step name is registered twice."""


class UnknownDependencyError(ValueError):
    """Raised when a step depends on a name that was never registered."""


class DependencyCycleError(ValueError):
    """Raised when step dependencies form a cycle."""


class ConstructionStep:
    """A named unit of construction and the steps it depends on."""

    def __init__(
        self,
        name: str,
        build: StepBuilder,
        depends_on: Sequence[str] = (),
    ) -> None:
        self.name: str = name
        self.build: StepBuilder = build
        self.depends_on: tuple[str, ...] = tuple(depends_on)


class ConstructionGraph:
    """Runs construction steps in topological order.

    Each step's builder receives a mapping of its declared dependencies'
    results, so a step can only see what it explicitly depends on.
    """

    def __init__(self) -> None:
        self._steps: dict[str, ConstructionStep] = {}

    def add(
        self,
        name: str,
        build: StepBuilder,
        depends_on: Sequence[str] = (),
    ) -> ConstructionGraph:
        """Register a step. Returns ``self`` for chaining."""
        if name in self._steps:
            raise DuplicateStepError(f"Step '{name}' is already registered.")
        self._steps[name] = ConstructionStep(name, build, depends_on)
        return self

    def order(self) -> list[str]:
        """Return step names in dependency order.

        Raises:
            UnknownDependencyError: A dependency names an unregistered step.
            DependencyCycleError: The dependencies contain a cycle.
        """
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for step in self._steps.values():
            for dependency in step.depends_on:
                if dependency not in self._steps:
                    raise UnknownDependencyError(
                        f"Step '{step.name}' depends on unknown step '{dependency}'."
                    )
            sorter.add(step.name, *step.depends_on)
        try:
            return list(sorter.static_order())
        except CycleError as exc:
            cycle = " -> ".join(exc.args[1])
            raise DependencyCycleError(f"Dependency cycle: {cycle}") from exc

    def build(self) -> dict[str, Any]:
        """Run every step once, in order, and return results keyed by step name."""
        results: dict[str, Any] = {}
        for name in self.order():
            step = self._steps[name]
            logger.debug(
                "construction_step", extra={"step": name, "depends_on": list(step.depends_on)}
            )
            results[name] = step.build({dep: results[dep] for dep in step.depends_on})
        return results
