"""Tests for dependency-ordered construction."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from artifacts_cdn_infra.graph import (
    ConstructionGraph,
    DependencyCycleError,
    DuplicateStepError,
    UnknownDependencyError,
)


def _named(name: str):
    def build(deps: Mapping[str, Any]) -> str:
        return f"{name}({','.join(sorted(deps))})"

    return build


def _public_access_graph() -> ConstructionGraph:
    return (
        ConstructionGraph()
        .add("bucket", _named("bucket"))
        .add("identity", _named("identity"))
        .add("policy", _named("policy"), depends_on=("bucket", "identity"))
        .add("edge_function", _named("edge_function"))
        .add(
            "distribution",
            _named("distribution"),
            depends_on=("bucket", "identity", "policy", "edge_function"),
        )
    )


def test_order_places_dependencies_first() -> None:
    """Every step comes after the steps it depends on."""
    order = _public_access_graph().order()
    assert order.index("bucket") < order.index("policy")
    assert order.index("identity") < order.index("policy")
    assert order.index("policy") < order.index("distribution")
    assert order.index("edge_function") < order.index("distribution")
    assert order[-1] == "distribution"


def test_order_is_deterministic() -> None:
    """The same graph always yields the same order."""
    assert _public_access_graph().order() == _public_access_graph().order()


def test_build_passes_only_declared_dependencies() -> None:
    """A builder only sees the results of its declared dependencies."""
    results = _public_access_graph().build()
    assert results["policy"] == "policy(bucket,identity)"
    assert results["distribution"] == "distribution(bucket,edge_function,identity,policy)"
    assert results["bucket"] == "bucket()"


def test_build_runs_each_step_once() -> None:
    calls: list[str] = []

    def record(name: str):
        def build(_: Mapping[str, Any]) -> None:
            calls.append(name)

        return build

    graph = ConstructionGraph().add("a", record("a")).add("b", record("b"), depends_on=("a",))
    graph.build()
    assert calls == ["a", "b"]


def test_duplicate_step_rejected() -> None:
    """Registering a step name twice is an error."""
    graph = ConstructionGraph().add("bucket", _named("bucket"))
    with pytest.raises(DuplicateStepError):
        graph.add("bucket", _named("bucket"))


def test_unknown_dependency_rejected() -> None:
    graph = ConstructionGraph().add("policy", _named("policy"), depends_on=("bucket",))
    with pytest.raises(UnknownDependencyError, match="bucket"):
        graph.order()


def test_cycle_rejected_before_any_step_runs() -> None:
    """A cycle is reported before any builder runs."""
    calls: list[str] = []

    def build(_: Mapping[str, Any]) -> None:
        calls.append("ran")

    graph = (
        ConstructionGraph()
        .add("a", build, depends_on=("b",))
        .add("b", build, depends_on=("a",))
    )
    with pytest.raises(DependencyCycleError):
        graph.build()
    assert calls == []
