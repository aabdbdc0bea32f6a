"""Tests for the package dependency graph and topological ordering."""

from pathlib import Path

import pytest

from workspace_convert.analysis import DependencyGraphBuilder, PackageLocator, topological_order
from workspace_convert.errors import DependencyCycleError
from workspace_convert.models import EdgeKind, ModuleGraphEdge, Package, PackageDependencyGraph

ROOT = Path("/std")


def _packages(*names):
    return [Package(name=n, root=ROOT / n) for n in names]


def _edge(src, dst, kind=EdgeKind.CODE):
    return ModuleGraphEdge(ROOT / src, ROOT / dst, kind)


def _graph(names, edges):
    return PackageDependencyGraph(packages=list(names), edges=set(edges))


def _assert_linear_extension(graph, order):
    position = {name: i for i, name in enumerate(order)}
    assert sorted(order) == sorted(graph.packages)
    for dependent, dependency in graph.edges:
        assert position[dependency] < position[dependent]


# ── Locator ───────────────────────────────────────────────────

def test_locator_longest_prefix():
    packages = [Package("a", ROOT / "a"), Package("nested", ROOT / "a" / "nested")]
    locator = PackageLocator(packages)
    assert locator.package_of(ROOT / "a" / "x.ts") == "a"
    assert locator.package_of(ROOT / "a" / "nested" / "y.ts") == "nested"
    assert locator.package_of(ROOT / "ab" / "z.ts") is None
    assert locator.package_of(ROOT / "version.ts") is None


# ── Builder ───────────────────────────────────────────────────

class TestDependencyGraphBuilder:
    def test_build_reduces_to_package_edges(self):
        graph = DependencyGraphBuilder().build(
            _packages("a", "b", "c"),
            [
                _edge("b/mod.ts", "a/mod.ts"),
                _edge("b/x.ts", "a/util.ts"),
                _edge("c/mod.ts", "b/mod.ts", EdgeKind.TYPE),
            ],
        )
        assert graph.edges == {("b", "a"), ("c", "b")}

    def test_no_self_edges(self):
        graph = DependencyGraphBuilder().build(_packages("a"), [_edge("a/mod.ts", "a/util.ts")])
        assert graph.edges == set()

    def test_isolated_packages_are_nodes(self):
        graph = DependencyGraphBuilder().build(_packages("a", "b", "lonely"), [_edge("b/mod.ts", "a/mod.ts")])
        assert graph.packages == ["a", "b", "lonely"]
        assert graph.dependencies_of("lonely") == []

    def test_edges_outside_packages_are_skipped(self):
        graph = DependencyGraphBuilder().build(
            _packages("a"),
            [_edge("a/mod.ts", "version.ts"), _edge("_internal/x.ts", "a/mod.ts")],
        )
        assert graph.edges == set()

    def test_detect_cycles(self):
        graph = _graph(["a", "b", "c"], [("a", "b"), ("b", "a"), ("c", "a")])
        cycles = DependencyGraphBuilder().detect_cycles(graph)
        assert cycles == [["a", "b", "a"]]


# ── Topological order ─────────────────────────────────────────

class TestTopologicalOrder:
    def test_dependency_first(self):
        graph = _graph(["a", "b"], [("b", "a")])
        assert topological_order(graph) == ["a", "b"]

    def test_dependency_discovered_later(self):
        graph = _graph(["async", "bytes", "streams"], [("async", "streams"), ("streams", "bytes")])
        order = topological_order(graph)
        assert order == ["bytes", "streams", "async"]
        _assert_linear_extension(graph, order)

    def test_diamond(self):
        graph = _graph(
            ["app", "left", "right", "base"],
            [("app", "left"), ("app", "right"), ("left", "base"), ("right", "base")],
        )
        order = topological_order(graph)
        _assert_linear_extension(graph, order)
        assert order[0] == "base" and order[-1] == "app"

    def test_independent_of_edge_insertion_order(self):
        edges = [("c", "a"), ("c", "b"), ("b", "a")]
        first = topological_order(_graph(["a", "b", "c"], edges))
        second = topological_order(_graph(["a", "b", "c"], list(reversed(edges))))
        assert first == second

    def test_does_not_mutate_graph(self):
        graph = _graph(["a", "b"], [("b", "a")])
        topological_order(graph)
        topological_order(graph)
        assert graph.edges == {("b", "a")}

    def test_cycle_raises_with_path(self):
        graph = _graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])
        with pytest.raises(DependencyCycleError) as exc:
            topological_order(graph)
        assert exc.value.cycle == ["a", "b", "c", "a"]
        assert "a -> b -> c -> a" in str(exc.value)

    def test_cycle_allowed_terminates(self):
        graph = _graph(["a", "b"], [("a", "b"), ("b", "a")])
        assert topological_order(graph, allow_cycles=True) == ["b", "a"]
