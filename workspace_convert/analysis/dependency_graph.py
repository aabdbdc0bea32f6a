"""Package dependency graph: reduces file edges to package edges, orders packages."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from workspace_convert.errors import DependencyCycleError
from workspace_convert.models import ModuleGraphEdge, Package, PackageDependencyGraph

logger = logging.getLogger(__name__)


class PackageLocator:
    """Find the package owning a file by longest-prefix match on package roots."""

    def __init__(self, packages: Iterable[Package]):
        # Deepest roots first so nested roots win over their parents.
        self._roots = sorted(
            ((p.root, p.name) for p in packages),
            key=lambda pair: len(pair[0].parts),
            reverse=True,
        )

    def package_of(self, path: Path) -> str | None:
        for root, name in self._roots:
            if path.is_relative_to(root):
                return name
        return None


class DependencyGraphBuilder:
    """Build a package-level dependency graph from module graph edges."""

    def build(
        self,
        packages: list[Package],
        edges: Iterable[ModuleGraphEdge],
    ) -> PackageDependencyGraph:
        graph = PackageDependencyGraph(packages=[p.name for p in packages])
        locator = PackageLocator(packages)

        for edge in edges:
            source_pkg = locator.package_of(edge.source)
            target_pkg = locator.package_of(edge.target)
            if source_pkg is None or target_pkg is None:
                logger.debug(
                    "Skipping edge outside known packages: %s -> %s", edge.source, edge.target,
                )
                continue
            graph.add_edge(source_pkg, target_pkg)

        logger.info(
            "Package graph: %d packages, %d edges", len(graph.packages), len(graph.edges),
        )
        return graph

    def detect_cycles(self, graph: PackageDependencyGraph) -> list[list[str]]:
        """Detect all cycles in the graph using DFS."""
        forward = _adjacency(graph)
        cycles: list[list[str]] = []
        visited: set[str] = set()
        rec_stack: set[str] = set()
        path: list[str] = []

        def dfs(name: str) -> None:
            visited.add(name)
            rec_stack.add(name)
            path.append(name)

            for neighbor in forward.get(name, []):
                if neighbor not in visited:
                    dfs(neighbor)
                elif neighbor in rec_stack:
                    idx = path.index(neighbor)
                    cycles.append(path[idx:] + [neighbor])

            path.pop()
            rec_stack.discard(name)

        for name in graph.packages:
            if name not in visited:
                dfs(name)

        return cycles


def topological_order(graph: PackageDependencyGraph, allow_cycles: bool = False) -> list[str]:
    """Return packages ordered so that every package follows its dependencies.

    Post-order DFS seeded in discovery order; dependencies are visited in
    sorted order so the result does not depend on edge insertion order.

    A cycle raises DependencyCycleError. With ``allow_cycles`` the package
    already on the stack is not re-entered, and the order satisfies only the
    edges that can be satisfied.
    """
    forward = _adjacency(graph)
    order: list[str] = []
    done: set[str] = set()
    stack: list[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in stack:
            cycle = stack[stack.index(name):] + [name]
            if not allow_cycles:
                raise DependencyCycleError(cycle)
            logger.warning("Ignoring dependency cycle: %s", " -> ".join(cycle))
            return
        stack.append(name)
        for dep in forward.get(name, []):
            visit(dep)
        stack.pop()
        done.add(name)
        order.append(name)

    for name in graph.packages:
        visit(name)
    return order


def _adjacency(graph: PackageDependencyGraph) -> dict[str, list[str]]:
    forward: dict[str, list[str]] = {name: [] for name in graph.packages}
    for source, target in graph.edges:
        forward.setdefault(source, []).append(target)
    for targets in forward.values():
        targets.sort()
    return forward
