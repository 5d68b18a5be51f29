"""Graph construction and cycle analysis for ordergraph."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contract.models import ConstraintKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from contract.models import UnitDecl
    from ordering.cache import FixedOrderCache


@dataclass
class DependencyGraph:
    """Resolved dependency sets plus their undirected companion.

    ``dependencies[u]`` holds every module id that must precede ``u``.
    ``connections`` is symmetric and is only used for island discovery and
    leaf classification.
    """

    lookup: dict[str, UnitDecl] = field(default_factory=dict)
    dependencies: dict[str, set[str]] = field(default_factory=dict)
    connections: dict[str, set[str]] = field(default_factory=dict)
    unresolved: list[tuple[str, str]] = field(default_factory=list)

    def dependencies_of(self, module_id: str) -> set[str]:
        return self.dependencies.get(module_id, set())

    def has_dependencies(self, module_id: str) -> bool:
        return bool(self.dependencies.get(module_id))

    def is_leaf(self, module_id: str) -> bool:
        """True when nothing depends on the unit.

        Units without any connection are never leaves.
        """
        connected = self.connections.get(module_id)
        if not connected:
            return False
        return len(self.dependencies_of(module_id)) == len(connected)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.dependencies.values())


def build_dependency_graph(units: Iterable[UnitDecl]) -> DependencyGraph:
    """Build the dependency and connection graphs for a unit set.

    ``a after b`` makes ``b`` a dependency of ``a``; ``a before b`` makes ``a``
    a dependency of ``b``. Constraints naming an absent unit are recorded in
    ``unresolved`` and dropped, as are self references. When two units share a
    module id the later one replaces the earlier.

    Args:
        units: Unit declarations in any order

    Returns:
        DependencyGraph with lookup, dependency sets and connection sets
    """
    graph = DependencyGraph()
    for unit in units:
        graph.lookup[unit.module_id] = unit

    dependencies: dict[str, set[str]] = defaultdict(set)
    for module_id, unit in graph.lookup.items():
        for constraint in unit.unique_constraints():
            target = constraint.relative_to
            if target == module_id:
                continue
            if target not in graph.lookup:
                graph.unresolved.append((module_id, target))
                continue
            if constraint.kind is ConstraintKind.AFTER:
                dependencies[module_id].add(target)
            else:
                dependencies[target].add(module_id)

    connections: dict[str, set[str]] = defaultdict(set)
    for module_id, deps in dependencies.items():
        for dep in deps:
            connections[module_id].add(dep)
            connections[dep].add(module_id)

    graph.dependencies = dict(dependencies)
    graph.connections = dict(connections)
    graph.unresolved.sort()
    return graph


def sort_units(units: Iterable[UnitDecl], cache: FixedOrderCache) -> list[UnitDecl]:
    """Return the deterministic input sequence for visitation.

    Units are ordered by fixed priority ascending (units without one count
    as 0), ties broken by module id.
    """
    return sorted(units, key=cache.sort_key)


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []

    def open(self, node: str) -> None:
        self.indices[node] = self.index
        self.low_link[node] = self.index
        self.index += 1
        self.stack.append(node)
        self.on_stack.add(node)


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _strongconnect(root: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Process every node reachable from ``root`` without recursing."""
    state.open(root)
    work: list[tuple[str, Iterator[str]]] = [
        (root, iter(sorted(graph.get(root, set()))))
    ]

    while work:
        node, neighbors = work[-1]
        descended = False
        for neighbor in neighbors:
            if neighbor not in state.indices:
                state.open(neighbor)
                work.append((neighbor, iter(sorted(graph.get(neighbor, set())))))
                descended = True
                break
            if neighbor in state.on_stack:
                state.low_link[node] = min(state.low_link[node], state.indices[neighbor])
        if descended:
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[node])

        if state.low_link[node] == state.indices[node]:
            scc = _extract_scc(state, node)
            if len(scc) > 1 or node in graph.get(node, set()):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Dictionary mapping each node to the nodes it points at

    Returns:
        Sorted list of cycles, each a sorted list of the member nodes
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return sorted(sorted(scc) for scc in state.sccs)


__all__ = [
    "DependencyGraph",
    "build_dependency_graph",
    "find_cycles",
    "sort_units",
]
