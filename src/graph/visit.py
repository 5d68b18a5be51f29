"""Deterministic depth-first linearization of the dependency graph."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from contract.diagnostics import DiagnosticSink
    from contract.models import UnitDecl
    from graph.algos import DependencyGraph
    from ordering.cache import FixedOrderCache


class VisitState(Enum):
    UNVISITED = "unvisited"
    VISITING = "visiting"
    VISITED = "visited"


class DeterministicVisitor:
    """Emits every unit after all of the units it depends on.

    Dependencies are visited in three groups: fixed-priority ones, then
    non-leaves, then leaves. Meeting a unit that is still on the current
    path is a cycle; the back edge is reported and skipped.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        cache: FixedOrderCache,
        sink: DiagnosticSink,
    ) -> None:
        self.graph = graph
        self.cache = cache
        self.sink = sink
        self.marks: dict[str, VisitState] = {}
        self.sequence: list[str] = []
        self.back_edges: list[tuple[str, str]] = []

    def state(self, module_id: str) -> VisitState:
        return self.marks.get(module_id, VisitState.UNVISITED)

    def ordered_dependencies(self, module_id: str) -> list[str]:
        lookup = self.graph.lookup
        deps = sorted(
            self.graph.dependencies_of(module_id),
            key=lambda dep: self.cache.sort_key(lookup[dep]),
        )
        fixed = [dep for dep in deps if self.cache.has_fixed_order(lookup[dep])]
        rest = [dep for dep in deps if not self.cache.has_fixed_order(lookup[dep])]
        non_leaves = [dep for dep in rest if not self.graph.is_leaf(dep)]
        leaves = [dep for dep in rest if self.graph.is_leaf(dep)]
        return fixed + non_leaves + leaves

    def visit(self, module_id: str) -> None:
        if self.state(module_id) is not VisitState.UNVISITED:
            return

        self.marks[module_id] = VisitState.VISITING
        stack: list[tuple[str, Iterator[str]]] = [
            (module_id, iter(self.ordered_dependencies(module_id)))
        ]
        while stack:
            current, pending = stack[-1]
            for dep in pending:
                dep_state = self.state(dep)
                if dep_state is VisitState.VISITED:
                    continue
                if dep_state is VisitState.VISITING:
                    self._report_cycle(dep, current, stack)
                    continue
                self.marks[dep] = VisitState.VISITING
                stack.append((dep, iter(self.ordered_dependencies(dep))))
                break
            else:
                stack.pop()
                self.marks[current] = VisitState.VISITED
                self.sequence.append(current)

    def _report_cycle(
        self,
        reentered: str,
        visited_by: str,
        stack: list[tuple[str, Iterator[str]]],
    ) -> None:
        path = [frame[0] for frame in stack]
        path = path[path.index(reentered) :] + [reentered]
        self.back_edges.append((visited_by, reentered))
        self.sink.warning(
            "cycle",
            reentered,
            f"Cyclic dependency found for {reentered} via {visited_by}: "
            + " -> ".join(path),
            visited_by=visited_by,
            path=path,
        )


def visit_units(
    ordered_units: Sequence[UnitDecl],
    graph: DependencyGraph,
    cache: FixedOrderCache,
    sink: DiagnosticSink,
) -> list[str]:
    """Linearize the graph in three deterministic outer passes.

    1. units with a fixed priority;
    2. units with dependencies that are not leaves;
    3. any remaining units with dependencies.

    Units with neither a fixed priority nor dependencies only enter the
    sequence as somebody's dependency.

    Returns:
        Module ids in visitation order
    """
    visitor = DeterministicVisitor(graph, cache, sink)

    for unit in ordered_units:
        if cache.has_fixed_order(unit):
            visitor.visit(unit.module_id)

    for unit in ordered_units:
        if graph.has_dependencies(unit.module_id) and not graph.is_leaf(unit.module_id):
            visitor.visit(unit.module_id)

    for unit in ordered_units:
        if graph.has_dependencies(unit.module_id):
            visitor.visit(unit.module_id)

    return visitor.sequence


__all__ = ["DeterministicVisitor", "VisitState", "visit_units"]
