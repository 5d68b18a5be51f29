"""Entry points: compute priorities, check staleness, apply to a store."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from artifacts.store import StoreError
from contract.diagnostics import DiagnosticSink
from contract.models import PriorityChange
from graph.algos import build_dependency_graph, find_cycles, sort_units
from graph.islands import partition_islands
from graph.visit import visit_units
from ordering.assign import assign_priorities
from ordering.cache import FixedOrderCache
from ordering.detect import needs_sort

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from artifacts.store import PriorityStore
    from contract.diagnostics import Diagnostic
    from contract.models import Island, UnitDecl
    from graph.algos import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class SortPlan:
    graph: DependencyGraph
    sequence: list[str]
    islands: list[Island]
    priorities: dict[str, int]
    cycles: list[list[str]]
    sink: DiagnosticSink


@dataclass(frozen=True)
class SortReport:
    sorted: bool
    changes: tuple[PriorityChange, ...] = field(default_factory=tuple)
    islands: tuple[Island, ...] = field(default_factory=tuple)
    cycles: tuple[tuple[str, ...], ...] = field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)
    elapsed_seconds: float = 0.0

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def to_dict(self) -> dict[str, object]:
        return {
            "sorted": self.sorted,
            "changes": [change.model_dump() for change in self.changes],
            "islands": [island.model_dump() for island in self.islands],
            "cycles": [list(cycle) for cycle in self.cycles],
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
            "elapsed_seconds": self.elapsed_seconds,
        }


def compute_priorities(
    units: Iterable[UnitDecl],
    *,
    cache: FixedOrderCache | None = None,
    sink: DiagnosticSink | None = None,
) -> SortPlan:
    """Run graph build, visitation, partitioning and assignment.

    Nothing is read from or written to a store. Units that end up outside
    every assigned island are absent from ``priorities``.
    """
    cache = cache if cache is not None else FixedOrderCache()
    sink = sink if sink is not None else DiagnosticSink()

    graph = build_dependency_graph(units)
    for owner, target in graph.unresolved:
        sink.warning(
            "unresolved-dependency",
            owner,
            f"Dependency {target} not found for {owner}, constraint ignored",
            target=target,
        )

    ordered = sort_units(graph.lookup.values(), cache)
    sequence = visit_units(ordered, graph, cache, sink)
    islands = partition_islands(sequence, graph)
    priorities = assign_priorities(islands, graph, cache, sink)

    return SortPlan(
        graph=graph,
        sequence=sequence,
        islands=islands,
        priorities=priorities,
        cycles=find_cycles(graph.dependencies),
        sink=sink,
    )


def apply_priorities(
    priorities: Mapping[str, int],
    store: PriorityStore,
    sink: DiagnosticSink,
) -> list[PriorityChange]:
    """Write every changed priority, reporting failures per unit."""
    changes: list[PriorityChange] = []
    for module_id in sorted(priorities):
        order = priorities[module_id]
        try:
            current = store.get(module_id)
            if order == current:
                continue
            store.set(module_id, order)
        except (KeyError, StoreError) as exc:
            sink.error(
                "apply-failed",
                module_id,
                f"Failed to apply order {order} to {module_id}: {exc}",
                order=order,
            )
            continue
        logger.info(
            "Order changed. Unit:%s PrevOrder:%d NewOrder:%d", module_id, current, order
        )
        changes.append(PriorityChange(module_id=module_id, previous=current, assigned=order))
    return changes


def run_sort(
    units: Iterable[UnitDecl],
    store: PriorityStore,
    *,
    cache: FixedOrderCache | None = None,
    sink: DiagnosticSink | None = None,
    force: bool = False,
) -> SortReport:
    """Sort now and apply the result to ``store``.

    Unless ``force`` is set, the sort is skipped when the live priorities
    already satisfy every declaration.
    """
    started = time.perf_counter()
    cache = cache if cache is not None else FixedOrderCache()
    sink = sink if sink is not None else DiagnosticSink()
    unit_list = list(units)
    logger.debug("Starting sort of %d units", len(unit_list))

    if not force and not needs_sort(unit_list, store, cache):
        elapsed = time.perf_counter() - started
        logger.debug("Doesn't need to sort. Took %.2fs", elapsed)
        return SortReport(sorted=False, elapsed_seconds=elapsed)

    plan = compute_priorities(unit_list, cache=cache, sink=sink)
    changes = apply_priorities(plan.priorities, store, sink)
    if changes:
        logger.info("%d orders changed", len(changes))

    elapsed = time.perf_counter() - started
    logger.debug("Sort complete. Took %.2fs", elapsed)
    return SortReport(
        sorted=True,
        changes=tuple(changes),
        islands=tuple(plan.islands),
        cycles=tuple(tuple(cycle) for cycle in plan.cycles),
        diagnostics=tuple(sink.entries),
        elapsed_seconds=elapsed,
    )


__all__ = [
    "SortPlan",
    "SortReport",
    "apply_priorities",
    "compute_priorities",
    "needs_sort",
    "run_sort",
]
