"""Turn ordered islands into integer priorities."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from contract.diagnostics import DiagnosticSink
    from contract.models import Island
    from graph.algos import DependencyGraph
    from ordering.cache import FixedOrderCache


def island_base(island: Island, graph: DependencyGraph, cache: FixedOrderCache) -> int:
    """Starting cursor for an island.

    Defaults to ``-len(island)`` and is lowered so that every member ahead
    of a fixed unit fits below its fixed value.
    """
    base = -len(island)
    for index, item in enumerate(island.items):
        fixed = cache.fixed_order(graph.lookup[item.module_id])
        if fixed is not None:
            base = min(base, fixed - index)
    return base


def _has_fixed_member(island: Island, graph: DependencyGraph, cache: FixedOrderCache) -> bool:
    return any(
        cache.has_fixed_order(graph.lookup[item.module_id]) for item in island.items
    )


def _dependency_floor(
    module_id: str, graph: DependencyGraph, assigned: dict[str, int]
) -> int | None:
    """Smallest value that keeps ``module_id`` above its assigned dependencies."""
    values = [assigned[dep] for dep in graph.dependencies_of(module_id) if dep in assigned]
    if not values:
        return None
    return max(values) + 1


def _describe_island(island: Island, graph: DependencyGraph, cache: FixedOrderCache) -> str:
    parts: list[str] = []
    for item in island.items:
        fixed = cache.fixed_order(graph.lookup[item.module_id])
        label = item.module_id if fixed is None else f"{item.module_id}[fixed={fixed}]"
        parts.append(f"{label}(is_leaf={item.is_leaf})")
    return ", ".join(parts)


def assign_island(
    island: Island,
    graph: DependencyGraph,
    cache: FixedOrderCache,
    sink: DiagnosticSink,
    assigned: dict[str, int],
) -> bool:
    """Assign priorities for one island into ``assigned``.

    Returns False when the island is a lone unit without a fixed priority,
    which is left untouched.
    """
    size = len(island)
    if size == 1 and not _has_fixed_member(island, graph, cache):
        return False

    items = island.items
    lookup = graph.lookup
    cursor = island_base(island, graph, cache)
    sink.info(
        "island",
        None,
        f"Island {island.index} starts at {cursor}: {_describe_island(island, graph, cache)}",
        island=island.index,
        base=cursor,
        members=island.module_ids,
    )

    pending_fixed = {
        item.module_id for item in items if cache.has_fixed_order(lookup[item.module_id])
    }
    last_leaf = max(
        (index for index, item in enumerate(items) if item.is_leaf), default=-1
    )

    for index, item in enumerate(items):
        module_id = item.module_id
        fixed = cache.fixed_order(lookup[module_id])
        floor = _dependency_floor(module_id, graph, assigned)

        if fixed is not None:
            # Only the unit's own dependencies may push it off its fixed order.
            cursor = fixed if floor is None else max(fixed, floor)
            if cursor != fixed:
                sink.warning(
                    "fixed-order-overridden",
                    module_id,
                    f"{module_id} has fixed order {fixed} but due to dependency "
                    f"sorting is now at order {cursor}",
                    requested=fixed,
                    assigned=cursor,
                )
            pending_fixed.discard(module_id)
        else:
            if not pending_fixed:
                # Leaves sit at 0 when possible, everything else stays in [-size, 0].
                if item.is_leaf and index == last_leaf:
                    cursor = max(0, cursor)
                else:
                    cursor = max(-size, cursor)
            if floor is not None:
                cursor = max(cursor, floor)

        assigned[module_id] = cursor

        if index + 1 < size:
            next_id = items[index + 1].module_id
            if (
                not item.is_leaf
                and graph.has_dependencies(next_id)
                and not cache.has_fixed_order(lookup[next_id])
            ):
                cursor += 1

    return True


def assign_priorities(
    islands: Sequence[Island],
    graph: DependencyGraph,
    cache: FixedOrderCache,
    sink: DiagnosticSink,
) -> dict[str, int]:
    """Compute the final priority of every unit that belongs to a sorted island."""
    assigned: dict[str, int] = {}
    for island in islands:
        assign_island(island, graph, cache, sink, assigned)
    return assigned


__all__ = ["assign_island", "assign_priorities", "island_base"]
