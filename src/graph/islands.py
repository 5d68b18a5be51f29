"""Split the visitor sequence into connected components."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contract.models import Island, IslandItem

if TYPE_CHECKING:
    from collections.abc import Sequence

    from graph.algos import DependencyGraph


def _flood_fill(start: str, graph: DependencyGraph) -> set[str]:
    closed_set: set[str] = set()
    open_set: list[str] = [start]
    while open_set:
        current = open_set.pop()
        if current in closed_set:
            continue
        closed_set.add(current)
        for connection in graph.connections.get(current, ()):
            if connection not in closed_set:
                open_set.append(connection)
    return closed_set


def partition_islands(sequence: Sequence[str], graph: DependencyGraph) -> list[Island]:
    """Partition a visitation sequence into islands.

    Islands are numbered in the order their first member appears in the
    sequence, and each island keeps the relative order of the sequence.

    Args:
        sequence: Module ids in visitation order
        graph: Graph whose connection sets define reachability

    Returns:
        Islands with every member tagged as leaf or not
    """
    island_of: dict[str, int] = {}
    island_count = 0
    for module_id in sequence:
        if module_id in island_of:
            continue
        for member in _flood_fill(module_id, graph):
            island_of[member] = island_count
        island_count += 1

    islands = [Island(index=index) for index in range(island_count)]
    for module_id in sequence:
        islands[island_of[module_id]].items.append(
            IslandItem(module_id=module_id, is_leaf=graph.is_leaf(module_id))
        )
    return islands


__all__ = ["partition_islands"]
