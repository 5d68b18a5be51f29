"""Cheap check for whether live priorities already satisfy every declaration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contract.models import ConstraintKind
from ordering.cache import FixedOrderCache

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from artifacts.store import PriorityStore
    from contract.models import UnitDecl


def stale_reasons(
    units: Iterable[UnitDecl],
    store: PriorityStore,
    cache: FixedOrderCache | None = None,
) -> Iterator[str]:
    """Yield a description of every declaration the live priorities break."""
    cache = cache if cache is not None else FixedOrderCache()
    unit_list = list(units)
    live = {unit.module_id: store.get(unit.module_id) for unit in unit_list}

    for unit in unit_list:
        order = live[unit.module_id]
        fixed = cache.fixed_order(unit)
        if fixed is not None and order != fixed:
            yield f"{unit.module_id} is at {order} but declares fixed order {fixed}"

        for constraint in unit.unique_constraints():
            target = constraint.relative_to
            if target == unit.module_id or target not in live:
                continue
            other = live[target]
            if constraint.kind is ConstraintKind.AFTER and order <= other:
                yield f"{unit.module_id} ({order}) must run after {target} ({other})"
            if constraint.kind is ConstraintKind.BEFORE and order >= other:
                yield f"{unit.module_id} ({order}) must run before {target} ({other})"


def needs_sort(
    units: Iterable[UnitDecl],
    store: PriorityStore,
    cache: FixedOrderCache | None = None,
) -> bool:
    """Return True unless every fixed priority and constraint already holds.

    Reporting True when a sort would change nothing is acceptable; reporting
    False while a declaration is broken is not.
    """
    return next(stale_reasons(units, store, cache), None) is not None


__all__ = ["needs_sort", "stale_reasons"]
