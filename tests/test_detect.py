from __future__ import annotations

import pytest

from artifacts.store import MemoryPriorityStore
from contract.models import Constraint, ConstraintKind, UnitDecl
from ordering.cache import FixedOrderCache
from ordering.detect import needs_sort, stale_reasons


def _unit(
    module_id: str,
    *,
    order: int | None = None,
    after: tuple[str, ...] = (),
    before: tuple[str, ...] = (),
) -> UnitDecl:
    constraints = [Constraint(relative_to=t, kind=ConstraintKind.AFTER) for t in after]
    constraints += [Constraint(relative_to=t, kind=ConstraintKind.BEFORE) for t in before]
    return UnitDecl(module_id=module_id, fixed_order=order, constraints=tuple(constraints))


def test_satisfied_declarations_need_no_sort() -> None:
    units = [_unit("A"), _unit("B", after=("A",)), _unit("C", before=("A",)), _unit("F", order=7)]
    store = MemoryPriorityStore({"A": 0, "B": 3, "C": -1, "F": 7})

    assert needs_sort(units, store) is False
    assert list(stale_reasons(units, store)) == []


def test_fixed_order_mismatch_needs_sort() -> None:
    units = [_unit("F", order=7)]
    store = MemoryPriorityStore({"F": 6})

    assert needs_sort(units, store) is True
    assert list(stale_reasons(units, store)) == ["F is at 6 but declares fixed order 7"]


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ({"A": 0, "B": 0}, True),
        ({"A": 1, "B": 0}, True),
        ({"A": 0, "B": 1}, False),
    ],
)
def test_after_requires_strictly_greater_priority(values: dict[str, int], expected: bool) -> None:
    units = [_unit("A"), _unit("B", after=("A",))]

    assert needs_sort(units, MemoryPriorityStore(values)) is expected


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ({"A": 0, "B": 0}, True),
        ({"A": 2, "B": 1}, True),
        ({"A": 1, "B": 2}, False),
    ],
)
def test_before_requires_strictly_smaller_priority(values: dict[str, int], expected: bool) -> None:
    units = [_unit("A", before=("B",)), _unit("B")]

    assert needs_sort(units, MemoryPriorityStore(values)) is expected


def test_missing_targets_and_self_references_are_ignored() -> None:
    units = [_unit("A", after=("Ghost", "A"))]

    assert needs_sort(units, MemoryPriorityStore()) is False


def test_duplicate_targets_only_check_the_first_declaration() -> None:
    units = [_unit("A", after=("B",), before=("B",)), _unit("B")]
    store = MemoryPriorityStore({"A": 1, "B": 0})

    assert needs_sort(units, store) is False


def test_detector_uses_the_supplied_cache() -> None:
    cache = FixedOrderCache()
    units = [_unit("F", order=3), _unit("G")]

    needs_sort(units, MemoryPriorityStore({"F": 3}), cache)

    assert "F" in cache
    assert "G" in cache
    assert cache.misses == 2
