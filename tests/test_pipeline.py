from __future__ import annotations

import logging

import pytest

from artifacts.store import MemoryPriorityStore
from contract.diagnostics import DiagnosticSink
from contract.models import Constraint, ConstraintKind, PriorityChange, UnitDecl
from ordering.cache import FixedOrderCache
from ordering.pipeline import compute_priorities, run_sort


def _unit(
    module_id: str,
    *,
    order: int | None = None,
    after: tuple[str, ...] = (),
) -> UnitDecl:
    constraints = tuple(
        Constraint(relative_to=t, kind=ConstraintKind.AFTER) for t in after
    )
    return UnitDecl(module_id=module_id, fixed_order=order, constraints=constraints)


def _chain() -> list[UnitDecl]:
    return [_unit("A"), _unit("B", after=("A",)), _unit("C", after=("B",))]


def test_run_sort_applies_only_changed_priorities() -> None:
    store = MemoryPriorityStore()

    report = run_sort(_chain(), store)

    assert report.sorted is True
    assert report.changes == (
        PriorityChange(module_id="A", previous=0, assigned=-3),
        PriorityChange(module_id="B", previous=0, assigned=-2),
    )
    assert store.snapshot() == {"A": -3, "B": -2}
    assert report.changed is True


def test_run_sort_skips_when_declarations_already_hold() -> None:
    store = MemoryPriorityStore({"A": -10, "B": 5, "C": 50})

    report = run_sort(_chain(), store)

    assert report.sorted is False
    assert report.changes == ()
    assert store.snapshot() == {"A": -10, "B": 5, "C": 50}


def test_force_renumbers_even_when_declarations_already_hold() -> None:
    """Keeping hand-set values relies on the unforced skip, not on the heuristic.

    A forced sort recomputes from scratch and may move units whose live
    priorities already satisfied every rule.
    """
    store = MemoryPriorityStore({"A": -10, "B": 5, "C": 50})

    report = run_sort(_chain(), store, force=True)

    assert report.sorted is True
    assert store.snapshot() == {"A": -3, "B": -2, "C": 0}


def test_second_run_is_a_no_op() -> None:
    store = MemoryPriorityStore()
    run_sort(_chain(), store)

    again = run_sort(_chain(), store)
    forced = run_sort(_chain(), store, force=True)

    assert again.sorted is False
    assert forced.changes == ()


def test_apply_failure_is_reported_per_unit() -> None:
    store = MemoryPriorityStore(known={"A", "C"})
    sink = DiagnosticSink()

    report = run_sort(_chain(), store, sink=sink)

    assert store.snapshot() == {"A": -3}
    (failure,) = sink.of_kind("apply-failed")
    assert failure.module_id == "B"
    assert failure.severity == "error"
    assert failure.details == {"order": -2}
    assert sink.ok is False
    assert [change.module_id for change in report.changes] == ["A"]


def test_independent_unit_priority_is_untouched() -> None:
    units = [*_chain(), _unit("Solo")]
    store = MemoryPriorityStore({"Solo": 42})

    run_sort(units, store, force=True)

    assert store.get("Solo") == 42


def test_report_carries_islands_cycles_and_diagnostics() -> None:
    units = [_unit("A", after=("B",)), _unit("B", after=("A",)), _unit("D", order=100)]

    report = run_sort(units, MemoryPriorityStore())

    assert [island.module_ids for island in report.islands] == [["D"], ["B", "A"]]
    assert report.cycles == (("A", "B"),)
    assert {entry.kind for entry in report.diagnostics} == {"cycle", "island"}
    payload = report.to_dict()
    assert payload["sorted"] is True
    assert payload["cycles"] == [["A", "B"]]


def test_fixed_order_cache_is_reused_across_runs() -> None:
    cache = FixedOrderCache()
    units = _chain()

    compute_priorities(units, cache=cache)
    misses = cache.misses
    compute_priorities(units, cache=cache)

    assert cache.misses == misses
    assert cache.hits > 0

    cache.clear()
    assert len(cache) == 0


def test_diagnostics_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ordergraph"):
        compute_priorities([_unit("A", after=("Ghost",))])

    assert "Dependency Ghost not found for A" in caplog.text


def test_reused_cache_serves_the_old_fixed_order_until_invalidated() -> None:
    cache = FixedOrderCache()
    original = [_unit("D", order=100)]
    assert compute_priorities(original, cache=cache).priorities == {"D": 100}

    redeclared = [_unit("D", order=40)]
    stale = compute_priorities(redeclared, cache=cache)

    assert stale.priorities == {"D": 100}
    assert cache.fixed_order(redeclared[0]) == 100

    cache.invalidate("D")

    assert "D" not in cache
    assert compute_priorities(redeclared, cache=cache).priorities == {"D": 40}


def test_clearing_the_cache_picks_up_changed_declarations() -> None:
    cache = FixedOrderCache()
    store = MemoryPriorityStore()
    run_sort([_unit("D", order=100)], store, cache=cache)

    redeclared = [_unit("D", order=40)]
    stale = run_sort(redeclared, store, cache=cache)
    assert stale.sorted is False
    assert store.get("D") == 100

    cache.clear()
    report = run_sort(redeclared, store, cache=cache)

    assert report.sorted is True
    assert store.get("D") == 40
