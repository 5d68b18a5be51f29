from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from artifacts.store import MemoryPriorityStore
from contract.models import Constraint, ConstraintKind, UnitDecl
from graph.algos import build_dependency_graph
from ordering.detect import needs_sort
from ordering.pipeline import compute_priorities, run_sort
from verify.verify import verify_orders


@st.composite
def acyclic_units(draw: st.DrawFn) -> list[UnitDecl]:
    """Units whose relations only ever point from a lower to a higher index."""
    count = draw(st.integers(min_value=1, max_value=10))
    ids = [f"unit{i:02d}" for i in range(count)]
    constraints: list[list[Constraint]] = [[] for _ in range(count)]
    for later in range(count):
        for earlier in range(later):
            relation = draw(st.sampled_from(["none", "none", "after", "before"]))
            if relation == "after":
                constraints[later].append(
                    Constraint(relative_to=ids[earlier], kind=ConstraintKind.AFTER)
                )
            elif relation == "before":
                constraints[earlier].append(
                    Constraint(relative_to=ids[later], kind=ConstraintKind.BEFORE)
                )
    fixed = draw(
        st.lists(
            st.one_of(st.none(), st.integers(min_value=-50, max_value=50)),
            min_size=count,
            max_size=count,
        )
    )
    units = [
        UnitDecl(module_id=ids[i], fixed_order=fixed[i], constraints=tuple(constraints[i]))
        for i in range(count)
    ]
    return draw(st.permutations(units))


@settings(max_examples=200, deadline=None)
@given(units=acyclic_units())
def test_every_dependency_sits_strictly_below_its_dependent(units: list[UnitDecl]) -> None:
    plan = compute_priorities(units)
    graph = build_dependency_graph(units)

    for module_id, deps in graph.dependencies.items():
        for dep in deps:
            assert plan.priorities[module_id] > plan.priorities[dep]
    assert plan.sink.of_kind("cycle") == []


@settings(max_examples=200, deadline=None)
@given(units=acyclic_units())
def test_fixed_units_without_dependencies_keep_their_value(units: list[UnitDecl]) -> None:
    plan = compute_priorities(units)
    graph = build_dependency_graph(units)

    for unit in units:
        if unit.fixed_order is not None and not graph.has_dependencies(unit.module_id):
            assert plan.priorities[unit.module_id] == unit.fixed_order


@settings(max_examples=100, deadline=None)
@given(units=acyclic_units())
def test_assignment_is_idempotent_and_order_independent(units: list[UnitDecl]) -> None:
    first = compute_priorities(units).priorities
    second = compute_priorities(list(reversed(units))).priorities

    assert first == second


@settings(max_examples=100, deadline=None)
@given(units=acyclic_units(), live=st.integers(min_value=-1000, max_value=1000))
def test_independent_unit_is_never_touched(units: list[UnitDecl], live: int) -> None:
    store = MemoryPriorityStore({"zz_independent": live})

    run_sort([*units, UnitDecl(module_id="zz_independent")], store, force=True)

    assert store.get("zz_independent") == live


@settings(max_examples=100, deadline=None)
@given(units=acyclic_units())
def test_forced_sort_leaves_priorities_that_verify(units: list[UnitDecl]) -> None:
    store = MemoryPriorityStore()

    run_sort(units, store, force=True)

    assert verify_orders(units, store).ok


@settings(max_examples=200, deadline=None)
@given(
    units=acyclic_units(),
    values=st.lists(st.integers(min_value=-5, max_value=5), min_size=10, max_size=10),
)
def test_no_sort_needed_means_every_declaration_already_holds(
    units: list[UnitDecl], values: list[int]
) -> None:
    ids = sorted(unit.module_id for unit in units)
    store = MemoryPriorityStore(dict(zip(ids, values)))

    if needs_sort(units, store):
        return

    present = {unit.module_id for unit in units}
    for unit in units:
        order = store.get(unit.module_id)
        if unit.fixed_order is not None:
            assert order == unit.fixed_order
        for constraint in unit.constraints:
            if constraint.relative_to not in present:
                continue
            other = store.get(constraint.relative_to)
            if constraint.kind is ConstraintKind.AFTER:
                assert order > other
            else:
                assert order < other

    before = store.snapshot()
    report = run_sort(units, store)
    assert report.sorted is False
    assert store.snapshot() == before


def test_mutual_after_terminates_with_finite_priorities() -> None:
    units = [
        UnitDecl(
            module_id="A",
            constraints=(Constraint(relative_to="B", kind=ConstraintKind.AFTER),),
        ),
        UnitDecl(
            module_id="B",
            constraints=(Constraint(relative_to="A", kind=ConstraintKind.AFTER),),
        ),
    ]

    plan = compute_priorities(units)

    assert set(plan.priorities) == {"A", "B"}
    assert all(isinstance(value, int) for value in plan.priorities.values())
    (cycle,) = plan.sink.of_kind("cycle")
    assert cycle.module_id in {"A", "B"}
