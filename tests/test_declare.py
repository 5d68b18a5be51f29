from __future__ import annotations

from contract.models import Constraint, ConstraintKind, UnitDecl
from ordering.pipeline import compute_priorities
from rules.declare import UnitRegistry, module_id_for


def _after(target: str) -> Constraint:
    return Constraint(relative_to=target, kind=ConstraintKind.AFTER)


def _before(target: str) -> Constraint:
    return Constraint(relative_to=target, kind=ConstraintKind.BEFORE)


def test_module_id_for_uses_module_and_qualname() -> None:
    class Local:
        pass

    assert module_id_for(Local) == f"{__name__}.{Local.__qualname__}"
    assert module_id_for("game.Renderer") == "game.Renderer"


def test_decorators_record_constraints_in_source_order() -> None:
    registry = UnitRegistry()

    class Input:
        pass

    @registry.execute_after(Input)
    @registry.execute_before("game.Renderer")
    class Physics:
        pass

    unit = registry.unit_for(Physics)

    assert unit.fixed_order is None
    assert unit.constraints == (
        _after(module_id_for(Input)),
        _before("game.Renderer"),
    )


def test_topmost_execution_order_wins() -> None:
    registry = UnitRegistry()

    @registry.execution_order(-5)
    @registry.execution_order(40)
    class Bootstrap:
        pass

    assert registry.unit_for(Bootstrap).fixed_order == -5


def test_subclass_inherits_relations_and_nearest_fixed_order() -> None:
    registry = UnitRegistry()

    @registry.execution_order(10)
    @registry.execute_after("game.Input")
    class Base:
        pass

    @registry.execution_order(20)
    class Middle(Base):
        pass

    @registry.execute_before("game.Audio")
    class Leaf(Middle):
        pass

    unit = registry.unit_for(Leaf)

    assert unit.fixed_order == 20
    assert unit.constraints == (_before("game.Audio"), _after("game.Input"))


def test_register_adds_a_unit_without_declarations() -> None:
    registry = UnitRegistry()

    @registry.register
    class Plain:
        pass

    assert len(registry) == 1
    assert registry.units() == [UnitDecl(module_id=module_id_for(Plain))]

    registry.clear()
    assert len(registry) == 0


def test_registered_units_feed_the_sorter() -> None:
    registry = UnitRegistry()

    @registry.register
    class Input:
        pass

    @registry.execute_after(Input)
    class Physics:
        pass

    @registry.execute_after(Physics)
    class Camera:
        pass

    plan = compute_priorities(registry.units())

    assert plan.priorities == {
        module_id_for(Input): -3,
        module_id_for(Physics): -2,
        module_id_for(Camera): 0,
    }
