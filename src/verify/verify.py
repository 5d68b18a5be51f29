"""Check live priorities against the declared ordering rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graph.algos import build_dependency_graph

if TYPE_CHECKING:
    from collections.abc import Iterable

    from artifacts.store import PriorityStore
    from contract.models import UnitDecl


@dataclass(frozen=True)
class FixedMismatch:
    module_id: str
    fixed_order: int
    actual: int


@dataclass(frozen=True)
class OrderingViolation:
    module_id: str
    order: int
    dependency: str
    dependency_order: int

    def describe(self) -> str:
        return (
            f"{self.module_id} order({self.order}) must be greater than "
            f"{self.dependency} order({self.dependency_order})"
        )


@dataclass(frozen=True)
class VerifyResult:
    ok: bool
    fixed_mismatches: tuple[FixedMismatch, ...] = field(default_factory=tuple)
    ordering_violations: tuple[OrderingViolation, ...] = field(default_factory=tuple)


def verify_orders(units: Iterable[UnitDecl], store: PriorityStore) -> VerifyResult:
    """Verify that live priorities honor every declaration.

    Fixed orders are only checked for units without dependencies, since
    dependency sorting may legitimately shift the others. Every resolved
    dependency must sit strictly below its dependent.

    Args:
        units: Declared units
        store: Live priorities to check

    Returns:
        VerifyResult with sorted mismatches and violations.
    """
    graph = build_dependency_graph(units)

    fixed_mismatches: list[FixedMismatch] = []
    violations: list[OrderingViolation] = []
    for module_id in sorted(graph.lookup):
        unit = graph.lookup[module_id]
        order = store.get(module_id)
        deps = graph.dependencies_of(module_id)

        if unit.fixed_order is not None and not deps and order != unit.fixed_order:
            fixed_mismatches.append(
                FixedMismatch(module_id=module_id, fixed_order=unit.fixed_order, actual=order)
            )

        for dep in sorted(deps):
            dep_order = store.get(dep)
            if order <= dep_order:
                violations.append(
                    OrderingViolation(
                        module_id=module_id,
                        order=order,
                        dependency=dep,
                        dependency_order=dep_order,
                    )
                )

    return VerifyResult(
        ok=not fixed_mismatches and not violations,
        fixed_mismatches=tuple(fixed_mismatches),
        ordering_violations=tuple(violations),
    )


__all__ = ["FixedMismatch", "OrderingViolation", "VerifyResult", "verify_orders"]
