"""Class decorators for declaring ordering rules in code.

Example::

    @execution_order(-100)
    class InputSystem: ...

    @execute_after(InputSystem)
    @execute_before("game.render.Renderer")
    class Physics: ...

Declarations are inherited: a registered subclass carries the relations of
its registered bases, and the nearest fixed order in its MRO.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from contract.models import Constraint, ConstraintKind, UnitDecl

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T", bound=type)


def module_id_for(target: type | str) -> str:
    """Module id of a class (``module.QualName``) or a pass-through string."""
    if isinstance(target, str):
        return target
    return f"{target.__module__}.{target.__qualname__}"


@dataclass
class _Declarations:
    fixed_order: int | None = None
    constraints: list[Constraint] = field(default_factory=list)


class UnitRegistry:
    """Records decorated classes and turns them into unit declarations."""

    def __init__(self) -> None:
        self._declared: dict[type, _Declarations] = {}

    def _entry(self, cls: type) -> _Declarations:
        return self._declared.setdefault(cls, _Declarations())

    def register(self, cls: T) -> T:
        """Register a class without adding any declaration of its own."""
        self._entry(cls)
        return cls

    def execution_order(self, order: int) -> Callable[[T], T]:
        def decorate(cls: T) -> T:
            # Decorators apply bottom-up, so the topmost one is applied last and wins.
            self._entry(cls).fixed_order = order
            return cls

        return decorate

    def _relation(self, target: type | str, kind: ConstraintKind) -> Callable[[T], T]:
        constraint = Constraint(relative_to=module_id_for(target), kind=kind)

        def decorate(cls: T) -> T:
            # Prepend so constraints read in source order, top to bottom.
            self._entry(cls).constraints.insert(0, constraint)
            return cls

        return decorate

    def execute_after(self, target: type | str) -> Callable[[T], T]:
        return self._relation(target, ConstraintKind.AFTER)

    def execute_before(self, target: type | str) -> Callable[[T], T]:
        return self._relation(target, ConstraintKind.BEFORE)

    def unit_for(self, cls: type) -> UnitDecl:
        fixed_order: int | None = None
        constraints: list[Constraint] = []
        for klass in cls.__mro__:
            declared = self._declared.get(klass)
            if declared is None:
                continue
            if fixed_order is None:
                fixed_order = declared.fixed_order
            constraints.extend(declared.constraints)
        return UnitDecl(
            module_id=module_id_for(cls),
            fixed_order=fixed_order,
            constraints=tuple(constraints),
        )

    def units(self) -> list[UnitDecl]:
        return [self.unit_for(cls) for cls in self._declared]

    def clear(self) -> None:
        self._declared.clear()

    def __len__(self) -> int:
        return len(self._declared)


default_registry = UnitRegistry()

register = default_registry.register
execution_order = default_registry.execution_order
execute_after = default_registry.execute_after
execute_before = default_registry.execute_before


__all__ = [
    "UnitRegistry",
    "default_registry",
    "execute_after",
    "execute_before",
    "execution_order",
    "module_id_for",
    "register",
]
