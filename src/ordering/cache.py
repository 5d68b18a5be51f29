"""Memoization of per-unit declaration lookups.

The table is owned by the caller and passed into each sort. It must be
cleared whenever the unit set or a unit's declaration changes; clearing it
early is always safe.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contract.models import UnitDecl

_MISSING = object()


class FixedOrderCache:
    """Remembers whether a unit carries a fixed priority, keyed by module id."""

    def __init__(self) -> None:
        self._fixed: dict[str, int | None] = {}
        self.hits = 0
        self.misses = 0

    def fixed_order(self, unit: UnitDecl) -> int | None:
        cached = self._fixed.get(unit.module_id, _MISSING)
        if cached is not _MISSING:
            self.hits += 1
            return cached  # type: ignore[return-value]
        self.misses += 1
        self._fixed[unit.module_id] = unit.fixed_order
        return unit.fixed_order

    def has_fixed_order(self, unit: UnitDecl) -> bool:
        return self.fixed_order(unit) is not None

    def sort_key(self, unit: UnitDecl) -> tuple[int, str]:
        """Input ordering: fixed order ascending (absent counts as 0), then id."""
        fixed = self.fixed_order(unit)
        return (0 if fixed is None else fixed, unit.module_id)

    def invalidate(self, module_id: str) -> None:
        self._fixed.pop(module_id, None)

    def clear(self) -> None:
        self._fixed.clear()

    def __len__(self) -> int:
        return len(self._fixed)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._fixed


__all__ = ["FixedOrderCache"]
