"""Unit and constraint models shared by every ordergraph layer.

A unit declares an optional fixed priority and a list of "after"/"before"
relations to other units. Live priorities are not part of the declaration;
they are read from and written to a priority store.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConstraintKind(str, Enum):
    """Direction of a declared ordering relation."""

    AFTER = "after"
    BEFORE = "before"


class Constraint(BaseModel):
    """A directed relation from the declaring unit to ``relative_to``."""

    model_config = ConfigDict(frozen=True)

    relative_to: str = Field(description="Module id of the related unit")
    kind: ConstraintKind = Field(description="after: strictly greater; before: strictly smaller")


class UnitDecl(BaseModel):
    """Declaration of one sortable unit."""

    model_config = ConfigDict(frozen=True)

    module_id: str = Field(description="Stable unique identifier of the unit")
    fixed_order: int | None = Field(
        default=None,
        description="Declared absolute priority, honored unless ordering forces an override",
    )
    constraints: tuple[Constraint, ...] = Field(default_factory=tuple)

    def unique_constraints(self) -> list[Constraint]:
        """Constraints deduplicated by target, first occurrence wins."""
        seen: set[str] = set()
        unique: list[Constraint] = []
        for constraint in self.constraints:
            if constraint.relative_to in seen:
                continue
            seen.add(constraint.relative_to)
            unique.append(constraint)
        return unique


class IslandItem(BaseModel):
    """One member of an island, in visitor order."""

    module_id: str
    is_leaf: bool


class Island(BaseModel):
    """A connected component of the connection graph."""

    index: int
    items: list[IslandItem] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def module_ids(self) -> list[str]:
        return [item.module_id for item in self.items]


class PriorityChange(BaseModel):
    """A priority written back to the store."""

    module_id: str
    previous: int
    assigned: int


__all__ = [
    "Constraint",
    "ConstraintKind",
    "Island",
    "IslandItem",
    "PriorityChange",
    "UnitDecl",
]
