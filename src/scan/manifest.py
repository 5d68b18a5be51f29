"""Load unit declarations from ``*.units.toml`` manifests.

A manifest holds any number of ``[[unit]]`` tables::

    [[unit]]
    id = "game.Physics"
    order = -100            # optional fixed priority
    after = ["game.Input"]  # optional
    before = ["game.Render"]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contract.models import Constraint, ConstraintKind, UnitDecl

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class ManifestError(Exception):
    """Raised when a manifest cannot be parsed or declares a unit twice."""


class ManifestUnit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    order: int | None = None
    after: list[str] = Field(default_factory=list)
    before: list[str] = Field(default_factory=list)

    def to_decl(self) -> UnitDecl:
        constraints = [
            Constraint(relative_to=target, kind=ConstraintKind.AFTER) for target in self.after
        ]
        constraints.extend(
            Constraint(relative_to=target, kind=ConstraintKind.BEFORE) for target in self.before
        )
        return UnitDecl(module_id=self.id, fixed_order=self.order, constraints=tuple(constraints))


class Manifest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unit: list[ManifestUnit] = Field(default_factory=list)


def read_manifest(path: Path) -> Manifest:
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ManifestError(msg) from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid manifest {path}: {e}"
        raise ManifestError(msg) from e


def load_units(paths: Iterable[Path]) -> list[UnitDecl]:
    """Read every manifest and return the declared units in file order."""
    units: list[UnitDecl] = []
    declared_in: dict[str, Path] = {}
    for path in paths:
        for entry in read_manifest(path).unit:
            if entry.id in declared_in:
                msg = f"Unit {entry.id!r} declared in both {declared_in[entry.id]} and {path}"
                raise ManifestError(msg)
            declared_in[entry.id] = path
            units.append(entry.to_decl())
    return units


__all__ = ["Manifest", "ManifestError", "ManifestUnit", "load_units", "read_manifest"]
