"""Artifact generation and priority store entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.store import JsonPriorityStore, MemoryPriorityStore, PriorityStore, StoreError

if TYPE_CHECKING:
    from pathlib import Path

    from contract.models import UnitDecl
    from ordering.pipeline import SortReport
    from rules.config import OrderGraphConfig


def generate_all_artifacts(
    *,
    root: Path,
    units: list[UnitDecl],
    store: PriorityStore,
    out_dir: Path | None = None,
    config: OrderGraphConfig | None = None,
    report: SortReport | None = None,
) -> dict[str, object]:
    """Generate artifacts via lazy import to avoid package import cycles."""
    from artifacts.write import generate_all_artifacts as _generate_all_artifacts

    return _generate_all_artifacts(
        root=root,
        units=units,
        store=store,
        out_dir=out_dir,
        config=config,
        report=report,
    )


__all__ = [
    "JsonPriorityStore",
    "MemoryPriorityStore",
    "PriorityStore",
    "StoreError",
    "generate_all_artifacts",
]
