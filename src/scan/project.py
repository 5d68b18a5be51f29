"""Snapshot of a project's declared units and live priorities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.store import JsonPriorityStore
from rules.config import load_config, resolve_store_path
from scan.files import find_manifest_files
from scan.manifest import load_units

if TYPE_CHECKING:
    from pathlib import Path

    from contract.models import UnitDecl
    from rules.config import OrderGraphConfig


def discover_units(root: Path, config: OrderGraphConfig | None = None) -> list[UnitDecl]:
    """Load every unit declared in the project's manifests."""
    if config is None:
        config = load_config(root)

    manifests = find_manifest_files(
        root,
        output_dir=config.output_dir,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    )
    return load_units(manifests)


def open_store(
    root: Path,
    units: list[UnitDecl],
    config: OrderGraphConfig | None = None,
) -> JsonPriorityStore:
    """Open the project's priority store, accepting writes for known units only."""
    if config is None:
        config = load_config(root)
    store_path = resolve_store_path(root, config.store_path)
    return JsonPriorityStore.load(store_path, known=[unit.module_id for unit in units])


__all__ = ["discover_units", "open_store"]
