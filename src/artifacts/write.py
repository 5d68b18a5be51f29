from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.order_cache import write_order_cache
from artifacts.utils import _write_json
from contract.artifacts import ORDER_CACHE_JSONL, SORT_REPORT_JSON
from rules.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.store import PriorityStore
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
    """Write the order cache, and the sort report when one is given.

    Args:
        root: Project root
        units: Units whose live priorities go into the order cache
        store: Live priority store
        out_dir: Optional output directory (default: config output dir)
        config: Optional configuration
        report: Result of the sort that produced the live priorities

    Returns:
        Dictionary with counts and list of generated artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    records = write_order_cache(out_dir / ORDER_CACHE_JSONL, units, store)
    artifacts_list = [ORDER_CACHE_JSONL]

    if report is not None:
        _write_json(out_dir / SORT_REPORT_JSON, report.to_dict())
        artifacts_list.append(SORT_REPORT_JSON)

    return {
        "unit_count": len(units),
        "cached_count": len(records),
        "artifacts": [str(out_dir / name) for name in artifacts_list],
    }
