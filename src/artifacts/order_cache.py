"""Precomputed priority table for fast lookup at run time.

Only units with a non-zero live priority are written; every other unit
reads back as 0.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from artifacts.utils import _load_jsonl, _write_jsonl
from contract.artifacts import OrderCacheRecord

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from artifacts.store import PriorityStore
    from contract.models import UnitDecl


def build_order_cache_records(
    units: Iterable[UnitDecl], store: PriorityStore
) -> list[OrderCacheRecord]:
    records: list[OrderCacheRecord] = []
    for module_id in sorted({unit.module_id for unit in units}):
        order = store.get(module_id)
        if order == 0:
            continue
        records.append(OrderCacheRecord(module_id=module_id, execution_order=order))
    return records


def write_order_cache(
    path: Path, units: Iterable[UnitDecl], store: PriorityStore
) -> list[OrderCacheRecord]:
    """Serialize the non-zero live priorities of ``units`` to ``path``."""
    records = build_order_cache_records(units, store)
    path.parent.mkdir(parents=True, exist_ok=True)
    _write_jsonl(path, records)
    return records


class OrderCache:
    """Read side of the order cache."""

    def __init__(self, orders: dict[str, int] | None = None) -> None:
        self._orders: dict[str, int] = dict(orders or {})

    @classmethod
    def load(cls, path: Path) -> OrderCache:
        orders: dict[str, int] = {}
        for raw in _load_jsonl(path):
            try:
                record = OrderCacheRecord.model_validate(raw)
            except ValidationError:
                continue
            if not record.module_id:
                continue
            orders[record.module_id] = record.execution_order
        return cls(orders)

    def get(self, module_id: str) -> int:
        return self._orders.get(module_id, 0)

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._orders


__all__ = ["OrderCache", "build_order_cache_records", "write_order_cache"]
