"""Live priority stores the pipeline reads from and applies results to."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Protocol

import orjson

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path


class StoreError(Exception):
    """Raised when a priority cannot be read or written."""


class PriorityStore(Protocol):
    def get(self, module_id: str) -> int: ...

    def set(self, module_id: str, value: int) -> None: ...


class MemoryPriorityStore:
    """Dict-backed store. Unknown ids read as 0.

    When ``known`` is given, writes to any other id raise ``StoreError``.
    """

    def __init__(
        self,
        values: Mapping[str, int] | None = None,
        *,
        known: Iterable[str] | None = None,
    ) -> None:
        self.values: dict[str, int] = dict(values or {})
        self.known: set[str] | None = set(known) if known is not None else None

    def get(self, module_id: str) -> int:
        return self.values.get(module_id, 0)

    def set(self, module_id: str, value: int) -> None:
        if self.known is not None and module_id not in self.known:
            msg = f"Unknown unit {module_id!r}"
            raise StoreError(msg)
        self.values[module_id] = value

    def snapshot(self) -> dict[str, int]:
        return dict(sorted(self.values.items()))


class JsonPriorityStore(MemoryPriorityStore):
    """Store persisted as a JSON object mapping module id to priority."""

    def __init__(
        self,
        path: Path,
        values: Mapping[str, int] | None = None,
        *,
        known: Iterable[str] | None = None,
    ) -> None:
        super().__init__(values, known=known)
        self.path = path

    @classmethod
    def load(cls, path: Path, *, known: Iterable[str] | None = None) -> JsonPriorityStore:
        if not path.is_file():
            return cls(path, known=known)

        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as exc:
            msg = f"Failed to read priority store {path}: {exc}"
            raise StoreError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Priority store {path} must contain a JSON object"
            raise StoreError(msg)

        values: dict[str, int] = {}
        for module_id, value in data.items():
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"Priority for {module_id!r} in {path} must be an integer"
                raise StoreError(msg)
            values[module_id] = value
        return cls(path, values, known=known)

    def save(self) -> None:
        opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
        payload = orjson.dumps(self.values, option=opts)
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            msg = f"Failed to write priority store {self.path}: {exc}"
            raise StoreError(msg) from exc


__all__ = ["JsonPriorityStore", "MemoryPriorityStore", "PriorityStore", "StoreError"]
