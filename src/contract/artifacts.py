"""Artifact contract definitions.

Filenames and record schemas for what ordergraph writes into its output
directory.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

# Artifact schema version for order cache records.
ARTIFACT_SCHEMA_VERSION = 1

# Artifact filename constants (stable contract identifiers).
ORDER_CACHE_JSONL = "order_cache.jsonl"
SORT_REPORT_JSON = "sort_report.json"


@dataclass(frozen=True)
class ArtifactSpec:
    filename: str
    format: str
    required_fields: tuple[str, ...]


ARTIFACT_SPECS: tuple[ArtifactSpec, ...] = (
    ArtifactSpec(
        filename=ORDER_CACHE_JSONL,
        format="jsonl",
        required_fields=("schema_version", "module_id", "execution_order"),
    ),
    ArtifactSpec(
        filename=SORT_REPORT_JSON,
        format="json",
        required_fields=("sorted", "changes", "islands", "cycles", "diagnostics"),
    ),
)


class OrderCacheRecord(BaseModel):
    """Runtime lookup entry: a unit whose live priority is non-zero."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    module_id: str
    execution_order: int


__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "ARTIFACT_SPECS",
    "ORDER_CACHE_JSONL",
    "SORT_REPORT_JSON",
    "ArtifactSpec",
    "OrderCacheRecord",
]
