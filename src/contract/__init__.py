"""Stable data contract shared by the ordergraph layers.

Unit declarations, diagnostics and artifact record schemas. Treat these
exports as the boundary between the sorting engine and its collaborators.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    ORDER_CACHE_JSONL,
    SORT_REPORT_JSON,
    ArtifactSpec,
    OrderCacheRecord,
)
from contract.diagnostics import Diagnostic, DiagnosticSink
from contract.models import (
    Constraint,
    ConstraintKind,
    Island,
    IslandItem,
    PriorityChange,
    UnitDecl,
)

__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "ARTIFACT_SPECS",
    "ORDER_CACHE_JSONL",
    "SORT_REPORT_JSON",
    "ArtifactSpec",
    "Constraint",
    "ConstraintKind",
    "Diagnostic",
    "DiagnosticSink",
    "Island",
    "IslandItem",
    "OrderCacheRecord",
    "PriorityChange",
    "UnitDecl",
]
