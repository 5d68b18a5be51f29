"""Structured diagnostics emitted while ordering units.

None of these stop a sort. Each defect degrades to the best assignment
available plus an entry here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

Severity = Literal["info", "warning", "error"]

DiagnosticKind = Literal[
    "apply-failed",
    "cycle",
    "fixed-order-overridden",
    "island",
    "unresolved-dependency",
]

_LOG_LEVELS: dict[Severity, int] = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger("ordergraph")


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    severity: Severity
    module_id: str | None
    message: str
    details: dict[str, object] = field(default_factory=dict)

    def location(self) -> str:
        if self.module_id is None:
            return self.kind
        return f"{self.kind}:{self.module_id}"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "severity": self.severity,
            "module_id": self.module_id,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass
class DiagnosticSink:
    """Collects diagnostics and mirrors them to the ``ordergraph`` logger."""

    entries: list[Diagnostic] = field(default_factory=list)
    log: logging.Logger = field(default=logger, repr=False)

    def emit(
        self,
        kind: DiagnosticKind,
        severity: Severity,
        module_id: str | None,
        message: str,
        **details: object,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            kind=kind,
            severity=severity,
            module_id=module_id,
            message=message,
            details=details,
        )
        self.entries.append(diagnostic)
        self.log.log(_LOG_LEVELS[severity], "%s", message)
        return diagnostic

    def info(
        self,
        kind: DiagnosticKind,
        module_id: str | None,
        message: str,
        **details: object,
    ) -> Diagnostic:
        return self.emit(kind, "info", module_id, message, **details)

    def warning(
        self,
        kind: DiagnosticKind,
        module_id: str | None,
        message: str,
        **details: object,
    ) -> Diagnostic:
        return self.emit(kind, "warning", module_id, message, **details)

    def error(
        self,
        kind: DiagnosticKind,
        module_id: str | None,
        message: str,
        **details: object,
    ) -> Diagnostic:
        return self.emit(kind, "error", module_id, message, **details)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [entry for entry in self.entries if entry.kind == kind]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [entry for entry in self.entries if entry.severity == "warning"]

    @property
    def errors(self) -> list[Diagnostic]:
        return [entry for entry in self.entries if entry.severity == "error"]

    @property
    def ok(self) -> bool:
        return not self.errors


__all__ = ["Diagnostic", "DiagnosticKind", "DiagnosticSink", "Severity"]
