"""
Run diagnostics

Non-fatal conditions met during a reconciliation run are recorded here rather
than raised. Callers may inspect them after the run or ignore them; each one is
also logged at WARNING level when emitted.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal


logger = logging.getLogger(__name__)

DiagnosticKind = Literal[
    "unresolved_channel",
    "unmapped_programme_channel",
    "malformed_programme",
]


@dataclass(slots=True, frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "context": dict(self.context)}


class DiagnosticCollector:
    """Collects diagnostics for one run."""

    def __init__(self, *, log: bool = True) -> None:
        self._items: list[Diagnostic] = []
        self._log = log

    def emit(self, kind: DiagnosticKind, message: str, **context: Any) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, context=context)
        self._items.append(diagnostic)
        if self._log:
            logger.warning("[%s] %s", kind, message)
        return diagnostic

    @property
    def items(self) -> list[Diagnostic]:
        return list(self._items)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [item for item in self._items if item.kind == kind]

    def counts(self) -> dict[str, int]:
        return dict(Counter(item.kind for item in self._items))

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["Diagnostic", "DiagnosticCollector", "DiagnosticKind"]
