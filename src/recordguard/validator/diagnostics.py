"""Diagnostic reporting for validation failures.

The validator and records report failures as ``DiagnosticEvent`` objects to a
``DiagnosticSink``. Sinks own formatting and destination; reporting is fire
and forget, and a failing sink never changes the outcome of a validation.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .models import IssueKind, Severity, ValidationIssueModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """A structured validation diagnostic.

    Attributes:
        severity: How serious the event is
        kind: Failure category
        message: Human-readable text
        field: Field involved, if any
        expected: Expected descriptor, if any
        actual: Actual runtime kind name, if any
        context_label: Where the failure happened, usually a schema name
    """

    severity: Severity
    kind: IssueKind
    message: str
    field: str | None = None
    expected: str | None = None
    actual: str | None = None
    context_label: str | None = None

    @classmethod
    def from_issue(
        cls, issue: ValidationIssueModel, severity: Severity, context_label: str | None = None
    ) -> "DiagnosticEvent":
        return cls(
            severity=severity,
            kind=issue.kind,
            message=issue.message,
            field=issue.field,
            expected=issue.expected,
            actual=issue.actual,
            context_label=context_label,
        )

    def format(self) -> str:
        prefix = f"[{self.context_label}] " if self.context_label else ""
        return f"{prefix}{self.message}"


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives diagnostic events."""

    def emit(self, event: DiagnosticEvent) -> None: ...


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LoggingDiagnosticSink:
    """Sink that writes events to a standard library logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logging.getLogger("recordguard.diagnostics")

    def emit(self, event: DiagnosticEvent) -> None:
        self.log.log(_LOG_LEVELS[event.severity], event.format())


class CollectingDiagnosticSink:
    """Sink that keeps every event in memory.

    Useful in tests and for callers that want to read the last failure after an
    operation returned False.
    """

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    @property
    def last(self) -> DiagnosticEvent | None:
        return self.events[-1] if self.events else None

    def of_severity(self, severity: Severity) -> list[DiagnosticEvent]:
        return [e for e in self.events if e.severity is severity]

    def clear(self) -> None:
        self.events.clear()


def emit_safely(sink: DiagnosticSink | None, event: DiagnosticEvent) -> None:
    """Deliver an event, logging instead of raising if the sink fails."""
    if sink is None:
        return
    try:
        sink.emit(event)
    except Exception as e:
        logger.error(f"Diagnostic sink {type(sink).__name__} failed: {e}")
