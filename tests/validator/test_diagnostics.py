"""Tests for recordguard.validator.diagnostics module."""

import logging

from recordguard.validator import (
    CollectingDiagnosticSink,
    DiagnosticEvent,
    DiagnosticSink,
    IssueKind,
    LoggingDiagnosticSink,
    Severity,
    ValidationIssueModel,
)
from recordguard.validator.diagnostics import emit_safely


def _event(severity=Severity.WARNING, label="Player"):
    return DiagnosticEvent(
        severity=severity,
        kind=IssueKind.TYPE_MISMATCH,
        message="Field 'level' expected int, got String",
        field="level",
        context_label=label,
    )


class TestDiagnosticEvent:
    """Test event construction and formatting."""

    def test_format_with_label(self):
        assert _event().format() == "[Player] Field 'level' expected int, got String"

    def test_format_without_label(self):
        assert _event(label=None).format() == "Field 'level' expected int, got String"

    def test_from_issue(self):
        issue = ValidationIssueModel(
            kind=IssueKind.MISSING_FIELD,
            field="name",
            expected="String",
            message="Missing field 'name' (expected String)",
        )
        event = DiagnosticEvent.from_issue(issue, Severity.ERROR, "Player")
        assert event.kind is IssueKind.MISSING_FIELD
        assert event.field == "name"
        assert event.expected == "String"
        assert event.actual is None
        assert event.severity is Severity.ERROR


class TestSinks:
    """Test the bundled sinks."""

    def test_collecting_sink(self):
        sink = CollectingDiagnosticSink()
        assert sink.last is None
        sink.emit(_event(Severity.WARNING))
        sink.emit(_event(Severity.ERROR))

        assert len(sink.events) == 2
        assert sink.last.severity is Severity.ERROR
        assert len(sink.of_severity(Severity.WARNING)) == 1

        sink.clear()
        assert sink.events == []

    def test_sinks_satisfy_protocol(self):
        assert isinstance(CollectingDiagnosticSink(), DiagnosticSink)
        assert isinstance(LoggingDiagnosticSink(), DiagnosticSink)

    def test_logging_sink_maps_severity(self, caplog):
        caplog.set_level(logging.INFO, logger="recordguard.diagnostics")
        sink = LoggingDiagnosticSink()
        sink.emit(_event(Severity.ERROR))
        sink.emit(_event(Severity.INFO))

        levels = [r.levelno for r in caplog.records if r.name == "recordguard.diagnostics"]
        assert levels == [logging.ERROR, logging.INFO]
        assert "[Player] Field 'level'" in caplog.text

    def test_emit_safely_ignores_missing_sink(self):
        emit_safely(None, _event())

    def test_emit_safely_logs_sink_failure(self, caplog):
        class BrokenSink:
            def emit(self, event):
                raise RuntimeError("sink down")

        emit_safely(BrokenSink(), _event())
        assert "BrokenSink failed: sink down" in caplog.text
