"""Pydantic models for the recordguard validator.

This module contains the result and issue models returned by
``TypeValidator.validate_record`` and the enums shared across the package.
"""

from enum import Enum

from pydantic import Field

from recordguard.models import RecordguardBaseModel


class ValidationMode(Enum):
    """How strictly a record is held to its schema.

    - STRICT: the data's key set must equal the schema's key set and a failed
      mutation is rolled back.
    - LOOSE: undeclared keys are allowed and a failed mutation is kept with a
      warning.
    """

    STRICT = "strict"
    LOOSE = "loose"


class IssueKind(Enum):
    """Kinds of validation failure."""

    EMPTY_SCHEMA = "empty_schema"
    MISSING_FIELD = "missing_field"
    TYPE_MISMATCH = "type_mismatch"
    UNEXPECTED_FIELD = "unexpected_field"
    CONSTRUCTION_REJECTED = "construction_rejected"


class Severity(Enum):
    """Severity of a diagnostic event."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ValidationIssueModel(RecordguardBaseModel):
    """A single validation failure.

    Attributes:
        kind: What went wrong.
        field: The schema or data key involved, if any.
        expected: The field's declared descriptor.
        actual: Runtime kind name of the offending value.
        path: Location of the failure, the field name followed by element
            indices for nested arrays.
        message: Human-readable description.
        context: Short previews of the neighbouring fields in the data, for
            display.
    """

    kind: IssueKind
    field: str | None = None
    expected: str | None = None
    actual: str | None = None
    path: tuple[str | int, ...] = ()
    message: str
    context: dict[str, str] = Field(default_factory=dict)


class ValidationResultModel(RecordguardBaseModel):
    """Outcome of validating a record against a schema.

    The result is truthy when valid, so callers can write
    ``if validator.validate_record(data, schema): ...``.

    Attributes:
        valid: Whether the data satisfied the schema.
        issues: Failures found, in schema declaration order. Holds at most one
            issue unless exhaustive collection was requested.
    """

    valid: bool
    issues: tuple[ValidationIssueModel, ...] = ()

    @property
    def issue(self) -> ValidationIssueModel | None:
        """The first failure, or None when valid."""
        return self.issues[0] if self.issues else None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def success(cls) -> "ValidationResultModel":
        return cls(valid=True)

    @classmethod
    def failure(cls, *issues: ValidationIssueModel) -> "ValidationResultModel":
        return cls(valid=False, issues=issues)
