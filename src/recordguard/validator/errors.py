"""Exceptions raised at the edges of the validator API.

Validation itself reports failures through ``ValidationResultModel``; these
exceptions are reserved for malformed input to the engine and for callers
that opt into raising constructors.
"""

from .models import ValidationIssueModel


class RecordValidationError(ValueError):
    """Base class for recordguard validation errors."""

    pass


class DescriptorError(RecordValidationError):
    """Raised when a type descriptor string cannot be parsed."""

    def __init__(self, descriptor: str, reason: str):
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Invalid type descriptor '{descriptor}': {reason}")


class ConstructionRejected(RecordValidationError):
    """Raised by ``ValidatedRecord.create_checked`` when initial data is invalid.

    Attributes:
        schema_name: Schema the record was being built for
        issue: The validation failure that rejected the data
    """

    def __init__(self, schema_name: str, issue: ValidationIssueModel | None):
        self.schema_name = schema_name
        self.issue = issue
        detail = issue.message if issue else "validation failed"
        super().__init__(f"Cannot construct '{schema_name}': {detail}")
