"""Type definitions for the recordguard validator.

This module re-exports the Pydantic models from models.py for public API.
"""

from collections.abc import Mapping

from .models import (
    IssueKind,
    Severity,
    ValidationIssueModel,
    ValidationMode,
    ValidationResultModel,
)

# Field name -> type descriptor
Schema = Mapping[str, str]

__all__ = [
    "IssueKind",
    "Severity",
    "ValidationIssueModel",
    "ValidationMode",
    "ValidationResultModel",
    "Schema",
]
