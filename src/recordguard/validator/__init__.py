"""recordguard validator - structural type checking for dynamic records.

This module provides the validation engine used by ``recordguard.record``:
- Type descriptor parsing (``"int"``, ``"float?"``, ``"Array<Item>"``)
- Recursive structural matching of values against descriptors
- Whole-record validation in STRICT or LOOSE mode
- Pluggable schema registry and diagnostic sinks

## Key Components

### Core Classes
- `TypeValidator`: Checks values and records
- `SchemaRegistry`: Resolves schema references to record factories
- `DiagnosticSink`: Receives structured failure events

### Results
- `ValidationResultModel`: Validity plus the failures found
- `ValidationIssueModel`: One failure with field, expected and actual kind

## Quick Examples

### Checking values
```python
from recordguard.validator import TypeValidator

validator = TypeValidator()
validator.check(None, "float?")              # True
validator.check(3, "float")                  # True, ints widen to float
validator.check(["x", 5], "Array<String>")   # False
```

### Validating a record
```python
from recordguard.validator import TypeValidator, ValidationMode

schema = {"name": "String", "level": "int", "health": "float?"}
result = TypeValidator().validate_record(
    {"name": "Hero", "level": "one"}, schema, ValidationMode.STRICT
)
result.valid          # False
result.issue.kind     # IssueKind.TYPE_MISMATCH
result.issue.field    # "level"
```
"""

from ._types import (
    IssueKind,
    Schema,
    Severity,
    ValidationIssueModel,
    ValidationMode,
    ValidationResultModel,
)
from .core import TypeValidator
from .descriptors import DescriptorCategory, TypeDescriptor, is_valid_descriptor, parse_descriptor
from .diagnostics import (
    CollectingDiagnosticSink,
    DiagnosticEvent,
    DiagnosticSink,
    LoggingDiagnosticSink,
)
from .errors import ConstructionRejected, DescriptorError, RecordValidationError
from .kinds import ValueKind, kind_name, kind_of
from .registry import SchemaBound, SchemaRegistry

__all__ = [
    # Types
    "IssueKind",
    "Schema",
    "Severity",
    "ValidationIssueModel",
    "ValidationMode",
    "ValidationResultModel",
    # Descriptors
    "DescriptorCategory",
    "TypeDescriptor",
    "parse_descriptor",
    "is_valid_descriptor",
    # Value kinds
    "ValueKind",
    "kind_of",
    "kind_name",
    # Collaborators
    "SchemaBound",
    "SchemaRegistry",
    "DiagnosticEvent",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    # Errors
    "RecordValidationError",
    "DescriptorError",
    "ConstructionRejected",
    # Core validator
    "TypeValidator",
]
