"""recordguard - runtime schema validation for dynamic key/value records.

Records are plain field/value mappings checked against a schema of type
descriptors on construction and on every mutation.

## Core Modules

### Type Validation (`recordguard.validator`)
Descriptor grammar, structural matching, STRICT/LOOSE record validation,
schema registry and diagnostic sinks.

### Records (`recordguard.record`)
`ValidatedRecord` with rollback on failed STRICT writes, runtime schema
extensions, namespaced side-channel data and introspection.

### Configuration (`recordguard.config`)
Settings loaded from `recordguard.yml` and the environment.

### Schema Files (`recordguard.loaders`)
Record types declared in YAML or JSON.

## Quick Start

```python
from recordguard import ValidatedRecord, ValidationMode

class Player(ValidatedRecord):
    schema_name = "Player"
    base_schema = {"name": "String", "level": "int", "health": "float?"}

hero = Player({"name": "Hero", "level": 1}, ValidationMode.STRICT)
hero.set("level", 2)       # True
hero.set("level", "two")   # False, level is still 2
```
"""

from recordguard.record import ValidatedRecord, define_record_type, describe_schema
from recordguard.validator import (
    IssueKind,
    SchemaRegistry,
    TypeValidator,
    ValidationMode,
    ValidationResultModel,
)

__version__ = "0.1.0"

__all__ = [
    "ValidatedRecord",
    "define_record_type",
    "describe_schema",
    "IssueKind",
    "SchemaRegistry",
    "TypeValidator",
    "ValidationMode",
    "ValidationResultModel",
]
