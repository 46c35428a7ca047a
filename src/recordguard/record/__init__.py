"""recordguard records - dictionaries that keep themselves valid.

## Key Components

- `ValidatedRecord`: Base class for record types; validates on construction
  and on every ``set``/``update``
- `define_record_type`: Build and register a record type at runtime
- `describe_schema`: Read-only introspection of a record type's fields

## Quick Example

```python
from recordguard.record import ValidatedRecord, define_record_type
from recordguard.validator import SchemaRegistry, ValidationMode

registry = SchemaRegistry()
Item = define_record_type("Item", {"id": "String", "weight": "float"}, registry)
Player = define_record_type(
    "Player", {"name": "String", "inventory": "Array<Item>"}, registry
)

hero = Player(
    {"name": "Hero", "inventory": [{"id": "sword", "weight": 3}]},
    ValidationMode.STRICT,
)
hero.get("inventory")[0]            # Item instance
hero.set("name", 42)                # False, rolled back
hero.set_namespaced_data("my_mod", "kills", 3)
```
"""

from .core import ValidatedRecord, define_record_type, wrap_nested
from .introspection import (
    FieldDescriptionModel,
    SchemaDescriptionModel,
    describe_field,
    describe_schema,
)
from .namespaces import NAMESPACE_FIELD, NamespacedDataMixin

__all__ = [
    "ValidatedRecord",
    "define_record_type",
    "wrap_nested",
    "NAMESPACE_FIELD",
    "NamespacedDataMixin",
    "FieldDescriptionModel",
    "SchemaDescriptionModel",
    "describe_field",
    "describe_schema",
]
