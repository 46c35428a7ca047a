"""Runtime value kinds.

Every value a record can hold is classified into exactly one ``ValueKind``.
The display names are the ones descriptors are written with, so a primitive
descriptor check is a comparison between a descriptor name and
``kind_name(value)``.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from .registry import SchemaBound


class ValueKind(Enum):
    """Closed set of value kinds understood by the validator."""

    NIL = "nil"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    RECORD = "record"
    OBJECT = "object"


KIND_NAMES: dict[ValueKind, str] = {
    ValueKind.NIL: "Nil",
    ValueKind.BOOL: "bool",
    ValueKind.INT: "int",
    ValueKind.FLOAT: "float",
    ValueKind.STRING: "String",
    ValueKind.BYTES: "bytes",
    ValueKind.ARRAY: "Array",
    ValueKind.DICTIONARY: "Dictionary",
    ValueKind.RECORD: "Record",
    ValueKind.OBJECT: "Object",
}


def kind_of(value: Any) -> ValueKind:
    """Classify a runtime value.

    ``bool`` is checked before ``int`` since it is a subclass of it, and strings
    and bytes before the generic sequence test.
    """
    if value is None:
        return ValueKind.NIL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, SchemaBound):
        return ValueKind.RECORD
    if isinstance(value, Mapping):
        return ValueKind.DICTIONARY
    if isinstance(value, Sequence):
        return ValueKind.ARRAY
    return ValueKind.OBJECT


def kind_name(value: Any) -> str:
    """Human-readable kind name of a value.

    Records report the name of the schema they are bound to.
    """
    kind = kind_of(value)
    if kind is ValueKind.RECORD:
        return str(value.schema_name)
    return KIND_NAMES[kind]
