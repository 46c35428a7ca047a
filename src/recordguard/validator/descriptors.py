"""Type descriptor grammar.

A descriptor is a small type expression written as a string::

    descriptor := base "?"?
    base       := primitive | "Array<" descriptor ">" | "Array" | "Dictionary" | reference
    primitive  := "String" | "int" | "float" | "bool" | "bytes" | "Object"
    reference  := identifier naming a registered schema

``parse_descriptor`` turns the string into a ``TypeDescriptor`` tree. Results
are cached, so parsing the same descriptor on every validation is cheap.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from .errors import DescriptorError

NULLABLE_SUFFIX = "?"
ARRAY_PREFIX = "Array<"
ARRAY_SUFFIX = ">"
UNTYPED_ARRAY = "Array"
UNTYPED_MAP = "Dictionary"

PRIMITIVE_NAMES = ("String", "int", "float", "bool", "bytes", "Object")
_PRIMITIVES_FOLDED = {name.casefold(): name for name in PRIMITIVE_NAMES}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class DescriptorCategory(Enum):
    PRIMITIVE = "primitive"
    ARRAY = "array"
    UNTYPED_ARRAY = "untyped_array"
    MAP = "map"
    REFERENCE = "reference"


@dataclass(frozen=True)
class TypeDescriptor:
    """Parsed form of a descriptor string.

    Attributes:
        raw: The normalised descriptor text, including any ``?`` suffix
        category: Which branch of the grammar the base matched
        name: Primitive or schema name; ``Array``/``Dictionary`` for the
            untyped containers and ``Array`` for typed arrays
        nullable: Whether the descriptor ends with ``?``
        element: Element descriptor of a typed array
    """

    raw: str
    category: DescriptorCategory
    name: str
    nullable: bool = False
    element: "TypeDescriptor | None" = None

    @property
    def base(self) -> str:
        """Descriptor text without the nullable suffix."""
        return self.raw[:-1] if self.nullable else self.raw

    @property
    def is_array(self) -> bool:
        return self.category in (DescriptorCategory.ARRAY, DescriptorCategory.UNTYPED_ARRAY)

    @property
    def is_reference(self) -> bool:
        return self.category is DescriptorCategory.REFERENCE

    @property
    def referenced_schema(self) -> str | None:
        """Schema named by this descriptor or by its array element, if any."""
        if self.is_reference:
            return self.name
        if self.element is not None:
            return self.element.referenced_schema
        return None

    def __str__(self) -> str:
        return self.raw


def parse_descriptor(text: str) -> TypeDescriptor:
    """Parse a descriptor string.

    Args:
        text: Descriptor such as ``"int"``, ``"float?"`` or ``"Array<Item?>"``

    Returns:
        The parsed descriptor

    Raises:
        DescriptorError: If the text does not follow the grammar
    """
    if not isinstance(text, str):
        raise DescriptorError(repr(text), "descriptor must be a string")
    return _parse(text)


@lru_cache(maxsize=1024)
def _parse(text: str) -> TypeDescriptor:
    raw = text.strip()
    if not raw:
        raise DescriptorError(text, "empty descriptor")

    nullable = raw.endswith(NULLABLE_SUFFIX)
    base = raw[:-1].rstrip() if nullable else raw
    if not base:
        raise DescriptorError(text, "nullable marker without a type")
    if base.endswith(NULLABLE_SUFFIX):
        raise DescriptorError(text, "more than one nullable marker")
    raw = base + NULLABLE_SUFFIX if nullable else base

    if base[: len(ARRAY_PREFIX)].casefold() == ARRAY_PREFIX.casefold():
        if not base.endswith(ARRAY_SUFFIX):
            raise DescriptorError(text, "unbalanced 'Array<...>'")
        inner = base[len(ARRAY_PREFIX) : -len(ARRAY_SUFFIX)]
        if not inner.strip():
            raise DescriptorError(text, "missing array element type")
        try:
            element = _parse(inner)
        except DescriptorError as e:
            raise DescriptorError(text, e.reason) from e
        raw = f"{ARRAY_PREFIX}{element.raw}{ARRAY_SUFFIX}" + (NULLABLE_SUFFIX if nullable else "")
        return TypeDescriptor(raw, DescriptorCategory.ARRAY, UNTYPED_ARRAY, nullable, element)

    if not _IDENTIFIER.match(base):
        raise DescriptorError(text, f"'{base}' is not a type name")

    folded = base.casefold()
    if folded == UNTYPED_ARRAY.casefold():
        return TypeDescriptor(raw, DescriptorCategory.UNTYPED_ARRAY, UNTYPED_ARRAY, nullable)
    if folded == UNTYPED_MAP.casefold():
        return TypeDescriptor(raw, DescriptorCategory.MAP, UNTYPED_MAP, nullable)
    if folded in _PRIMITIVES_FOLDED:
        return TypeDescriptor(raw, DescriptorCategory.PRIMITIVE, base, nullable)
    return TypeDescriptor(raw, DescriptorCategory.REFERENCE, base, nullable)


def is_valid_descriptor(text: str) -> bool:
    try:
        parse_descriptor(text)
    except DescriptorError:
        return False
    return True
