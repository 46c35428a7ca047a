"""Read-only schema introspection.

Documentation and viewer tooling need to know, per field, what a record type
declares and where the declaration came from. ``describe_schema`` answers
that as Pydantic models; serialising them is up to the caller.
"""

from typing import Literal

from recordguard.models import RecordguardBaseModel
from recordguard.validator import DescriptorError, parse_descriptor

from .core import ValidatedRecord

FieldOrigin = Literal["base", "extension"]


class FieldDescriptionModel(RecordguardBaseModel):
    """Description of one effective schema field.

    Attributes:
        type: The descriptor string as declared.
        is_nullable: Whether the descriptor ends with ``?``.
        is_array: Whether the field holds an array.
        element_type: Element descriptor of a typed array.
        is_reference: Whether the field (or its elements) names another schema.
        is_valid_descriptor: False when the descriptor does not parse.
        is_base_field: Whether the base schema declares the field.
        origin: Which component the effective descriptor comes from.
    """

    type: str
    is_nullable: bool = False
    is_array: bool = False
    element_type: str | None = None
    is_reference: bool = False
    is_valid_descriptor: bool = True
    is_base_field: bool
    origin: FieldOrigin


class SchemaDescriptionModel(RecordguardBaseModel):
    """Description of a record type's schema.

    Example:
        >>> description = describe_schema(Player)
        >>> description.fields["inventory"].element_type
        'Item'
    """

    name: str
    description: str = ""
    is_extendable: bool
    base_schema: dict[str, str]
    extended_schema: dict[str, str]
    fields: dict[str, FieldDescriptionModel]


def describe_field(
    descriptor: str, is_base_field: bool, origin: FieldOrigin
) -> FieldDescriptionModel:
    try:
        parsed = parse_descriptor(descriptor)
    except DescriptorError:
        return FieldDescriptionModel(
            type=str(descriptor),
            is_valid_descriptor=False,
            is_base_field=is_base_field,
            origin=origin,
        )
    return FieldDescriptionModel(
        type=parsed.raw,
        is_nullable=parsed.nullable,
        is_array=parsed.is_array,
        element_type=parsed.element.raw if parsed.element is not None else None,
        is_reference=parsed.referenced_schema is not None,
        is_base_field=is_base_field,
        origin=origin,
    )


def describe_schema(record_type: type[ValidatedRecord]) -> SchemaDescriptionModel:
    """Describe the effective schema of a record type."""
    base = record_type.get_base_schema()
    extended = record_type.get_extended_schema()
    fields = {
        name: describe_field(
            descriptor,
            is_base_field=name in base,
            origin="extension" if name in extended else "base",
        )
        for name, descriptor in record_type.effective_schema().items()
    }
    return SchemaDescriptionModel(
        name=record_type.schema_name,
        description=record_type.description,
        is_extendable=record_type.extendable,
        base_schema=base,
        extended_schema=extended,
        fields=fields,
    )
