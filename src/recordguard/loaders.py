"""Schema-definition file loading for recordguard.

Record types can be declared in YAML or JSON instead of Python::

    schemas:
      Item:
        fields: {id: String, weight: float}
      Player:
        description: A player character
        fields:
          name: String
          level: int
          health: float?
          inventory: Array<Item>
    extensions:
      Player:
        mana: int?

``load_registry`` turns one or more such files into a ``SchemaRegistry`` of
``ValidatedRecord`` types, applying extensions after every type is defined so
files can extend types declared in other files.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, ValidationError, field_validator

from recordguard.models import RecordguardBaseModel
from recordguard.record import define_record_type
from recordguard.validator import SchemaRegistry, parse_descriptor

logger = logging.getLogger(__name__)


def _check_descriptors(fields: dict[str, str]) -> dict[str, str]:
    for name, descriptor in fields.items():
        if not name:
            raise ValueError("Field names must not be empty")
        # Raises DescriptorError, a ValueError, which Pydantic reports.
        parse_descriptor(descriptor)
    return fields


class SchemaDefinitionModel(RecordguardBaseModel):
    """One record type declared in a schema file."""

    description: str = ""
    extendable: bool = True
    fields: dict[str, str]

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, value: dict[str, str]) -> dict[str, str]:
        return _check_descriptors(value)


class SchemaFileModel(RecordguardBaseModel):
    """Contents of a schema-definition file."""

    schemas: dict[str, SchemaDefinitionModel] = Field(default_factory=dict)
    extensions: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, value: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        for fields in value.values():
            _check_descriptors(fields)
        return value


def load_schema(content: str, format: str = "yaml") -> dict[str, Any]:
    """Load a schema document from string content.

    Args:
        content: Schema content as string
        format: Format of the content ('yaml' or 'json')

    Returns:
        Schema dictionary

    Raises:
        ValueError: If format is not supported or parsing fails
    """
    if format == "yaml":
        try:
            loaded = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML: {e}") from e
    elif format == "json":
        try:
            loaded = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON: {e}") from e
    else:
        raise ValueError(f"Unsupported format: {format}. Use 'yaml' or 'json'")
    return cast(dict[str, Any], loaded or {})


def load_document(path: str | Path) -> Any:
    """Load a YAML or JSON file, choosing the parser from the extension.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file format is not supported or parsing fails
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() in [".yaml", ".yml"]:
        format = "yaml"
    elif path.suffix.lower() == ".json":
        format = "json"
    else:
        raise ValueError(f"Unsupported file extension: {path.suffix}. Use .yaml, .yml, or .json")

    content = path.read_text(encoding="utf-8")
    return load_schema(content, format=format)


def load_schema_file(path: str | Path) -> SchemaFileModel:
    """Load and validate a schema-definition file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file cannot be parsed or declares invalid schemas
    """
    document = load_document(path)
    try:
        return SchemaFileModel.model_validate(document)
    except ValidationError as e:
        raise ValueError(f"Invalid schema file {path}: {e}") from e


def load_registry(
    paths: Iterable[str | Path], registry: SchemaRegistry | None = None
) -> SchemaRegistry:
    """Build a registry of record types from schema-definition files.

    Args:
        paths: Files to load, in order. A later file redefining a schema
            replaces the earlier definition.
        registry: Registry to populate; a new one is created if omitted

    Returns:
        The populated registry

    Raises:
        ValueError: If an extension targets a schema that was never defined
    """
    registry = registry if registry is not None else SchemaRegistry()
    files = [load_schema_file(path) for path in paths]

    for schema_file in files:
        for name, definition in schema_file.schemas.items():
            define_record_type(
                name,
                definition.fields,
                registry=registry,
                description=definition.description,
                extendable=definition.extendable,
            )

    for schema_file in files:
        for name, fields in schema_file.extensions.items():
            if not registry.is_schema(name):
                raise ValueError(f"Cannot extend unknown schema '{name}'")
            record_type = registry.get(name)
            extend = getattr(record_type, "extend_schema", None)
            if extend is None:
                raise ValueError(f"Schema '{name}' does not support extensions")
            try:
                extend(fields)
            except TypeError as e:
                raise ValueError(str(e)) from e

    logger.debug(f"Loaded {len(registry)} schemas: {registry.names()}")
    return registry
