"""Schema registry used to resolve named record types.

A descriptor such as ``"Item"`` or ``"Array<Item>"`` refers to another schema by
name. The registry answers whether a name is a known schema and builds record
instances for it. It is a plain in-memory lookup populated by whoever owns the
schema set (application code, ``define_record_type`` or the schema-file
loaders); the validator never discovers types on its own.

Example:
    >>> registry = SchemaRegistry()
    >>> registry.register("Item", lambda data, mode: make_item(data, mode))
    >>> registry.is_schema("Item")
    True
"""

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .models import ValidationMode

if TYPE_CHECKING:
    from recordguard.record.core import ValidatedRecord

logger = logging.getLogger(__name__)

RecordFactory = Callable[[dict[str, Any], ValidationMode], Any]


@runtime_checkable
class SchemaBound(Protocol):
    """Anything bound to a named schema, typically a ``ValidatedRecord``."""

    schema_name: str


class SchemaRegistry:
    """Mapping from schema name to record factory."""

    def __init__(self) -> None:
        self._factories: dict[str, RecordFactory] = {}

    def register(self, name: str, factory: RecordFactory) -> None:
        """Register a factory for a schema name.

        Args:
            name: Schema name as it appears in descriptors
            factory: Callable ``(initial_data, mode) -> record``
        """
        if not name:
            raise ValueError("Schema name must not be empty")
        if name in self._factories:
            logger.warning(f"Replacing registered schema '{name}'")
        self._factories[name] = factory
        logger.debug(f"Registered schema '{name}'")

    def register_type(self, record_type: "type[ValidatedRecord]") -> None:
        """Register a record type under its ``schema_name``.

        The type is bound to this registry so nested references inside it
        resolve through the same lookup.
        """
        record_type.registry = self
        self.register(record_type.schema_name, record_type)

    def unregister(self, name: str) -> None:
        if name not in self._factories:
            raise KeyError(f"Unknown schema: {name}")
        del self._factories[name]

    def is_schema(self, name: str) -> bool:
        return name in self._factories

    def get(self, name: str) -> RecordFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise KeyError(f"Unknown schema: {name}") from None

    def create(
        self, name: str, data: dict[str, Any], mode: ValidationMode = ValidationMode.LOOSE
    ) -> Any:
        """Build a record instance of the named schema."""
        return self.get(name)(data, mode)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
