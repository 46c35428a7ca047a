"""Validated records.

A ``ValidatedRecord`` owns a mapping of field name to value and keeps it
consistent with its schema. Every construction and mutation goes through a
``TypeValidator``:

- STRICT records never expose invalid state. A failed ``set`` or ``update``
  is rolled back to the last valid data.
- LOOSE records keep a failed write, report a warning and mark themselves
  tainted until a later write validates again.

Schemas are declared on subclasses and may be extended at runtime, for
example by plugins adding fields to a shared record type::

    class Player(ValidatedRecord):
        schema_name = "Player"
        base_schema = {"name": "String", "level": "int", "health": "float?"}

    Player.extend_schema({"mana": "int?"})
    hero = Player({"name": "Hero", "level": 1}, ValidationMode.STRICT)
    hero.set("level", "one")   # False, level stays 1

Records are not thread safe. Callers sharing a record between threads must
serialise ``set``/``update`` and ``extend_schema`` themselves.
"""

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from recordguard.config import RecordguardSettingsModel, load_settings
from recordguard.validator import (
    ConstructionRejected,
    DescriptorCategory,
    DescriptorError,
    DiagnosticEvent,
    DiagnosticSink,
    IssueKind,
    LoggingDiagnosticSink,
    SchemaBound,
    SchemaRegistry,
    Severity,
    TypeDescriptor,
    TypeValidator,
    ValidationMode,
    ValidationResultModel,
    ValueKind,
    kind_of,
    parse_descriptor,
)
from recordguard.validator.diagnostics import emit_safely

from .namespaces import NamespacedDataMixin

if TYPE_CHECKING:
    from .introspection import SchemaDescriptionModel

logger = logging.getLogger(__name__)


class ValidatedRecord(NamespacedDataMixin):
    """Key/value record bound to a schema.

    Subclasses declare the schema through class attributes:

    Attributes:
        schema_name: Name used in descriptors referring to this type
        base_schema: Field name to descriptor mapping owned by the type
        description: Free text shown by introspection
        extendable: Whether ``extend_schema`` may add fields
        registry: Registry used to build nested records, set when the type is
            registered

    Records built with the plain constructor always validate. Use
    ``from_settings`` to honour ``recordguard.yml`` and the environment, so
    that ``RECORDGUARD_PRODUCTION`` turns validation off and ``default_mode``
    applies.
    """

    schema_name: ClassVar[str] = "ValidatedRecord"
    base_schema: ClassVar[dict[str, str]] = {}
    description: ClassVar[str] = ""
    extendable: ClassVar[bool] = True
    registry: SchemaRegistry | None = None
    _extended_schema: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Each record type has its own extension store, shared by its instances.
        cls._extended_schema = {}
        if "schema_name" not in cls.__dict__:
            cls.schema_name = cls.__name__

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        mode: ValidationMode = ValidationMode.LOOSE,
        *,
        validator: TypeValidator | None = None,
        registry: SchemaRegistry | None = None,
        sink: DiagnosticSink | None = None,
    ):
        """Create a record from initial data.

        When the initial data fails validation the record is left empty and
        ``construction_result`` holds the failure; known-invalid data is
        never committed. Use ``create_checked`` to get an exception instead.

        Args:
            data: Initial field values, copied defensively
            mode: STRICT or LOOSE enforcement
            validator: Validator to use; defaults to a new one bound to the
                record's registry, reporting to ``sink`` or to logging
            registry: Registry for nested record types; defaults to the one
                the record type was registered with
            sink: Diagnostic sink; defaults to the validator's
        """
        self.mode = mode
        self.registry = registry if registry is not None else type(self).registry
        if validator is None:
            validator = TypeValidator(registry=self.registry, sink=sink or LoggingDiagnosticSink())
        self.validator = validator
        self.sink = sink if sink is not None else validator.sink
        self.tainted = False
        self.last_result: ValidationResultModel | None = None
        self._valid = False
        self._data: dict[str, Any] = {}
        self.construction_result = self._construct(data or {})

    @classmethod
    def create_checked(
        cls,
        data: Mapping[str, Any] | None = None,
        mode: ValidationMode = ValidationMode.LOOSE,
        **kwargs: Any,
    ) -> "ValidatedRecord":
        """Create a record, raising instead of returning an empty one.

        Raises:
            ConstructionRejected: If the initial data fails validation
        """
        record = cls(data, mode, **kwargs)
        if not record.construction_result:
            raise ConstructionRejected(cls.schema_name, record.construction_result.issue)
        return record

    @classmethod
    def from_settings(
        cls,
        data: Mapping[str, Any] | None = None,
        settings: RecordguardSettingsModel | None = None,
        mode: ValidationMode | None = None,
        *,
        registry: SchemaRegistry | None = None,
        sink: DiagnosticSink | None = None,
    ) -> "ValidatedRecord":
        """Create a record with a validator configured from settings.

        Args:
            data: Initial field values
            settings: Settings to apply; loaded with ``load_settings()`` if omitted
            mode: Overrides the settings' ``default_mode``
            registry: Registry for nested record types
            sink: Diagnostic sink; defaults to logging
        """
        if settings is None:
            settings = load_settings()
        registry = registry if registry is not None else cls.registry
        validator = TypeValidator.from_settings(
            settings, registry=registry, sink=sink or LoggingDiagnosticSink()
        )
        return cls(
            data, mode or settings.default_mode, validator=validator, registry=registry, sink=sink
        )

    @classmethod
    def validate_data(
        cls,
        data: Mapping[str, Any],
        mode: ValidationMode = ValidationMode.LOOSE,
        *,
        validator: TypeValidator | None = None,
        exhaustive: bool = False,
    ) -> ValidationResultModel:
        """Validate data against this type without building a record.

        Nested mappings are wrapped exactly as the constructor would wrap
        them. With ``exhaustive`` every failure is reported, not just the
        first.
        """
        validator = validator or TypeValidator(registry=cls.registry)
        registry = validator.registry if validator.registry is not None else cls.registry
        view = cls._validation_view(cls._prepare(data, registry, mode))
        check = validator.collect_issues if exhaustive else validator.validate_record
        return check(view, cls.effective_schema(), mode, label=cls.schema_name)

    # Schema

    @classmethod
    def get_base_schema(cls) -> dict[str, str]:
        return dict(cls.base_schema)

    @classmethod
    def get_extended_schema(cls) -> dict[str, str]:
        return dict(cls._extended_schema)

    @classmethod
    def effective_schema(cls) -> dict[str, str]:
        """Base schema merged with extensions, extensions winning on collision."""
        return {**cls.base_schema, **cls._extended_schema}

    @classmethod
    def extend_schema(cls, extra_fields: Mapping[str, str]) -> None:
        """Add or override fields for every record of this type.

        Raises:
            TypeError: If the record type is not extendable
        """
        if not cls.extendable:
            raise TypeError(f"Schema '{cls.schema_name}' is not extendable")
        cls._extended_schema.update(extra_fields)
        logger.debug(f"Extended schema '{cls.schema_name}' with {sorted(extra_fields)}")

    @classmethod
    def reset_extensions(cls) -> None:
        cls._extended_schema.clear()

    @classmethod
    def describe(cls) -> "SchemaDescriptionModel":
        """Introspection of this type's effective schema."""
        from .introspection import describe_schema

        return describe_schema(cls)

    # Reads

    def get(self, field: str, default: Any = None) -> Any:
        """Return a field's value, or ``default`` when absent.

        Plain mappings stored in fields typed as record references are
        upgraded to record instances on first read.
        """
        if field not in self._data:
            return default
        value = self._data[field]
        descriptor = self._descriptor_for(field)
        if descriptor is not None:
            upgraded = self._wrap(value, descriptor)
            if upgraded is not value:
                self._data[field] = upgraded
                value = upgraded
        return value

    def has(self, field: str) -> bool:
        return field in self._data

    def keys(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping of the record's data, nested records included."""
        return {key: _to_plain(value) for key, value in self._data.items()}

    @property
    def is_valid(self) -> bool:
        """Whether the committed data is known to satisfy the schema.

        False after a rejected construction or a kept LOOSE failure. A STRICT
        rollback leaves it unchanged since the data is restored.
        """
        return self._valid

    # Writes

    def set(self, field: str, value: Any) -> bool:
        """Set a single field and revalidate the record.

        Returns:
            True if the record is valid after the write. On failure a STRICT
            record is restored to its previous state; a LOOSE record keeps
            the value and becomes tainted.
        """
        descriptor = self._descriptor_for(field)
        if descriptor is not None:
            value = self._wrap(value, descriptor)

        existed = field in self._data
        previous = self._data.get(field)
        self._data[field] = value

        if self._revalidate():
            return True

        if self.mode is ValidationMode.STRICT:
            if existed:
                self._data[field] = previous
            else:
                del self._data[field]
            self._note(f"Rolled back write to '{field}'", field)
        else:
            self.tainted = True
            self._valid = False
        return False

    def update(self, partial: Mapping[str, Any]) -> bool:
        """Merge several fields at once and revalidate.

        A STRICT failure restores the whole pre-merge state, not just the
        offending keys.
        """
        snapshot = dict(self._data)
        for field, value in partial.items():
            descriptor = self._descriptor_for(field)
            self._data[field] = value if descriptor is None else self._wrap(value, descriptor)

        if self._revalidate():
            return True

        if self.mode is ValidationMode.STRICT:
            self._data = snapshot
            self._note(f"Rolled back update of {sorted(partial)}")
        else:
            self.tainted = True
            self._valid = False
        return False

    # Internals

    @classmethod
    def _prepare(
        cls, data: Mapping[str, Any], registry: SchemaRegistry | None, mode: ValidationMode
    ) -> dict[str, Any]:
        """Defensive copy of ``data`` with nested record fields wrapped."""
        candidate: dict[str, Any] = {key: _defensive_copy(value) for key, value in data.items()}
        for field, value in candidate.items():
            descriptor = cls._descriptor_for(field)
            if descriptor is not None:
                candidate[field] = wrap_nested(value, descriptor, registry, mode)
        return candidate

    @classmethod
    def _validation_view(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in data.items() if key != cls.namespace_field}

    @classmethod
    def _descriptor_for(cls, field: str) -> TypeDescriptor | None:
        text = cls.effective_schema().get(field)
        if text is None:
            return None
        try:
            return parse_descriptor(text)
        except DescriptorError:
            # Reported by the validator when the record is checked.
            return None

    def _construct(self, data: Mapping[str, Any]) -> ValidationResultModel:
        candidate = self._prepare(data, self.registry, self.mode)

        if self.effective_schema():
            result = self._validate(candidate)
            if not result:
                issue = result.issue
                message = f"Rejected initial data: {issue.message if issue else 'invalid'}"
                emit_safely(
                    self.sink,
                    DiagnosticEvent(
                        severity=Severity.ERROR,
                        kind=IssueKind.CONSTRUCTION_REJECTED,
                        message=message,
                        field=issue.field if issue else None,
                        context_label=self.schema_name,
                    ),
                )
                return result
        else:
            result = ValidationResultModel.success()

        self._data = candidate
        self._valid = True
        return result

    def _validate(self, data: Mapping[str, Any]) -> ValidationResultModel:
        result = self.validator.validate_record(
            self._validation_view(data), self.effective_schema(), self.mode, label=self.schema_name
        )
        self.last_result = result
        return result

    def _revalidate(self) -> bool:
        if not self._validate(self._data):
            return False
        self.tainted = False
        self._valid = True
        return True

    def _wrap(self, value: Any, descriptor: TypeDescriptor) -> Any:
        return wrap_nested(value, descriptor, self.registry, self.mode)

    def _note(self, message: str, field: str | None = None) -> None:
        issue = self.last_result.issue if self.last_result is not None else None
        emit_safely(
            self.sink,
            DiagnosticEvent(
                severity=Severity.INFO,
                kind=issue.kind if issue is not None else IssueKind.TYPE_MISMATCH,
                message=message,
                field=field,
                context_label=self.schema_name,
            ),
        )

    # Mapping-style access

    def __getitem__(self, field: str) -> Any:
        if field not in self._data:
            raise KeyError(field)
        return self.get(field)

    def __setitem__(self, field: str, value: Any) -> None:
        self.set(field, value)

    def __contains__(self, field: object) -> bool:
        return field in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidatedRecord):
            return NotImplemented
        return self.schema_name == other.schema_name and self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r}, mode={self.mode.value})"


def define_record_type(
    name: str,
    fields: Mapping[str, str],
    registry: SchemaRegistry | None = None,
    description: str = "",
    extendable: bool = True,
) -> type[ValidatedRecord]:
    """Create a record type at runtime and optionally register it.

    Args:
        name: Schema name of the new type
        fields: Base schema
        registry: Registry to add the type to
        description: Free text for introspection
        extendable: Whether the type accepts schema extensions

    Returns:
        The new ``ValidatedRecord`` subclass
    """
    record_type = type(
        name,
        (ValidatedRecord,),
        {
            "schema_name": name,
            "base_schema": dict(fields),
            "description": description,
            "extendable": extendable,
            "__module__": __name__,
        },
    )
    if registry is not None:
        registry.register_type(record_type)
    return record_type


def wrap_nested(
    value: Any,
    descriptor: TypeDescriptor,
    registry: SchemaRegistry | None,
    mode: ValidationMode = ValidationMode.LOOSE,
) -> Any:
    """Convert plain mappings into nested records where the descriptor says so.

    ``Item`` wraps a mapping into an ``Item`` record and ``Array<Item>`` wraps
    each mapping element. Values that are already records, names the registry
    does not know, and mappings the referenced type rejects are returned
    unchanged, so wrapping twice is a no-op.
    """
    target = descriptor.referenced_schema
    if target is None or registry is None or not registry.is_schema(target):
        return value

    if descriptor.category is DescriptorCategory.REFERENCE:
        if isinstance(value, Mapping) and not isinstance(value, SchemaBound):
            nested = registry.create(target, dict(value), mode)
            if getattr(nested, "is_valid", True):
                return nested
            logger.debug(f"Keeping raw mapping for '{target}': nested construction rejected")
        return value

    if descriptor.category is DescriptorCategory.ARRAY and kind_of(value) is ValueKind.ARRAY:
        assert descriptor.element is not None
        wrapped = [wrap_nested(item, descriptor.element, registry, mode) for item in value]
        # Any sequence the validator accepts as an array comes back as a list.
        if not isinstance(value, list) or any(new is not old for new, old in zip(wrapped, value)):
            return wrapped
    return value


def _defensive_copy(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _defensive_copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_defensive_copy(item) for item in value]
    return value


def _to_plain(value: Any) -> Any:
    if isinstance(value, ValidatedRecord):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    return value
