"""Core validation logic for recordguard.

``TypeValidator`` checks single values against type descriptors and whole
records against a schema, a mapping of field name to descriptor. It keeps no
state between calls apart from its collaborators: the schema registry used to
resolve named record types and the diagnostic sink failures are reported to.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._types import Schema
from .descriptors import DescriptorCategory, TypeDescriptor, parse_descriptor
from .diagnostics import DiagnosticEvent, DiagnosticSink, emit_safely
from .errors import DescriptorError
from .kinds import ValueKind, kind_name, kind_of
from .models import (
    IssueKind,
    Severity,
    ValidationIssueModel,
    ValidationMode,
    ValidationResultModel,
)
from .registry import SchemaBound, SchemaRegistry

if TYPE_CHECKING:
    from recordguard.config.models import RecordguardSettingsModel

logger = logging.getLogger(__name__)

_PREVIEW_LENGTH = 40


@dataclass(frozen=True)
class _Mismatch:
    """Innermost point where a value stopped matching its descriptor."""

    path: tuple[int, ...]
    expected: str
    actual: str
    reason: str | None = None


class TypeValidator:
    """Structural type checker for records.

    Example:
        >>> validator = TypeValidator()
        >>> validator.check(None, "float?")
        True
        >>> validator.check(["x", 5], "Array<String>")
        False
        >>> result = validator.validate_record(
        ...     {"a": 1, "b": 2}, {"a": "int"}, ValidationMode.STRICT
        ... )
        >>> result.issue.kind
        <IssueKind.UNEXPECTED_FIELD: 'unexpected_field'>
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        sink: DiagnosticSink | None = None,
        enabled: bool = True,
        excerpt_size: int = 2,
    ):
        """Initialize the validator.

        Args:
            registry: Resolves schema references. Without one, a reference
                matches any record bound to a schema of that name.
            sink: Receives a diagnostic for each reported failure
            enabled: When False every check passes without doing any work
            excerpt_size: Neighbouring fields on each side included in an
                issue's context excerpt
        """
        self.registry = registry
        self.sink = sink
        self.enabled = enabled
        self.excerpt_size = excerpt_size

    @classmethod
    def from_settings(
        cls,
        settings: "RecordguardSettingsModel",
        registry: SchemaRegistry | None = None,
        sink: DiagnosticSink | None = None,
    ) -> "TypeValidator":
        return cls(
            registry=registry,
            sink=sink,
            enabled=settings.validation_enabled,
            excerpt_size=settings.context_excerpt_size,
        )

    def check(self, value: Any, descriptor: str | TypeDescriptor) -> bool:
        """Check a single value against a descriptor.

        A malformed descriptor never matches anything.
        """
        if not self.enabled:
            return True
        try:
            parsed = _as_descriptor(descriptor)
        except DescriptorError as e:
            logger.error(str(e))
            return False
        return self._find_mismatch(value, parsed) is None

    def validate_record(
        self,
        data: Mapping[str, Any],
        schema: Schema,
        mode: ValidationMode | bool = ValidationMode.LOOSE,
        label: str | None = None,
    ) -> ValidationResultModel:
        """Validate a record, stopping at the first failure.

        Fields are visited in schema declaration order, then undeclared keys
        in data order (STRICT mode only), so the reported failure is stable.

        Args:
            data: The record's field values
            schema: Field name to descriptor mapping
            mode: ValidationMode, or True for STRICT
            label: Context label attached to emitted diagnostics

        Returns:
            Result holding at most one issue
        """
        if not self.enabled:
            return ValidationResultModel.success()
        mode = _as_mode(mode)
        for issue in self._iter_issues(data, schema, mode):
            self._report(issue, mode, label)
            return ValidationResultModel.failure(issue)
        return ValidationResultModel.success()

    def collect_issues(
        self,
        data: Mapping[str, Any],
        schema: Schema,
        mode: ValidationMode | bool = ValidationMode.LOOSE,
        label: str | None = None,
    ) -> ValidationResultModel:
        """Validate a record and report every failure instead of the first."""
        if not self.enabled:
            return ValidationResultModel.success()
        mode = _as_mode(mode)
        issues = tuple(self._iter_issues(data, schema, mode))
        for issue in issues:
            self._report(issue, mode, label)
        if issues:
            return ValidationResultModel.failure(*issues)
        return ValidationResultModel.success()

    def _iter_issues(
        self, data: Mapping[str, Any], schema: Schema, mode: ValidationMode
    ) -> Iterator[ValidationIssueModel]:
        if not schema:
            yield ValidationIssueModel(kind=IssueKind.EMPTY_SCHEMA, message="Schema is empty")
            return

        if not isinstance(data, Mapping):
            actual = kind_name(data)
            yield ValidationIssueModel(
                kind=IssueKind.TYPE_MISMATCH,
                expected="Dictionary",
                actual=actual,
                message=f"Record data must be a Dictionary, got {actual}",
            )
            return

        for field, descriptor in schema.items():
            try:
                parsed = _as_descriptor(descriptor)
            except DescriptorError as e:
                yield self._issue(
                    IssueKind.TYPE_MISMATCH,
                    data,
                    schema,
                    field,
                    message=f"Field '{field}': {e}",
                    expected=str(descriptor),
                    actual=kind_name(data.get(field)),
                )
                continue

            if field not in data:
                # An absent nullable field is treated as null.
                if parsed.nullable:
                    continue
                yield self._issue(
                    IssueKind.MISSING_FIELD,
                    data,
                    schema,
                    field,
                    message=f"Missing field '{field}' (expected {parsed.raw})",
                    expected=parsed.raw,
                )
                continue

            value = data[field]
            mismatch = self._find_mismatch(value, parsed)
            if mismatch is not None:
                actual = kind_name(value)
                message = f"Field '{field}' expected {parsed.raw}, got {actual}"
                if mismatch.path:
                    location = "".join(f"[{i}]" for i in mismatch.path)
                    message += (
                        f" (element {location} expected {mismatch.expected},"
                        f" got {mismatch.actual})"
                    )
                if mismatch.reason:
                    message += f": {mismatch.reason}"
                yield self._issue(
                    IssueKind.TYPE_MISMATCH,
                    data,
                    schema,
                    field,
                    message=message,
                    expected=parsed.raw,
                    actual=actual,
                    path=(field, *mismatch.path),
                )

        if mode is ValidationMode.STRICT:
            for key in data:
                if key not in schema:
                    yield self._issue(
                        IssueKind.UNEXPECTED_FIELD,
                        data,
                        schema,
                        key,
                        message=f"Unexpected field '{key}' in strict mode",
                        actual=kind_name(data[key]),
                    )

    def _find_mismatch(
        self, value: Any, descriptor: TypeDescriptor, path: tuple[int, ...] = ()
    ) -> _Mismatch | None:
        if value is None:
            if descriptor.nullable:
                return None
            return _Mismatch(path, descriptor.raw, kind_name(value))

        kind = kind_of(value)
        category = descriptor.category

        if category is DescriptorCategory.ARRAY:
            if kind is not ValueKind.ARRAY:
                return _Mismatch(path, descriptor.raw, kind_name(value))
            assert descriptor.element is not None
            for index, item in enumerate(value):
                mismatch = self._find_mismatch(item, descriptor.element, (*path, index))
                if mismatch is not None:
                    return mismatch
            return None

        if category is DescriptorCategory.UNTYPED_ARRAY:
            matched = kind is ValueKind.ARRAY
        elif category is DescriptorCategory.MAP:
            matched = kind is ValueKind.DICTIONARY
        elif category is DescriptorCategory.REFERENCE:
            if self.registry is not None and not self.registry.is_schema(descriptor.name):
                return _Mismatch(
                    path,
                    descriptor.raw,
                    kind_name(value),
                    reason=f"unknown schema '{descriptor.name}'",
                )
            matched = isinstance(value, SchemaBound) and value.schema_name == descriptor.name
        else:
            matched = _primitive_matches(kind_name(value), descriptor.name)

        if matched:
            return None
        return _Mismatch(path, descriptor.raw, kind_name(value))

    def _issue(
        self,
        kind: IssueKind,
        data: Mapping[str, Any],
        schema: Schema,
        field: str,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
        path: tuple[str | int, ...] | None = None,
    ) -> ValidationIssueModel:
        return ValidationIssueModel(
            kind=kind,
            field=field,
            expected=expected,
            actual=actual,
            path=path if path is not None else (field,),
            message=message,
            context=self._excerpt(data, schema, field),
        )

    def _excerpt(self, data: Mapping[str, Any], schema: Schema, field: str) -> dict[str, str]:
        """Preview of the fields around ``field``, in schema order."""
        if self.excerpt_size <= 0:
            return {}
        ordered = list(schema) + [key for key in data if key not in schema]
        index = ordered.index(field)
        window = ordered[max(0, index - self.excerpt_size) : index + self.excerpt_size + 1]
        return {key: _preview(data[key]) for key in window if key in data}

    def _report(self, issue: ValidationIssueModel, mode: ValidationMode, label: str | None) -> None:
        severity = Severity.ERROR if mode is ValidationMode.STRICT else Severity.WARNING
        emit_safely(self.sink, DiagnosticEvent.from_issue(issue, severity, label))


def _as_descriptor(descriptor: str | TypeDescriptor) -> TypeDescriptor:
    if isinstance(descriptor, TypeDescriptor):
        return descriptor
    return parse_descriptor(descriptor)


def _as_mode(mode: ValidationMode | bool) -> ValidationMode:
    if isinstance(mode, ValidationMode):
        return mode
    return ValidationMode.STRICT if mode else ValidationMode.LOOSE


def _primitive_matches(actual: str, expected: str) -> bool:
    if actual == expected:
        return True
    # Whole numbers are accepted where a float is expected.
    if actual == "int" and expected.casefold() == "float":
        return True
    return actual.casefold() == expected.casefold()


def _preview(value: Any) -> str:
    text = repr(value)
    if len(text) > _PREVIEW_LENGTH:
        text = text[: _PREVIEW_LENGTH - 3] + "..."
    return text
