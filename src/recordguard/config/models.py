"""Pydantic models for recordguard configuration."""

from pathlib import Path

from pydantic import Field

from recordguard.models import RecordguardBaseModel
from recordguard.validator import ValidationMode


class RecordguardSettingsModel(RecordguardBaseModel):
    """Runtime settings for validators and tooling.

    Attributes:
        validation_enabled: Set to False in production builds to turn every
            validation into a no-op that succeeds.
        default_mode: Mode used by tooling when none is given explicitly.
        context_excerpt_size: Neighbouring fields shown on each side of a
            failing field in issue excerpts.
        schema_files: Schema-definition files loaded by the CLI.

    Example:
        >>> settings = RecordguardSettingsModel(default_mode="strict")
        >>> settings.default_mode
        <ValidationMode.STRICT: 'strict'>
    """

    validation_enabled: bool = True
    default_mode: ValidationMode = ValidationMode.LOOSE
    context_excerpt_size: int = Field(default=2, ge=0)
    schema_files: list[Path] = Field(default_factory=list)
