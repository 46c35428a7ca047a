from collections.abc import Sequence
from pathlib import Path

from recordguard.config import RecordguardSettingsModel
from recordguard.loaders import load_registry
from recordguard.validator import SchemaRegistry


def resolve_registry(
    schema_files: Sequence[Path], settings: RecordguardSettingsModel
) -> SchemaRegistry:
    """Load the registry from command-line files, falling back to settings."""
    files = list(schema_files) or list(settings.schema_files)
    if not files:
        raise ValueError(
            "No schema files given. Use --schemas or set schema_files in recordguard.yml"
        )
    return load_registry(files)
