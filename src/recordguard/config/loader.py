"""Configuration loader for recordguard settings.

Settings live in a YAML file::

    recordguard:
      validation_enabled: true
      default_mode: strict
      context_excerpt_size: 2
      schema_files:
        - schemas/game.yml

Environment variables override the file:

- ``RECORDGUARD_CONFIG``: path of the settings file
- ``RECORDGUARD_PRODUCTION``: when truthy, disables validation
- ``RECORDGUARD_MODE``: ``strict`` or ``loose``
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import RecordguardSettingsModel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "recordguard.yml"


def get_env_flag(env_var: str, default: bool = False) -> bool:
    """Get a boolean flag from an environment variable.

    Returns:
        True if the variable is set to "1", "true" or "yes" (case insensitive),
        ``default`` if it is unset
    """
    value = os.environ.get(env_var, "").lower()
    return value in ("1", "true", "yes") if value else default


def load_settings(config_path: Path | None = None) -> RecordguardSettingsModel:
    """Load settings from a YAML file and the environment.

    Args:
        config_path: Optional path to the settings file. If not provided, looks for:
                    1. RECORDGUARD_CONFIG environment variable
                    2. ./recordguard.yml

    Returns:
        RecordguardSettingsModel with environment overrides applied

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If the config is invalid
    """
    if config_path is None:
        env_path = os.environ.get("RECORDGUARD_CONFIG")
        if env_path:
            config_path = Path(env_path)
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_NAME
            if candidate.exists():
                config_path = candidate

    raw_settings: dict[str, Any] = {}
    if config_path is None:
        logger.info("No recordguard config file found, using default settings")
    else:
        if not config_path.exists():
            raise FileNotFoundError(f"Recordguard config file not found at {config_path}")
        logger.debug(f"Loading recordguard config from: {config_path}")
        raw_settings = _read_settings_section(config_path)

    raw_settings = _apply_env_overrides(raw_settings)

    try:
        settings = RecordguardSettingsModel.model_validate(raw_settings)
    except ValidationError as e:
        raise ValueError(f"Invalid recordguard config: {e}") from e

    if config_path is not None:
        settings = _resolve_schema_paths(settings, config_path.parent)

    logger.debug(f"Loaded recordguard settings: {settings}")
    return settings


def _read_settings_section(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if not raw_config:
        logger.info("Empty recordguard config file, using default settings")
        return {}
    if not isinstance(raw_config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    section = raw_config.get("recordguard", {})
    if not isinstance(section, dict):
        raise ValueError(f"'recordguard' section in {config_path} must be a mapping")
    return dict(section)


def _apply_env_overrides(raw_settings: dict[str, Any]) -> dict[str, Any]:
    result = dict(raw_settings)
    if get_env_flag("RECORDGUARD_PRODUCTION"):
        result["validation_enabled"] = False
    mode = os.environ.get("RECORDGUARD_MODE")
    if mode:
        result["default_mode"] = mode.lower()
    return result


def _resolve_schema_paths(
    settings: RecordguardSettingsModel, base_dir: Path
) -> RecordguardSettingsModel:
    """Make relative schema file paths relative to the config file.

    Since Pydantic models are frozen, a copy is returned.
    """
    resolved = [path if path.is_absolute() else base_dir / path for path in settings.schema_files]
    return settings.model_copy(update={"schema_files": resolved})
