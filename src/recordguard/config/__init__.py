"""Configuration for recordguard.

This module re-exports the settings model and loader for public API.
"""

from .loader import get_env_flag, load_settings
from .models import RecordguardSettingsModel

__all__ = [
    "RecordguardSettingsModel",
    "load_settings",
    "get_env_flag",
]
