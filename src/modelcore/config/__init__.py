"""Configuration module using Pydantic Settings.

Provides typed configuration for the model engine with environment variable support.

Usage:
    from modelcore.config import ModelSettings, get_settings

    settings = get_settings()
    custom = ModelSettings(type_key="kind")
"""

from modelcore.config.settings import ModelSettings, get_settings

__all__ = [
    "ModelSettings",
    "get_settings",
]
