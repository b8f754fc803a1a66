"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the model engine.

Usage:
    from modelcore.config import ModelSettings, get_settings

    # Load from environment variables (MODELCORE_*)
    settings = get_settings()

    # Or override with explicit values
    settings = ModelSettings(type_key="__typename")
"""

from __future__ import annotations

from functools import cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for serialization and construction of models.

    Attributes:
        type_key: Reserved wire key holding a payload's type tag.
        max_default_resolution_depth: Maximum number of producer calls made while
            resolving a field default before giving up.
        strict_scalars: Validate scalar field values in pydantic strict mode
            (no "1" -> 1 coercion).

    Environment Variables:
        MODELCORE_TYPE_KEY
        MODELCORE_MAX_DEFAULT_RESOLUTION_DEPTH
        MODELCORE_STRICT_SCALARS
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    type_key: str = Field(default="_type", min_length=1)
    max_default_resolution_depth: int = Field(default=32, ge=1)
    strict_scalars: bool = False


@cache
def get_settings() -> ModelSettings:
    """Access the process-wide settings.

    Loaded once from the environment; call ``get_settings.cache_clear()`` to reload.

    Returns:
        The cached ModelSettings instance.
    """
    return ModelSettings()
