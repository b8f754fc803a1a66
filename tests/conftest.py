"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from modelcore import ModelRegistry, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings around every test so environment overrides never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry():
    """Fresh ModelRegistry instance."""
    return ModelRegistry()
