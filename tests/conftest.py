"""Shared test configuration."""

import pytest
from moonmarket.config import reset_settings_cache


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Keep cached settings from leaking between tests."""
    reset_settings_cache()
    yield
    reset_settings_cache()
