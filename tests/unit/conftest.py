import pytest

from region_catalog.utils.settings import refresh_settings_cache


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; reset around each unit test."""
    refresh_settings_cache()
    yield
    refresh_settings_cache()
