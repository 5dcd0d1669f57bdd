"""
Unit tests for settings and API configuration loading.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import pytest

from servicemap.api import api_config as api_config_module
from servicemap.common import settings as settings_module


def test_load_settings_success() -> None:
    settings_module.get_settings.cache_clear()
    settings = settings_module.get_settings()
    assert settings.PROJECT_NAME
    assert settings.DATABASE_URL


def test_load_settings_missing_required(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_module.get_settings.cache_clear()
    monkeypatch.delenv("PROJECT_NAME", raising=False)
    with pytest.raises(RuntimeError, match="Missing required environment variables"):
        settings_module.load_settings(load_env=False)


def test_api_config_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCH_MAX_RADIUS_KM", "25")
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "50")
    monkeypatch.setenv("API_ALLOWED_ORIGINS", "http://a.test, http://b.test")
    config = api_config_module.load_api_config(load_env=False)
    assert config.max_search_radius_km == 25.0
    assert config.max_page_size == 50
    assert config.allowed_origins == ["http://a.test", "http://b.test"]
    assert config.api_version_label() == "v1"


def test_api_config_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "")
    with pytest.raises(RuntimeError, match="DATABASE_URL is required"):
        api_config_module.load_api_config(load_env=False)


def test_production_requires_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "production")
    monkeypatch.delenv("AUTH_SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError, match="AUTH_SECRET_KEY"):
        api_config_module.load_api_config(load_env=False)


def test_default_radius_cannot_exceed_maximum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCH_DEFAULT_RADIUS_KM", "60")
    with pytest.raises(ValueError):
        api_config_module.load_api_config(load_env=False)


def test_version_path_shape_is_enforced(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_VERSION_PATH", "api")
    with pytest.raises(ValueError):
        api_config_module.load_api_config(load_env=False)
