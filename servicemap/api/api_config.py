# This file defines runtime settings for the API layer in one place.
# Versioning, search bounds, pagination limits and token signing are all configured through environment variables.
# The loader applies local-development defaults and rejects malformed values at startup.

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_DEV_SECRET_KEY = "servicemap-dev-secret-change-me"


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Service Map API"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "local"
    database_url: str
    default_search_radius_km: float = 10.0
    max_search_radius_km: float = 50.0
    default_page_size: int = 20
    max_page_size: int = 100
    default_popular_limit: int = 10
    default_division_search_limit: int = 20
    allowed_origins: list[str] = Field(default_factory=list)
    auth_secret_key: str = _DEV_SECRET_KEY
    auth_token_max_age_seconds: int = 86400
    app_version: str = "0.1.0"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator(
        "default_page_size",
        "max_page_size",
        "default_popular_limit",
        "default_division_search_limit",
        "auth_token_max_age_seconds",
    )
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @field_validator("default_search_radius_km", "max_search_radius_km")
    @classmethod
    def validate_positive_radius(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Search radius must be greater than 0.")
        return value

    @model_validator(mode="after")
    def validate_bounds(self) -> ApiConfig:
        if self.default_search_radius_km > self.max_search_radius_km:
            raise ValueError("default_search_radius_km must be <= max_search_radius_km.")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must be <= max_page_size.")
        if self.default_popular_limit > self.max_page_size:
            raise ValueError("default_popular_limit must be <= max_page_size.")
        return self

    def api_version_label(self) -> str:
        return self.api_version_path.rstrip("/").split("/")[-1]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Service Map API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "schema_version": os.getenv("API_SCHEMA_VERSION", "1.0.0"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": _env_int("API_PORT", 8000),
        "environment": os.getenv("ENV", "local"),
        "database_url": os.getenv("DATABASE_URL", ""),
        "default_search_radius_km": _env_float("SEARCH_DEFAULT_RADIUS_KM", 10.0),
        "max_search_radius_km": _env_float("SEARCH_MAX_RADIUS_KM", 50.0),
        "default_page_size": _env_int("API_DEFAULT_PAGE_SIZE", 20),
        "max_page_size": _env_int("API_MAX_PAGE_SIZE", 100),
        "default_popular_limit": _env_int("API_DEFAULT_POPULAR_LIMIT", 10),
        "default_division_search_limit": _env_int("API_DEFAULT_DIVISION_SEARCH_LIMIT", 20),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "auth_secret_key": os.getenv("AUTH_SECRET_KEY", _DEV_SECRET_KEY),
        "auth_token_max_age_seconds": _env_int("AUTH_TOKEN_MAX_AGE_SECONDS", 86400),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")
    if config_values["environment"] == "production" and config_values["auth_secret_key"] == _DEV_SECRET_KEY:
        raise RuntimeError("AUTH_SECRET_KEY must be set in production.")

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
