# This file provides shared helpers for API endpoint tests.
# Tests override service dependencies with fakes, or with real services bound to an in-memory database.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from servicemap.api.api_config import ApiConfig
from servicemap.api.app import app
from servicemap.api.db_access import DatabaseClient
from servicemap.api.dependencies import (
    get_address_service,
    get_auth_service,
    get_config,
    get_database_client,
    get_favorite_service,
    get_search_service,
)
from servicemap.api.services.address_service import AddressService
from servicemap.api.services.auth_service import AuthService
from servicemap.api.services.division_store import DivisionStore
from servicemap.api.services.enrichment import ServiceEnricher
from servicemap.api.services.favorite_service import FavoriteService
from servicemap.api.services.search_service import SearchService
from servicemap.common.tables import CORE_TABLE_NAMES
from servicemap.geo.address_catalog import get_address_catalog


def build_test_config(**overrides: Any) -> ApiConfig:
    """Create deterministic API config for tests."""

    values: dict[str, Any] = {
        "api_name": "Test Service Map API",
        "api_version_path": "/api/v1",
        "schema_version": "1.0.0",
        "host": "0.0.0.0",
        "port": 8000,
        "environment": "test",
        "database_url": "sqlite+pysqlite:///:memory:",
        "default_search_radius_km": 10.0,
        "max_search_radius_km": 50.0,
        "default_page_size": 20,
        "max_page_size": 100,
        "default_popular_limit": 10,
        "allowed_origins": [],
        "auth_secret_key": "test-secret",
        "auth_token_max_age_seconds": 3600,
        "app_version": "0.1.0",
    }
    values.update(overrides)
    return ApiConfig(**values)


class FakeDBClient:
    """Simple fake DB dependency for health/readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = set(CORE_TABLE_NAMES) if existing_tables is None else existing_tables

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables


def build_services(db: DatabaseClient, config: ApiConfig) -> dict[str, Any]:
    """Real services wired to `db`, keyed by `api_test_client` argument name."""

    catalog = get_address_catalog()
    divisions = DivisionStore(db=db)
    enricher = ServiceEnricher(db=db, catalog=catalog, divisions=divisions)
    return {
        "db_client": db,
        "search_service": SearchService(config=config, db=db, enricher=enricher),
        "address_service": AddressService(config=config, catalog=catalog, divisions=divisions),
        "favorite_service": FavoriteService(config=config, db=db, enricher=enricher),
        "auth_service": AuthService(config=config, db=db),
    }


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    search_service: Any | None = None,
    address_service: Any | None = None,
    favorite_service: Any | None = None,
    auth_service: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()

    app.dependency_overrides[get_config] = lambda: resolved_config
    if db_client is not None:
        app.dependency_overrides[get_database_client] = lambda: db_client
    if search_service is not None:
        app.dependency_overrides[get_search_service] = lambda: search_service
    if address_service is not None:
        app.dependency_overrides[get_address_service] = lambda: address_service
    if favorite_service is not None:
        app.dependency_overrides[get_favorite_service] = lambda: favorite_service
    # Token checks always need an auth service; default to one signed with the test secret.
    app.dependency_overrides[get_auth_service] = lambda: auth_service or AuthService(
        config=resolved_config, db=db_client
    )

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
