# This file provides dependency factories for FastAPI routes and middleware.
# Services are created once per process and shared through dependency injection, so tests can override them.
# Bearer token resolution lives here too: a required variant for favorites and an optional one for reads.

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from servicemap.api.api_config import ApiConfig, get_api_config
from servicemap.api.db_access import DatabaseClient
from servicemap.api.services.address_service import AddressService
from servicemap.api.services.auth_service import AuthService
from servicemap.api.services.division_store import DivisionStore
from servicemap.api.services.enrichment import ServiceEnricher
from servicemap.api.services.favorite_service import FavoriteService
from servicemap.api.services.search_service import SearchService
from servicemap.geo.address_catalog import AddressCatalog, get_address_catalog

_BEARER_PREFIX = "bearer "


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


def get_catalog() -> AddressCatalog:
    return get_address_catalog()


@lru_cache(maxsize=1)
def get_division_store() -> DivisionStore:
    return DivisionStore(db=get_database_client())


@lru_cache(maxsize=1)
def get_service_enricher() -> ServiceEnricher:
    return ServiceEnricher(db=get_database_client(), catalog=get_catalog(), divisions=get_division_store())


@lru_cache(maxsize=1)
def get_search_service() -> SearchService:
    config = get_api_config()
    db_client = get_database_client()
    return SearchService(config=config, db=db_client, enricher=get_service_enricher())


@lru_cache(maxsize=1)
def get_address_service() -> AddressService:
    config = get_api_config()
    return AddressService(config=config, catalog=get_catalog(), divisions=get_division_store())


@lru_cache(maxsize=1)
def get_favorite_service() -> FavoriteService:
    config = get_api_config()
    db_client = get_database_client()
    return FavoriteService(config=config, db=db_client, enricher=get_service_enricher())


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    config = get_api_config()
    db_client = get_database_client()
    return AuthService(config=config, db=db_client)


def get_config() -> ApiConfig:
    return get_api_config()


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if authorization[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_user_id(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> int:
    return auth.verify_token(_bearer_token(authorization))


def get_optional_user_id(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> int | None:
    """User id when a valid token is sent; anonymous otherwise."""

    token = _bearer_token(authorization)
    if token is None:
        return None
    return auth.verify_token(token)


def clear_dependency_caches() -> None:
    for factory in (
        get_database_client,
        get_division_store,
        get_service_enricher,
        get_search_service,
        get_address_service,
        get_favorite_service,
        get_auth_service,
    ):
        factory.cache_clear()
