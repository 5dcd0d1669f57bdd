# This file implements the service directory reads: radius search and the related catalog lookups.
# The database narrows radius candidates with a bounding box; the exact haversine filter, nearest-first
# ordering, counting and pagination then run in-process on one distance value per service.
# All results go through the shared enricher so every endpoint returns the same service shape.

from __future__ import annotations

import logging
from typing import Any

from servicemap.api.api_config import ApiConfig
from servicemap.api.db_access import DatabaseClient
from servicemap.api.error_handlers import NotFoundError
from servicemap.api.pagination import PaginationSpec, page_window
from servicemap.api.services.division_store import escape_like
from servicemap.api.services.enrichment import SERVICE_COLUMNS, SERVICE_FROM, ServiceEnricher, service_location
from servicemap.api.validation import SearchQuery
from servicemap.geo.distance import bounding_box, distance_meters

LOGGER = logging.getLogger("servicemap.search")


class SearchService:
    """Data retrieval for service search endpoints."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient, enricher: ServiceEnricher) -> None:
        self.config = config
        self.db = db
        self.enricher = enricher

    def search(self, query: SearchQuery, user_id: int | None = None) -> dict[str, Any]:
        radius_meters = query.radius_km * 1000.0
        box = bounding_box(query.origin, radius_meters)

        where_clauses = [
            "s.is_active = :is_active",
            "s.latitude BETWEEN :min_latitude AND :max_latitude",
        ]
        params: dict[str, Any] = {
            "is_active": True,
            "min_latitude": box.min_latitude,
            "max_latitude": box.max_latitude,
        }
        if box.constrains_longitude:
            where_clauses.append("s.longitude BETWEEN :min_longitude AND :max_longitude")
            params["min_longitude"] = box.min_longitude
            params["max_longitude"] = box.max_longitude
        if query.service_type_id is not None:
            where_clauses.append("s.service_type_id = :service_type_id")
            params["service_type_id"] = query.service_type_id
        if query.name_contains:
            where_clauses.append("LOWER(s.name) LIKE LOWER(:name_pattern) ESCAPE '!'")
            params["name_pattern"] = f"%{escape_like(query.name_contains)}%"

        candidates_query = f"""
        SELECT {SERVICE_COLUMNS}
        {SERVICE_FROM}
        WHERE {" AND ".join(where_clauses)}
        """
        candidates = self.db.fetch_all(candidates_query, params)

        within: list[tuple[float, int, dict[str, Any]]] = []
        for row in candidates:
            distance = distance_meters(query.origin, service_location(row))
            if distance <= radius_meters:
                within.append((distance, int(row["id"]), row))
        within.sort(key=lambda item: (item[0], item[1]))

        pagination = PaginationSpec(page=query.page, limit=query.limit)
        page_rows = [row for _, _, row in within[pagination.offset : pagination.offset + pagination.limit]]
        window = page_window(total=len(within), page=query.page, limit=query.limit)

        LOGGER.debug(
            "Search origin=(%s, %s) radius_km=%s candidates=%s matched=%s page=%s",
            query.origin.latitude,
            query.origin.longitude,
            query.radius_km,
            len(candidates),
            len(within),
            query.page,
        )

        result: dict[str, Any] = {
            "services": self.enricher.enrich(page_rows, origin=query.origin, user_id=user_id),
        }
        result.update(window.as_dict())
        return result

    def get_by_id(self, service_id: int, user_id: int | None = None) -> dict[str, Any]:
        query = f"""
        SELECT {SERVICE_COLUMNS}
        {SERVICE_FROM}
        WHERE s.id = :service_id
        """
        row = self.db.fetch_one(query, {"service_id": service_id})
        if row is None:
            raise NotFoundError("Service not found", details={"service_id": service_id})

        service = self.enricher.enrich([row], user_id=user_id)[0]
        service["favorite_count"] = self.enricher.favorite_count(service_id)
        return service

    def get_by_type(
        self,
        service_type_id: int,
        *,
        limit: int,
        offset: int = 0,
        user_id: int | None = None,
    ) -> list[dict[str, Any]]:
        query = f"""
        SELECT {SERVICE_COLUMNS}
        {SERVICE_FROM}
        WHERE s.is_active = :is_active
          AND s.service_type_id = :service_type_id
        ORDER BY s.name ASC, s.id ASC
        LIMIT :limit OFFSET :offset
        """
        rows = self.db.fetch_all(
            query,
            {"is_active": True, "service_type_id": service_type_id, "limit": limit, "offset": offset},
        )
        return self.enricher.enrich(rows, user_id=user_id)

    def get_popular(self, *, limit: int, user_id: int | None = None) -> list[dict[str, Any]]:
        query = f"""
        SELECT {SERVICE_COLUMNS}
        {SERVICE_FROM}
        WHERE s.is_active = :is_active
        ORDER BY s.rating DESC, s.created_at DESC, s.id DESC
        LIMIT :limit
        """
        rows = self.db.fetch_all(query, {"is_active": True, "limit": limit})
        return self.enricher.enrich(rows, user_id=user_id)

    def search_by_address(self, term: str, *, limit: int, user_id: int | None = None) -> list[dict[str, Any]]:
        query = f"""
        SELECT {SERVICE_COLUMNS}
        {SERVICE_FROM}
        WHERE s.is_active = :is_active
          AND LOWER(s.street_address) LIKE LOWER(:pattern) ESCAPE '!'
        ORDER BY s.id ASC
        LIMIT :limit
        """
        rows = self.db.fetch_all(
            query,
            {"is_active": True, "pattern": f"%{escape_like(term)}%", "limit": limit},
        )
        return self.enricher.enrich(rows, user_id=user_id)

    def list_service_types(self) -> list[dict[str, Any]]:
        query = """
        SELECT t.id, t.name, t.description, t.icon
        FROM service_types t
        ORDER BY t.name ASC
        """
        return self.db.fetch_all(query)
