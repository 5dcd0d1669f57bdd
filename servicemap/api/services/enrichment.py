# This file decorates raw service rows for presentation.
# Every read operation (search, by id, by type, popular, address search, favorites) goes through one enricher.
# Division names for all rows are resolved in one batched query; favorite flags in one more.

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

from servicemap.api.db_access import DatabaseClient
from servicemap.api.services.division_store import DivisionStore
from servicemap.common.tables import as_datetime
from servicemap.geo.address_catalog import AddressCatalog
from servicemap.geo.components import (
    AddressComponent,
    division_ids,
    dump_address_components,
    parse_address_components,
)
from servicemap.geo.distance import GeoPoint, distance_meters
from servicemap.geo.divisions import DivisionIndex
from servicemap.geo.formatter import AddressFormatter

SERVICE_COLUMNS = """
    s.id,
    s.name,
    s.service_type_id,
    s.street_address,
    s.address_components,
    s.country_code,
    s.latitude,
    s.longitude,
    s.phone,
    s.website,
    s.rating,
    s.is_active,
    s.created_at,
    s.updated_at,
    st.name AS service_type_name,
    st.icon AS service_type_icon
"""

SERVICE_FROM = """
FROM services s
JOIN service_types st ON st.id = s.service_type_id
"""


def normalize_service_row(row: dict[str, Any]) -> dict[str, Any]:
    """Coerce driver-specific column values into plain Python types.

    Text queries skip the column types, so JSON comes back as a string and
    booleans as integers on some backends.
    """

    raw_components = row.get("address_components")
    if isinstance(raw_components, (str, bytes)):
        raw_components = json.loads(raw_components) if raw_components else None

    normalized = dict(row)
    normalized["address_components"] = parse_address_components(raw_components)
    normalized["latitude"] = float(row["latitude"])
    normalized["longitude"] = float(row["longitude"])
    normalized["rating"] = float(row["rating"]) if row.get("rating") is not None else None
    normalized["is_active"] = bool(row.get("is_active"))
    normalized["created_at"] = as_datetime(row.get("created_at"))
    normalized["updated_at"] = as_datetime(row.get("updated_at"))
    return normalized


def service_location(row: dict[str, Any]) -> GeoPoint:
    return GeoPoint(latitude=float(row["latitude"]), longitude=float(row["longitude"]))


class ServiceEnricher:
    """Adds type, country, address, distance and favorite fields to service rows."""

    def __init__(self, *, db: DatabaseClient, catalog: AddressCatalog, divisions: DivisionStore) -> None:
        self.db = db
        self.catalog = catalog
        self.divisions = divisions

    def enrich(
        self,
        rows: Sequence[dict[str, Any]],
        *,
        origin: GeoPoint | None = None,
        user_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Enrich raw rows selected with `SERVICE_COLUMNS`, keeping their order."""

        if not rows:
            return []

        normalized = [normalize_service_row(row) for row in rows]
        index = self._resolve_divisions(row["address_components"] for row in normalized)
        formatter = AddressFormatter(
            catalog=self.catalog,
            lookup=lambda ids: [index.get(i) for i in ids if i in index],
        )
        favorites = self.favorite_ids(user_id, [row["id"] for row in normalized]) if user_id else set()

        enriched: list[dict[str, Any]] = []
        for row in normalized:
            components = row["address_components"]
            formatted = formatter.format(row["street_address"], components, row["country_code"])
            item = {
                "id": row["id"],
                "name": row["name"],
                "service_type_id": row["service_type_id"],
                "street_address": row["street_address"],
                "address_components": dump_address_components(components),
                "country_code": row["country_code"],
                "latitude": row["latitude"],
                "longitude": row["longitude"],
                "phone": row.get("phone"),
                "website": row.get("website"),
                "rating": row["rating"],
                "is_active": row["is_active"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
                "service_type_name": row.get("service_type_name"),
                "service_type_icon": row.get("service_type_icon"),
                "country_name": self.catalog.country_name(row["country_code"]),
                "formatted_address": formatted.formatted_address,
                "address_display": formatted.address_display,
            }
            if origin is not None:
                item["distance"] = distance_meters(origin, service_location(row))
            if user_id:
                item["is_favorite"] = row["id"] in favorites
            enriched.append(item)
        return enriched

    def favorite_ids(self, user_id: int, service_ids: Iterable[int]) -> set[int]:
        ids = sorted(set(service_ids))
        if not ids:
            return set()
        query = """
        SELECT f.service_id
        FROM user_favorites f
        WHERE f.user_id = :user_id
          AND f.service_id IN :service_ids
        """
        rows = self.db.fetch_all(query, {"user_id": user_id, "service_ids": ids})
        return {int(row["service_id"]) for row in rows}

    def _resolve_divisions(self, component_maps: Iterable[dict[str, AddressComponent]]) -> DivisionIndex:
        ids: dict[int, None] = {}
        for components in component_maps:
            for division_id in division_ids(components):
                ids.setdefault(division_id, None)
        return DivisionIndex.build(self.divisions.find_by_ids(ids))

    def favorite_count(self, service_id: int) -> int:
        query = "SELECT COUNT(*) AS total_count FROM user_favorites WHERE service_id = :service_id"
        return int(self.db.fetch_scalar(query, {"service_id": service_id}) or 0)
