# This file implements a user's favorites list.
# The (user_id, service_id) unique constraint is the final guard against duplicates. A constraint failure on
# add or toggle is reported as "already in favorites" only when the row is there afterwards; anything else
# propagates. Toggle runs its delete-or-insert inside one transaction.

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError

from servicemap.api.api_config import ApiConfig
from servicemap.api.db_access import DatabaseClient
from servicemap.api.error_handlers import ConflictError, NotFoundError
from servicemap.api.pagination import PaginationSpec, page_window
from servicemap.api.services.enrichment import SERVICE_COLUMNS, SERVICE_FROM, ServiceEnricher
from servicemap.common.tables import as_datetime, user_favorites

LOGGER = logging.getLogger("servicemap.favorites")


class FavoriteService:
    """Add, remove, toggle and list favorite services for one user."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient, enricher: ServiceEnricher) -> None:
        self.config = config
        self.db = db
        self.enricher = enricher

    def add_favorite(self, user_id: int, service_id: int) -> dict[str, Any]:
        self._require_service(service_id)
        if self._find_favorite(user_id, service_id) is not None:
            raise ConflictError("Service is already in favorites")

        try:
            favorite_id = self.db.insert(insert(user_favorites).values(user_id=user_id, service_id=service_id))
        except IntegrityError as exc:
            self._raise_if_duplicate(user_id, service_id, exc)
            raise

        favorite = self._find_favorite(user_id, service_id) or {}
        return {
            "id": favorite_id,
            "user_id": user_id,
            "service_id": service_id,
            "created_at": as_datetime(favorite.get("created_at")),
        }

    def remove_favorite(self, user_id: int, service_id: int) -> None:
        statement = delete(user_favorites).where(
            user_favorites.c.user_id == user_id,
            user_favorites.c.service_id == service_id,
        )
        if self.db.execute(statement) == 0:
            raise NotFoundError("Service is not in favorites")

    def toggle_favorite(self, user_id: int, service_id: int) -> dict[str, Any]:
        self._require_service(service_id)
        try:
            with self.db.transaction() as connection:
                removed = connection.execute(
                    delete(user_favorites).where(
                        user_favorites.c.user_id == user_id,
                        user_favorites.c.service_id == service_id,
                    )
                ).rowcount
                if not removed:
                    connection.execute(insert(user_favorites).values(user_id=user_id, service_id=service_id))
        except IntegrityError as exc:
            self._raise_if_duplicate(user_id, service_id, exc)
            raise

        if removed:
            return {"is_favorite": False, "message": "Service removed from favorites"}
        return {"is_favorite": True, "message": "Service added to favorites"}

    def check_status(self, user_id: int, service_id: int) -> dict[str, bool]:
        return {"is_favorite": self._find_favorite(user_id, service_id) is not None}

    def list_favorites(self, user_id: int, *, page: int, limit: int) -> dict[str, Any]:
        total = int(
            self.db.fetch_scalar(
                "SELECT COUNT(*) AS total_count FROM user_favorites WHERE user_id = :user_id",
                {"user_id": user_id},
            )
            or 0
        )
        pagination = PaginationSpec(page=page, limit=limit)
        query = f"""
        SELECT {SERVICE_COLUMNS},
            f.created_at AS favorited_at
        FROM user_favorites f
        JOIN services s ON s.id = f.service_id
        JOIN service_types st ON st.id = s.service_type_id
        WHERE f.user_id = :user_id
        ORDER BY f.created_at DESC, f.id DESC
        LIMIT :limit OFFSET :offset
        """
        rows = self.db.fetch_all(
            query,
            {"user_id": user_id, "limit": pagination.limit, "offset": pagination.offset},
        )

        favorites = []
        for row, service in zip(rows, self.enricher.enrich(rows), strict=True):
            service["favorited_at"] = as_datetime(row.get("favorited_at"))
            favorites.append(service)

        result: dict[str, Any] = {"favorites": favorites}
        result.update(page_window(total=total, page=page, limit=limit).as_dict())
        return result

    def clear_favorites(self, user_id: int) -> int:
        removed = self.db.execute(delete(user_favorites).where(user_favorites.c.user_id == user_id))
        LOGGER.info("Cleared favorites user_id=%s removed=%s", user_id, removed)
        return removed

    def favorite_count(self, service_id: int) -> int:
        return self.enricher.favorite_count(service_id)

    def _require_service(self, service_id: int) -> None:
        if self.db.fetch_one("SELECT s.id FROM services s WHERE s.id = :service_id", {"service_id": service_id}) is None:
            raise NotFoundError("Service not found", details={"service_id": service_id})

    def _raise_if_duplicate(self, user_id: int, service_id: int, exc: IntegrityError) -> None:
        """Turn a lost insert race into a conflict; any other constraint failure is left to propagate."""

        if self._find_favorite(user_id, service_id) is None:
            return
        LOGGER.info("Concurrent favorite insert lost user_id=%s service_id=%s", user_id, service_id)
        raise ConflictError("Service is already in favorites") from exc

    def _find_favorite(self, user_id: int, service_id: int) -> dict[str, Any] | None:
        query = """
        SELECT f.id, f.user_id, f.service_id, f.created_at
        FROM user_favorites f
        WHERE f.user_id = :user_id
          AND f.service_id = :service_id
        """
        return self.db.fetch_one(query, {"user_id": user_id, "service_id": service_id})
