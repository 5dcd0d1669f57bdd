# This file implements lookups and inserts for administrative divisions.
# Listing keeps the three-way parent filter: any parent, roots only, or the children of one division.
# Inserts enforce the per-country forest: a parent must exist in the same country one level up.

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import insert

from servicemap.api.db_access import DatabaseClient
from servicemap.api.error_handlers import InputValidationError
from servicemap.common.tables import administrative_divisions
from servicemap.geo.divisions import ROOT_LEVEL, AdministrativeDivision, DivisionIndex
from servicemap.geo.distance import GeoPoint

LOGGER = logging.getLogger("servicemap.divisions")

_DIVISION_COLUMNS = """
    d.id,
    d.name,
    d.type,
    d.level,
    d.parent_id,
    d.country_code,
    d.latitude,
    d.longitude,
    d.created_at
"""


class ParentFilter(enum.Enum):
    ANY = "any"


ANY_PARENT = ParentFilter.ANY


def escape_like(term: str) -> str:
    """Escape LIKE wildcards using `!` as the escape character."""

    return term.replace("!", "!!").replace("%", "!%").replace("_", "!_")


class DivisionStore:
    """Administrative division queries scoped by country."""

    def __init__(self, *, db: DatabaseClient) -> None:
        self.db = db

    def list_divisions(
        self,
        country_code: str,
        parent_id: int | None | ParentFilter = ANY_PARENT,
    ) -> list[AdministrativeDivision]:
        where_clauses = ["d.country_code = :country_code"]
        params: dict[str, Any] = {"country_code": country_code}

        if parent_id is None:
            where_clauses.append("d.parent_id IS NULL")
        elif not isinstance(parent_id, ParentFilter):
            where_clauses.append("d.parent_id = :parent_id")
            params["parent_id"] = parent_id

        query = f"""
        SELECT {_DIVISION_COLUMNS}
        FROM administrative_divisions d
        WHERE {" AND ".join(where_clauses)}
        ORDER BY d.name ASC, d.id ASC
        """
        return [AdministrativeDivision.from_row(row) for row in self.db.fetch_all(query, params)]

    def list_divisions_by_level(self, country_code: str, level: int) -> list[AdministrativeDivision]:
        query = f"""
        SELECT {_DIVISION_COLUMNS}
        FROM administrative_divisions d
        WHERE d.country_code = :country_code
          AND d.level = :level
        ORDER BY d.name ASC, d.id ASC
        """
        rows = self.db.fetch_all(query, {"country_code": country_code, "level": level})
        return [AdministrativeDivision.from_row(row) for row in rows]

    def find_by_ids(self, ids: Iterable[int]) -> list[AdministrativeDivision]:
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return []
        query = f"""
        SELECT {_DIVISION_COLUMNS}
        FROM administrative_divisions d
        WHERE d.id IN :ids
        """
        return [AdministrativeDivision.from_row(row) for row in self.db.fetch_all(query, {"ids": unique_ids})]

    def get(self, division_id: int) -> AdministrativeDivision | None:
        found = self.find_by_ids([division_id])
        return found[0] if found else None

    def search(
        self,
        country_code: str,
        term: str,
        *,
        division_type: str | None = None,
        limit: int = 20,
    ) -> list[AdministrativeDivision]:
        where_clauses = [
            "d.country_code = :country_code",
            "LOWER(d.name) LIKE LOWER(:pattern) ESCAPE '!'",
        ]
        params: dict[str, Any] = {
            "country_code": country_code,
            "pattern": f"%{escape_like(term)}%",
            "limit": limit,
        }
        if division_type:
            where_clauses.append("d.type = :division_type")
            params["division_type"] = division_type

        query = f"""
        SELECT {_DIVISION_COLUMNS}
        FROM administrative_divisions d
        WHERE {" AND ".join(where_clauses)}
        ORDER BY d.name ASC, d.id ASC
        LIMIT :limit
        """
        return [AdministrativeDivision.from_row(row) for row in self.db.fetch_all(query, params)]

    def country_index(self, country_code: str) -> DivisionIndex:
        """Every division of a country as an id-keyed index."""

        return DivisionIndex.build(self.list_divisions(country_code))

    def create_division(
        self,
        *,
        name: str,
        division_type: str,
        country_code: str,
        parent_id: int | None = None,
        level: int | None = None,
        location: GeoPoint | None = None,
    ) -> AdministrativeDivision:
        if parent_id is None:
            expected_level = ROOT_LEVEL
        else:
            parent = self.get(parent_id)
            if parent is None:
                raise InputValidationError(f"Parent division {parent_id} does not exist")
            if parent.country_code != country_code:
                raise InputValidationError(
                    f"Parent division {parent_id} belongs to {parent.country_code}, not {country_code}"
                )
            expected_level = parent.level + 1

        if level is not None and level != expected_level:
            raise InputValidationError(f"Division level must be {expected_level}, got {level}")

        statement = insert(administrative_divisions).values(
            name=name,
            type=division_type,
            level=expected_level,
            parent_id=parent_id,
            country_code=country_code,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
        )
        division_id = self.db.insert(statement)
        LOGGER.debug("Created division id=%s name=%s country=%s", division_id, name, country_code)
        return AdministrativeDivision(
            id=division_id,
            name=name,
            type=division_type,
            level=expected_level,
            country_code=country_code,
            parent_id=parent_id,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
        )
