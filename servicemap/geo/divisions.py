"""
Administrative divisions and an in-memory index over them.
Divisions form a forest per country. The index keeps them in a flat id-keyed
arena with a parent-id index; navigation is always a lookup, never an object graph.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from servicemap.common.tables import as_datetime

ROOT_LEVEL = 1


@dataclass(frozen=True)
class AdministrativeDivision:
    id: int
    name: str
    type: str
    level: int
    country_code: str
    parent_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AdministrativeDivision:
        return cls(
            id=int(row["id"]),
            name=row["name"],
            type=row["type"],
            level=int(row["level"]),
            country_code=row["country_code"],
            parent_id=int(row["parent_id"]) if row.get("parent_id") is not None else None,
            latitude=float(row["latitude"]) if row.get("latitude") is not None else None,
            longitude=float(row["longitude"]) if row.get("longitude") is not None else None,
            created_at=as_datetime(row.get("created_at")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "level": self.level,
            "parent_id": self.parent_id,
            "country_code": self.country_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "created_at": self.created_at,
        }


@dataclass
class DivisionIndex:
    """Flat collection of divisions keyed by id, with a parent-id index."""

    _by_id: dict[int, AdministrativeDivision] = field(default_factory=dict)
    _children: dict[int | None, list[int]] = field(default_factory=dict)

    @classmethod
    def build(cls, divisions: Iterable[AdministrativeDivision]) -> DivisionIndex:
        index = cls()
        for division in divisions:
            index.add(division)
        return index

    def add(self, division: AdministrativeDivision) -> None:
        if division.id in self._by_id:
            raise ValueError(f"Duplicate division id: {division.id}")
        self._by_id[division.id] = division
        self._children.setdefault(division.parent_id, []).append(division.id)

    def __contains__(self, division_id: object) -> bool:
        return division_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[AdministrativeDivision]:
        return iter(self._by_id.values())

    def get(self, division_id: int) -> AdministrativeDivision | None:
        return self._by_id.get(division_id)

    def roots(self) -> list[AdministrativeDivision]:
        return [self._by_id[i] for i in self._children.get(None, [])]

    def children_of(self, parent_id: int) -> list[AdministrativeDivision]:
        return [self._by_id[i] for i in self._children.get(parent_id, [])]

    def ancestors(self, division_id: int) -> list[AdministrativeDivision]:
        """Parents of `division_id`, nearest first. Stops at the first id missing from the index."""

        chain: list[AdministrativeDivision] = []
        seen = {division_id}
        current = self._by_id.get(division_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id in seen:
                raise ValueError(f"Division hierarchy contains a cycle at id {current.parent_id}")
            seen.add(current.parent_id)
            parent = self._by_id.get(current.parent_id)
            if parent is None:
                break
            chain.append(parent)
            current = parent
        return chain
