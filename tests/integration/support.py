# This file provides row builders for tests that run against the in-memory SQLite database.

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import insert
from werkzeug.security import generate_password_hash

from servicemap.api.db_access import DatabaseClient
from servicemap.api.services.division_store import DivisionStore
from servicemap.common.tables import service_types, services, user_favorites, users
from servicemap.geo.divisions import AdministrativeDivision

ORIGIN = (21.0285, 105.8542)


def add_service_type(db: DatabaseClient, name: str, icon: str | None = None) -> int:
    return db.insert(insert(service_types).values(name=name, description=f"{name} places", icon=icon))


def add_service(
    db: DatabaseClient,
    *,
    service_type_id: int,
    name: str = "Service",
    latitude: float = ORIGIN[0],
    longitude: float = ORIGIN[1],
    street_address: str = "1 Trang Tien",
    address_components: dict[str, Any] | None = None,
    country_code: str = "VN",
    rating: float = 4.0,
    is_active: bool = True,
    created_at: datetime | None = None,
) -> int:
    values: dict[str, Any] = {
        "name": name,
        "service_type_id": service_type_id,
        "street_address": street_address,
        "address_components": address_components or {},
        "country_code": country_code,
        "latitude": latitude,
        "longitude": longitude,
        "rating": rating,
        "is_active": is_active,
    }
    if created_at is not None:
        values["created_at"] = created_at
    return db.insert(insert(services).values(**values))


def add_user(db: DatabaseClient, username: str = "alice", email: str | None = None, password: str = "secret1") -> int:
    return db.insert(
        insert(users).values(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=generate_password_hash(password),
        )
    )


def add_favorite(db: DatabaseClient, user_id: int, service_id: int, created_at: datetime | None = None) -> int:
    values: dict[str, Any] = {"user_id": user_id, "service_id": service_id}
    if created_at is not None:
        values["created_at"] = created_at
    return db.insert(insert(user_favorites).values(**values))


def build_hanoi(store: DivisionStore) -> dict[str, AdministrativeDivision]:
    """Small VN forest: Hanoi > Ba Dinh > (Kim Ma, Truc Bach), Hanoi > Hoan Kiem, plus Da Nang."""

    hanoi = store.create_division(name="Hanoi", division_type="province", country_code="VN")
    ba_dinh = store.create_division(name="Ba Dinh", division_type="district", country_code="VN", parent_id=hanoi.id)
    hoan_kiem = store.create_division(
        name="Hoan Kiem", division_type="district", country_code="VN", parent_id=hanoi.id
    )
    kim_ma = store.create_division(name="Kim Ma", division_type="ward", country_code="VN", parent_id=ba_dinh.id)
    truc_bach = store.create_division(
        name="Truc Bach", division_type="ward", country_code="VN", parent_id=ba_dinh.id
    )
    da_nang = store.create_division(name="Da Nang", division_type="province", country_code="VN")
    return {
        "hanoi": hanoi,
        "ba_dinh": ba_dinh,
        "hoan_kiem": hoan_kiem,
        "kim_ma": kim_ma,
        "truc_bach": truc_bach,
        "da_nang": da_nang,
    }
