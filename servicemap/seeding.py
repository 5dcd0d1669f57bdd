"""Load reference data and demo services into an empty service directory database."""

from __future__ import annotations

import json
import logging
import math
import random
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import insert
from werkzeug.security import generate_password_hash

from servicemap.api.db_access import DatabaseClient
from servicemap.api.services.division_store import DivisionStore
from servicemap.common.tables import create_schema, drop_schema, service_types, services, users
from servicemap.geo.address_catalog import AddressCatalog, Country
from servicemap.geo.distance import GeoPoint
from servicemap.geo.divisions import AdministrativeDivision, DivisionIndex

LOGGER = logging.getLogger("servicemap.seeding")

DATA_DIR = Path(__file__).resolve().parent / "data"
SERVICE_TYPES_FILE = DATA_DIR / "service_types.json"
DIVISIONS_FILE = DATA_DIR / "divisions.json"

# Hanoi city centre.
DEFAULT_CENTER = GeoPoint(latitude=21.0285, longitude=105.8542)
KM_PER_DEGREE = 111.32

DEMO_USER = {"username": "root", "email": "root@admin.com", "password": "root123"}

_NAME_PREFIXES = (
    "Central", "Golden", "Riverside", "Lotus", "Green", "Sunrise",
    "Old Quarter", "Lakeside", "Red River", "Capital", "Harmony", "Pearl",
)
_STREETS = (
    "Trang Tien", "Hang Bai", "Ly Thuong Kiet", "Tran Hung Dao", "Kim Ma",
    "Nguyen Chi Thanh", "Xuan Thuy", "Ba Trieu", "Hue", "Lang Ha",
)

# Area-code prefixes for demo phone numbers; other countries get no phone.
_PHONE_PREFIXES = {
    "VN": "+84 24",
    "US": "+1 213",
    "JP": "+81 3",
    "GB": "+44 20",
    "TH": "+66 2",
}


@dataclass(frozen=True)
class SeedSummary:
    service_types: int
    divisions: int
    services: int
    users: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def load_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def seed_service_types(db: DatabaseClient, records: Iterable[dict[str, Any]]) -> list[int]:
    ids = []
    for record in records:
        statement = insert(service_types).values(
            name=record["name"],
            description=record.get("description"),
            icon=record.get("icon"),
        )
        ids.append(db.insert(statement))
    return ids


def seed_divisions(store: DivisionStore, tree: Iterable[dict[str, Any]]) -> int:
    """Insert a nested division tree, parents before children.

    Country codes are inherited from the enclosing node.
    """

    created = 0
    stack: list[tuple[dict[str, Any], int | None, str | None]] = [(node, None, None) for node in reversed(list(tree))]
    while stack:
        node, parent_id, inherited_country = stack.pop()
        country_code = node.get("country_code") or inherited_country
        if not country_code:
            raise ValueError(f"Division {node.get('name')!r} has no country_code")

        location = None
        if node.get("latitude") is not None and node.get("longitude") is not None:
            location = GeoPoint(latitude=float(node["latitude"]), longitude=float(node["longitude"]))

        division = store.create_division(
            name=node["name"],
            division_type=node["type"],
            country_code=country_code,
            parent_id=parent_id,
            location=location,
        )
        created += 1
        for child in reversed(node.get("children", [])):
            stack.append((child, division.id, country_code))
    return created


def address_components_for(
    division: AdministrativeDivision,
    index: DivisionIndex,
    country: Country,
) -> dict[str, int]:
    """Component map for `division` and its ancestors, keyed by the country's level names."""

    components: dict[str, int] = {}
    chain = [division, *index.ancestors(division.id)]
    for level in country.address_format.levels:
        for candidate in chain:
            if candidate.type == level.type:
                components[level.name] = candidate.id
                break
    return components


def random_point_near(center: GeoPoint, radius_km: float, rng: random.Random) -> GeoPoint:
    # sqrt keeps points uniform over the disc area
    distance_km = radius_km * math.sqrt(rng.random())
    angle = rng.random() * 2 * math.pi
    d_lat = distance_km * math.cos(angle) / KM_PER_DEGREE
    d_lng = distance_km * math.sin(angle) / (KM_PER_DEGREE * math.cos(math.radians(center.latitude)))
    return GeoPoint(
        latitude=round(max(-90.0, min(90.0, center.latitude + d_lat)), 6),
        longitude=round(max(-180.0, min(180.0, center.longitude + d_lng)), 6),
    )


def demo_phone(prefix: str | None, rng: random.Random) -> str | None:
    if prefix is None or rng.random() >= 0.6:
        return None
    return f"{prefix} {rng.randint(1000, 9999)} {rng.randint(1000, 9999)}"


def generate_services(
    db: DatabaseClient,
    *,
    catalog: AddressCatalog,
    store: DivisionStore,
    service_type_ids: list[int],
    country_code: str,
    count: int,
    center: GeoPoint,
    radius_km: float,
    rng: random.Random,
) -> int:
    """Insert `count` demo services scattered around `center`."""

    if not service_type_ids:
        raise ValueError("Service types must be seeded before services")

    country = catalog.get_country(country_code)
    index = store.country_index(country_code)
    leaves = [division for division in index if not index.children_of(division.id)]
    type_names = {
        int(row["id"]): row["name"]
        for row in db.fetch_all("SELECT t.id, t.name FROM service_types t")
    }

    phone_prefix = _PHONE_PREFIXES.get(country_code)
    for number in range(count):
        type_id = rng.choice(service_type_ids)
        components: dict[str, int] = {}
        if country is not None and leaves:
            components = address_components_for(rng.choice(leaves), index, country)
        point = random_point_near(center, radius_km, rng)
        statement = insert(services).values(
            name=f"{rng.choice(_NAME_PREFIXES)} {type_names.get(type_id, 'Service')} {number + 1}",
            service_type_id=type_id,
            street_address=f"{rng.randint(1, 300)} {rng.choice(_STREETS)} Street",
            address_components=components,
            country_code=country_code,
            latitude=point.latitude,
            longitude=point.longitude,
            phone=demo_phone(phone_prefix, rng),
            website=f"https://example.com/services/{number + 1}" if rng.random() < 0.4 else None,
            rating=round(rng.uniform(1.0, 5.0), 1),
            is_active=True,
        )
        db.insert(statement)
    return count


def seed_demo_user(db: DatabaseClient) -> int:
    statement = insert(users).values(
        username=DEMO_USER["username"],
        email=DEMO_USER["email"],
        password_hash=generate_password_hash(DEMO_USER["password"]),
    )
    return db.insert(statement)


def seed_reference_data(
    db: DatabaseClient,
    *,
    catalog: AddressCatalog,
    services_count: int = 200,
    country_code: str = "VN",
    center: GeoPoint = DEFAULT_CENTER,
    radius_km: float = 10.0,
    random_seed: int = 42,
    reset: bool = False,
    with_demo_user: bool = True,
) -> SeedSummary:
    """Create the schema and load service types, divisions, demo services and a demo user."""

    if reset:
        LOGGER.info("Dropping existing schema")
        drop_schema(db.engine)
    create_schema(db.engine)

    store = DivisionStore(db=db)
    type_ids = seed_service_types(db, load_json(SERVICE_TYPES_FILE))
    LOGGER.info("Seeded %s service types", len(type_ids))

    division_count = seed_divisions(store, load_json(DIVISIONS_FILE))
    LOGGER.info("Seeded %s administrative divisions", division_count)

    service_count = generate_services(
        db,
        catalog=catalog,
        store=store,
        service_type_ids=type_ids,
        country_code=country_code,
        count=services_count,
        center=center,
        radius_km=radius_km,
        rng=random.Random(random_seed),
    )
    LOGGER.info("Seeded %s services around (%s, %s)", service_count, center.latitude, center.longitude)

    user_count = 0
    if with_demo_user:
        seed_demo_user(db)
        user_count = 1
        LOGGER.info("Created demo account email=%s", DEMO_USER["email"])

    return SeedSummary(
        service_types=len(type_ids),
        divisions=division_count,
        services=service_count,
        users=user_count,
    )
