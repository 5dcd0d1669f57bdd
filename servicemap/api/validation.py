# This file validates raw caller input before it reaches the services.
# Query strings and JSON bodies arrive untyped; each check here maps one bad value to one fixed message.
# Routers pass raw values through so the messages stay identical for every entry point.

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from servicemap.api.api_config import ApiConfig
from servicemap.api.error_handlers import InputValidationError
from servicemap.api.services.division_store import ANY_PARENT, ParentFilter
from servicemap.geo.distance import GeoPoint

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_COUNTRY_CODE_RE = re.compile(r"^[A-Za-z]{2,3}$")
_NULL_TOKEN = "null"


@dataclass(frozen=True)
class SearchQuery:
    origin: GeoPoint
    radius_km: float
    limit: int
    page: int
    service_type_id: int | None = None
    name_contains: str | None = None


@dataclass(frozen=True)
class Registration:
    username: str
    email: str
    password: str


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _format_bound(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def validate_search_params(params: Mapping[str, Any], *, config: ApiConfig) -> SearchQuery:
    """Turn raw search parameters into a `SearchQuery` or raise with a literal message."""

    latitude = params.get("latitude")
    longitude = params.get("longitude")
    if _is_blank(latitude) or _is_blank(longitude):
        raise InputValidationError("Latitude and longitude are required")

    lat = _to_float(latitude)
    if lat is None or lat < -90 or lat > 90:
        raise InputValidationError("Invalid latitude. Must be between -90 and 90")

    lng = _to_float(longitude)
    if lng is None or lng < -180 or lng > 180:
        raise InputValidationError("Invalid longitude. Must be between -180 and 180")

    radius_km = config.default_search_radius_km
    if not _is_blank(params.get("radius")):
        radius = _to_float(params["radius"])
        if radius is None or radius <= 0 or radius > config.max_search_radius_km:
            raise InputValidationError(
                f"Invalid radius. Must be between 0 and {_format_bound(config.max_search_radius_km)} kilometers"
            )
        radius_km = radius

    limit = parse_limit(params.get("limit"), default=config.default_page_size, maximum=config.max_page_size)
    page = parse_page(params.get("page"))

    service_type_id = None
    if not _is_blank(params.get("service_type")):
        service_type_id = _to_int(params["service_type"])
        if service_type_id is None or service_type_id <= 0:
            raise InputValidationError("Invalid service type. Must be a positive integer")

    name = params.get("name")
    name_contains = name.strip() if isinstance(name, str) and name.strip() else None

    return SearchQuery(
        origin=GeoPoint(latitude=lat, longitude=lng),
        radius_km=radius_km,
        limit=limit,
        page=page,
        service_type_id=service_type_id,
        name_contains=name_contains,
    )


def parse_limit(raw: Any, *, default: int, maximum: int) -> int:
    if _is_blank(raw):
        return default
    limit = _to_int(raw)
    if limit is None or limit <= 0 or limit > maximum:
        raise InputValidationError(f"Invalid limit. Must be between 1 and {maximum}")
    return limit


def parse_page(raw: Any) -> int:
    if _is_blank(raw):
        return 1
    page = _to_int(raw)
    if page is None or page < 1:
        raise InputValidationError("Invalid page. Must be a positive integer")
    return page


def parse_offset(raw: Any) -> int:
    if _is_blank(raw):
        return 0
    offset = _to_int(raw)
    if offset is None or offset < 0:
        raise InputValidationError("Invalid offset. Must be a non-negative integer")
    return offset


def _positive_id(raw: Any, message: str) -> int:
    value = _to_int(raw)
    if value is None or value <= 0:
        raise InputValidationError(message)
    return value


def validate_service_id(raw: Any) -> int:
    return _positive_id(raw, "Invalid service ID")


def validate_service_type_id(raw: Any) -> int:
    return _positive_id(raw, "Invalid service type ID")


def validate_favorite_request(body: Mapping[str, Any] | None) -> int:
    """Extract `service_id` from an add-favorite body."""

    raw = (body or {}).get("service_id")
    if _is_blank(raw) or raw == 0:
        raise InputValidationError("Service ID is required")
    return validate_service_id(raw)


def validate_search_term(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InputValidationError("Search term is required")
    return raw.strip()


def validate_country_code(raw: Any) -> str:
    if not isinstance(raw, str) or not _COUNTRY_CODE_RE.match(raw):
        raise InputValidationError("Invalid country code")
    return raw.upper()


def parse_parent_id(raw: str | None) -> int | None | ParentFilter:
    """Absent means any parent, `null` means roots only, an integer means children of that division."""

    if raw is None:
        return ANY_PARENT
    if raw.strip().lower() == _NULL_TOKEN:
        return None
    return _positive_id(raw, "Invalid parent ID")


def validate_level(raw: Any) -> int:
    return _positive_id(raw, "Invalid level")


def validate_registration(body: Mapping[str, Any] | None) -> Registration:
    payload = body or {}
    username = payload.get("username")
    email = payload.get("email")
    password = payload.get("password")

    if not username or not email or not password:
        raise InputValidationError("Username, email, and password are required")
    if not isinstance(username, str) or not 3 <= len(username) <= 50:
        raise InputValidationError("Username must be between 3 and 50 characters")
    if not isinstance(email, str) or not _EMAIL_RE.match(email):
        raise InputValidationError("Invalid email format")
    if not isinstance(password, str) or len(password) < 6:
        raise InputValidationError("Password must be at least 6 characters long")
    return Registration(username=username, email=email, password=password)


def validate_login(body: Mapping[str, Any] | None) -> Credentials:
    payload = body or {}
    email = payload.get("email")
    password = payload.get("password")
    if not email or not password or not isinstance(email, str) or not isinstance(password, str):
        raise InputValidationError("Email and password are required")
    return Credentials(email=email, password=password)
