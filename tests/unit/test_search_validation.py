"""
Unit tests for caller input validation.
Every message asserted here is part of the public error contract.
"""

from __future__ import annotations

import pytest

from servicemap.api import validation
from servicemap.api.api_config import ApiConfig
from servicemap.api.error_handlers import InputValidationError
from servicemap.api.services.division_store import ANY_PARENT
from tests.api.support import build_test_config


@pytest.fixture
def config() -> ApiConfig:
    return build_test_config()


def _message(excinfo: pytest.ExceptionInfo[InputValidationError]) -> str:
    return excinfo.value.message


def test_missing_coordinates(config: ApiConfig) -> None:
    with pytest.raises(InputValidationError) as excinfo:
        validation.validate_search_params({}, config=config)
    assert _message(excinfo) == "Latitude and longitude are required"
    assert excinfo.value.status_code == 400


def test_blank_coordinate_counts_as_missing(config: ApiConfig) -> None:
    with pytest.raises(InputValidationError, match="Latitude and longitude are required"):
        validation.validate_search_params({"latitude": "21.0", "longitude": ""}, config=config)


def test_zero_coordinates_are_valid(config: ApiConfig) -> None:
    query = validation.validate_search_params({"latitude": 0, "longitude": "0"}, config=config)
    assert query.origin.latitude == 0.0
    assert query.origin.longitude == 0.0


@pytest.mark.parametrize(
    "params,message",
    [
        ({"latitude": 91, "longitude": 0}, "Invalid latitude. Must be between -90 and 90"),
        ({"latitude": "abc", "longitude": 0}, "Invalid latitude. Must be between -90 and 90"),
        ({"latitude": 10, "longitude": 181}, "Invalid longitude. Must be between -180 and 180"),
        ({"latitude": 10, "longitude": 20, "radius": "0"}, "Invalid radius. Must be between 0 and 50 kilometers"),
        ({"latitude": 10, "longitude": 20, "radius": "50.5"}, "Invalid radius. Must be between 0 and 50 kilometers"),
        ({"latitude": 10, "longitude": 20, "limit": "0"}, "Invalid limit. Must be between 1 and 100"),
        ({"latitude": 10, "longitude": 20, "limit": "101"}, "Invalid limit. Must be between 1 and 100"),
        ({"latitude": 10, "longitude": 20, "page": "0"}, "Invalid page. Must be a positive integer"),
        ({"latitude": 10, "longitude": 20, "page": "x"}, "Invalid page. Must be a positive integer"),
        (
            {"latitude": 10, "longitude": 20, "service_type": "-3"},
            "Invalid service type. Must be a positive integer",
        ),
    ],
)
def test_literal_messages(config: ApiConfig, params: dict[str, object], message: str) -> None:
    with pytest.raises(InputValidationError) as excinfo:
        validation.validate_search_params(params, config=config)
    assert _message(excinfo) == message


def test_defaults_are_applied(config: ApiConfig) -> None:
    query = validation.validate_search_params({"latitude": "21.0285", "longitude": "105.8542"}, config=config)
    assert query.radius_km == 10.0
    assert query.limit == 20
    assert query.page == 1
    assert query.service_type_id is None
    assert query.name_contains is None


def test_all_fields_parsed(config: ApiConfig) -> None:
    query = validation.validate_search_params(
        {
            "latitude": "21.0285",
            "longitude": "105.8542",
            "radius": "2.5",
            "service_type": "3",
            "name": "  pho ",
            "limit": "5",
            "page": "2",
        },
        config=config,
    )
    assert query.radius_km == 2.5
    assert query.service_type_id == 3
    assert query.name_contains == "pho"
    assert (query.limit, query.page) == (5, 2)


def test_radius_message_follows_configured_maximum() -> None:
    config = build_test_config(max_search_radius_km=25.0)
    with pytest.raises(InputValidationError) as excinfo:
        validation.validate_search_params({"latitude": 1, "longitude": 1, "radius": 30}, config=config)
    assert _message(excinfo) == "Invalid radius. Must be between 0 and 25 kilometers"


def test_offset_and_ids() -> None:
    assert validation.parse_offset(None) == 0
    assert validation.parse_offset("15") == 15
    with pytest.raises(InputValidationError, match="Invalid offset. Must be a non-negative integer"):
        validation.parse_offset("-1")
    assert validation.validate_service_id("7") == 7
    with pytest.raises(InputValidationError, match="Invalid service ID"):
        validation.validate_service_id("abc")
    with pytest.raises(InputValidationError, match="Invalid service type ID"):
        validation.validate_service_type_id("0")


def test_favorite_request_body() -> None:
    assert validation.validate_favorite_request({"service_id": "4"}) == 4
    with pytest.raises(InputValidationError, match="Service ID is required"):
        validation.validate_favorite_request({})
    with pytest.raises(InputValidationError, match="Invalid service ID"):
        validation.validate_favorite_request({"service_id": "x"})


def test_search_term_and_country_code() -> None:
    assert validation.validate_search_term("  Kim Ma ") == "Kim Ma"
    with pytest.raises(InputValidationError, match="Search term is required"):
        validation.validate_search_term("   ")
    assert validation.validate_country_code("vn") == "VN"
    for bad in ("V", "VNMX", "V1"):
        with pytest.raises(InputValidationError, match="Invalid country code"):
            validation.validate_country_code(bad)


def test_parent_id_three_way_parse() -> None:
    assert validation.parse_parent_id(None) is ANY_PARENT
    assert validation.parse_parent_id("null") is None
    assert validation.parse_parent_id("5") == 5
    with pytest.raises(InputValidationError, match="Invalid parent ID"):
        validation.parse_parent_id("five")


@pytest.mark.parametrize(
    "body,message",
    [
        ({"username": "abc", "email": "a@b.co"}, "Username, email, and password are required"),
        ({"username": "ab", "email": "a@b.co", "password": "secret1"}, "Username must be between 3 and 50 characters"),
        ({"username": "abc", "email": "not-an-email", "password": "secret1"}, "Invalid email format"),
        ({"username": "abc", "email": "a@b.co", "password": "short"}, "Password must be at least 6 characters long"),
    ],
)
def test_registration_messages(body: dict[str, str], message: str) -> None:
    with pytest.raises(InputValidationError) as excinfo:
        validation.validate_registration(body)
    assert _message(excinfo) == message


def test_login_requires_both_fields() -> None:
    with pytest.raises(InputValidationError, match="Email and password are required"):
        validation.validate_login({"email": "a@b.co"})
    credentials = validation.validate_login({"email": "a@b.co", "password": "pw"})
    assert credentials.email == "a@b.co"
