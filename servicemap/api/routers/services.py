# This file defines the service directory endpoints under the versioned API path.
# Query values arrive as raw strings and go through `servicemap.api.validation`,
# so a bad value is reported with the same literal message everywhere.
# Country, division and address endpoints share the `/services` prefix.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from servicemap.api.api_config import ApiConfig
from servicemap.api.dependencies import (
    get_address_service,
    get_config,
    get_optional_user_id,
    get_search_service,
)
from servicemap.api.response_envelope import envelope
from servicemap.api.schemas.address_schemas import (
    AddressRequestV1,
    AddressValidationResponseV1,
    CountryListResponseV1,
    CountryResponseV1,
    DivisionListResponseV1,
    FormattedAddressResponseV1,
)
from servicemap.api.schemas.service_schemas import (
    SearchResponseV1,
    ServiceDetailResponseV1,
    ServiceListResponseV1,
    ServiceTypeListResponseV1,
)
from servicemap.api.services.address_service import AddressService
from servicemap.api.services.search_service import SearchService
from servicemap.api.validation import (
    parse_limit,
    parse_offset,
    parse_parent_id,
    validate_country_code,
    validate_level,
    validate_search_params,
    validate_search_term,
    validate_service_id,
    validate_service_type_id,
)

router = APIRouter(prefix="/services", tags=["services"])
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
AddressServiceDep = Annotated[AddressService, Depends(get_address_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
OptionalUserDep = Annotated[int | None, Depends(get_optional_user_id)]


@router.get("/search", response_model=SearchResponseV1)
def search_services(
    request: Request,
    service: SearchServiceDep,
    config: ConfigDep,
    user_id: OptionalUserDep,
    latitude: str | None = Query(default=None),
    longitude: str | None = Query(default=None),
    radius: str | None = Query(default=None),
    service_type: str | None = Query(default=None),
    name: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    page: str | None = Query(default=None),
) -> dict[str, object]:
    query = validate_search_params(
        {
            "latitude": latitude,
            "longitude": longitude,
            "radius": radius,
            "service_type": service_type,
            "name": name,
            "limit": limit,
            "page": page,
        },
        config=config,
    )
    return envelope(config, request.state.request_id, service.search(query, user_id))


@router.get("/types", response_model=ServiceTypeListResponseV1)
def service_types(
    request: Request,
    service: SearchServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.list_service_types())


@router.get("/popular", response_model=ServiceListResponseV1)
def popular_services(
    request: Request,
    service: SearchServiceDep,
    config: ConfigDep,
    user_id: OptionalUserDep,
    limit: str | None = Query(default=None),
) -> dict[str, object]:
    resolved_limit = parse_limit(limit, default=config.default_popular_limit, maximum=config.max_page_size)
    return envelope(config, request.state.request_id, service.get_popular(limit=resolved_limit, user_id=user_id))


@router.get("/type/{type_id}", response_model=ServiceListResponseV1)
def services_by_type(
    request: Request,
    type_id: str,
    service: SearchServiceDep,
    config: ConfigDep,
    user_id: OptionalUserDep,
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
) -> dict[str, object]:
    service_type_id = validate_service_type_id(type_id)
    rows = service.get_by_type(
        service_type_id,
        limit=parse_limit(limit, default=config.default_page_size, maximum=config.max_page_size),
        offset=parse_offset(offset),
        user_id=user_id,
    )
    return envelope(config, request.state.request_id, rows)


@router.get("/search-address", response_model=ServiceListResponseV1)
def search_by_address(
    request: Request,
    service: SearchServiceDep,
    config: ConfigDep,
    user_id: OptionalUserDep,
    q: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> dict[str, object]:
    term = validate_search_term(q)
    rows = service.search_by_address(
        term,
        limit=parse_limit(limit, default=config.default_page_size, maximum=config.max_page_size),
        user_id=user_id,
    )
    return envelope(config, request.state.request_id, rows)


@router.get("/countries", response_model=CountryListResponseV1)
def countries(
    request: Request,
    service: AddressServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.list_countries())


@router.get("/countries/{country_code}", response_model=CountryResponseV1)
def country(
    request: Request,
    country_code: str,
    service: AddressServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.get_country(validate_country_code(country_code)))


@router.get("/countries/{country_code}/divisions", response_model=DivisionListResponseV1)
def divisions(
    request: Request,
    country_code: str,
    service: AddressServiceDep,
    config: ConfigDep,
    parent_id: str | None = Query(default=None),
) -> dict[str, object]:
    code = validate_country_code(country_code)
    return envelope(config, request.state.request_id, service.list_divisions(code, parse_parent_id(parent_id)))


@router.get("/countries/{country_code}/divisions/level/{level}", response_model=DivisionListResponseV1)
def divisions_by_level(
    request: Request,
    country_code: str,
    level: str,
    service: AddressServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    code = validate_country_code(country_code)
    return envelope(config, request.state.request_id, service.list_divisions_by_level(code, validate_level(level)))


@router.get("/countries/{country_code}/divisions/search", response_model=DivisionListResponseV1)
def search_divisions(
    request: Request,
    country_code: str,
    service: AddressServiceDep,
    config: ConfigDep,
    q: str | None = Query(default=None),
    type: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> dict[str, object]:
    code = validate_country_code(country_code)
    rows = service.search_divisions(
        code,
        validate_search_term(q),
        division_type=type or None,
        limit=parse_limit(limit, default=config.default_division_search_limit, maximum=config.max_page_size),
    )
    return envelope(config, request.state.request_id, rows)


@router.post("/countries/{country_code}/address/format", response_model=FormattedAddressResponseV1)
def format_address(
    request: Request,
    country_code: str,
    payload: AddressRequestV1,
    service: AddressServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    code = validate_country_code(country_code)
    formatted = service.format_address(code, payload.street_address, payload.address_components)
    return envelope(
        config,
        request.state.request_id,
        {"formatted_address": formatted.formatted_address, "address_display": formatted.address_display},
    )


@router.post("/countries/{country_code}/address/validate", response_model=AddressValidationResponseV1)
def validate_address(
    request: Request,
    country_code: str,
    payload: AddressRequestV1,
    service: AddressServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    code = validate_country_code(country_code)
    result = service.validate_address(code, payload.address_components)
    return envelope(config, request.state.request_id, {"valid": result.valid, "errors": result.errors})


@router.get("/{service_id}", response_model=ServiceDetailResponseV1)
def service_detail(
    request: Request,
    service_id: str,
    service: SearchServiceDep,
    config: ConfigDep,
    user_id: OptionalUserDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.get_by_id(validate_service_id(service_id), user_id))
