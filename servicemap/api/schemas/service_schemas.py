# This file defines service directory schemas: enriched services, search pages and service types.
# `distance` is present only when the request carried an origin; `is_favorite` only for signed-in callers.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from servicemap.api.schemas.common import EnvelopeFields, PageWindowFields


class EnrichedServiceV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    service_type_id: int
    street_address: str
    address_components: dict[str, int | str]
    country_code: str
    latitude: float
    longitude: float
    phone: str | None = None
    website: str | None = None
    rating: float | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    service_type_name: str | None = None
    service_type_icon: str | None = None
    country_name: str
    formatted_address: str
    address_display: dict[str, str]
    distance: float | None = None
    is_favorite: bool | None = None


class ServiceDetailV1(EnrichedServiceV1):
    favorite_count: int


class SearchPageV1(PageWindowFields):
    services: list[EnrichedServiceV1]


class SearchResponseV1(EnvelopeFields):
    data: SearchPageV1


class ServiceListResponseV1(EnvelopeFields):
    data: list[EnrichedServiceV1]


class ServiceDetailResponseV1(EnvelopeFields):
    data: ServiceDetailV1


class ServiceTypeV1(BaseModel):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None


class ServiceTypeListResponseV1(EnvelopeFields):
    data: list[ServiceTypeV1]
