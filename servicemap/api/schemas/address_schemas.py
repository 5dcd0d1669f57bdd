# This file defines schemas for countries, administrative divisions and address formatting.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from servicemap.api.schemas.common import EnvelopeFields


class AddressLevelV1(BaseModel):
    name: str
    type: str
    level: int
    required: bool


class AddressFormatV1(BaseModel):
    levels: list[AddressLevelV1]
    display_format: str
    search_fields: list[str]


class CountryV1(BaseModel):
    code: str
    name: str
    address_format: AddressFormatV1


class CountryListResponseV1(EnvelopeFields):
    data: list[CountryV1]


class CountryResponseV1(EnvelopeFields):
    data: CountryV1


class DivisionV1(BaseModel):
    id: int
    name: str
    type: str
    level: int
    parent_id: int | None = None
    country_code: str
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime | None = None


class DivisionListResponseV1(EnvelopeFields):
    data: list[DivisionV1]


class AddressRequestV1(BaseModel):
    street_address: str = ""
    address_components: dict[str, Any] = Field(default_factory=dict)


class FormattedAddressV1(BaseModel):
    formatted_address: str
    address_display: dict[str, str]


class FormattedAddressResponseV1(EnvelopeFields):
    data: FormattedAddressV1


class AddressValidationV1(BaseModel):
    valid: bool
    errors: list[str]


class AddressValidationResponseV1(EnvelopeFields):
    data: AddressValidationV1
