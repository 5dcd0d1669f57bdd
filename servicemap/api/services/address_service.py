# This file implements the country catalog and address endpoints.
# It joins the static address catalog with division lookups so routers can list, format and validate addresses.
# Unknown countries surface as 404 here; the formatter itself degrades to the raw street address.

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from servicemap.api.api_config import ApiConfig
from servicemap.api.error_handlers import InputValidationError, NotFoundError
from servicemap.api.services.division_store import ANY_PARENT, DivisionStore, ParentFilter
from servicemap.geo.address_catalog import AddressCatalog, Country
from servicemap.geo.components import parse_address_components
from servicemap.geo.formatter import AddressFormatter, AddressValidation, FormattedAddress


class AddressService:
    """Countries, divisions and address rendering for the catalog endpoints."""

    def __init__(self, *, config: ApiConfig, catalog: AddressCatalog, divisions: DivisionStore) -> None:
        self.config = config
        self.catalog = catalog
        self.divisions = divisions
        self.formatter = AddressFormatter(catalog=catalog, lookup=divisions.find_by_ids)

    def list_countries(self) -> list[dict[str, Any]]:
        return [country.as_dict() for country in self.catalog.list_countries()]

    def get_country(self, country_code: str) -> dict[str, Any]:
        return self._require_country(country_code).as_dict()

    def list_divisions(
        self,
        country_code: str,
        parent_id: int | None | ParentFilter = ANY_PARENT,
    ) -> list[dict[str, Any]]:
        return [division.as_dict() for division in self.divisions.list_divisions(country_code, parent_id)]

    def list_divisions_by_level(self, country_code: str, level: int) -> list[dict[str, Any]]:
        return [division.as_dict() for division in self.divisions.list_divisions_by_level(country_code, level)]

    def search_divisions(
        self,
        country_code: str,
        term: str,
        *,
        division_type: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        found = self.divisions.search(
            country_code,
            term,
            division_type=division_type,
            limit=limit or self.config.default_division_search_limit,
        )
        return [division.as_dict() for division in found]

    def format_address(
        self,
        country_code: str,
        street_address: str,
        address_components: Mapping[str, Any] | None,
    ) -> FormattedAddress:
        components = self._parse_components(address_components)
        return self.formatter.format(street_address, components, country_code)

    def validate_address(
        self,
        country_code: str,
        address_components: Mapping[str, Any] | None,
    ) -> AddressValidation:
        components = self._parse_components(address_components)
        return self.formatter.validate(components, country_code)

    def _require_country(self, country_code: str) -> Country:
        country = self.catalog.get_country(country_code)
        if country is None:
            raise NotFoundError("Country not found", details={"country_code": country_code})
        return country

    @staticmethod
    def _parse_components(raw: Mapping[str, Any] | None) -> dict:
        try:
            return parse_address_components(raw)
        except ValueError as exc:
            raise InputValidationError("Invalid address components", details={"reason": str(exc)}) from exc
