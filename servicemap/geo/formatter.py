"""
Country-specific address rendering and validation.

`AddressFormatter.format` turns a street address plus a sparse set of
division references into a display string using the country's
`display_format` template, and a `{level name: division name}` map.
`AddressFormatter.validate` checks required levels and that every
referenced division brings its parent along.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from servicemap.geo.address_catalog import STREET_ADDRESS_KEY, AddressCatalog, AddressLevel
from servicemap.geo.components import AddressComponent, DivisionRef, division_ids
from servicemap.geo.divisions import AdministrativeDivision, DivisionIndex

DivisionLookup = Callable[[list[int]], Iterable[AdministrativeDivision]]

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
_REPEATED_COMMA_RE = re.compile(r",(?:\s*,)+")
_TRAILING_COMMA_RE = re.compile(r",\s*$")
_LEADING_COMMA_RE = re.compile(r"^\s*,")


@dataclass(frozen=True)
class FormattedAddress:
    formatted_address: str
    address_display: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AddressValidation:
    valid: bool
    errors: list[str]


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Replace every `{key}` with its value, or an empty string when absent."""

    return _PLACEHOLDER_RE.sub(lambda match: values.get(match.group(1), "") or "", template)


def clean_separators(rendered: str) -> str:
    cleaned = _REPEATED_COMMA_RE.sub(",", rendered)
    cleaned = _TRAILING_COMMA_RE.sub("", cleaned)
    cleaned = _LEADING_COMMA_RE.sub("", cleaned)
    return cleaned.strip()


def match_level(
    level: AddressLevel,
    components: Mapping[str, AddressComponent],
    resolved: DivisionIndex,
) -> AdministrativeDivision | None:
    """First component, in key order, whose resolved division type equals the level type."""

    for component in components.values():
        if not isinstance(component, DivisionRef):
            continue
        division = resolved.get(component.id)
        if division is not None and division.type == level.type:
            return division
    return None


class AddressFormatter:
    def __init__(self, *, catalog: AddressCatalog, lookup: DivisionLookup) -> None:
        self.catalog = catalog
        self.lookup = lookup

    def resolve(self, components: Mapping[str, AddressComponent]) -> DivisionIndex:
        ids = division_ids(components)
        if not ids:
            return DivisionIndex()
        return DivisionIndex.build(self.lookup(ids))

    def format(
        self,
        street_address: str,
        components: Mapping[str, AddressComponent],
        country_code: str,
    ) -> FormattedAddress:
        country = self.catalog.get_country(country_code)
        if country is None:
            return FormattedAddress(formatted_address=street_address, address_display={})

        resolved = self.resolve(components)
        display: dict[str, str] = {}
        values: dict[str, str] = {STREET_ADDRESS_KEY: street_address}
        for level in country.address_format.levels:
            division = match_level(level, components, resolved)
            if division is not None:
                display[level.name] = division.name
                values[level.name] = division.name

        rendered = render_template(country.address_format.display_format, values)
        return FormattedAddress(formatted_address=clean_separators(rendered), address_display=display)

    def validate(
        self,
        components: Mapping[str, AddressComponent],
        country_code: str,
    ) -> AddressValidation:
        country = self.catalog.get_country(country_code)
        if country is None:
            return AddressValidation(valid=False, errors=["Invalid country"])

        resolved = self.resolve(components)
        errors: list[str] = []

        for level in country.address_format.levels:
            if level.required and match_level(level, components, resolved) is None:
                errors.append(f"{level.name} is required for {country.name}")

        for division in resolved:
            if division.parent_id is not None and division.parent_id not in resolved:
                errors.append(f"Invalid hierarchy: {division.name} requires its parent division")

        for division_id in division_ids(components):
            division = resolved.get(division_id)
            if division is None:
                errors.append(f"Unknown administrative division: {division_id}")
            elif division.country_code != country.code:
                errors.append(f"{division.name} does not belong to {country.name}")

        return AddressValidation(valid=not errors, errors=errors)
