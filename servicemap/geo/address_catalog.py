"""
Static country reference data with per-country address formats.
The catalog is read from `servicemap/data/countries.json` once and never mutated afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "countries.json"
STREET_ADDRESS_KEY = "street_address"


@dataclass(frozen=True)
class AddressLevel:
    name: str
    type: str
    level: int
    required: bool


@dataclass(frozen=True)
class AddressFormat:
    levels: tuple[AddressLevel, ...]
    display_format: str
    search_fields: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "levels": [
                {"name": lvl.name, "type": lvl.type, "level": lvl.level, "required": lvl.required}
                for lvl in self.levels
            ],
            "display_format": self.display_format,
            "search_fields": list(self.search_fields),
        }


@dataclass(frozen=True)
class Country:
    code: str
    name: str
    address_format: AddressFormat

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name, "address_format": self.address_format.as_dict()}


def _parse_format(raw: dict[str, Any]) -> AddressFormat:
    levels = tuple(
        sorted(
            (
                AddressLevel(
                    name=str(item["name"]),
                    type=str(item["type"]),
                    level=int(item["level"]),
                    required=bool(item.get("required", False)),
                )
                for item in raw.get("levels", [])
            ),
            key=lambda lvl: lvl.level,
        )
    )
    names = [lvl.name for lvl in levels]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate address level names: {names}")
    if STREET_ADDRESS_KEY in names:
        raise ValueError(f"Address level name {STREET_ADDRESS_KEY!r} is reserved")
    return AddressFormat(
        levels=levels,
        display_format=str(raw["display_format"]),
        search_fields=tuple(str(f) for f in raw.get("search_fields", [])),
    )


class AddressCatalog:
    """Ordered, read-only set of countries keyed by code."""

    def __init__(self, countries: list[Country]) -> None:
        self._countries = tuple(countries)
        self._by_code: dict[str, Country] = {}
        for country in self._countries:
            if country.code in self._by_code:
                raise ValueError(f"Duplicate country code: {country.code!r}")
            self._by_code[country.code] = country

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> AddressCatalog:
        return cls(
            [
                Country(
                    code=str(record["code"]),
                    name=str(record["name"]),
                    address_format=_parse_format(record["address_format"]),
                )
                for record in records
            ]
        )

    @classmethod
    def from_file(cls, path: Path) -> AddressCatalog:
        return cls.from_records(json.loads(path.read_text(encoding="utf-8")))

    def list_countries(self) -> tuple[Country, ...]:
        return self._countries

    def get_country(self, code: str) -> Country | None:
        return self._by_code.get(code)

    def country_name(self, code: str, default: str = "Unknown") -> str:
        country = self._by_code.get(code)
        return country.name if country is not None else default


@lru_cache(maxsize=1)
def get_address_catalog() -> AddressCatalog:
    """Process-wide catalog loaded from the bundled data file."""

    return AddressCatalog.from_file(DEFAULT_CATALOG_PATH)
