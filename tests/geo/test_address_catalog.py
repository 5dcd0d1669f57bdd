"""
Unit tests for the bundled country catalog.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import pytest

from servicemap.geo.address_catalog import STREET_ADDRESS_KEY, AddressCatalog, get_address_catalog


def test_bundled_catalog_loads_every_country() -> None:
    catalog = get_address_catalog()
    codes = [country.code for country in catalog.list_countries()]
    assert codes == ["VN", "US", "JP", "GB", "TH"]


def test_every_bundled_format_is_ordered_and_uses_street_placeholder() -> None:
    for country in get_address_catalog().list_countries():
        levels = [level.level for level in country.address_format.levels]
        assert levels == sorted(levels)
        assert "{" + STREET_ADDRESS_KEY + "}" in country.address_format.display_format


def test_lookups() -> None:
    catalog = get_address_catalog()
    vietnam = catalog.get_country("VN")
    assert vietnam is not None
    assert vietnam.name == "Vietnam"
    assert catalog.get_country("ZZ") is None
    assert catalog.country_name("ZZ") == "Unknown"


def test_as_dict_shape() -> None:
    payload = get_address_catalog().get_country("VN").as_dict()
    assert payload["code"] == "VN"
    assert payload["address_format"]["levels"][0] == {
        "name": "province",
        "type": "province",
        "level": 1,
        "required": True,
    }


def test_reserved_level_name_is_rejected() -> None:
    with pytest.raises(ValueError, match="reserved"):
        AddressCatalog.from_records(
            [
                {
                    "code": "QQ",
                    "name": "Q",
                    "address_format": {
                        "levels": [{"name": "street_address", "type": "x", "level": 1, "required": True}],
                        "display_format": "{street_address}",
                    },
                }
            ]
        )


def test_duplicate_country_codes_are_rejected() -> None:
    record = {"code": "QQ", "name": "Q", "address_format": {"levels": [], "display_format": "{street_address}"}}
    with pytest.raises(ValueError, match="Duplicate country code"):
        AddressCatalog.from_records([record, record])
