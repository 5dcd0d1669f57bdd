"""
Typed address components.
A service stores a sparse, schema-free mapping of component keys to either an
administrative division id or a literal string. Stored JSON is parsed into
`DivisionRef` / `LiteralComponent` values once, at the storage boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class DivisionRef:
    id: int


@dataclass(frozen=True)
class LiteralComponent:
    text: str


AddressComponent = Union[DivisionRef, LiteralComponent]


def parse_component(key: str, value: Any) -> AddressComponent:
    # bool is an int subclass; a flag is never a division id
    if isinstance(value, bool):
        raise ValueError(f"Unsupported address component value for {key!r}: {value!r}")
    if isinstance(value, int):
        return DivisionRef(id=value)
    if isinstance(value, float) and value.is_integer():
        return DivisionRef(id=int(value))
    if isinstance(value, str):
        return LiteralComponent(text=value)
    raise ValueError(f"Unsupported address component value for {key!r}: {value!r}")


def parse_address_components(raw: Mapping[str, Any] | None) -> dict[str, AddressComponent]:
    """Parse a stored component mapping, keeping key order; None values are dropped."""

    if not raw:
        return {}
    return {str(key): parse_component(str(key), value) for key, value in raw.items() if value is not None}


def dump_address_components(components: Mapping[str, AddressComponent]) -> dict[str, int | str]:
    dumped: dict[str, int | str] = {}
    for key, component in components.items():
        if isinstance(component, DivisionRef):
            dumped[key] = component.id
        else:
            dumped[key] = component.text
    return dumped


def division_ids(components: Mapping[str, AddressComponent]) -> list[int]:
    """Referenced division ids in first-seen order, without duplicates."""

    seen: dict[int, None] = {}
    for component in components.values():
        if isinstance(component, DivisionRef):
            seen.setdefault(component.id, None)
    return list(seen)
