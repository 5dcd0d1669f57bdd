# This file holds the pagination arithmetic shared by every list operation.
# Search, favorites and the catalog lists all derive offset, total pages and next/previous flags here.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PaginationSpec:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageWindow:
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
        }


def compute_total_pages(*, total_count: int, page_size: int) -> int:
    """Compute deterministic total page count."""

    if total_count <= 0:
        return 0
    return ((total_count - 1) // page_size) + 1


def page_window(*, total: int, page: int, limit: int) -> PageWindow:
    total_pages = compute_total_pages(total_count=total, page_size=limit)
    return PageWindow(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )
