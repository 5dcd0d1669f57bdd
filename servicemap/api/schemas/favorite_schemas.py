# This file defines schemas for the favorites endpoints.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from servicemap.api.schemas.common import EnvelopeFields, PageWindowFields
from servicemap.api.schemas.service_schemas import EnrichedServiceV1


class FavoriteServiceV1(EnrichedServiceV1):
    favorited_at: datetime | None = None


class FavoritePageV1(PageWindowFields):
    favorites: list[FavoriteServiceV1]


class FavoriteListResponseV1(EnvelopeFields):
    data: FavoritePageV1


class FavoriteV1(BaseModel):
    id: int
    user_id: int
    service_id: int
    created_at: datetime | None = None


class FavoriteResponseV1(EnvelopeFields):
    data: FavoriteV1


class FavoriteStatusV1(BaseModel):
    is_favorite: bool


class FavoriteStatusResponseV1(EnvelopeFields):
    data: FavoriteStatusV1
