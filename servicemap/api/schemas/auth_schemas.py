# This file defines schemas for registration, login and the signed-in user profile.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from servicemap.api.schemas.common import EnvelopeFields


class UserV1(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthPayloadV1(BaseModel):
    token: str
    user: UserV1


class AuthResponseV1(EnvelopeFields):
    data: AuthPayloadV1


class UserResponseV1(EnvelopeFields):
    data: UserV1
