# This file implements user registration, login and bearer token handling.
# Passwords are stored as werkzeug hashes; tokens are itsdangerous signed payloads with a max age.
# Registration checks uniqueness first; the unique indexes catch a concurrent duplicate.

from __future__ import annotations

import logging
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from servicemap.api.api_config import ApiConfig
from servicemap.api.db_access import DatabaseClient
from servicemap.api.error_handlers import AuthenticationError, ConflictError, ForbiddenError, NotFoundError
from servicemap.api.validation import Credentials, Registration
from servicemap.common.tables import as_datetime, users

LOGGER = logging.getLogger("servicemap.auth")

TOKEN_SALT = "servicemap-auth-token"
_DUPLICATE_USER_MESSAGE = "User with this email or username already exists"
_BAD_CREDENTIALS_MESSAGE = "Invalid email or password"

_USER_COLUMNS = "u.id, u.username, u.email, u.created_at, u.updated_at"


def _public_user(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "username": row["username"],
        "email": row["email"],
        "created_at": as_datetime(row.get("created_at")),
        "updated_at": as_datetime(row.get("updated_at")),
    }


class AuthService:
    """Accounts and signed access tokens."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.serializer = URLSafeTimedSerializer(config.auth_secret_key, salt=TOKEN_SALT)

    def register(self, registration: Registration) -> dict[str, Any]:
        if self._find_existing(registration) is not None:
            raise ConflictError(_DUPLICATE_USER_MESSAGE)

        statement = insert(users).values(
            username=registration.username,
            email=registration.email,
            password_hash=generate_password_hash(registration.password),
        )
        try:
            user_id = self.db.insert(statement)
        except IntegrityError as exc:
            if self._find_existing(registration) is None:
                raise
            LOGGER.warning("Concurrent registration conflict email=%s", registration.email)
            raise ConflictError(_DUPLICATE_USER_MESSAGE) from exc

        user = self.get_user(user_id)
        LOGGER.info("Registered user id=%s", user_id)
        return {"token": self.issue_token(user_id=user_id, email=registration.email), "user": user}

    def login(self, credentials: Credentials) -> dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT {_USER_COLUMNS}, u.password_hash FROM users u WHERE u.email = :email",
            {"email": credentials.email},
        )
        if row is None or not check_password_hash(row["password_hash"], credentials.password):
            raise AuthenticationError(_BAD_CREDENTIALS_MESSAGE)

        user = _public_user(row)
        return {"token": self.issue_token(user_id=user["id"], email=user["email"]), "user": user}

    def get_user(self, user_id: int) -> dict[str, Any]:
        row = self.db.fetch_one(f"SELECT {_USER_COLUMNS} FROM users u WHERE u.id = :user_id", {"user_id": user_id})
        if row is None:
            raise NotFoundError("User not found")
        return _public_user(row)

    def _find_existing(self, registration: Registration) -> dict[str, Any] | None:
        return self.db.fetch_one(
            "SELECT u.id FROM users u WHERE u.email = :email OR u.username = :username",
            {"email": registration.email, "username": registration.username},
        )

    def issue_token(self, *, user_id: int, email: str) -> str:
        return self.serializer.dumps({"user_id": user_id, "email": email})

    def verify_token(self, token: str | None) -> int:
        """Return the user id carried by `token`."""

        if not token:
            raise AuthenticationError("Access token required")
        try:
            payload = self.serializer.loads(token, max_age=self.config.auth_token_max_age_seconds)
        except SignatureExpired as exc:
            raise AuthenticationError("Token expired") from exc
        except BadSignature as exc:
            raise ForbiddenError("Invalid token") from exc

        user_id = payload.get("user_id") if isinstance(payload, dict) else None
        if not isinstance(user_id, int):
            raise ForbiddenError("Invalid token")
        return user_id
