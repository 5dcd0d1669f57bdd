# This file builds response envelopes for API endpoints in a consistent format.
# Every payload carries version metadata, the request id and a generation timestamp next to `data`.
# The helpers return plain dictionaries that Pydantic response models validate at runtime.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from servicemap.api.api_config import ApiConfig
from servicemap.api.schema_versions import build_version_fields


def utc_now_iso() -> datetime:
    """Return timezone-aware UTC timestamp for response generation."""

    return datetime.now(tz=UTC)


def build_object_envelope(
    *,
    api_version_path: str,
    schema_version: str,
    request_id: str,
    data: Any,
    message: str | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard response envelope."""

    return {
        **build_version_fields(api_version_path=api_version_path, schema_version=schema_version),
        "request_id": request_id,
        "generated_at": utc_now_iso(),
        "data": data,
        "message": message,
        "warnings": warnings,
    }


def envelope(config: ApiConfig, request_id: str, data: Any, *, message: str | None = None) -> dict[str, Any]:
    return build_object_envelope(
        api_version_path=config.api_version_path,
        schema_version=config.schema_version,
        request_id=request_id,
        data=data,
        message=message,
    )
