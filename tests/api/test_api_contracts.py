# This file tests API schema contracts, envelope helpers, and versioning utilities.
# It exists to detect accidental response-shape changes before release.
# The tests assert required paths and key fields remain present in OpenAPI output.

from __future__ import annotations

import pytest

from servicemap.api.app import app
from servicemap.api.response_envelope import build_object_envelope, envelope
from servicemap.api.schema_versions import api_version_label, build_version_fields
from tests.api.support import build_test_config


def test_openapi_contains_required_paths() -> None:
    schema = app.openapi()
    required_paths = {
        "/health",
        "/ready",
        "/version",
        "/api/v1/auth/register",
        "/api/v1/auth/login",
        "/api/v1/auth/me",
        "/api/v1/services/search",
        "/api/v1/services/types",
        "/api/v1/services/popular",
        "/api/v1/services/type/{type_id}",
        "/api/v1/services/search-address",
        "/api/v1/services/{service_id}",
        "/api/v1/services/countries",
        "/api/v1/services/countries/{country_code}",
        "/api/v1/services/countries/{country_code}/divisions",
        "/api/v1/services/countries/{country_code}/divisions/level/{level}",
        "/api/v1/services/countries/{country_code}/divisions/search",
        "/api/v1/services/countries/{country_code}/address/format",
        "/api/v1/services/countries/{country_code}/address/validate",
        "/api/v1/favorites",
        "/api/v1/favorites/{service_id}",
        "/api/v1/favorites/{service_id}/status",
        "/api/v1/favorites/{service_id}/toggle",
    }
    missing = required_paths - set(schema.get("paths", {}).keys())
    assert not missing


def test_envelope_includes_version_and_request_fields() -> None:
    payload = build_object_envelope(
        api_version_path="/api/v1",
        schema_version="1.0.0",
        request_id="req-2",
        data={"ok": True},
    )
    wrapped = envelope(build_test_config(), "req-3", [], message="done")

    assert payload["api_version"] == "v1"
    assert payload["request_id"] == "req-2"
    assert payload["data"] == {"ok": True}
    assert payload["message"] is None
    assert wrapped["message"] == "done"
    assert wrapped["request_id"] == "req-3"
    assert "generated_at" in wrapped


def test_version_helpers() -> None:
    assert build_version_fields(api_version_path="/api/v1", schema_version="1.0.0") == {
        "api_version": "v1",
        "schema_version": "1.0.0",
    }
    assert api_version_label("/api/v2/") == "v2"
    with pytest.raises(ValueError):
        api_version_label("/")
