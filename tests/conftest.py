"""
Shared test configuration.
Sets the environment the settings loaders require and provides an in-memory SQLite database.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS = {
    "PROJECT_NAME": "servicemap-test",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
    "API_HOST": "0.0.0.0",
    "API_PORT": "8000",
}

# The app module builds its config at import time, before any fixture runs.
for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from servicemap.api.db_access import DatabaseClient  # noqa: E402
from servicemap.common.tables import create_schema  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def db_client() -> Iterator[DatabaseClient]:
    """Fresh in-memory SQLite database with the full schema."""

    client = DatabaseClient(database_url="sqlite+pysqlite:///:memory:")
    create_schema(client.engine)
    try:
        yield client
    finally:
        client.engine.dispose()
