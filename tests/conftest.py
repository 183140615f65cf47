"""
Shared test fixtures for DayData API tests.

Every test gets its own SQLite database file under tmp_path, reached through
aiosqlite exactly as in production. The ``client`` fixture runs the full
application lifespan, so the schema is created on startup.

CHANGELOG:
- 2026-10-19: Initial creation
"""

from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.api.main import create_app
from dayapi.db.session import create_engine, create_schema, create_session_factory

CERT_SUBJECT = "CN=inverter-gateway,O=Solar Home"
CERT_HEADER = {"X-Client-Cert-Subject": CERT_SUBJECT}

# All ApiSettings environment variable names, used for cleanup.
_ALL_API_ENV_VARS = (
    "DATABASE_URL",
    "CLIENT_CERT_SUBJECT",
    "CLIENT_CERT_HEADERS",
    "CREATE_SCHEMA",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "HOST",
    "PORT",
)


def start_of_today() -> int:
    """Epoch seconds of today's midnight as SQLite computes it (UTC)."""
    now = datetime.now(UTC)
    return int(now.replace(hour=0, minute=0, second=0, microsecond=0).timestamp())


def make_entry(
    ts: int = 1_700_000_000,
    serial: str = "SN-1001",
    **overrides: object,
) -> dict:
    """Build a single /new_entries object with sensible defaults."""
    entry = {
        "TimeStamp": ts,
        "Serial": serial,
        "Power": 1500.0,
        "TotalYield": 12345.6,
        "LastChangedAt": "2026-10-19 12:00:00",
    }
    entry.update(overrides)
    return entry


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    """Async URL of a fresh SQLite database file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'daydata.db'}"


@pytest.fixture(autouse=True)
def _set_test_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, database_url: str
) -> None:
    """Isolate settings from the host environment and any .env file."""
    for var in _ALL_API_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("CLIENT_CERT_SUBJECT", CERT_SUBJECT)


@pytest.fixture()
def app() -> FastAPI:
    """A DayData application built from the test environment."""
    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """TestClient with lifespan events (engine setup, schema) applied.

    Yields:
        TestClient: Configured test client for the FastAPI app.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def session(database_url: str) -> AsyncGenerator[AsyncSession, None]:
    """An AsyncSession on the test database with the schema in place."""
    engine = create_engine(database_url)
    await create_schema(engine)
    factory = create_session_factory(engine)
    async with factory() as db:
        yield db
    await engine.dispose()
