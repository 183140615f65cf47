"""
FastAPI application factory for the DayData API.

Settings are loaded when the application is created. The lifespan owns the
database engine: it creates the engine and session factory, ensures the
schema, and stores both on app.state together with the ClientCertAuth gate
used by the ingestion route.

CHANGELOG:
- 2026-10-19: Render unmatched routes and dict HTTPException details as JSON
- 2026-10-19: Initial creation
"""

import json
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dayapi.api.health import router as health_router
from dayapi.api.ingest import router as ingest_router
from dayapi.api.readings import router as readings_router
from dayapi.auth import ClientCertAuth
from dayapi.config import ApiSettings
from dayapi.db.session import create_engine, create_schema, create_session_factory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging for the API process.

    Installs a single stderr handler, JSON-formatted unless ``fmt`` is
    ``"text"``.
    """
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "text":
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Lifespan and error handlers
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: database setup and teardown.

    Startup:
        - Creates the async engine and session factory.
        - Creates the schema when CREATE_SCHEMA is enabled.
        - Builds the ClientCertAuth gate.

    Shutdown:
        - Disposes of the engine.
    """
    settings: ApiSettings = app.state.settings

    engine = create_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    if settings.create_schema:
        await create_schema(engine)

    app.state.cert_auth = ClientCertAuth(
        settings.client_cert_subject, settings.cert_header_names
    )
    if not settings.client_cert_subject:
        logger.warning("CLIENT_CERT_SUBJECT is empty, POST /new_entries will fail")

    logger.info("DayData API ready (%s)", engine.dialect.name)
    yield
    await engine.dispose()
    logger.info("DayData API shutting down")


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors as JSON bodies.

    Unknown paths and unsupported methods on known paths both become the
    404 Not Found body. Dict details are used as the body verbatim.
    """
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": "The requested endpoint does not exist",
            },
        )
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    """Build the DayData FastAPI application.

    Args:
        settings: Optional settings; loaded from the environment if omitted.

    Returns:
        FastAPI: The configured application.

    Raises:
        pydantic.ValidationError: If required settings are missing or invalid.
    """
    if settings is None:
        settings = ApiSettings()

    app = FastAPI(
        title="DayData API",
        description="Solar inverter day data: ingestion and read views.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_methods=["GET"],
        )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(health_router)
    app.include_router(readings_router)
    app.include_router(ingest_router)
    return app
