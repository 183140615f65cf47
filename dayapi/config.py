"""
API configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All configuration values come from environment variables or .env files;
no hardcoded database locations or certificate subjects.

CHANGELOG:
- 2026-10-19: Add logging and CORS settings
- 2026-10-19: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_CERT_HEADERS = "X-Client-Cert-Subject,X-SSL-Client-S-DN,X-Client-DN"


class ApiSettings(BaseSettings):
    """DayData API configuration.

    Only ``database_url`` is required at startup. An empty
    ``client_cert_subject`` is accepted here and rejected per request by the
    ingestion access check, so read endpoints keep working while the write
    endpoint reports the misconfiguration.

    Attributes:
        database_url: SQLAlchemy async URL (sqlite+aiosqlite or
            postgresql+asyncpg).
        client_cert_subject: Expected client certificate subject for
            POST /new_entries.
        client_cert_headers: Comma-separated header names checked, in
            order, for the presented certificate subject.
        create_schema: Create the DayData table and indexes at startup.
        cors_origins: Comma-separated origins allowed to call read endpoints.
        log_level: Root log level name.
        log_format: ``json`` or ``text``.
        host: Interface the HTTP server binds to.
        port: TCP port the HTTP server listens on.
    """

    database_url: str
    client_cert_subject: str = ""
    client_cert_headers: str = DEFAULT_CERT_HEADERS
    create_schema: bool = True
    cors_origins: str = ""
    log_level: str = "INFO"
    log_format: str = "json"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url")
    @classmethod
    def database_url_must_be_async(cls, v: str) -> str:
        """Validate that the URL names one of the supported async drivers."""
        if not v.startswith(("sqlite+aiosqlite://", "postgresql+asyncpg://")):
            raise ValueError(
                "DATABASE_URL must use sqlite+aiosqlite:// or "
                f"postgresql+asyncpg:// (got: '{v.split('://')[0]}')"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard level name (got: '{v}')")
        return level

    @field_validator("log_format")
    @classmethod
    def log_format_must_be_known(cls, v: str) -> str:
        """Validate the log format is json or text."""
        fmt = v.strip().lower()
        if fmt not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return fmt

    @property
    def cert_header_names(self) -> list[str]:
        """Return the configured certificate header names in lookup order."""
        return [h.strip() for h in self.client_cert_headers.split(",") if h.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        """Return the configured CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
