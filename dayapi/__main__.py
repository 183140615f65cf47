"""
Run the DayData API with uvicorn: ``python -m dayapi``.

TLS, including client certificate verification, is expected to be
terminated by the reverse proxy in front of this process.
"""

import uvicorn

from dayapi.api.main import configure_logging, create_app
from dayapi.config import ApiSettings


def main() -> None:
    """Load settings, configure logging and serve the application."""
    settings = ApiSettings()
    configure_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
