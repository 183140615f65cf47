"""
FastAPI dependency injection providers.

Provides database sessions and the client certificate gate for use with
FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-19: Add require_client_cert dependency
- 2026-10-19: Initial creation
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.db.session import get_async_session


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session.

    Convenience wrapper around get_async_session that tests can replace
    through ``app.dependency_overrides``.

    Yields:
        AsyncSession: An async SQLAlchemy session.
    """
    async for session in get_async_session(request):
        yield session


async def require_client_cert(request: Request) -> str:
    """Run the ClientCertAuth stored on app.state against the request.

    Args:
        request: The incoming FastAPI request.

    Returns:
        str: The accepted certificate subject.
    """
    return request.app.state.cert_auth.verify(request)
