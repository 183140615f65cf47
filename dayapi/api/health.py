"""
Health check endpoint for the DayData API.

Provides a simple GET /health endpoint that returns {"status": "ok"} with
HTTP 200. No authentication is required and the database is not touched.

CHANGELOG:
- 2026-10-19: Initial creation
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status.

    Returns:
        dict: ``{"status": "ok"}`` indicating the service is alive.
    """
    return {"status": "ok"}
