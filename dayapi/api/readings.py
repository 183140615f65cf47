"""
Read endpoints for DayData views.

All routes are unauthenticated and return ``{"success": true, "data": ...}``.
A database failure is logged and answered with HTTP 500 and
``{"success": false, "error", "details"}``. Only GET /current treats an
empty table as 404; the list views return an empty array.

CHANGELOG:
- 2026-10-19: Add GET /yearly-yield
- 2026-10-19: Initial creation

TODO:
- None
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.api.deps import get_db
from dayapi.services import queries

logger = logging.getLogger(__name__)

router = APIRouter(tags=["readings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def failure_response(error: str, exc: Exception) -> JSONResponse:
    """Build the 500 failure envelope for an unexpected exception.

    Args:
        error: Generic, endpoint-specific message.
        exc: The exception that was caught.

    Returns:
        JSONResponse: HTTP 500 with error and underlying details.
    """
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, "details": str(exc)},
    )


async def _run_view(
    db: AsyncSession,
    query: Callable[[AsyncSession], Awaitable[Any]],
    error: str,
) -> dict | JSONResponse:
    try:
        data = await query(db)
    except Exception as exc:
        logger.exception("%s", error)
        return failure_response(error, exc)
    return {"success": True, "data": data}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/current", response_model=None)
async def current(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Return power, timestamp and total yield of the most recent reading.

    Returns:
        dict: ``{"success": true, "data": {"power", "timestamp", "total_yield"}}``,
        or 404 ``{"error": "No data found"}`` when no readings exist.
    """
    try:
        row = await queries.current_reading(db)
    except Exception as exc:
        logger.exception("Failed to fetch solar meter data")
        return failure_response("Failed to fetch solar meter data", exc)

    if row is None:
        return JSONResponse(status_code=404, content={"error": "No data found"})

    return {
        "success": True,
        "data": {
            "power": row["power"],
            "timestamp": row["timestamp"],
            "total_yield": row["total_yield"],
        },
    }


@router.get("/current-and-max", response_model=None)
async def current_and_max(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Return today's first, today's max-power and the overall latest reading."""
    return await _run_view(
        db, queries.current_and_max, "Failed to fetch current and max data"
    )


@router.get("/max-yield", response_model=None)
async def max_yield(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Return the reading with the highest power ever recorded."""
    return await _run_view(
        db, queries.max_power_reading, "Failed to fetch max yield data"
    )


@router.get("/today", response_model=None)
async def today(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Return all of today's readings, newest first."""
    return await _run_view(db, queries.today_readings, "Failed to fetch today's data")


@router.get("/yearly-yield", response_model=None)
async def yearly_yield(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Return the highest total yield per calendar year, newest year first."""
    return await _run_view(
        db, queries.yearly_yield, "Failed to fetch yearly yield data"
    )
