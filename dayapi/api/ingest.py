"""
POST /new_entries endpoint for ingesting DayData readings.

Accepts a single JSON object or an array of objects, guarded by the client
certificate subject check. Invalid entries are reported by index and
skipped; valid ones are upserted one by one. The ``inserted`` count in the
response is the number of entries that passed validation, so callers must
check each ``results`` status to learn which rows were actually written.
A body that is not a JSON object or array is rejected as malformed.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Parse the body with pydantic; NaN/Infinity literals are 400

TODO:
- None
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ConfigDict, TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.api.deps import get_db, require_client_cert
from dayapi.api.readings import failure_response
from dayapi.services.ingestion import ingest_entries

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingest"])

# Strict JSON: NaN and Infinity literals are rejected as malformed.
_BODY_ADAPTER = TypeAdapter(
    list[Any] | dict[str, Any], config=ConfigDict(allow_inf_nan=False)
)


@router.post("/new_entries", response_model=None)
async def new_entries(
    request: Request,
    subject: Annotated[str, Depends(require_client_cert)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict | JSONResponse:
    """Ingest one or more readings.

    Args:
        request: The incoming FastAPI request.
        subject: Accepted client certificate subject.
        db: Async database session.

    Returns:
        dict: ``{"success": true, "inserted", "results"}`` plus
        ``validationErrors`` when some entries were rejected.

    Raises:
        HTTPException: 403/500 from the certificate check.
    """
    body = await request.body()
    try:
        payload = _BODY_ADAPTER.validate_json(body)
    except ValidationError as exc:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid JSON body",
                "details": str(exc),
            },
        )

    entries = payload if isinstance(payload, list) else [payload]
    logger.debug("Received %d entries from %s", len(entries), subject)

    try:
        outcome = await ingest_entries(db, entries)
    except Exception as exc:
        logger.exception("Failed to insert entries")
        return failure_response("Failed to insert entries", exc)

    if outcome.valid_count == 0:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "No valid entries to insert",
                "validationErrors": outcome.validation_errors,
            },
        )

    response: dict = {
        "success": True,
        "inserted": outcome.valid_count,
        "results": outcome.results,
    }
    if outcome.validation_errors:
        response["validationErrors"] = outcome.validation_errors
    return response
