"""
Ingestion service for DayData readings.

Validates raw JSON entries one by one and upserts the valid ones with
INSERT ... ON CONFLICT ("TimeStamp", "Serial") DO UPDATE. Every row is
written and committed on its own; a failing row is rolled back, recorded
and skipped so the remaining rows are still written.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Reject non-finite Power and TotalYield values

TODO:
- None
"""

import logging
from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.db.models import DayData

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}

# Finite JSON number; an overflowing literal such as 1e400 decodes to inf.
FiniteNumber = StrictInt | Annotated[float, Field(strict=True, allow_inf_nan=False)]


class ReadingIn(BaseModel):
    """One reading as posted to /new_entries.

    Numbers must be present, non-null and finite (zero is valid); strings
    must be non-empty. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    TimeStamp: StrictInt
    Serial: str = Field(min_length=1)
    Power: FiniteNumber
    TotalYield: FiniteNumber
    LastChangedAt: str = Field(min_length=1)


@dataclass
class IngestResult:
    """Outcome of one ingestion request.

    Attributes:
        valid_count: Number of entries that passed validation.
        results: Per-row write outcomes, in submission order.
        validation_errors: Indexed errors for rejected entries.
    """

    valid_count: int = 0
    results: list[dict] = field(default_factory=list)
    validation_errors: list[dict] = field(default_factory=list)


def _invalid_fields(exc: ValidationError) -> list[str]:
    names = []
    for error in exc.errors():
        if error["loc"] and error["loc"][0] not in names:
            names.append(str(error["loc"][0]))
    return names


def validate_entries(
    entries: list[Any],
) -> tuple[list[tuple[int, ReadingIn]], list[dict]]:
    """Split raw entries into valid readings and indexed validation errors.

    Args:
        entries: Decoded JSON values, one per submitted reading.

    Returns:
        tuple: ``(valid, errors)`` where ``valid`` holds ``(index, reading)``
        pairs and ``errors`` holds ``{"index", "error", "fields"}`` dicts.
    """
    valid: list[tuple[int, ReadingIn]] = []
    errors: list[dict] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors.append(
                {"index": index, "error": "Entry must be a JSON object", "fields": []}
            )
            continue
        try:
            valid.append((index, ReadingIn.model_validate(entry)))
        except ValidationError as exc:
            fields = _invalid_fields(exc)
            errors.append(
                {
                    "index": index,
                    "error": f"Missing or invalid fields: {', '.join(fields)}",
                    "fields": fields,
                }
            )
    return valid, errors


def build_upsert(dialect_name: str, reading: ReadingIn):
    """Build the upsert statement for one reading.

    Args:
        dialect_name: SQLAlchemy dialect name of the target database.
        reading: The validated reading.

    Returns:
        Insert: An INSERT ... ON CONFLICT DO UPDATE statement.

    Raises:
        KeyError: If the dialect has no upsert support here.
    """
    insert = _INSERT_BY_DIALECT[dialect_name]
    stmt = insert(DayData).values(**reading.model_dump())
    return stmt.on_conflict_do_update(
        index_elements=["TimeStamp", "Serial"],
        set_={
            "Power": stmt.excluded.Power,
            "TotalYield": stmt.excluded.TotalYield,
            "LastChangedAt": stmt.excluded.LastChangedAt,
        },
    )


async def ingest_entries(db: AsyncSession, entries: list[Any]) -> IngestResult:
    """Validate and upsert a batch of readings.

    Rows are written sequentially. A database error on one row is rolled
    back and reported with ``status: "failed"``; later rows are still
    attempted. Nothing is written when no entry validates.

    Args:
        db: Async SQLAlchemy session.
        entries: Decoded JSON values, one per submitted reading.

    Returns:
        IngestResult: Valid count, per-row results and validation errors.
    """
    valid, errors = validate_entries(entries)
    outcome = IngestResult(valid_count=len(valid), validation_errors=errors)
    if not valid:
        logger.info("Rejected batch of %d entries, none valid", len(entries))
        return outcome

    dialect_name = db.get_bind().dialect.name
    failed = 0
    for index, reading in valid:
        row = {"index": index, "TimeStamp": reading.TimeStamp, "Serial": reading.Serial}
        try:
            await db.execute(build_upsert(dialect_name, reading))
            await db.commit()
            row["status"] = "success"
        except Exception as exc:
            await db.rollback()
            failed += 1
            logger.warning(
                "Upsert failed for TimeStamp=%s Serial=%s: %s",
                reading.TimeStamp,
                reading.Serial,
                exc,
            )
            row["status"] = "failed"
            row["error"] = str(exc)
        outcome.results.append(row)

    logger.info(
        "Ingested %d/%d entries (%d invalid, %d failed)",
        len(valid) - failed,
        len(entries),
        len(errors),
        failed,
    )
    return outcome
