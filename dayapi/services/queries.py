"""
Read queries for the DayData views.

Each view is a single parameter-free SQL statement over the DayData table.
Calendar boundaries ("start of today", "year of a reading") are computed by
the database at query time, so the SQL differs per dialect; DIALECT_SQL maps
a dialect name to the fragments that are spliced into the shared templates.

Max queries pick one row when several share the extreme value. Which one is
left to the database.

CHANGELOG:
- 2026-10-19: Add yearly yield maxima
- 2026-10-19: Initial creation

TODO:
- None
"""

import logging
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DialectSQL:
    """Dialect-specific SQL expressions.

    Attributes:
        start_of_day: Integer epoch seconds of the current day's midnight.
        year_of_ts: Integer calendar year of the TimeStamp column.
        formatted_ts: TimeStamp rendered as 'YYYY-MM-DD HH:MM:SS'.
    """

    start_of_day: str
    year_of_ts: str
    formatted_ts: str


DIALECT_SQL: dict[str, DialectSQL] = {
    # SQLite evaluates 'now' in UTC.
    "sqlite": DialectSQL(
        start_of_day="CAST(strftime('%s', 'now', 'start of day') AS INTEGER)",
        year_of_ts="CAST(strftime('%Y', \"TimeStamp\", 'unixepoch') AS INTEGER)",
        formatted_ts="strftime('%Y-%m-%d %H:%M:%S', \"TimeStamp\", 'unixepoch')",
    ),
    # PostgreSQL evaluates date_trunc/to_timestamp in the session time zone.
    "postgresql": DialectSQL(
        start_of_day="CAST(EXTRACT(EPOCH FROM date_trunc('day', now())) AS BIGINT)",
        year_of_ts="CAST(EXTRACT(YEAR FROM to_timestamp(\"TimeStamp\")) AS INTEGER)",
        formatted_ts="to_char(to_timestamp(\"TimeStamp\"), 'YYYY-MM-DD HH24:MI:SS')",
    ),
}

_ROW_COLUMNS = (
    'a."TimeStamp", a."Serial", a."Power", a."TotalYield", a."LastChangedAt"'
)

_CURRENT_SQL = """\
SELECT "Power" AS power, {formatted_ts} AS "timestamp", "TotalYield" AS total_yield
FROM "DayData"
ORDER BY "timestamp" DESC
LIMIT 1"""

_TODAY_FIRST_SQL = f"""\
SELECT {_ROW_COLUMNS}
FROM "DayData" a
INNER JOIN (
    SELECT MIN("TimeStamp") AS first_ts
    FROM "DayData"
    WHERE "TimeStamp" >= {{start_of_day}}
) b ON a."TimeStamp" = b.first_ts
LIMIT 1"""

_TODAY_MAX_POWER_SQL = f"""\
SELECT {_ROW_COLUMNS}
FROM "DayData" a
WHERE a."TimeStamp" >= {{start_of_day}}
ORDER BY a."Power" DESC
LIMIT 1"""

_LATEST_SQL = f"""\
SELECT {_ROW_COLUMNS}
FROM "DayData" a
INNER JOIN (
    SELECT MAX("TimeStamp") AS latest_ts
    FROM "DayData"
) b ON a."TimeStamp" = b.latest_ts
LIMIT 1"""

_MAX_POWER_SQL = f"""\
SELECT {_ROW_COLUMNS}
FROM "DayData" a
INNER JOIN (
    SELECT MAX("Power") AS max_power
    FROM "DayData"
) b ON a."Power" = b.max_power
LIMIT 1"""

_TODAY_SQL = f"""\
SELECT {_ROW_COLUMNS}
FROM "DayData" a
WHERE a."TimeStamp" >= {{start_of_day}}
ORDER BY a."TimeStamp" DESC"""

_YEARLY_YIELD_SQL = """\
SELECT {year_of_ts} AS "year", MAX("TotalYield") AS total_yield
FROM "DayData"
GROUP BY {year_of_ts}
ORDER BY "year" DESC"""


def dialect_sql(db: AsyncSession) -> DialectSQL:
    """Return the SQL fragments for the session's database dialect.

    Raises:
        KeyError: If the dialect is not supported.
    """
    return DIALECT_SQL[db.get_bind().dialect.name]


def _render(template: str, fragments: DialectSQL) -> str:
    return template.format(
        start_of_day=fragments.start_of_day,
        year_of_ts=fragments.year_of_ts,
        formatted_ts=fragments.formatted_ts,
    )


async def _first(db: AsyncSession, template: str) -> dict | None:
    result = await db.execute(text(_render(template, dialect_sql(db))))
    row = result.mappings().first()
    return dict(row) if row is not None else None


async def _all(db: AsyncSession, template: str) -> list[dict]:
    result = await db.execute(text(_render(template, dialect_sql(db))))
    return [dict(row) for row in result.mappings().all()]


async def current_reading(db: AsyncSession) -> dict | None:
    """Return power, formatted timestamp and total yield of the newest row.

    Returns:
        dict | None: ``{"power", "timestamp", "total_yield"}`` or None when
        the table is empty.
    """
    return await _first(db, _CURRENT_SQL)


async def current_and_max(db: AsyncSession) -> list[dict]:
    """Return today's first reading, today's max-power reading and the latest.

    The three queries run one after another. A query that finds nothing
    contributes no entry, so the result holds zero to three rows.
    """
    rows: list[dict] = []
    for template in (_TODAY_FIRST_SQL, _TODAY_MAX_POWER_SQL, _LATEST_SQL):
        row = await _first(db, template)
        if row is not None:
            rows.append(row)
    return rows


async def max_power_reading(db: AsyncSession) -> list[dict]:
    """Return a single row holding the all-time maximum power, if any."""
    row = await _first(db, _MAX_POWER_SQL)
    return [row] if row is not None else []


async def today_readings(db: AsyncSession) -> list[dict]:
    """Return every row since the start of today, newest first."""
    return await _all(db, _TODAY_SQL)


async def yearly_yield(db: AsyncSession) -> list[dict]:
    """Return the maximum TotalYield for each calendar year, newest year first."""
    rows = await _all(db, _YEARLY_YIELD_SQL)
    logger.debug("Yearly yield query returned %d year(s)", len(rows))
    return rows
