"""
Schema bootstrap tool for local development and first deployments.

Creates the DayData table and indexes if they are missing and, with --seed,
upserts one example reading stamped one minute in the past so the read
endpoints have something to return.

Usage:
    python -m dayapi.db.init_db --database-url sqlite+aiosqlite:///./daydata.db
    python -m dayapi.db.init_db --seed        # DATABASE_URL from environment

CHANGELOG:
- 2026-10-19: Initial creation
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import time
from datetime import UTC, datetime

from dayapi.db.session import create_engine, create_schema, create_session_factory
from dayapi.services.ingestion import ReadingIn, build_upsert

logger = logging.getLogger(__name__)

SEED_SERIAL = "SMA-TEST-001"


def seed_reading(now: float | None = None) -> ReadingIn:
    """Return the example reading used by --seed."""
    if now is None:
        now = time.time()
    ts = int(now) - 60
    return ReadingIn(
        TimeStamp=ts,
        Serial=SEED_SERIAL,
        Power=123.45,
        TotalYield=6789.0,
        LastChangedAt=datetime.fromtimestamp(int(now), tz=UTC).strftime(
            "%Y-%m-%d %H:%M:%S"
        ),
    )


async def init_db(database_url: str, seed: bool = False) -> None:
    """Create the schema and optionally seed one reading.

    Args:
        database_url: Async SQLAlchemy URL.
        seed: Upsert the example reading after creating the schema.
    """
    engine = create_engine(database_url)
    try:
        await create_schema(engine)
        if seed:
            session_factory = create_session_factory(engine)
            reading = seed_reading()
            async with session_factory() as session:
                await session.execute(build_upsert(engine.dialect.name, reading))
                await session.commit()
            logger.info("Seeded %s at TimeStamp=%d", reading.Serial, reading.TimeStamp)
    finally:
        await engine.dispose()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(description="Create the DayData schema.")
    p.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL"),
        help="Async SQLAlchemy URL (default: $DATABASE_URL)",
    )
    p.add_argument(
        "--seed",
        action="store_true",
        help="Insert one example reading for local development",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    args = parse_args(argv)
    if not args.database_url:
        print(
            "DATABASE_URL is not set and --database-url was not given",
            file=sys.stderr,
        )
        return 2
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_db(args.database_url, seed=args.seed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
