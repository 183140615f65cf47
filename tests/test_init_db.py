"""
Tests for the schema bootstrap tool.

CHANGELOG:
- 2026-10-19: Initial creation
"""

import sqlite3

import pytest

from dayapi.db.init_db import SEED_SERIAL, init_db, main, seed_reading


def _sqlite_path(database_url: str) -> str:
    return database_url.removeprefix("sqlite+aiosqlite:///")


def _index_names(database_url: str) -> set[str]:
    with sqlite3.connect(_sqlite_path(database_url)) as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'index' AND tbl_name = 'DayData'"
        ).fetchall()
    return {name for (name,) in rows}


class TestSeedReading:
    def test_one_minute_in_the_past(self) -> None:
        reading = seed_reading(now=1_700_000_000)
        assert reading.TimeStamp == 1_699_999_940
        assert reading.Serial == SEED_SERIAL
        assert reading.Power == 123.45
        assert reading.TotalYield == 6789.0
        assert reading.LastChangedAt == "2023-11-14 22:13:20"


class TestInitDb:
    @pytest.mark.asyncio
    async def test_creates_table_and_indexes(self, database_url: str) -> None:
        await init_db(database_url)
        assert {"idx_DayData_TimeStamp", "idx_DayData_Power"} <= _index_names(
            database_url
        )

    @pytest.mark.asyncio
    async def test_idempotent_with_seed(self, database_url: str) -> None:
        await init_db(database_url, seed=True)
        await init_db(database_url, seed=True)
        with sqlite3.connect(_sqlite_path(database_url)) as conn:
            serials = conn.execute('SELECT "Serial" FROM "DayData"').fetchall()
        # Two runs in the same second upsert the same key; a slower second
        # run may land on the next second.
        assert 1 <= len(serials) <= 2
        assert {s for (s,) in serials} == {SEED_SERIAL}


class TestMain:
    def test_runs_from_environment(self, database_url: str) -> None:
        assert main(["--seed"]) == 0
        with sqlite3.connect(_sqlite_path(database_url)) as conn:
            count = conn.execute('SELECT COUNT(*) FROM "DayData"').fetchone()[0]
        assert count == 1

    def test_requires_database_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL")
        assert main([]) == 2
