"""
Unit tests for entry validation and upsert statement construction.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Non-finite Power and TotalYield
"""

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from dayapi.services.ingestion import (
    ReadingIn,
    build_upsert,
    ingest_entries,
    validate_entries,
)
from tests.conftest import make_entry


class TestValidateEntries:
    """Entries are checked one by one and errors keep their index."""

    def test_valid_and_invalid_split(self) -> None:
        bad = make_entry()
        del bad["TotalYield"]
        valid, errors = validate_entries([make_entry(), bad, make_entry(ts=5)])
        assert [index for index, _ in valid] == [0, 2]
        assert errors == [
            {
                "index": 1,
                "error": "Missing or invalid fields: TotalYield",
                "fields": ["TotalYield"],
            }
        ]

    def test_zero_numbers_are_defined(self) -> None:
        valid, errors = validate_entries([make_entry(ts=0, Power=0, TotalYield=0)])
        assert errors == []
        assert valid[0][1].Power == 0

    def test_null_number_rejected(self) -> None:
        _, errors = validate_entries([make_entry(TotalYield=None)])
        assert errors[0]["fields"] == ["TotalYield"]

    def test_empty_string_rejected(self) -> None:
        _, errors = validate_entries([make_entry(LastChangedAt="")])
        assert errors[0]["fields"] == ["LastChangedAt"]

    def test_string_number_rejected(self) -> None:
        _, errors = validate_entries([make_entry(Power="12")])
        assert errors[0]["fields"] == ["Power"]

    @pytest.mark.parametrize("field", ["Power", "TotalYield"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_number_rejected(self, field: str, value: float) -> None:
        valid, errors = validate_entries([make_entry(**{field: value})])
        assert valid == []
        assert errors[0]["fields"] == [field]

    def test_integer_number_accepted(self) -> None:
        valid, _ = validate_entries([make_entry(Power=1500, TotalYield=12345)])
        assert valid[0][1].Power == 1500

    def test_several_missing_fields_listed(self) -> None:
        _, errors = validate_entries([{"TimeStamp": 1}])
        assert errors[0]["fields"] == [
            "Serial",
            "Power",
            "TotalYield",
            "LastChangedAt",
        ]

    def test_non_object(self) -> None:
        _, errors = validate_entries(["nope"])
        assert errors == [
            {"index": 0, "error": "Entry must be a JSON object", "fields": []}
        ]


class TestBuildUpsert:
    """The statement conflicts on the natural key and updates the values."""

    @pytest.mark.parametrize(
        ("name", "dialect"),
        [("sqlite", sqlite.dialect()), ("postgresql", postgresql.dialect())],
    )
    def test_on_conflict_update(self, name: str, dialect) -> None:
        reading = ReadingIn.model_validate(make_entry())
        sql = str(build_upsert(name, reading).compile(dialect=dialect))
        assert 'ON CONFLICT ("TimeStamp", "Serial") DO UPDATE' in sql
        assert '"Power" = excluded."Power"' in sql
        assert '"TotalYield" = excluded."TotalYield"' in sql
        assert '"LastChangedAt" = excluded."LastChangedAt"' in sql

    def test_unknown_dialect(self) -> None:
        reading = ReadingIn.model_validate(make_entry())
        with pytest.raises(KeyError):
            build_upsert("mssql", reading)


class TestIngestEntries:
    """Service-level behaviour against SQLite."""

    @pytest.mark.asyncio
    async def test_nothing_valid_writes_nothing(self, session: AsyncSession) -> None:
        outcome = await ingest_entries(session, [{"Serial": "x"}])
        assert outcome.valid_count == 0
        assert outcome.results == []
        assert len(outcome.validation_errors) == 1

    @pytest.mark.asyncio
    async def test_results_follow_submission_order(
        self, session: AsyncSession
    ) -> None:
        outcome = await ingest_entries(
            session, [make_entry(ts=3), {"bad": True}, make_entry(ts=1)]
        )
        assert outcome.valid_count == 2
        assert [(r["index"], r["TimeStamp"]) for r in outcome.results] == [
            (0, 3),
            (2, 1),
        ]
