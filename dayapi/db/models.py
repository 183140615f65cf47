"""
SQLAlchemy ORM models for the DayData database.

Defines the DayData model storing one inverter reading per (TimeStamp,
Serial). The composite primary key is the natural key used as the upsert
conflict target; two secondary indexes serve the range and max-power
read queries.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from sqlalchemy import BigInteger, Double, Index, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all DayData ORM models."""

    pass


class DayData(Base):
    """A single timestamped reading from one inverter.

    Column names keep the PascalCase spelling used on the wire so that
    query rows serialise straight into response bodies.

    Attributes:
        TimeStamp: Measurement instant in Unix epoch seconds.
        Serial: Inverter serial number.
        Power: Instantaneous output power.
        TotalYield: Cumulative energy counter.
        LastChangedAt: Caller-supplied, human-readable write marker.
    """

    __tablename__ = "DayData"
    __table_args__ = (
        Index("idx_DayData_TimeStamp", "TimeStamp"),
        Index("idx_DayData_Power", "Power"),
    )

    TimeStamp: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        nullable=False,
    )
    Serial: Mapped[str] = mapped_column(Text, primary_key=True, nullable=False)
    Power: Mapped[float] = mapped_column(Double, nullable=False)
    TotalYield: Mapped[float] = mapped_column(Double, nullable=False)
    LastChangedAt: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        """Return string representation of the DayData row."""
        return (
            f"DayData(TimeStamp={self.TimeStamp!r}, "
            f"Serial={self.Serial!r}, Power={self.Power!r})"
        )
