"""SQLAlchemy ORM models for the dynasty keeper database.

Two tables:
  - ``records``: the flat key/value working set of the active dynasty. Each
    value is an independently JSON-serialized document, so one corrupted
    record never prevents the rest from loading.
  - ``dynasties``: one row per save slot, holding the summary shown on the
    launch screen and the saved copy of that slot's records.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class RecordRow(Base):
    """One named record of the active working set (e.g. ``schedule_2025``)."""

    __tablename__ = "records"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)


class DynastyRow(Base):
    """A save slot: summary columns plus the flattened records of the dynasty."""

    __tablename__ = "dynasties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    coach_name: Mapped[str] = mapped_column(String(100), nullable=False)
    school_name: Mapped[str] = mapped_column(String(100), nullable=False)
    current_year: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    last_played: Mapped[datetime] = mapped_column(DateTime, default=_now)
    seasons_played: Mapped[int] = mapped_column(Integer, default=0)
    total_wins: Mapped[int] = mapped_column(Integer, default=0)
    total_losses: Mapped[int] = mapped_column(Integer, default=0)
    championships: Mapped[int] = mapped_column(Integer, default=0)
    data: Mapped[dict] = mapped_column(JSON, default=dict)

    __table_args__ = (Index("ix_dynasties_school_name", "school_name", unique=True),)
