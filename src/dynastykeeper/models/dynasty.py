"""Save-slot summary and snapshot document models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from dynastykeeper.db.models import DynastyRow


class DynastyTotals(BaseModel):
    """Career numbers derived from a dynasty's records."""

    seasons_played: int = 0
    total_wins: int = 0
    total_losses: int = 0
    championships: int = 0


class DynastySummary(BaseModel):
    """Launch-screen row for one save slot. Always derived from the slot's data."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    id: str
    coach_name: str
    school_name: str
    current_year: int
    created_at: datetime
    last_played: datetime
    seasons_played: int = 0
    total_wins: int = 0
    total_losses: int = 0
    championships: int = 0

    @classmethod
    def from_row(cls, row: DynastyRow) -> DynastySummary:
        return cls(
            id=row.id,
            coach_name=row.coach_name,
            school_name=row.school_name,
            current_year=row.current_year,
            created_at=row.created_at,
            last_played=row.last_played,
            seasons_played=row.seasons_played,
            total_wins=row.total_wins,
            total_losses=row.total_losses,
            championships=row.championships,
        )


class DynastySnapshot(BaseModel):
    """Self-contained export of one dynasty.

    ``dynasty_data`` holds every record of the dynasty keyed exactly as in the
    record store (``coachProfile``, ``schedule_2025`` ...), one level deep.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    version: str
    exported_at: str
    dynasty_data: dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
