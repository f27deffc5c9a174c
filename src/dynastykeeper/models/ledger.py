"""Season ledger models: the per-year record and the lists it captures."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from dynastykeeper.models.base import RecordModel
from dynastykeeper.models.schedule import Game


class SchoolColors(RecordModel):
    primary: str = "#3B82F6"
    secondary: str = "#EF4444"
    accent: str = "#10B981"


class CoachProfile(RecordModel):
    """Who is coaching where. The school name is the dynasty's identity."""

    coach_name: str = ""
    school_name: str = ""
    school_colors: SchoolColors | None = None


class Player(RecordModel):
    """A roster entry."""

    id: int | str | None = None
    name: str = ""
    position: str = ""
    year: str = ""
    rating: str = ""
    jersey_number: str = ""
    dev_trait: Literal["Normal", "Impact", "Star", "Elite"] | None = None
    notes: str | None = None
    is_redshirted: bool = False


class Recruit(RecordModel):
    id: int | str | None = None
    recruited_year: int
    name: str = ""
    stars: str = ""
    position: str = ""
    rating: str = ""
    potential: str = ""


class Transfer(RecordModel):
    id: int | str | None = None
    transfer_year: int
    player_name: str = ""
    position: str = ""
    stars: str = ""
    transfer_direction: Literal["From", "To"] = "From"
    school: str = ""


class Award(RecordModel):
    id: int | str | None = None
    player_name: str = ""
    award_name: str = ""
    year: int
    team: Literal["1st Team", "2nd Team", "Freshman"] | None = None


class DraftedPlayer(RecordModel):
    id: str = ""
    player_name: str = ""
    original_team: str = ""
    drafted_team: str = ""
    round: int = 1
    pick: int = 1
    year: int


class Trophy(RecordModel):
    id: int | str | None = None
    category: Literal["championship", "bowl", "conference", "rivalry"]
    type: str = ""
    name: str = ""
    year: int
    description: str | None = None
    opponent: str | None = None
    location: str | None = None
    significance: Literal["High", "Medium", "Low"] | None = None


class YearRecord(RecordModel):
    """Ledger entry for one season-year.

    Recruits, transfers and awards are copies taken when the season is
    finalized; editing the dynasty-wide lists afterwards does not change them.
    """

    year: int
    overall_record: str = "0-0"
    conference_record: str = "0-0"
    bowl_game: str = ""
    bowl_result: str = ""
    points_for: str = "0"
    points_against: str = "0"
    nat_champ: str = ""
    heisman: str = ""
    recruiting_class_placement: str = ""
    final_ranking: str = ""
    conference_finish: str = ""
    schedule: list[Game] = Field(default_factory=list)
    recruits: list[Recruit] = Field(default_factory=list)
    transfers: list[Transfer] = Field(default_factory=list)
    player_awards: list[Award] = Field(default_factory=list)
    players_drafted: list[DraftedPlayer] = Field(default_factory=list)

    @property
    def wins_losses(self) -> tuple[int, int]:
        """Parse ``overall_record``; anything unparseable counts as 0-0."""
        return parse_record(self.overall_record)


def parse_record(record: str) -> tuple[int, int]:
    """Parse a "W-L" string. Malformed halves count as zero."""
    parts = str(record or "").split("-")
    if len(parts) < 2:
        return 0, 0

    def _num(text: str) -> int:
        try:
            return int(text.strip())
        except ValueError:
            return 0

    return _num(parts[0]), _num(parts[1])


def default_year_record(year: int) -> YearRecord:
    return YearRecord(year=year)
