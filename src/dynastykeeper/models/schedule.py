"""Schedule and season statistics models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, field_validator, model_validator

from dynastykeeper.models.base import RecordModel
from dynastykeeper.models.constants import BYE_OPPONENTS


class GameLocation(StrEnum):
    """Where a game is played, using the save-file vocabulary."""

    HOME = "vs"
    AWAY = "@"
    NEUTRAL = "neutral"


class GameResult(StrEnum):
    WIN = "Win"
    LOSS = "Loss"
    TIE = "Tie"
    BYE = "Bye"
    NOT_PLAYED = "N/A"


_LOCATION_ALIASES: dict[str, GameLocation] = {
    "vs": GameLocation.HOME,
    "home": GameLocation.HOME,
    "@": GameLocation.AWAY,
    "away": GameLocation.AWAY,
    "at": GameLocation.AWAY,
    "neutral": GameLocation.NEUTRAL,
}

_RESULT_ALIASES: dict[str, GameResult] = {
    "win": GameResult.WIN,
    "w": GameResult.WIN,
    "loss": GameResult.LOSS,
    "l": GameResult.LOSS,
    "tie": GameResult.TIE,
    "t": GameResult.TIE,
    "bye": GameResult.BYE,
    "n/a": GameResult.NOT_PLAYED,
    "notplayed": GameResult.NOT_PLAYED,
    "": GameResult.NOT_PLAYED,
}


def parse_result(value: object) -> GameResult:
    """Read a stored result the lenient way: ``"W"``, ``"win"`` and ``"Win"`` are all wins."""
    if isinstance(value, GameResult):
        return value
    if isinstance(value, str):
        return _RESULT_ALIASES.get(value.strip().lower(), GameResult.NOT_PLAYED)
    return GameResult.NOT_PLAYED


class Game(RecordModel):
    """One week's slot in a schedule."""

    id: int | str = 0
    week: int = Field(default=0, ge=0)
    location: GameLocation = GameLocation.HOME
    opponent: str = ""
    result: GameResult = GameResult.NOT_PLAYED
    score: str = ""

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value: object) -> object:
        # Older saves used " " and "unselected" style placeholders; anything
        # unrecognised is read the way the score parser reads it: home.
        if isinstance(value, str):
            return _LOCATION_ALIASES.get(value.strip().lower(), GameLocation.HOME)
        return value if value is not None else GameLocation.HOME

    @field_validator("result", mode="before")
    @classmethod
    def _coerce_result(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return parse_result(value)
        return value

    @field_validator("opponent", "score", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @model_validator(mode="after")
    def _no_result_without_opponent(self) -> Game:
        """A decided result needs an opponent; open weeks may still say Bye."""
        if not self.opponent.strip() and self.result in (
            GameResult.WIN,
            GameResult.LOSS,
            GameResult.TIE,
        ):
            self.result = GameResult.NOT_PLAYED
        return self

    @property
    def is_bye(self) -> bool:
        return self.result == GameResult.BYE or self.opponent.strip().upper() in BYE_OPPONENTS

    @property
    def counts(self) -> bool:
        """Whether this game contributes to season statistics."""
        if not self.opponent.strip() or self.is_bye:
            return False
        return self.result not in (GameResult.NOT_PLAYED, GameResult.BYE)


class YearStats(RecordModel):
    """Season totals derived from a schedule. Any stored copy is a cache."""

    wins: int = 0
    losses: int = 0
    ties: int = 0
    conference_wins: int = 0
    conference_losses: int = 0
    points_scored: int = 0
    points_against: int = 0
    players_drafted: int = 0
    conference_standing: str = ""
    bowl_game: str = ""
    bowl_result: str = ""

    @property
    def overall_record(self) -> str:
        return f"{self.wins}-{self.losses}"

    @property
    def conference_record(self) -> str:
        return f"{self.conference_wins}-{self.conference_losses}"

    def computed_fields_match(self, other: YearStats) -> bool:
        """Compare only the schedule-derived counters, not user-entered text."""
        keys = (
            "wins",
            "losses",
            "ties",
            "conference_wins",
            "conference_losses",
            "points_scored",
            "points_against",
        )
        return all(getattr(self, k) == getattr(other, k) for k in keys)


class LocationRecord(RecordModel):
    """Win/loss split for one game location."""

    location: GameLocation
    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties
