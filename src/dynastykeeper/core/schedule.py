"""Schedule shape helpers: blank schedules, normalization, active week, labels."""

from __future__ import annotations

from collections.abc import Sequence

from dynastykeeper.models.constants import SCHEDULE_LENGTH, WEEK_DISPLAY_NAMES
from dynastykeeper.models.schedule import Game, GameLocation, GameResult


def blank_game(week: int) -> Game:
    return Game(
        id=week,
        week=week,
        location=GameLocation.HOME,
        opponent="",
        result=GameResult.NOT_PLAYED,
        score="",
    )


def blank_schedule() -> list[Game]:
    """A fresh season: every week open, nothing played."""
    return [blank_game(week) for week in range(SCHEDULE_LENGTH)]


def normalize_schedule(games: Sequence[Game]) -> list[Game]:
    """Return a 21-week schedule whose ``week`` matches each game's position.

    Short schedules are padded with open weeks. More than 21 games is a
    caller error.
    """
    if len(games) > SCHEDULE_LENGTH:
        msg = f"A schedule holds {SCHEDULE_LENGTH} weeks, got {len(games)} games"
        raise ValueError(msg)
    normalized = [
        game if game.week == week else game.model_copy(update={"week": week})
        for week, game in enumerate(games)
    ]
    normalized.extend(blank_game(week) for week in range(len(normalized), SCHEDULE_LENGTH))
    return normalized


def active_week(schedule: Sequence[Game]) -> int:
    """The next week to be played, derived from results.

    Scans from the end for the last game with any result other than N/A and
    returns the week after it, clamped to 0..21. No results means week 0.
    """
    for game in reversed(schedule):
        if game.result != GameResult.NOT_PLAYED:
            return max(0, min(SCHEDULE_LENGTH, game.week + 1))
    return 0


def week_display_name(week: int) -> str:
    return WEEK_DISPLAY_NAMES.get(week, f"Week {week}")
