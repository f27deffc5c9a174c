"""Schedule-derived season statistics.

``calculate_stats`` is the single source of truth for a season's numbers.
It is pure and never raises on bad input: unplayed weeks, byes and
unparseable scores simply contribute nothing.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from dynastykeeper.core.teams import TeamDirectory
from dynastykeeper.models.schedule import (
    Game,
    GameLocation,
    GameResult,
    LocationRecord,
    YearStats,
)

_NUMBER = re.compile(r"\d+")


def parse_score(score: str) -> tuple[int, int] | None:
    """Split an ``"A-B"`` score into its two numbers.

    Returns None when the text is not two dash-separated halves. A half with
    no digits reads as 0.
    """
    if not score or "-" not in score:
        return None
    parts = score.split("-")
    if len(parts) != 2:
        return None

    def _half(text: str) -> int:
        match = _NUMBER.search(text)
        return int(match.group()) if match else 0

    return _half(parts[0]), _half(parts[1])


def team_points(game: Game) -> tuple[int, int] | None:
    """Return ``(points_for, points_against)`` for *game*, or None if unscored.

    Away scores are written opponent-first. When that reading contradicts
    the recorded Win/Loss the score was typed team-first, so it is flipped.
    """
    parsed = parse_score(game.score)
    if parsed is None:
        return None
    first, second = parsed
    if game.location == GameLocation.AWAY:
        ours, theirs = second, first
    else:
        ours, theirs = first, second
    if (game.result == GameResult.WIN and ours < theirs) or (
        game.result == GameResult.LOSS and ours > theirs
    ):
        ours, theirs = theirs, ours
    return ours, theirs


def calculate_stats(
    schedule: Sequence[Game],
    school_name: str,
    teams: TeamDirectory | None = None,
) -> YearStats:
    """Compute win/loss, conference split and points for *school_name*.

    Conference games are those where both sides resolve, through the custom
    team mappings, to the same conference.
    """
    teams = teams or TeamDirectory()
    stats = YearStats()
    for game in schedule:
        if not game.counts:
            continue
        in_conference = teams.same_conference(school_name, game.opponent)

        if game.result == GameResult.WIN:
            stats.wins += 1
            if in_conference:
                stats.conference_wins += 1
        elif game.result == GameResult.LOSS:
            stats.losses += 1
            if in_conference:
                stats.conference_losses += 1
        elif game.result == GameResult.TIE:
            stats.ties += 1

        points = team_points(game)
        if points is not None:
            stats.points_scored += points[0]
            stats.points_against += points[1]
    return stats


def location_record(schedule: Sequence[Game], location: GameLocation) -> LocationRecord:
    """Record for games played at one location (home, away or neutral)."""
    record = LocationRecord(location=location)
    for game in schedule:
        if game.location != location or not game.counts:
            continue
        if game.result == GameResult.WIN:
            record.wins += 1
        elif game.result == GameResult.LOSS:
            record.losses += 1
        elif game.result == GameResult.TIE:
            record.ties += 1
    return record
