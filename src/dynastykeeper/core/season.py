"""Season lifecycle: the Active -> Finalized transition for one season-year.

The current year is ACTIVE: its schedule is editable and its stats are
always recomputed from the schedule. Every earlier year is FINALIZED: its
``YearRecord`` is a snapshot taken by ``end_season`` and later edits to the
recruiting, transfer or award lists do not reach it.

``end_season`` is the only way to move the current-year pointer forward.
It runs inside the caller's database session, so a failure part way through
is rolled back as a whole.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from dynastykeeper.core.schedule import blank_schedule
from dynastykeeper.models.ledger import YearRecord
from dynastykeeper.models.schedule import Game, YearStats

if TYPE_CHECKING:
    from dynastykeeper.core.ledger import SeasonLedger
    from dynastykeeper.core.session import DynastySession

logger = logging.getLogger(__name__)


class SeasonPhase(StrEnum):
    ACTIVE = "active"
    FINALIZED = "finalized"


class SeasonTransitionError(ValueError):
    """Raised when a season cannot be ended or the next one cannot be prepared."""


# Fields the user fills in by hand after the season. A regenerated record
# keeps whatever was already entered for them.
_USER_EDITED_FIELDS: tuple[str, ...] = (
    "bowl_game",
    "bowl_result",
    "nat_champ",
    "heisman",
    "recruiting_class_placement",
    "final_ranking",
    "conference_finish",
    "players_drafted",
)


def season_phase(year: int, current_year: int) -> SeasonPhase:
    """Phase of *year* relative to the current year.

    Raises:
        ValueError: If *year* is after the current year.
    """
    if year == current_year:
        return SeasonPhase.ACTIVE
    if year < current_year:
        return SeasonPhase.FINALIZED
    msg = f"Season {year} has not started (current season is {current_year})"
    raise ValueError(msg)


async def generate_year_record(
    ledger: SeasonLedger,
    year: int,
    stats: YearStats,
    schedule: list[Game],
) -> YearRecord:
    """Build the finalized ledger entry for *year*.

    Recruits, transfers and awards are copied by value. Hand-entered fields
    from an existing record for the year (bowl game, national champion,
    draft picks...) are carried into the new one.
    """
    existing = await ledger.get_year_record(year)
    record = YearRecord(
        year=year,
        overall_record=f"{stats.wins}-{stats.losses}",
        conference_record=f"{stats.conference_wins}-{stats.conference_losses}",
        bowl_game=stats.bowl_game,
        bowl_result=stats.bowl_result,
        points_for=str(stats.points_scored),
        points_against=str(stats.points_against),
        schedule=[game.model_copy(deep=True) for game in schedule],
        recruits=[r.model_copy(deep=True) for r in await ledger.get_recruits(year)],
        transfers=[t.model_copy(deep=True) for t in await ledger.get_transfers(year)],
        player_awards=[a.model_copy(deep=True) for a in await ledger.get_year_awards(year)],
    )
    carried = {
        name: getattr(existing, name)
        for name in _USER_EDITED_FIELDS
        if getattr(existing, name)
    }
    return record.model_copy(update=carried) if carried else record


async def prepare_next_season(session: DynastySession, year: int) -> None:
    """Lay out *year*: blank schedule, zeroed stats, a default record and a week-0 poll.

    An existing year record is kept. Any Top 25 history already held for
    *year* is replaced by the empty week-0 poll.
    """
    ledger = session.ledger
    await ledger.set_schedule(year, blank_schedule())
    await ledger.set_year_stats(year, YearStats())
    await ledger.set_year_record(year, await ledger.get_year_record(year))
    await session.reset_rankings(year)


async def end_season(session: DynastySession, year: int) -> YearRecord:
    """Finalize *year* and advance the dynasty to ``year + 1``.

    Args:
        session: The active dynasty session.
        year: The season to end. Must be the current year.

    Returns:
        The finalized YearRecord for *year*.

    Raises:
        SeasonTransitionError: If *year* is not the current season.
    """
    if session.current_year is None:
        raise SeasonTransitionError("No dynasty is loaded")
    if year != session.current_year:
        msg = f"Only the current season ({session.current_year}) can be ended, got {year}"
        raise SeasonTransitionError(msg)

    ledger = session.ledger
    schedule = await ledger.get_schedule(year)
    stats = await ledger.refresh_year_stats(year, schedule)
    record = await generate_year_record(ledger, year, stats, schedule)
    await ledger.set_year_record(year, record)

    next_year = year + 1
    await prepare_next_season(session, next_year)
    await session.set_current_year(next_year)

    logger.info(
        "season_ended year=%d record=%s conference=%s next=%d",
        year,
        record.overall_record,
        record.conference_record,
        next_year,
    )
    return record
