"""Save slots: creating, saving, loading and deleting dynasties.

The record store holds one *active* dynasty. Each save slot keeps its own
copy of that dynasty's records in ``DynastyRow.data``; loading a slot
restores the copy into the store, saving writes the store back into it.
Launch-screen numbers (record, seasons, titles) are always recomputed from
the saved records.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from dynastykeeper.core import records
from dynastykeeper.core.schedule import blank_schedule
from dynastykeeper.core.snapshot import (
    clear_active_data,
    collect_dynasty_data,
    restore_from_snapshot,
)
from dynastykeeper.models.constants import MIN_VALID_YEAR
from dynastykeeper.models.dynasty import DynastySummary, DynastyTotals
from dynastykeeper.models.ledger import CoachProfile, SchoolColors, parse_record
from dynastykeeper.models.schedule import GameResult, parse_result

if TYPE_CHECKING:
    from dynastykeeper.core.session import DynastySession
    from dynastykeeper.db.repository import Repository

logger = logging.getLogger(__name__)

_EMPTY_LIST_KEYS: tuple[str, ...] = (
    records.PLAYERS_KEY,
    records.PLAYER_STATS_KEY,
    records.ALL_RECRUITS_KEY,
    records.ALL_TRANSFERS_KEY,
    records.ALL_AWARDS_KEY,
    records.YEAR_RECORDS_KEY,
    records.ALL_TROPHIES_KEY,
)


class DynastyError(ValueError):
    """A save-slot operation was refused (duplicate school, unknown slot...)."""


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def summarize_dynasty_data(data: Mapping[str, Any]) -> DynastyTotals:
    """Derive career totals from a dynasty's raw records.

    - Finalized years (year records before the current year) contribute
      their ``overallRecord``.
    - The current season counts too once it has a decided game.
    - Championships are distinct years with a ``championship`` trophy or a
      year record naming the school as national champion.
    """
    totals = DynastyTotals()
    profile = data.get(records.COACH_PROFILE_KEY)
    school = profile.get("schoolName", "") if isinstance(profile, Mapping) else ""
    current_year = _as_int(data.get(records.CURRENT_YEAR_KEY))

    finalized: set[int] = set()
    title_years: set[int] = set()
    year_records = data.get(records.YEAR_RECORDS_KEY)
    for record in year_records if isinstance(year_records, list) else []:
        if not isinstance(record, Mapping):
            continue
        year = _as_int(record.get("year"))
        if year is None:
            continue
        if school and record.get("natChamp") == school:
            title_years.add(year)
        if current_year is not None and year >= current_year:
            continue
        if year in finalized:
            continue
        finalized.add(year)
        wins, losses = parse_record(record.get("overallRecord", ""))
        totals.total_wins += wins
        totals.total_losses += losses
    totals.seasons_played = len(finalized)

    if current_year is not None and current_year not in finalized:
        schedule = data.get(records.SCHEDULE_FAMILY.key(current_year))
        if not isinstance(schedule, list):
            schedule = []
        results = [parse_result(g.get("result")) for g in schedule if isinstance(g, Mapping)]
        wins = results.count(GameResult.WIN)
        losses = results.count(GameResult.LOSS)
        if wins or losses:
            totals.total_wins += wins
            totals.total_losses += losses
            totals.seasons_played += 1

    trophies = data.get(records.ALL_TROPHIES_KEY)
    for trophy in trophies if isinstance(trophies, list) else []:
        if isinstance(trophy, Mapping) and trophy.get("category") == "championship":
            year = _as_int(trophy.get("year"))
            if year is not None:
                title_years.add(year)
    totals.championships = len(title_years)
    return totals


async def _save_loaded(session: DynastySession) -> None:
    """Save the loaded dynasty, if its slot still exists."""
    if session.dynasty_id is None:
        return
    if await session.repo.get_dynasty(session.dynasty_id) is None:
        logger.warning("dynasty_slot_missing dynasty=%s", session.dynasty_id)
        return
    await save_dynasty(session)


async def list_dynasties(repo: Repository) -> list[DynastySummary]:
    return [DynastySummary.from_row(row) for row in await repo.list_dynasties()]


async def create_dynasty(
    session: DynastySession,
    coach_name: str,
    school_name: str,
    start_year: int,
    school_colors: SchoolColors | None = None,
) -> DynastySummary:
    """Start a new dynasty in a new save slot and make it the active one.

    The currently loaded dynasty, if any, is saved to its slot first.

    Raises:
        DynastyError: If a name is blank, the year is invalid or the school
            already has a save slot.
    """
    coach_name, school_name = coach_name.strip(), school_name.strip()
    if not coach_name:
        raise DynastyError("Coach name is required")
    if not school_name:
        raise DynastyError("School name is required")
    if start_year < MIN_VALID_YEAR:
        raise DynastyError(f"Start year must be after 1900, got {start_year}")
    repo = session.repo
    if await repo.get_dynasty_by_school(school_name) is not None:
        raise DynastyError(f"A dynasty already exists for {school_name}")

    await _save_loaded(session)

    session.discard_cached_state()
    await clear_active_data(repo)
    ledger = session.ledger
    await ledger.set_coach_profile(
        CoachProfile(
            coach_name=coach_name,
            school_name=school_name,
            school_colors=school_colors or SchoolColors(),
        )
    )
    await session.set_current_year(start_year)
    for key in _EMPTY_LIST_KEYS:
        await records.store_record(repo, records.FIXED_BY_KEY[key], [])
    await ledger.set_schedule(start_year, blank_schedule())
    await session.seed_rankings(start_year)

    row = await repo.create_dynasty(
        coach_name=coach_name,
        school_name=school_name,
        current_year=start_year,
        data=await collect_dynasty_data(repo),
    )
    await session.set_dynasty_id(row.id)
    logger.info("dynasty_created dynasty=%s school=%s year=%d", row.id, school_name, start_year)
    return DynastySummary.from_row(row)


async def save_dynasty(session: DynastySession) -> DynastySummary:
    """Copy the active records into the loaded slot and refresh its summary.

    Raises:
        DynastyError: If no slot is loaded or the slot no longer exists.
    """
    if session.dynasty_id is None:
        raise DynastyError("No dynasty is loaded")
    repo = session.repo
    row = await repo.get_dynasty(session.dynasty_id)
    if row is None:
        raise DynastyError(f"Dynasty {session.dynasty_id} not found")

    await session.flush_rankings()
    data = await collect_dynasty_data(repo)
    totals = summarize_dynasty_data(data)
    profile = data.get(records.COACH_PROFILE_KEY)
    profile = profile if isinstance(profile, Mapping) else {}

    school_name = profile.get("schoolName") or row.school_name
    if school_name != row.school_name:
        other = await repo.get_dynasty_by_school(school_name)
        if other is not None and other.id != row.id:
            logger.warning(
                "dynasty_rename_skipped dynasty=%s school=%s reason=taken", row.id, school_name
            )
            school_name = row.school_name

    row = await repo.update_dynasty(
        row.id,
        data=data,
        coach_name=profile.get("coachName") or row.coach_name,
        school_name=school_name,
        current_year=_as_int(data.get(records.CURRENT_YEAR_KEY)) or row.current_year,
        last_played=datetime.now(UTC),
        **totals.model_dump(),
    )
    logger.info("dynasty_saved dynasty=%s records=%d", row.id, len(data))
    return DynastySummary.from_row(row)


async def load_dynasty(session: DynastySession, dynasty_id: str) -> DynastySummary:
    """Make *dynasty_id* the active dynasty.

    Whatever is currently loaded is saved to its slot first.

    Raises:
        DynastyError: If the slot does not exist.
    """
    repo = session.repo
    row = await repo.get_dynasty(dynasty_id)
    if row is None:
        raise DynastyError(f"Dynasty {dynasty_id} not found")

    await _save_loaded(session)

    await restore_from_snapshot(session, row.data or {})
    await session.set_dynasty_id(dynasty_id)
    await repo.touch_dynasty(dynasty_id)
    logger.info("dynasty_loaded dynasty=%s school=%s", dynasty_id, row.school_name)
    return DynastySummary.from_row(row)


async def delete_dynasty(session: DynastySession, dynasty_id: str) -> None:
    """Delete a save slot. Deleting the loaded slot also returns to launch.

    Raises:
        DynastyError: If the slot does not exist.
    """
    if await session.repo.get_dynasty(dynasty_id) is None:
        raise DynastyError(f"Dynasty {dynasty_id} not found")
    if session.dynasty_id == dynasty_id:
        await session.return_to_launch()
    await session.repo.delete_dynasty(dynasty_id)
    logger.info("dynasty_deleted dynasty=%s", dynasty_id)
