"""Season ledger: typed access to the active dynasty's records.

Every read goes through the record registry, so a missing record reads as
its empty default and a damaged one is discarded and replaced by the
default. Reads never write; only explicit setters persist.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from dynastykeeper.core import records
from dynastykeeper.core.schedule import normalize_schedule
from dynastykeeper.core.stats import calculate_stats
from dynastykeeper.core.teams import TeamDirectory
from dynastykeeper.models.constants import FALLBACK_YEAR, MIN_VALID_YEAR, SCHEDULE_LENGTH
from dynastykeeper.models.ledger import (
    Award,
    CoachProfile,
    Player,
    Recruit,
    Transfer,
    Trophy,
    YearRecord,
    default_year_record,
)
from dynastykeeper.models.schedule import Game, YearStats

if TYPE_CHECKING:
    from dynastykeeper.db.repository import Repository

logger = logging.getLogger(__name__)


def _next_id(items: Sequence[Any]) -> int:
    """One past the largest integer id in *items*; non-integer ids are ignored."""
    ids = [item.id for item in items if isinstance(item.id, int)]
    return max(ids, default=0) + 1


class SeasonLedger:
    """Typed reads and writes over the record store for one dynasty."""

    def __init__(self, repo: Repository, teams: TeamDirectory | None = None) -> None:
        self.repo = repo
        self.teams = teams or TeamDirectory()

    async def _load(self, key: str) -> Any:
        return await records.load_record(self.repo, records.FIXED_BY_KEY[key])

    async def _store(self, key: str, value: Any) -> None:
        await records.store_record(self.repo, records.FIXED_BY_KEY[key], value)

    # --- Coach profile / current year ---

    async def get_coach_profile(self) -> CoachProfile | None:
        return await self._load(records.COACH_PROFILE_KEY)

    async def set_coach_profile(self, profile: CoachProfile) -> None:
        await self._store(records.COACH_PROFILE_KEY, profile)

    async def school_name(self) -> str:
        profile = await self.get_coach_profile()
        return profile.school_name if profile else ""

    async def get_current_year(self) -> int:
        """The season-year in progress. Missing or implausible values read as 2024."""
        year = await self._load(records.CURRENT_YEAR_KEY)
        if year < MIN_VALID_YEAR:
            logger.warning("current_year_invalid value=%s fallback=%d", year, FALLBACK_YEAR)
            return FALLBACK_YEAR
        return year

    async def set_current_year(self, year: int) -> None:
        if year < MIN_VALID_YEAR:
            msg = f"Year must be after 1900, got {year}"
            raise ValueError(msg)
        await self._store(records.CURRENT_YEAR_KEY, year)

    # --- Schedules and stats ---

    async def get_schedule(self, year: int) -> list[Game]:
        """The stored schedule for *year*, or a blank 21-week one (not written)."""
        spec = records.SCHEDULE_FAMILY.spec(year)
        games = await records.load_record(self.repo, spec)
        if len(games) > SCHEDULE_LENGTH:
            logger.warning("schedule_oversized year=%d games=%d", year, len(games))
            return games
        return normalize_schedule(games)

    async def set_schedule(self, year: int, games: Sequence[Game]) -> YearStats:
        """Store a normalized schedule and refresh the year's stats cache."""
        schedule = normalize_schedule(games)
        await records.store_record(self.repo, records.SCHEDULE_FAMILY.spec(year), schedule)
        return await self.refresh_year_stats(year, schedule)

    async def update_game(self, year: int, week: int, **changes: Any) -> Game:
        """Patch one week of *year*'s schedule. Returns the updated game."""
        schedule = await self.get_schedule(year)
        if not 0 <= week < len(schedule):
            msg = f"Week must be between 0 and {SCHEDULE_LENGTH - 1}, got {week}"
            raise ValueError(msg)
        current = schedule[week].model_dump()
        current.update(changes, week=week)
        schedule[week] = Game.model_validate(current)
        await self.set_schedule(year, schedule)
        return schedule[week]

    async def live_year_stats(self, year: int) -> YearStats:
        """Stats recomputed from the schedule, ignoring any cached copy."""
        return calculate_stats(await self.get_schedule(year), await self.school_name(), self.teams)

    async def get_year_stats(self, year: int) -> YearStats:
        """The cached stats for *year*; zeros when nothing is cached."""
        return await records.load_record(self.repo, records.YEAR_STATS_FAMILY.spec(year))

    async def set_year_stats(self, year: int, stats: YearStats) -> None:
        await records.store_record(self.repo, records.YEAR_STATS_FAMILY.spec(year), stats)

    async def refresh_year_stats(
        self, year: int, schedule: Sequence[Game] | None = None
    ) -> YearStats:
        """Recompute the cache, keeping user-entered fields such as the bowl game."""
        if schedule is None:
            schedule = await self.get_schedule(year)
        computed = calculate_stats(schedule, await self.school_name(), self.teams)
        cached = await self.get_year_stats(year)
        merged = cached.model_copy(
            update=computed.model_dump(
                include={
                    "wins",
                    "losses",
                    "ties",
                    "conference_wins",
                    "conference_losses",
                    "points_scored",
                    "points_against",
                }
            )
        )
        await self.set_year_stats(year, merged)
        return merged

    async def year_stats_is_stale(self, year: int) -> bool:
        cached = await self.get_year_stats(year)
        return not cached.computed_fields_match(await self.live_year_stats(year))

    # --- Year records ---

    async def get_all_year_records(self) -> list[YearRecord]:
        return sorted(await self._load(records.YEAR_RECORDS_KEY), key=lambda r: r.year)

    async def get_year_record(self, year: int) -> YearRecord:
        """The ledger entry for *year*, or an empty default (not written)."""
        for record in await self._load(records.YEAR_RECORDS_KEY):
            if record.year == year:
                return record
        return default_year_record(year)

    async def set_year_record(self, year: int, record: YearRecord) -> None:
        """Replace *year*'s entry, or add it. Entries stay sorted by year."""
        if record.year != year:
            record = record.model_copy(update={"year": year})
        kept = [r for r in await self._load(records.YEAR_RECORDS_KEY) if r.year != year]
        kept.append(record)
        await self._store(records.YEAR_RECORDS_KEY, sorted(kept, key=lambda r: r.year))

    # --- Roster ---

    async def get_players(self) -> list[Player]:
        return await self._load(records.PLAYERS_KEY)

    async def set_players(self, players: Sequence[Player]) -> None:
        await self._store(records.PLAYERS_KEY, list(players))

    async def add_player(self, player: Player) -> Player:
        players = await self.get_players()
        if player.id is None:
            player = player.model_copy(update={"id": _next_id(players)})
        players.append(player)
        await self.set_players(players)
        return player

    async def get_player_stats(self) -> list[dict[str, Any]]:
        return await self._load(records.PLAYER_STATS_KEY)

    async def set_player_stats(self, stats: Sequence[dict[str, Any]]) -> None:
        await self._store(records.PLAYER_STATS_KEY, list(stats))

    # --- Recruits / transfers / awards / trophies ---

    async def get_all_recruits(self) -> list[Recruit]:
        return await self._load(records.ALL_RECRUITS_KEY)

    async def set_all_recruits(self, recruits: Sequence[Recruit]) -> None:
        await self._store(records.ALL_RECRUITS_KEY, list(recruits))

    async def get_recruits(self, year: int) -> list[Recruit]:
        return [r for r in await self.get_all_recruits() if r.recruited_year == year]

    async def add_recruit(self, recruit: Recruit) -> Recruit:
        recruits = await self.get_all_recruits()
        if recruit.id is None:
            recruit = recruit.model_copy(update={"id": _next_id(recruits)})
        recruits.append(recruit)
        await self.set_all_recruits(recruits)
        return recruit

    async def get_all_transfers(self) -> list[Transfer]:
        return await self._load(records.ALL_TRANSFERS_KEY)

    async def set_all_transfers(self, transfers: Sequence[Transfer]) -> None:
        await self._store(records.ALL_TRANSFERS_KEY, list(transfers))

    async def get_transfers(self, year: int) -> list[Transfer]:
        return [t for t in await self.get_all_transfers() if t.transfer_year == year]

    async def add_transfer(self, transfer: Transfer) -> Transfer:
        transfers = await self.get_all_transfers()
        if transfer.id is None:
            transfer = transfer.model_copy(update={"id": _next_id(transfers)})
        transfers.append(transfer)
        await self.set_all_transfers(transfers)
        return transfer

    async def get_all_awards(self) -> list[Award]:
        return await self._load(records.ALL_AWARDS_KEY)

    async def set_all_awards(self, awards: Sequence[Award]) -> None:
        await self._store(records.ALL_AWARDS_KEY, list(awards))

    async def get_year_awards(self, year: int) -> list[Award]:
        """Awards captured in the year record, else the dynasty-wide list for *year*."""
        record = await self.get_year_record(year)
        if record.player_awards:
            return list(record.player_awards)
        return [a for a in await self.get_all_awards() if a.year == year]

    async def add_award(self, award: Award) -> Award:
        awards = await self.get_all_awards()
        if award.id is None:
            award = award.model_copy(update={"id": _next_id(awards)})
        awards.append(award)
        await self.set_all_awards(awards)
        return award

    async def get_trophies(self) -> list[Trophy]:
        return await self._load(records.ALL_TROPHIES_KEY)

    async def set_trophies(self, trophies: Sequence[Trophy]) -> None:
        await self._store(records.ALL_TROPHIES_KEY, list(trophies))

    async def add_trophy(self, trophy: Trophy) -> Trophy:
        trophies = await self.get_trophies()
        if trophy.id is None:
            trophy = trophy.model_copy(update={"id": _next_id(trophies)})
        trophies.append(trophy)
        await self.set_trophies(trophies)
        return trophy

    # --- Top 25 (raw save-file shape; see DynastySession for the typed view) ---

    async def get_top25_data(self) -> dict[str, Any]:
        return await self._load(records.TOP25_HISTORY_KEY)

    async def set_top25_data(self, data: dict[str, Any]) -> None:
        """Store the poll mapping as given, nulls included."""
        await self.repo.set_record(records.TOP25_HISTORY_KEY, records.encode_value(data))
