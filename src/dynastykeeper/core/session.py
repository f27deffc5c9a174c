"""Working session over the active dynasty.

Holds what the rest of the app treats as "current": the season-year, the
loaded save slot, the team directory and the in-memory Top 25 history.
Poll edits are kept in memory and written back on ``flush_rankings``.
Anything that reads raw records (export, save) must flush first.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from dynastykeeper.core import records
from dynastykeeper.core.ledger import SeasonLedger
from dynastykeeper.core.rankings import Top25History
from dynastykeeper.core.teams import TeamDirectory, load_custom_teams
from dynastykeeper.models.rankings import Poll, RankMovement

if TYPE_CHECKING:
    from dynastykeeper.db.repository import Repository

logger = logging.getLogger(__name__)


async def _read_dynasty_id(repo: Repository) -> str | None:
    raw = await repo.get_record(records.CURRENT_DYNASTY_KEY)
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        # early builds stored the bare id
        return raw
    return str(value) if value else None


class DynastySession:
    """The active dynasty: ledger access, current year and the poll history."""

    def __init__(
        self,
        repo: Repository,
        current_year: int | None,
        teams: TeamDirectory | None = None,
        dynasty_id: str | None = None,
    ) -> None:
        self.repo = repo
        self.current_year = current_year
        self.teams = teams or TeamDirectory()
        self.dynasty_id = dynasty_id
        self.ledger = SeasonLedger(repo, self.teams)
        self._rankings: Top25History | None = None
        self._rankings_dirty = False

    @classmethod
    async def open(cls, repo: Repository, teams: TeamDirectory | None = None) -> DynastySession:
        """Build a session from whatever the record store currently holds.

        Custom team mappings are read from the store and layered over *teams*.
        """
        base = teams or TeamDirectory()
        directory = base.with_custom_teams(await load_custom_teams(repo))
        ledger = SeasonLedger(repo, directory)
        current_year = await ledger.get_current_year()
        return cls(repo, current_year, directory, await _read_dynasty_id(repo))

    async def school_name(self) -> str:
        return await self.ledger.school_name()

    async def set_current_year(self, year: int) -> None:
        await self.ledger.set_current_year(year)
        self.current_year = year

    # --- Top 25 ---

    async def rankings(self) -> Top25History:
        if self._rankings is None:
            self._rankings = Top25History.from_dict(await self.ledger.get_top25_data())
        return self._rankings

    async def get_poll(self, year: int, week: int) -> Poll:
        return (await self.rankings()).get_poll(year, week)

    async def set_poll(self, year: int, week: int, poll: Poll, persist: bool = True) -> None:
        """Replace one week's poll. With ``persist=False`` only memory is updated."""
        (await self.rankings()).set_poll(year, week, poll)
        self._rankings_dirty = True
        if persist:
            await self.flush_rankings()

    async def rank_of(self, team_name: str, year: int, week: int) -> int | None:
        return (await self.rankings()).rank_of(team_name, year, week)

    async def movement(self, team_name: str, year: int, week: int) -> RankMovement:
        return (await self.rankings()).movement(team_name, year, week)

    async def seed_rankings(self, year: int) -> bool:
        """Give *year* an empty week-0 poll if it has none. Written immediately."""
        seeded = (await self.rankings()).seed_year(year)
        if seeded:
            self._rankings_dirty = True
            await self.flush_rankings()
        return seeded

    async def reset_rankings(self, year: int) -> None:
        """Start *year* over with an empty week-0 poll. Written immediately."""
        (await self.rankings()).reset_year(year)
        self._rankings_dirty = True
        await self.flush_rankings()

    @property
    def rankings_dirty(self) -> bool:
        return self._rankings_dirty

    async def flush_rankings(self) -> None:
        """Write in-memory poll edits to the store, if there are any."""
        if self._rankings is None or not self._rankings_dirty:
            return
        await self.ledger.set_top25_data(self._rankings.to_dict())
        self._rankings_dirty = False

    def discard_cached_state(self) -> None:
        """Forget in-memory state so the next read comes from the store."""
        self._rankings = None
        self._rankings_dirty = False

    async def reload(self) -> None:
        """Re-read the current year and dynasty pointer after the store changed."""
        self.discard_cached_state()
        self.current_year = await self.ledger.get_current_year()
        self.dynasty_id = await _read_dynasty_id(self.repo)

    async def set_dynasty_id(self, dynasty_id: str | None) -> None:
        self.dynasty_id = dynasty_id
        if dynasty_id is None:
            await self.repo.delete_record(records.CURRENT_DYNASTY_KEY)
        else:
            await self.repo.set_record(records.CURRENT_DYNASTY_KEY, json.dumps(dynasty_id))

    async def return_to_launch(self) -> None:
        """Drop the loaded slot and the current-year pointer.

        Pending poll edits are written first.
        """
        await self.flush_rankings()
        await self.set_dynasty_id(None)
        self.discard_cached_state()
        self.current_year = None
        logger.info("dynasty_closed")
