"""Week-indexed Top 25 history.

The poll is only entered on some weeks. A missing ``(year, week)`` entry
means "unchanged since the latest earlier entry", so every read resolves to
the closest stored week at or before the one asked for. Weeks are kept
sorted per year so that lookup is a binary search.

Writes replace one week's poll wholesale. To change a single slot, read the
effective poll with ``get_poll``, edit it, and write the whole poll back.

The loaded save-file mapping is kept as is and only the weeks that were
written are replaced in it, so entries this class cannot parse (an
oversized poll, a week past the final one) survive a save unchanged.
"""

from __future__ import annotations

import bisect
import copy
import logging
from typing import Any

from pydantic import TypeAdapter

from dynastykeeper.models.constants import FINAL_POLL_WEEK, POLL_SIZE
from dynastykeeper.models.rankings import Poll, RankedTeam, RankMovement, empty_poll

logger = logging.getLogger(__name__)

_poll_adapter = TypeAdapter(list[RankedTeam])


def _validate_week(week: int) -> None:
    if not 0 <= week <= FINAL_POLL_WEEK:
        msg = f"Week must be between 0 and {FINAL_POLL_WEEK}, got {week}"
        raise ValueError(msg)


def _copy_poll(poll: Poll) -> Poll:
    return [team.model_copy() for team in poll]


def _keys_for(mapping: dict[str, Any], number: int) -> list[str]:
    """Keys of *mapping* that read as *number*, e.g. ``"5"`` and ``"05"``."""
    keys = []
    for key in mapping:
        try:
            if int(key) == number:
                keys.append(key)
        except ValueError:
            continue
    return keys


class Top25History:
    """Sparse ``year -> week -> Poll`` map with fallback reads."""

    def __init__(self) -> None:
        self._polls: dict[int, dict[int, Poll]] = {}
        self._weeks: dict[int, list[int]] = {}
        # save-file mapping, kept in step with every write
        self._source: dict[str, Any] = {}

    # --- reads ---

    def years(self) -> list[int]:
        return sorted(self._polls)

    def weeks(self, year: int) -> list[int]:
        """Weeks with an explicit entry for *year*, ascending."""
        return list(self._weeks.get(year, []))

    def latest_week(self, year: int) -> int | None:
        weeks = self._weeks.get(year)
        return weeks[-1] if weeks else None

    def effective_week(self, year: int, week: int) -> int | None:
        """The stored week a read of ``(year, week)`` resolves to, if any."""
        weeks = self._weeks.get(year)
        if not weeks:
            return None
        idx = bisect.bisect_right(weeks, week)
        return weeks[idx - 1] if idx else None

    def get_poll(self, year: int, week: int) -> Poll:
        """The poll in effect at *week*: that week's entry or the latest earlier one.

        Never fails; a year with nothing entered up to *week* reads as 25
        empty slots. The result is a copy and can be edited freely.
        """
        source = self.effective_week(year, week)
        if source is None:
            return empty_poll()
        return _copy_poll(self._polls[year][source])

    def rank_of(self, team_name: str, year: int, week: int) -> int | None:
        """1-based rank of *team_name* in the poll in effect at *week*."""
        if not team_name:
            return None
        for index, team in enumerate(self.get_poll(year, week)):
            if team.name == team_name:
                return index + 1
        return None

    def movement(self, team_name: str, year: int, week: int) -> RankMovement:
        """Compare the team's rank at *week* with the week before.

        Week 0 has no previous week, so every ranked team there has entered.
        """
        rank = self.rank_of(team_name, year, week)
        previous = self.rank_of(team_name, year, week - 1) if week > 0 else None
        movement = RankMovement(
            team=team_name, year=year, week=week, rank=rank, previous_rank=previous
        )
        if rank is None:
            movement.status = "dropped" if previous is not None else "unranked"
        elif previous is None:
            movement.status = "entered"
        else:
            movement.change = previous - rank
            if movement.change > 0:
                movement.status = "up"
            elif movement.change < 0:
                movement.status = "down"
            else:
                movement.status = "unchanged"
        return movement

    # --- writes ---

    def set_poll(self, year: int, week: int, poll: Poll) -> None:
        """Overwrite exactly the ``(year, week)`` entry. Other weeks are untouched."""
        _validate_week(week)
        if len(poll) > POLL_SIZE:
            msg = f"A poll holds at most {POLL_SIZE} teams, got {len(poll)}"
            raise ValueError(msg)
        weeks = self._weeks.setdefault(year, [])
        if week not in self._polls.setdefault(year, {}):
            bisect.insort(weeks, week)
        self._polls[year][week] = _copy_poll(poll)

        weeks_data = self._source.get(str(year))
        if not isinstance(weeks_data, dict):
            weeks_data = self._source[str(year)] = {}
        for key in _keys_for(weeks_data, week):
            del weeks_data[key]
        weeks_data[str(week)] = [team.to_record() for team in self._polls[year][week]]

    def seed_year(self, year: int) -> bool:
        """Give *year* an empty week-0 poll unless it already has entries."""
        if self._weeks.get(year):
            return False
        self.set_poll(year, 0, empty_poll())
        return True

    def reset_year(self, year: int) -> None:
        """Replace everything held for *year* with one empty week-0 poll."""
        self._polls.pop(year, None)
        self._weeks.pop(year, None)
        for key in _keys_for(self._source, year):
            del self._source[key]
        self.set_poll(year, 0, empty_poll())

    # --- serialization ---

    def to_dict(self) -> dict[str, Any]:
        """Save-file shape: ``{"2025": {"0": [{"name": ...}, ...]}}``.

        Loaded entries that were never rewritten come back exactly as loaded.
        """
        return copy.deepcopy(self._source)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Top25History:
        """Build from the save-file shape.

        Entries whose year or week key is not an integer, or whose poll does
        not parse, are skipped with a warning rather than failing the load.
        They stay in the mapping that ``to_dict`` returns.
        """
        history = cls()
        for year_key, weeks in (data or {}).items():
            if not isinstance(weeks, dict):
                logger.warning("poll_year_skipped year=%s reason=not_a_mapping", year_key)
                continue
            for week_key, poll in weeks.items():
                try:
                    year, week = int(year_key), int(week_key)
                    history.set_poll(year, week, _poll_adapter.validate_python(poll))
                except ValueError as exc:
                    # pydantic.ValidationError is a ValueError subclass
                    logger.warning(
                        "poll_entry_skipped year=%s week=%s reason=%s", year_key, week_key, exc
                    )
        history._source = copy.deepcopy(dict(data or {}))
        return history
