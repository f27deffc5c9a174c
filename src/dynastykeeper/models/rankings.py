"""Weekly Top 25 poll models."""

from __future__ import annotations

from typing import Literal

from dynastykeeper.models.base import RecordModel
from dynastykeeper.models.constants import POLL_SIZE


class RankedTeam(RecordModel):
    """One poll slot. Rank is position + 1; an empty name is an unranked slot."""

    name: str = ""
    record: str | None = None


Poll = list[RankedTeam]


def empty_poll() -> Poll:
    return [RankedTeam() for _ in range(POLL_SIZE)]


MovementStatus = Literal["entered", "up", "down", "unchanged", "dropped", "unranked"]


class RankMovement(RecordModel):
    """How a team's rank changed from the previous week.

    ``change`` is positive when the team moved up. Teams entering the poll
    report ``entered`` with no numeric change.
    """

    team: str
    year: int
    week: int
    rank: int | None = None
    previous_rank: int | None = None
    status: MovementStatus = "unranked"
    change: int | None = None
