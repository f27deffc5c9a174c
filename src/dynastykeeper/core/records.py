"""Registry of the records that make up a dynasty.

Fixed records live under one well-known key each. Per-year records belong to
a *family* (``schedule_<year>``, ``yearStats_<year>``) and are enumerated by
asking the store for the family's prefix, so nothing has to scan every key.

Each entry also carries the value schema and the empty default used when the
record is missing or fails to parse.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from dynastykeeper.core.schedule import blank_schedule
from dynastykeeper.core.teams import CUSTOM_TEAMS_KEY
from dynastykeeper.models.constants import FALLBACK_YEAR
from dynastykeeper.models.ledger import (
    Award,
    CoachProfile,
    Player,
    Recruit,
    Transfer,
    Trophy,
    YearRecord,
)
from dynastykeeper.models.schedule import Game, YearStats

if TYPE_CHECKING:
    from dynastykeeper.db.repository import Repository

logger = logging.getLogger(__name__)

COACH_PROFILE_KEY = "coachProfile"
CURRENT_YEAR_KEY = "currentYear"
PLAYERS_KEY = "players"
PLAYER_STATS_KEY = "playerStats"
ALL_RECRUITS_KEY = "allRecruits"
ALL_TRANSFERS_KEY = "allTransfers"
ALL_AWARDS_KEY = "allAwards"
YEAR_RECORDS_KEY = "yearRecords"
ALL_TROPHIES_KEY = "allTrophies"
TOP25_HISTORY_KEY = "top25History"

# Installation-wide keys. Never exported, wiped or overwritten by a restore.
CURRENT_DYNASTY_KEY = "currentDynastyId"
GLOBAL_KEYS: frozenset[str] = frozenset({CURRENT_DYNASTY_KEY, CUSTOM_TEAMS_KEY})

# Written by early builds; cleared on restore so it cannot leak between slots.
LEGACY_KEYS: tuple[str, ...] = ("top25Rankings",)


@dataclass(frozen=True)
class RecordSpec:
    """A fixed record: its key, value schema and empty default."""

    key: str
    adapter: TypeAdapter = field(compare=False)
    default: Callable[[], Any] = field(compare=False)


@dataclass(frozen=True)
class RecordFamily:
    """A per-year record family keyed ``<prefix><year>``."""

    name: str
    prefix: str
    adapter: TypeAdapter = field(compare=False)
    default: Callable[[], Any] = field(compare=False)

    def key(self, year: int) -> str:
        return f"{self.prefix}{year}"

    def owns(self, key: str) -> bool:
        """Whether *key* lives under this family's prefix, well-formed or not."""
        return key.startswith(self.prefix)

    def spec(self, year: int) -> RecordSpec:
        return RecordSpec(self.key(year), self.adapter, self.default)


FIXED_RECORDS: tuple[RecordSpec, ...] = (
    RecordSpec(COACH_PROFILE_KEY, TypeAdapter(CoachProfile | None), lambda: None),
    RecordSpec(CURRENT_YEAR_KEY, TypeAdapter(int), lambda: FALLBACK_YEAR),
    RecordSpec(PLAYERS_KEY, TypeAdapter(list[Player]), list),
    RecordSpec(PLAYER_STATS_KEY, TypeAdapter(list[dict[str, Any]]), list),
    RecordSpec(ALL_RECRUITS_KEY, TypeAdapter(list[Recruit]), list),
    RecordSpec(ALL_TRANSFERS_KEY, TypeAdapter(list[Transfer]), list),
    RecordSpec(ALL_AWARDS_KEY, TypeAdapter(list[Award]), list),
    RecordSpec(YEAR_RECORDS_KEY, TypeAdapter(list[YearRecord]), list),
    RecordSpec(ALL_TROPHIES_KEY, TypeAdapter(list[Trophy]), list),
    RecordSpec(TOP25_HISTORY_KEY, TypeAdapter(dict[str, Any]), dict),
)
FIXED_BY_KEY: dict[str, RecordSpec] = {spec.key: spec for spec in FIXED_RECORDS}
FIXED_KEYS: tuple[str, ...] = tuple(spec.key for spec in FIXED_RECORDS)

SCHEDULE_FAMILY = RecordFamily("schedule", "schedule_", TypeAdapter(list[Game]), blank_schedule)
YEAR_STATS_FAMILY = RecordFamily("yearStats", "yearStats_", TypeAdapter(YearStats), YearStats)
DYNAMIC_FAMILIES: tuple[RecordFamily, ...] = (SCHEDULE_FAMILY, YEAR_STATS_FAMILY)


def is_dynasty_key(key: str) -> bool:
    """Whether *key* belongs to the active dynasty: a fixed key or any family key."""
    return key in FIXED_BY_KEY or any(family.owns(key) for family in DYNAMIC_FAMILIES)


async def dynasty_keys(repo: Repository) -> list[str]:
    """Every stored key that belongs to the active dynasty.

    Fixed keys come first in registry order, then every key under each
    family prefix, including malformed ones such as ``schedule_abc``.
    """
    present = await repo.get_records(FIXED_KEYS)
    keys = [key for key in FIXED_KEYS if key in present]
    for family in DYNAMIC_FAMILIES:
        keys.extend(await repo.list_record_keys(family.prefix))
    return keys


# --- typed load/store ---


async def load_record(repo: Repository, spec: RecordSpec) -> Any:
    """Read and validate a record, falling back to its default.

    A value that fails to parse is logged and deleted, and the default is
    returned, so one damaged record never blocks the rest of the dynasty.
    """
    raw = await repo.get_record(spec.key)
    if raw is None:
        return spec.default()
    try:
        return spec.adapter.validate_json(raw)
    except ValidationError as exc:
        logger.warning("record_discarded key=%s reason=%s", spec.key, exc.errors()[0]["msg"])
        await repo.delete_record(spec.key)
        return spec.default()


def encode_value(value: Any) -> str:
    """Serialize a JSON-ready value the one way every record is stored."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


async def store_record(repo: Repository, spec: RecordSpec, value: Any) -> None:
    data = spec.adapter.dump_python(value, mode="json", by_alias=True, exclude_none=True)
    await repo.set_record(spec.key, encode_value(data))
