"""Snapshot export, validation, import and restore.

A snapshot is one JSON document holding every record of a dynasty::

    {"version": "1.0.1", "exportedAt": "...", "dynastyData": {"coachProfile": {...},
     "currentYear": 2025, "schedule_2025": [...], ...}}

Export reads the records as stored, after writing any Top 25 edits that are
still only in memory, so ``restore(export())`` writes back exactly the same
values. Restore is destructive: the active dynasty's records are wiped
first. Import validates the whole document before touching anything.
"""

from __future__ import annotations

import json
import logging
import pathlib
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from dynastykeeper.core import records
from dynastykeeper.models.constants import MIN_VALID_YEAR
from dynastykeeper.models.dynasty import DynastySnapshot

if TYPE_CHECKING:
    from dynastykeeper.core.session import DynastySession
    from dynastykeeper.db.repository import Repository
    from dynastykeeper.models.dynasty import DynastySummary

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0.1"
RECOGNIZED_VERSIONS: frozenset[str] = frozenset({"1.0.0", "1.0.1"})

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]+')


class SnapshotValidationError(ValueError):
    """An import document was rejected. The message says why."""


# --- Export ---


async def collect_dynasty_data(repo: Repository) -> dict[str, Any]:
    """Every dynasty record as parsed JSON, keyed as in the store.

    A stored value that is not JSON cannot be carried in the document. It is
    discarded from the store and left out, as a damaged record is on read.
    """
    keys = await records.dynasty_keys(repo)
    raw = await repo.get_records(keys)
    data: dict[str, Any] = {}
    damaged: list[str] = []
    for key in keys:
        try:
            data[key] = json.loads(raw[key])
        except json.JSONDecodeError:
            logger.warning("snapshot_value_not_json key=%s action=discarded", key)
            damaged.append(key)
    if damaged:
        await repo.delete_records(damaged)
    return data


async def export_snapshot(session: DynastySession) -> DynastySnapshot:
    """Flatten the active dynasty into one versioned document."""
    await session.flush_rankings()
    data = await collect_dynasty_data(session.repo)
    snapshot = DynastySnapshot(
        version=SNAPSHOT_VERSION,
        exported_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        dynasty_data=data,
    )
    logger.info("snapshot_exported keys=%d dynasty=%s", len(data), session.dynasty_id)
    return snapshot


def snapshot_filename(snapshot: DynastySnapshot) -> str:
    """``<school>-Dynasty-<year>-<YYYY-MM-DD>.json`` for a backup file."""
    data = snapshot.dynasty_data
    profile = data.get(records.COACH_PROFILE_KEY)
    school = ""
    if isinstance(profile, Mapping):
        school = str(profile.get("schoolName") or "")
    school = _UNSAFE_FILENAME_CHARS.sub("_", school).strip() or "Dynasty"
    year = data.get(records.CURRENT_YEAR_KEY) or datetime.now(UTC).year
    day = snapshot.exported_at[:10] or datetime.now(UTC).date().isoformat()
    return f"{school}-Dynasty-{year}-{day}.json"


def write_snapshot(snapshot: DynastySnapshot, path: str | pathlib.Path) -> pathlib.Path:
    """Write *snapshot* as pretty-printed JSON. A directory gets the default filename."""
    path = pathlib.Path(path)
    if path.is_dir():
        path = path / snapshot_filename(snapshot)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(snapshot.to_document(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    logger.info("snapshot_written path=%s", path)
    return path


def read_snapshot(path: str | pathlib.Path) -> dict[str, Any]:
    """Read a snapshot file as a raw document. Validation is left to the caller."""
    path = pathlib.Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SnapshotValidationError(f"Snapshot file not found: {path}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotValidationError(f"Snapshot file is not valid JSON: {path}") from exc
    return document


# --- Validation ---


def validate_snapshot(document: Any) -> DynastySnapshot:
    """Check an import document's shape and return it as a DynastySnapshot.

    Raises:
        SnapshotValidationError: With a human-readable reason, if the
            document is not a recognized, complete dynasty snapshot.
    """
    if not isinstance(document, Mapping):
        raise SnapshotValidationError("Snapshot must be a JSON object")

    version = document.get("version")
    if version not in RECOGNIZED_VERSIONS:
        msg = (
            f"Unrecognized snapshot version {version!r}; "
            f"expected one of {sorted(RECOGNIZED_VERSIONS)}"
        )
        raise SnapshotValidationError(msg)

    data = document.get("dynastyData")
    if not isinstance(data, Mapping) or not data:
        raise SnapshotValidationError("Snapshot has no dynastyData")

    profile = data.get(records.COACH_PROFILE_KEY)
    if not isinstance(profile, Mapping):
        raise SnapshotValidationError("Snapshot is missing the coach profile")
    for field in ("coachName", "schoolName"):
        value = profile.get(field)
        if not isinstance(value, str) or not value.strip():
            raise SnapshotValidationError(f"Coach profile is missing {field}")

    year = data.get(records.CURRENT_YEAR_KEY)
    try:
        year = int(year)
    except (TypeError, ValueError) as exc:
        raise SnapshotValidationError("Snapshot is missing a valid currentYear") from exc
    if year < MIN_VALID_YEAR:
        raise SnapshotValidationError(f"Snapshot currentYear {year} is not a valid season")

    exported_at = document.get("exportedAt")
    return DynastySnapshot(
        version=version,
        exported_at=exported_at if isinstance(exported_at, str) else "",
        dynasty_data=dict(data),
    )


def parse_snapshot_source(source: Mapping[str, Any] | str | bytes | pathlib.Path) -> Any:
    """Turn a document, JSON text or file path into a raw document."""
    if isinstance(source, pathlib.Path):
        return read_snapshot(source)
    if isinstance(source, str | bytes):
        try:
            return json.loads(source)
        except json.JSONDecodeError as exc:
            raise SnapshotValidationError("Snapshot is not valid JSON") from exc
    return source


# --- Restore / import ---


async def clear_active_data(repo: Repository) -> int:
    """Delete every record of the active dynasty plus legacy keys.

    Installation-wide keys (custom teams, the current dynasty pointer) stay.
    """
    keys = await records.dynasty_keys(repo)
    removed = await repo.delete_records([*keys, *records.LEGACY_KEYS])
    logger.info("active_data_cleared records=%d", removed)
    return removed


async def restore_from_snapshot(
    session: DynastySession, snapshot: DynastySnapshot | Mapping[str, Any]
) -> int:
    """Replace the active dynasty with the records in *snapshot*.

    *snapshot* is either a DynastySnapshot or its ``dynastyData`` mapping.
    Every dynasty key is written as the JSON of its value, so a null comes
    back as ``null``. Keys the document lacks stay absent and read as their
    defaults. Keys that are not dynasty records are skipped. Returns how
    many records were written.
    """
    data = snapshot.dynasty_data if isinstance(snapshot, DynastySnapshot) else snapshot
    repo = session.repo

    # Pending poll edits belong to the dynasty being replaced.
    session.discard_cached_state()
    await clear_active_data(repo)

    written = 0
    for key, value in data.items():
        if key in records.GLOBAL_KEYS:
            logger.warning("snapshot_key_ignored key=%s reason=installation_wide", key)
            continue
        if not records.is_dynasty_key(key):
            logger.warning("snapshot_key_ignored key=%s reason=unregistered", key)
            continue
        await repo.set_record(key, records.encode_value(value))
        written += 1

    await session.reload()
    logger.info("snapshot_restored records=%d current_year=%s", written, session.current_year)
    return written


async def import_snapshot(
    session: DynastySession, source: Mapping[str, Any] | str | bytes | pathlib.Path
) -> DynastySummary:
    """Validate a snapshot, store it as a new save slot and load it.

    Nothing is written unless the document passes validation and no save
    slot exists for the same school.

    Raises:
        SnapshotValidationError: If the document is rejected.
    """
    from dynastykeeper.core.dynasties import load_dynasty, summarize_dynasty_data

    snapshot = validate_snapshot(parse_snapshot_source(source))
    data = snapshot.dynasty_data
    profile = data[records.COACH_PROFILE_KEY]
    school = profile["schoolName"].strip()

    if await session.repo.get_dynasty_by_school(school) is not None:
        raise SnapshotValidationError(f"A dynasty for {school} already exists")

    totals = summarize_dynasty_data(data)
    row = await session.repo.create_dynasty(
        coach_name=profile["coachName"].strip(),
        school_name=school,
        current_year=int(data[records.CURRENT_YEAR_KEY]),
        data=data,
        seasons_played=totals.seasons_played,
        total_wins=totals.total_wins,
        total_losses=totals.total_losses,
        championships=totals.championships,
    )
    logger.info(
        "snapshot_imported dynasty=%s school=%s version=%s", row.id, school, snapshot.version
    )
    return await load_dynasty(session, row.id)
