"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. Records are stored as opaque serialized
strings; parsing and default handling belong to the callers in ``core``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dynastykeeper.db.models import DynastyRow, RecordRow


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Records (key-value working set) ---

    async def get_record(self, key: str) -> str | None:
        """Return the raw serialized value stored under *key*, or None."""
        row = await self.session.get(RecordRow, key)
        return row.value if row else None

    async def set_record(self, key: str, value: str) -> None:
        """Upsert a record. The write is flushed before returning."""
        row = await self.session.get(RecordRow, key)
        if row is not None:
            row.value = value
        else:
            self.session.add(RecordRow(key=key, value=value))
        await self.session.flush()

    async def delete_record(self, key: str) -> None:
        await self.session.execute(delete(RecordRow).where(RecordRow.key == key))
        await self.session.flush()

    async def delete_records(self, keys: Iterable[str]) -> int:
        """Delete every listed key. Returns how many rows were removed."""
        keys = list(keys)
        if not keys:
            return 0
        result = await self.session.execute(delete(RecordRow).where(RecordRow.key.in_(keys)))
        await self.session.flush()
        return result.rowcount or 0

    async def list_record_keys(self, prefix: str | None = None) -> list[str]:
        """List stored keys, optionally restricted to a literal prefix."""
        stmt = select(RecordRow.key).order_by(RecordRow.key)
        if prefix:
            # autoescape so the "_" in "schedule_" is not a LIKE wildcard
            stmt = stmt.where(RecordRow.key.startswith(prefix, autoescape=True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_records(self, keys: Iterable[str]) -> dict[str, str]:
        """Bulk fetch. Missing keys are simply absent from the result."""
        keys = list(keys)
        if not keys:
            return {}
        result = await self.session.execute(select(RecordRow).where(RecordRow.key.in_(keys)))
        return {row.key: row.value for row in result.scalars().all()}

    # --- Dynasties (save slots) ---

    async def create_dynasty(
        self,
        coach_name: str,
        school_name: str,
        current_year: int,
        data: dict | None = None,
        seasons_played: int = 0,
        total_wins: int = 0,
        total_losses: int = 0,
        championships: int = 0,
    ) -> DynastyRow:
        row = DynastyRow(
            coach_name=coach_name,
            school_name=school_name,
            current_year=current_year,
            data=data or {},
            seasons_played=seasons_played,
            total_wins=total_wins,
            total_losses=total_losses,
            championships=championships,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_dynasty(self, dynasty_id: str) -> DynastyRow | None:
        return await self.session.get(DynastyRow, dynasty_id)

    async def get_dynasty_by_school(self, school_name: str) -> DynastyRow | None:
        """Find a save slot by school, ignoring case and surrounding whitespace."""
        stored = func.lower(func.trim(DynastyRow.school_name))
        result = await self.session.execute(
            select(DynastyRow).where(stored == school_name.strip().lower()).limit(1)
        )
        return result.scalars().first()

    async def list_dynasties(self) -> list[DynastyRow]:
        """All save slots, most recently played first."""
        result = await self.session.execute(
            select(DynastyRow).order_by(DynastyRow.last_played.desc())
        )
        return list(result.scalars().all())

    async def update_dynasty(self, dynasty_id: str, **fields: object) -> DynastyRow | None:
        """Update summary columns and/or the saved data of a slot."""
        row = await self.session.get(DynastyRow, dynasty_id)
        if row is None:
            return None
        for name, value in fields.items():
            if not hasattr(DynastyRow, name):
                msg = f"Unknown dynasty field: {name}"
                raise ValueError(msg)
            setattr(row, name, value)
        await self.session.flush()
        return row

    async def touch_dynasty(self, dynasty_id: str) -> None:
        """Stamp ``last_played`` with the current time."""
        await self.update_dynasty(dynasty_id, last_played=datetime.now(UTC))

    async def delete_dynasty(self, dynasty_id: str) -> bool:
        row = await self.session.get(DynastyRow, dynasty_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True
