"""Year record API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from dynastykeeper.api.deps import SessionDep
from dynastykeeper.core.season import season_phase
from dynastykeeper.models.ledger import YearRecord

router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("")
async def list_year_records(session: SessionDep) -> dict:
    records = await session.ledger.get_all_year_records()
    return {"data": [record.to_record() for record in records]}


@router.get("/{year}")
async def get_year_record(year: int, session: SessionDep) -> dict:
    record = await session.ledger.get_year_record(year)
    return {"data": record.to_record()}


@router.put("/{year}")
async def put_year_record(year: int, record: YearRecord, session: SessionDep) -> dict:
    """Replace a year's record. Seasons that have not started cannot be edited."""
    if session.current_year is None:
        raise HTTPException(status_code=400, detail="No dynasty is loaded")
    try:
        phase = season_phase(year, session.current_year)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    await session.ledger.set_year_record(year, record)
    saved = await session.ledger.get_year_record(year)
    return {"data": {**saved.to_record(), "phase": phase.value}}
