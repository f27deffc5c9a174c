"""Season lifecycle API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from dynastykeeper.api.deps import SessionDep
from dynastykeeper.core.season import end_season, season_phase

router = APIRouter(prefix="/api/seasons", tags=["seasons"])


@router.get("/current")
async def get_current_season(session: SessionDep) -> dict:
    return {"data": {"year": session.current_year, "dynastyId": session.dynasty_id}}


@router.get("/{year}")
async def get_season(year: int, session: SessionDep) -> dict:
    if session.current_year is None:
        raise HTTPException(status_code=400, detail="No dynasty is loaded")
    try:
        phase = season_phase(year, session.current_year)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": {"year": year, "phase": phase.value}}


@router.post("/{year}/end")
async def end_season_endpoint(year: int, session: SessionDep) -> dict:
    """Finalize *year* and move the dynasty to the next season.

    There is no undo. Callers are expected to confirm with the user first.
    """
    try:
        record = await end_season(session, year)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": {"record": record.to_record(), "currentYear": session.current_year}}
