"""Save-slot API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from dynastykeeper.api.deps import RepoDep, SessionDep
from dynastykeeper.core import dynasties

router = APIRouter(prefix="/api/dynasties", tags=["dynasties"])


class CreateDynastyRequest(BaseModel):
    """Request body for starting a new dynasty."""

    coach_name: str
    school_name: str
    start_year: int | None = None


@router.get("")
async def list_dynasties(repo: RepoDep) -> dict:
    summaries = await dynasties.list_dynasties(repo)
    return {"data": [s.model_dump(mode="json", by_alias=True) for s in summaries]}


@router.post("")
async def create_dynasty(body: CreateDynastyRequest, request: Request, session: SessionDep) -> dict:
    start_year = body.start_year or request.app.state.settings.dynasty_default_start_year
    try:
        summary = await dynasties.create_dynasty(
            session, body.coach_name, body.school_name, start_year
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": summary.model_dump(mode="json", by_alias=True)}


@router.post("/save")
async def save_dynasty(session: SessionDep) -> dict:
    try:
        summary = await dynasties.save_dynasty(session)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": summary.model_dump(mode="json", by_alias=True)}


@router.post("/close")
async def close_dynasty(session: SessionDep) -> dict:
    """Save the loaded dynasty and return to the launch screen."""
    if session.dynasty_id is not None:
        try:
            await dynasties.save_dynasty(session)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    await session.return_to_launch()
    return {"data": {"dynastyId": None}}


@router.post("/{dynasty_id}/load")
async def load_dynasty(dynasty_id: str, repo: RepoDep, session: SessionDep) -> dict:
    if await repo.get_dynasty(dynasty_id) is None:
        raise HTTPException(status_code=404, detail="Dynasty not found")
    summary = await dynasties.load_dynasty(session, dynasty_id)
    return {"data": summary.model_dump(mode="json", by_alias=True)}


@router.delete("/{dynasty_id}")
async def delete_dynasty(dynasty_id: str, repo: RepoDep, session: SessionDep) -> dict:
    if await repo.get_dynasty(dynasty_id) is None:
        raise HTTPException(status_code=404, detail="Dynasty not found")
    await dynasties.delete_dynasty(session, dynasty_id)
    return {"data": {"deleted": dynasty_id}}
