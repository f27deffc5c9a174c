"""Schedule API endpoints: the season's games, live stats and active week."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from dynastykeeper.api.deps import SessionDep
from dynastykeeper.core.schedule import active_week, week_display_name
from dynastykeeper.core.stats import location_record
from dynastykeeper.models.schedule import Game, GameLocation

router = APIRouter(prefix="/api/schedule", tags=["schedule"])


class GameUpdate(BaseModel):
    """Partial update for one week. Unset fields keep their stored value."""

    location: str | None = None
    opponent: str | None = None
    result: str | None = None
    score: str | None = None


@router.get("/{year}")
async def get_schedule(year: int, session: SessionDep) -> dict:
    games = await session.ledger.get_schedule(year)
    return {"data": [game.to_record() for game in games]}


@router.put("/{year}")
async def put_schedule(year: int, games: list[Game], session: SessionDep) -> dict:
    """Replace the whole schedule. Short schedules are padded to 21 weeks."""
    try:
        stats = await session.ledger.set_schedule(year, games)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    schedule = await session.ledger.get_schedule(year)
    return {
        "data": {
            "games": [game.to_record() for game in schedule],
            "stats": stats.to_record(),
        },
    }


@router.patch("/{year}/weeks/{week}")
async def patch_week(year: int, week: int, body: GameUpdate, session: SessionDep) -> dict:
    try:
        game = await session.ledger.update_game(year, week, **body.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": game.to_record()}


@router.get("/{year}/stats")
async def get_stats(year: int, session: SessionDep) -> dict:
    """Stats recomputed from the schedule, with home/away/neutral splits."""
    schedule = await session.ledger.get_schedule(year)
    stats = await session.ledger.live_year_stats(year)
    return {
        "data": {
            **stats.to_record(),
            "overallRecord": stats.overall_record,
            "conferenceRecord": stats.conference_record,
            "splits": {
                loc.name.lower(): location_record(schedule, loc).to_record()
                for loc in GameLocation
            },
            "cacheStale": await session.ledger.year_stats_is_stale(year),
        },
    }


@router.get("/{year}/active-week")
async def get_active_week(year: int, session: SessionDep) -> dict:
    week = active_week(await session.ledger.get_schedule(year))
    return {"data": {"week": week, "label": week_display_name(week)}}
