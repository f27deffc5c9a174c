"""Top 25 API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from dynastykeeper.api.deps import SessionDep
from dynastykeeper.core.schedule import week_display_name
from dynastykeeper.models.rankings import RankedTeam

router = APIRouter(prefix="/api/rankings", tags=["rankings"])


@router.get("/{year}/{week}")
async def get_poll(year: int, week: int, session: SessionDep) -> dict:
    """The poll in effect at *week*, falling back to the latest earlier week."""
    rankings = await session.rankings()
    poll = rankings.get_poll(year, week)
    return {
        "data": {
            "year": year,
            "week": week,
            "label": week_display_name(week),
            "effectiveWeek": rankings.effective_week(year, week),
            "poll": [team.to_record() for team in poll],
        },
    }


@router.put("/{year}/{week}")
async def put_poll(year: int, week: int, poll: list[RankedTeam], session: SessionDep) -> dict:
    """Replace exactly one week's poll."""
    try:
        await session.set_poll(year, week, poll)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    saved = await session.get_poll(year, week)
    return {"data": {"year": year, "week": week, "poll": [t.to_record() for t in saved]}}


@router.get("/{year}/{week}/teams/{team}")
async def get_team_rank(year: int, week: int, team: str, session: SessionDep) -> dict:
    movement = await session.movement(team, year, week)
    return {"data": movement.to_record()}
