"""Snapshot export / import / restore API endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import JSONResponse

from dynastykeeper.api.deps import SessionDep
from dynastykeeper.core.snapshot import (
    export_snapshot,
    import_snapshot,
    restore_from_snapshot,
    snapshot_filename,
    validate_snapshot,
)

router = APIRouter(prefix="/api/snapshot", tags=["snapshot"])


@router.get("")
async def download_snapshot(session: SessionDep) -> JSONResponse:
    """The active dynasty as a backup file download."""
    snapshot = await export_snapshot(session)
    filename = snapshot_filename(snapshot)
    return JSONResponse(
        content=snapshot.to_document(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_endpoint(session: SessionDep, document: Any = Body(...)) -> dict:
    """Store a snapshot as a new save slot and load it."""
    try:
        summary = await import_snapshot(session, document)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": summary.model_dump(mode="json", by_alias=True)}


@router.post("/restore")
async def restore_endpoint(session: SessionDep, document: Any = Body(...)) -> dict:
    """Replace the active dynasty's records with a snapshot's. Destructive."""
    try:
        snapshot = validate_snapshot(document)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    written = await restore_from_snapshot(session, snapshot)
    return {"data": {"records": written, "currentYear": session.current_year}}
