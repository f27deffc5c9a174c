"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dynastykeeper.api.dynasties import router as dynasties_router
from dynastykeeper.api.rankings import router as rankings_router
from dynastykeeper.api.records import router as records_router
from dynastykeeper.api.schedule import router as schedule_router
from dynastykeeper.api.seasons import router as seasons_router
from dynastykeeper.api.snapshots import router as snapshots_router
from dynastykeeper.config import Settings
from dynastykeeper.core.teams import load_team_directory
from dynastykeeper.db.engine import create_engine, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine/tables and load the team directory."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await init_db(engine)
    app.state.engine = engine
    app.state.teams = load_team_directory(settings.teams_file_path())

    yield

    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the dynasty keeper FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.dynasty_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Dynasty Keeper",
        version="0.1.0",
        description="Save-game ledger for college football dynasty mode",
        docs_url="/docs" if settings.dynasty_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(dynasties_router)
    app.include_router(schedule_router)
    app.include_router(records_router)
    app.include_router(rankings_router)
    app.include_router(seasons_router)
    app.include_router(snapshots_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.dynasty_env}

    return app


app = create_app()
