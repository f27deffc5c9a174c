"""Tests for the dynasty session: current year, poll cache and launch state."""

import json

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from dynastykeeper.core.session import DynastySession
from dynastykeeper.core.teams import TeamDirectory, create_custom_team
from dynastykeeper.db.engine import create_engine, get_session, init_db
from dynastykeeper.db.repository import Repository
from dynastykeeper.models.rankings import RankedTeam


@pytest.fixture
async def engine() -> AsyncEngine:
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def repo(engine: AsyncEngine) -> Repository:
    async with get_session(engine) as session:
        yield Repository(session)


def _poll(*names: str) -> list[RankedTeam]:
    return [RankedTeam(name=name) for name in names]


class TestOpen:
    async def test_empty_store(self, repo: Repository):
        session = await DynastySession.open(repo)
        assert session.current_year == 2024
        assert session.dynasty_id is None

    async def test_reads_pointer_and_year(self, repo: Repository):
        await repo.set_record("currentYear", "2027")
        await repo.set_record("currentDynastyId", json.dumps("abc"))
        session = await DynastySession.open(repo)
        assert (session.current_year, session.dynasty_id) == (2027, "abc")

    async def test_bare_dynasty_id(self, repo: Repository):
        await repo.set_record("currentDynastyId", "legacy-id")
        session = await DynastySession.open(repo)
        assert session.dynasty_id == "legacy-id"

    async def test_custom_teams_layered_on_directory(
        self, repo: Repository, teams: TeamDirectory
    ):
        await create_custom_team(repo, "Tech", "Gators East")
        session = await DynastySession.open(repo, teams)
        assert session.teams.conference_of("Gators East") == "ACC"
        assert session.ledger.teams is session.teams
        assert teams.custom_teams == []


class TestPolls:
    async def test_set_poll_persists(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_poll(2025, 3, _poll("Tech"))
        assert not session.rankings_dirty
        stored = json.loads(await repo.get_record("top25History"))
        assert stored == {"2025": {"3": [{"name": "Tech"}]}}

        reopened = await DynastySession.open(repo)
        assert (await reopened.get_poll(2025, 8))[0].name == "Tech"
        assert await reopened.rank_of("Tech", 2025, 8) == 1

    async def test_in_memory_edit_until_flush(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_poll(2025, 3, _poll("Tech"), persist=False)
        assert session.rankings_dirty
        assert await repo.get_record("top25History") is None
        assert (await session.get_poll(2025, 3))[0].name == "Tech"
        await session.flush_rankings()
        assert not session.rankings_dirty
        assert await repo.get_record("top25History") is not None

    async def test_flush_without_edits_writes_nothing(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.get_poll(2025, 0)
        await session.flush_rankings()
        assert await repo.get_record("top25History") is None

    async def test_discard_drops_pending_edits(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_poll(2025, 3, _poll("Tech"), persist=False)
        session.discard_cached_state()
        assert (await session.get_poll(2025, 3))[0].name == ""

    async def test_seed_rankings(self, repo: Repository):
        session = await DynastySession.open(repo)
        assert await session.seed_rankings(2025) is True
        assert await session.seed_rankings(2025) is False
        stored = json.loads(await repo.get_record("top25History"))
        assert list(stored["2025"]) == ["0"]
        assert len(stored["2025"]["0"]) == 25

    async def test_untouched_weeks_saved_as_loaded(self, repo: Repository):
        oversized = [{"name": f"Team {i}"} for i in range(26)]
        unrecorded = [{"name": "Tech", "record": None}]
        await repo.set_record(
            "top25History", json.dumps({"2024": {"5": oversized, "6": unrecorded}})
        )
        session = await DynastySession.open(repo)
        await session.set_poll(2025, 1, _poll("Home U"))
        stored = json.loads(await repo.get_record("top25History"))
        assert stored["2024"]["5"] == oversized
        assert stored["2024"]["6"] == unrecorded
        assert stored["2025"]["1"][0]["name"] == "Home U"

    async def test_reset_rankings_replaces_year(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_poll(2026, 4, _poll("Early"))
        await session.set_poll(2025, 2, _poll("Kept"))
        await session.reset_rankings(2026)
        stored = json.loads(await repo.get_record("top25History"))
        assert list(stored["2026"]) == ["0"]
        assert stored["2025"]["2"][0]["name"] == "Kept"

    async def test_movement(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_poll(2025, 0, _poll("A", "B"))
        await session.set_poll(2025, 1, _poll("B", "A"))
        assert (await session.movement("B", 2025, 1)).status == "up"


class TestLaunchState:
    async def test_set_and_clear_dynasty_id(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_dynasty_id("slot-1")
        assert json.loads(await repo.get_record("currentDynastyId")) == "slot-1"
        await session.set_dynasty_id(None)
        assert await repo.get_record("currentDynastyId") is None

    async def test_return_to_launch_flushes_first(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_dynasty_id("slot-1")
        await session.set_poll(2025, 0, _poll("Tech"), persist=False)
        await session.return_to_launch()
        assert session.current_year is None
        assert session.dynasty_id is None
        assert await repo.get_record("currentDynastyId") is None
        assert "Tech" in await repo.get_record("top25History")

    async def test_reload(self, repo: Repository):
        session = await DynastySession.open(repo)
        await repo.set_record("currentYear", "2030")
        await session.reload()
        assert session.current_year == 2030

    async def test_set_current_year(self, repo: Repository):
        session = await DynastySession.open(repo)
        await session.set_current_year(2026)
        assert session.current_year == 2026
        assert await repo.get_record("currentYear") == "2026"
