"""Tests for the season lifecycle: ending a season and preparing the next."""

import json

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from dynastykeeper.core.schedule import blank_schedule
from dynastykeeper.core.season import (
    SeasonPhase,
    SeasonTransitionError,
    end_season,
    season_phase,
)
from dynastykeeper.core.session import DynastySession
from dynastykeeper.core.teams import TeamDirectory
from dynastykeeper.db.engine import create_engine, get_session, init_db
from dynastykeeper.db.repository import Repository
from dynastykeeper.models.ledger import Award, CoachProfile, Recruit, Transfer, YearRecord
from dynastykeeper.models.rankings import RankedTeam
from dynastykeeper.models.schedule import Game, GameResult, YearStats


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


@pytest.fixture
async def session(repo: Repository, teams: TeamDirectory) -> DynastySession:
    session = await DynastySession.open(repo, teams)
    await session.ledger.set_coach_profile(CoachProfile(coach_name="C", school_name="Home U"))
    await session.set_current_year(2025)
    schedule = blank_schedule()
    schedule[0] = Game(opponent="State", result="Win", score="20-10")
    schedule[1] = Game(location="@", opponent="Tech", result="Loss", score="7-21")
    schedule[2] = Game(result="Bye")
    await session.ledger.set_schedule(2025, schedule)
    return session


class TestSeasonPhase:
    def test_phases(self):
        assert season_phase(2025, 2025) == SeasonPhase.ACTIVE
        assert season_phase(2020, 2025) == SeasonPhase.FINALIZED

    def test_future_year(self):
        with pytest.raises(ValueError, match="has not started"):
            season_phase(2026, 2025)


class TestEndSeason:
    async def test_reference_rollover(self, session: DynastySession):
        record = await end_season(session, 2025)
        ledger = session.ledger

        assert session.current_year == 2026
        assert await ledger.get_current_year() == 2026
        assert record.overall_record == "1-1"
        assert record.conference_record == "1-0"
        assert (record.points_for, record.points_against) == ("27", "31")
        assert (await ledger.get_year_record(2025)).overall_record == "1-1"

        next_schedule = await ledger.get_schedule(2026)
        assert len(next_schedule) == 21
        assert all(g.result == GameResult.NOT_PLAYED and g.opponent == "" for g in next_schedule)
        assert (await ledger.get_year_stats(2026)).model_dump() == YearStats().model_dump()
        assert (await ledger.get_year_record(2026)).overall_record == "0-0"
        assert [g.opponent for g in record.schedule[:2]] == ["State", "Tech"]

    async def test_only_current_year(self, session: DynastySession, repo: Repository):
        before = await repo.get_record("yearRecords")
        with pytest.raises(SeasonTransitionError, match="current season"):
            await end_season(session, 2024)
        with pytest.raises(SeasonTransitionError):
            await end_season(session, 2026)
        assert session.current_year == 2025
        assert await repo.get_record("yearRecords") == before

    async def test_no_dynasty_loaded(self, session: DynastySession):
        await session.return_to_launch()
        with pytest.raises(SeasonTransitionError, match="No dynasty"):
            await end_season(session, 2025)

    async def test_captures_lists_by_value(self, session: DynastySession):
        ledger = session.ledger
        await ledger.add_recruit(Recruit(recruited_year=2025, name="Five Star"))
        await ledger.add_recruit(Recruit(recruited_year=2026, name="Next Class"))
        await ledger.add_transfer(Transfer(transfer_year=2025, player_name="Portal Guy"))
        await ledger.add_award(Award(year=2025, player_name="QB", award_name="Heisman"))
        await end_season(session, 2025)

        await ledger.set_all_recruits([])
        await ledger.set_all_awards([])
        record = await ledger.get_year_record(2025)
        assert [r.name for r in record.recruits] == ["Five Star"]
        assert [t.player_name for t in record.transfers] == ["Portal Guy"]
        assert [a.player_name for a in record.player_awards] == ["QB"]

    async def test_hand_entered_fields_carried(self, session: DynastySession):
        await session.ledger.set_year_record(
            2025, YearRecord(year=2025, nat_champ="Home U", heisman="QB", overall_record="9-9")
        )
        record = await end_season(session, 2025)
        assert (record.nat_champ, record.heisman) == ("Home U", "QB")
        assert record.overall_record == "1-1"

    async def test_bowl_from_stats(self, session: DynastySession):
        await session.ledger.set_year_stats(
            2025, YearStats(bowl_game="Rose Bowl", bowl_result="W 31-17")
        )
        record = await end_season(session, 2025)
        assert (record.bowl_game, record.bowl_result) == ("Rose Bowl", "W 31-17")

    async def test_next_year_polls_replaced(self, session: DynastySession, repo: Repository):
        await session.set_poll(2026, 4, [RankedTeam(name="Early Entry")])
        await session.set_poll(2025, 21, [RankedTeam(name="Home U")])
        await end_season(session, 2025)
        stored = json.loads(await repo.get_record("top25History"))
        assert list(stored["2026"]) == ["0"]
        assert {team["name"] for team in stored["2026"]["0"]} == {""}
        assert stored["2025"]["21"][0]["name"] == "Home U"
        assert (await session.get_poll(2026, 4))[0].name == ""

    async def test_next_year_poll_seeded(self, session: DynastySession, repo: Repository):
        await end_season(session, 2025)
        stored = json.loads(await repo.get_record("top25History"))
        assert list(stored["2026"]) == ["0"]

    async def test_next_year_record_kept_if_present(self, session: DynastySession):
        await session.ledger.set_year_record(2026, YearRecord(year=2026, heisman="Preseason"))
        await end_season(session, 2025)
        assert (await session.ledger.get_year_record(2026)).heisman == "Preseason"

    async def test_two_seasons_in_a_row(self, session: DynastySession):
        await end_season(session, 2025)
        await end_season(session, 2026)
        years = [r.year for r in await session.ledger.get_all_year_records()]
        assert years == [2025, 2026, 2027]
        assert session.current_year == 2027
