"""Tests for the record registry and typed record access."""

import json

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from dynastykeeper.core import records
from dynastykeeper.db.engine import create_engine, get_session, init_db
from dynastykeeper.db.repository import Repository
from dynastykeeper.models.constants import FALLBACK_YEAR, SCHEDULE_LENGTH
from dynastykeeper.models.ledger import CoachProfile


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


class TestRegistry:
    def test_family_keys(self):
        assert records.SCHEDULE_FAMILY.key(2025) == "schedule_2025"
        assert records.SCHEDULE_FAMILY.owns("schedule_2025")
        assert records.SCHEDULE_FAMILY.owns("schedule_abc")
        assert not records.SCHEDULE_FAMILY.owns("scheduleX2025")
        assert records.YEAR_STATS_FAMILY.key(2024) == "yearStats_2024"

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("coachProfile", True),
            ("top25History", True),
            ("schedule_2030", True),
            ("yearStats_1999", True),
            ("currentDynastyId", False),
            ("customTeams", False),
            ("top25Rankings", False),
            ("schedule_next", True),
            ("scheduleNotes", False),
            ("futureFeature", False),
        ],
    )
    def test_is_dynasty_key(self, key, expected):
        assert records.is_dynasty_key(key) is expected

    async def test_dynasty_keys_enumerates_families(self, repo: Repository):
        for key in ("schedule_2025", "schedule_2024", "yearStats_2024", "currentYear",
                    "customTeams", "scheduleXnotes", "unrelated"):
            await repo.set_record(key, "1")
        keys = await records.dynasty_keys(repo)
        assert keys == ["currentYear", "schedule_2024", "schedule_2025", "yearStats_2024"]

    async def test_dynasty_keys_include_malformed_family_keys(self, repo: Repository):
        await repo.set_record("schedule_abc", "[]")
        await repo.set_record("yearStats_", "{}")
        keys = await records.dynasty_keys(repo)
        assert keys == ["schedule_abc", "yearStats_"]


class TestLoadStore:
    async def test_missing_reads_default(self, repo: Repository):
        year_spec = records.FIXED_BY_KEY["currentYear"]
        assert await records.load_record(repo, year_spec) == FALLBACK_YEAR
        assert await records.load_record(repo, records.FIXED_BY_KEY["coachProfile"]) is None
        schedule = await records.load_record(repo, records.SCHEDULE_FAMILY.spec(2025))
        assert len(schedule) == SCHEDULE_LENGTH
        assert await repo.get_record("schedule_2025") is None

    async def test_store_uses_save_file_keys(self, repo: Repository):
        spec = records.FIXED_BY_KEY["coachProfile"]
        await records.store_record(repo, spec, CoachProfile(coach_name="Ann", school_name="Tech"))
        assert json.loads(await repo.get_record("coachProfile")) == {
            "coachName": "Ann",
            "schoolName": "Tech",
        }
        loaded = await records.load_record(repo, spec)
        assert loaded.school_name == "Tech"

    async def test_damaged_record_is_discarded(self, repo: Repository):
        await repo.set_record("allRecruits", '{"not": "a list"}')
        spec = records.FIXED_BY_KEY["allRecruits"]
        assert await records.load_record(repo, spec) == []
        assert await repo.get_record("allRecruits") is None

    async def test_unparseable_json_is_discarded(self, repo: Repository):
        await repo.set_record("players", "[{")
        assert await records.load_record(repo, records.FIXED_BY_KEY["players"]) == []
        assert await repo.get_record("players") is None

    async def test_string_year_is_accepted(self, repo: Repository):
        await repo.set_record("currentYear", '"2027"')
        assert await records.load_record(repo, records.FIXED_BY_KEY["currentYear"]) == 2027

    def test_encode_value_is_compact(self):
        assert records.encode_value({"a": [1, 2], "b": "é"}) == '{"a":[1,2],"b":"é"}'
