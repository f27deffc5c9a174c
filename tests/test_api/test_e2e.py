"""End-to-end test: create dynasty -> play schedule -> polls -> end season -> backup."""

import pytest
from httpx import ASGITransport, AsyncClient

from dynastykeeper.config import Settings
from dynastykeeper.core.teams import TeamDirectory
from dynastykeeper.db.engine import create_engine, init_db
from dynastykeeper.main import create_app
from dynastykeeper.models.teams import Team


@pytest.fixture
async def app_and_engine():
    """Create test app with in-memory database and a small team directory."""
    settings = Settings(
        database_url="sqlite+aiosqlite:///:memory:", dynasty_default_start_year=2025
    )
    application = create_app(settings)
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    application.state.engine = engine
    application.state.teams = TeamDirectory(
        [
            Team(name="Home U", conference="Big Ten"),
            Team(name="State", conference="Big Ten"),
            Team(name="Tech", conference="ACC"),
        ]
    )
    yield application, engine
    await engine.dispose()


@pytest.fixture
async def client(app_and_engine):
    application, _ = app_and_engine
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _create(client: AsyncClient, school: str = "Home U", **extra) -> dict:
    resp = await client.post(
        "/api/dynasties", json={"coach_name": "Coach Ann", "school_name": school, **extra}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


class TestE2E:
    async def test_full_season_flow(self, client: AsyncClient):
        # Health
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

        # New dynasty starts at the configured year
        dynasty = await _create(client)
        assert dynasty["currentYear"] == 2025
        resp = await client.get("/api/seasons/current")
        assert resp.json()["data"] == {"year": 2025, "dynastyId": dynasty["id"]}

        # Enter results
        games = [
            {"opponent": "State", "result": "Win", "score": "20-10"},
            {"location": "@", "opponent": "Tech", "result": "Loss", "score": "7-21"},
            {"result": "Bye"},
        ]
        resp = await client.put("/api/schedule/2025", json=games)
        assert resp.status_code == 200
        body = resp.json()["data"]
        assert len(body["games"]) == 21
        assert body["stats"]["wins"] == 1

        resp = await client.patch(
            "/api/schedule/2025/weeks/3", json={"opponent": "State", "result": "W", "score": "3-0"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["result"] == "Win"

        resp = await client.get("/api/schedule/2025/stats")
        stats = resp.json()["data"]
        assert stats["overallRecord"] == "2-1"
        assert stats["conferenceRecord"] == "2-0"
        assert (stats["pointsScored"], stats["pointsAgainst"]) == (30, 31)
        assert stats["splits"]["away"]["losses"] == 1
        assert stats["cacheStale"] is False

        resp = await client.get("/api/schedule/2025/active-week")
        assert resp.json()["data"] == {"week": 4, "label": "Week 4"}

        # Poll entered on week 3 reads through later weeks
        resp = await client.put("/api/rankings/2025/3", json=[{"name": "Tech"}, {"name": "Home U"}])
        assert resp.status_code == 200
        resp = await client.get("/api/rankings/2025/9")
        poll = resp.json()["data"]
        assert poll["effectiveWeek"] == 3
        assert poll["poll"][1]["name"] == "Home U"
        resp = await client.get("/api/rankings/2025/3/teams/Home U")
        assert resp.json()["data"]["status"] == "entered"

        # End the season
        resp = await client.post("/api/seasons/2024/end")
        assert resp.status_code == 400
        resp = await client.post("/api/seasons/2025/end")
        assert resp.status_code == 200
        ended = resp.json()["data"]
        assert ended["currentYear"] == 2026
        assert ended["record"]["overallRecord"] == "2-1"

        resp = await client.get("/api/seasons/2025")
        assert resp.json()["data"]["phase"] == "finalized"
        resp = await client.get("/api/seasons/2027")
        assert resp.status_code == 400

        resp = await client.get("/api/records")
        assert [r["year"] for r in resp.json()["data"]] == [2025, 2026]
        resp = await client.get("/api/schedule/2026/active-week")
        assert resp.json()["data"]["week"] == 0

        # Save slot reflects the finished season
        resp = await client.post("/api/dynasties/save")
        assert resp.status_code == 200
        saved = resp.json()["data"]
        assert (saved["seasonsPlayed"], saved["totalWins"], saved["totalLosses"]) == (1, 2, 1)

    async def test_records_edit(self, client: AsyncClient):
        await _create(client)
        resp = await client.put(
            "/api/records/2025", json={"year": 2025, "bowlGame": "Rose Bowl", "natChamp": "Home U"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["phase"] == "active"
        resp = await client.get("/api/records/2025")
        assert resp.json()["data"]["bowlGame"] == "Rose Bowl"
        resp = await client.put("/api/records/2026", json={"year": 2026})
        assert resp.status_code == 400

    async def test_bad_inputs(self, client: AsyncClient):
        await _create(client)
        resp = await client.patch("/api/schedule/2025/weeks/30", json={"opponent": "Tech"})
        assert resp.status_code == 400
        resp = await client.put("/api/schedule/2025", json=[{}] * 22)
        assert resp.status_code == 400
        resp = await client.put("/api/rankings/2025/22", json=[])
        assert resp.status_code == 400
        body = {"coach_name": "X", "school_name": "Home U"}
        resp = await client.post("/api/dynasties", json=body)
        assert resp.status_code == 400


class TestSlots:
    async def test_switch_close_delete(self, client: AsyncClient):
        home = await _create(client)
        await client.put("/api/schedule/2025", json=[{"opponent": "State", "result": "Win"}])
        tech = await _create(client, "Tech", start_year=2031)

        resp = await client.get("/api/dynasties")
        assert {d["schoolName"] for d in resp.json()["data"]} == {"Home U", "Tech"}

        resp = await client.post(f"/api/dynasties/{home['id']}/load")
        assert resp.status_code == 200
        resp = await client.get("/api/schedule/2025")
        assert resp.json()["data"][0]["opponent"] == "State"
        resp = await client.get("/api/seasons/current")
        assert resp.json()["data"]["year"] == 2025

        resp = await client.post("/api/dynasties/close")
        assert resp.json()["data"] == {"dynastyId": None}
        resp = await client.post("/api/dynasties/save")
        assert resp.status_code == 400

        resp = await client.delete(f"/api/dynasties/{tech['id']}")
        assert resp.status_code == 200
        resp = await client.delete(f"/api/dynasties/{tech['id']}")
        assert resp.status_code == 404
        resp = await client.post("/api/dynasties/missing/load")
        assert resp.status_code == 404


class TestSnapshots:
    async def test_download_and_restore(self, client: AsyncClient):
        await _create(client)
        await client.put("/api/schedule/2025", json=[{"opponent": "State", "result": "Win"}])
        resp = await client.get("/api/snapshot")
        assert resp.status_code == 200
        assert resp.headers["content-disposition"].startswith('attachment; filename="Home U-')
        document = resp.json()
        assert document["dynastyData"]["currentYear"] == 2025

        await client.put("/api/schedule/2025", json=[])
        resp = await client.post("/api/snapshot/restore", json=document)
        assert resp.status_code == 200
        assert resp.json()["data"]["currentYear"] == 2025
        resp = await client.get("/api/schedule/2025")
        assert resp.json()["data"][0]["opponent"] == "State"

    async def test_import(self, client: AsyncClient):
        await _create(client)
        document = {
            "version": "1.0.0",
            "exportedAt": "2030-01-01T00:00:00Z",
            "dynastyData": {
                "coachProfile": {"coachName": "Coach Bo", "schoolName": "Tech"},
                "currentYear": 2030,
            },
        }
        resp = await client.post("/api/snapshot/import", json=document)
        assert resp.status_code == 200
        assert resp.json()["data"]["schoolName"] == "Tech"
        resp = await client.get("/api/seasons/current")
        assert resp.json()["data"]["year"] == 2030

        resp = await client.post("/api/snapshot/import", json=document)
        assert resp.status_code == 400
        resp = await client.post("/api/snapshot/import", json={"version": "1.0.1"})
        assert resp.status_code == 400
        resp = await client.post("/api/snapshot/restore", json={"version": "9"})
        assert resp.status_code == 400
