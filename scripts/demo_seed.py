"""Seed a demo dynasty and play seasons for demo purposes.

Usage:
    python scripts/demo_seed.py seed          # Create the demo dynasty + first schedule
    python scripts/demo_seed.py step [N]      # Play and end N seasons (default 1)
    python scripts/demo_seed.py status        # Print current state

Uses a local SQLite database (demo_dynasty.db).
"""

from __future__ import annotations

import asyncio
import os
import random
import sys

from dynastykeeper.config import Settings
from dynastykeeper.core.dynasties import create_dynasty, list_dynasties, save_dynasty
from dynastykeeper.core.schedule import active_week, week_display_name
from dynastykeeper.core.season import end_season
from dynastykeeper.core.session import DynastySession
from dynastykeeper.core.teams import TeamDirectory, load_team_directory
from dynastykeeper.db.engine import create_engine, get_session, init_db
from dynastykeeper.db.repository import Repository
from dynastykeeper.models.ledger import Recruit
from dynastykeeper.models.rankings import RankedTeam
from dynastykeeper.models.schedule import Game, GameLocation, GameResult

DEMO_DB = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///demo_dynasty.db")

COACH = "Demo Coach"
SCHOOL = "Oregon State"
START_YEAR = 2024

OPPONENTS = [
    "Idaho State",
    "Oregon",
    "Boise State",
    "Washington State",
    "San Diego State",
    "Colorado State",
    "Fresno State",
    "Hawaii",
    "Utah State",
    "UNLV",
    "Nevada",
    "Wyoming",
]

RECRUIT_NAMES = ["Briar Ashwood", "Rosa Vex", "Hazel Blackthorn", "Kit Larkspur", "Juno Vale"]
POSITIONS = ["QB", "RB", "WR", "TE", "OL", "DL", "LB", "CB", "S"]


def _teams() -> TeamDirectory:
    return load_team_directory(Settings().teams_file_path())


def _random_season(rng: random.Random) -> list[Game]:
    """Twelve regular-season games with one bye in week 6."""
    games: list[Game] = []
    opponents = iter(rng.sample(OPPONENTS, k=len(OPPONENTS)))
    for week in range(13):
        if week == 6:
            games.append(Game(id=week, week=week, opponent="BYE", result=GameResult.BYE))
            continue
        ours, theirs = rng.randint(10, 45), rng.randint(7, 42)
        if ours == theirs:
            ours += 3
        location = rng.choice([GameLocation.HOME, GameLocation.AWAY])
        result = GameResult.WIN if ours > theirs else GameResult.LOSS
        # away scores are entered opponent-first
        score = f"{theirs}-{ours}" if location == GameLocation.AWAY else f"{ours}-{theirs}"
        games.append(
            Game(
                id=week,
                week=week,
                location=location,
                opponent=next(opponents),
                result=result,
                score=score,
            )
        )
    return games


async def seed():
    """Create the demo dynasty with an empty first season."""
    engine = create_engine(DEMO_DB)
    await init_db(engine)
    async with get_session(engine) as session:
        repo = Repository(session)
        dynasty = await DynastySession.open(repo, _teams())
        summary = await create_dynasty(dynasty, COACH, SCHOOL, START_YEAR)
        print(f"Created dynasty {summary.id}: {COACH} at {SCHOOL}, {START_YEAR}")

    await engine.dispose()


async def step(seasons: int):
    """Fill in, rank and end the current season, *seasons* times."""
    rng = random.Random(os.environ.get("DEMO_SEED", "dynasty"))
    engine = create_engine(DEMO_DB)
    async with get_session(engine) as session:
        repo = Repository(session)
        dynasty = await DynastySession.open(repo, _teams())
        if dynasty.dynasty_id is None:
            print("No dynasty loaded. Run `seed` first.")
            return

        for _ in range(seasons):
            year = dynasty.current_year
            stats = await dynasty.ledger.set_schedule(year, _random_season(rng))
            for name in rng.sample(RECRUIT_NAMES, k=3):
                await dynasty.ledger.add_recruit(
                    Recruit(
                        recruited_year=year,
                        name=name,
                        stars=str(rng.randint(2, 5)),
                        position=rng.choice(POSITIONS),
                    )
                )
            if stats.wins >= 9:
                poll = [RankedTeam(name=SCHOOL, record=stats.overall_record)]
                await dynasty.set_poll(year, 21, poll, persist=False)

            record = await end_season(dynasty, year)
            print(
                f"{year}: {record.overall_record} "
                f"(conf {record.conference_record}, PF {record.points_for}, "
                f"PA {record.points_against})"
            )

        summary = await save_dynasty(dynasty)
        print(f"Saved: {summary.total_wins}-{summary.total_losses} over "
              f"{summary.seasons_played} seasons")

    await engine.dispose()


async def status():
    """Print save slots and the active season."""
    engine = create_engine(DEMO_DB)
    await init_db(engine)
    async with get_session(engine) as session:
        repo = Repository(session)
        for s in await list_dynasties(repo):
            print(f"{s.school_name:<20} {s.coach_name:<15} {s.current_year} "
                  f"{s.total_wins}-{s.total_losses} titles={s.championships}")

        dynasty = await DynastySession.open(repo, _teams())
        if dynasty.dynasty_id is None:
            print("No dynasty loaded.")
            return
        year = dynasty.current_year
        week = active_week(await dynasty.ledger.get_schedule(year))
        print(f"Current season: {year} | Next up: {week_display_name(week)}")
        for record in await dynasty.ledger.get_all_year_records():
            print(f"  {record.year}: {record.overall_record} ({record.conference_record} conf)")

    await engine.dispose()


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return

    cmd = sys.argv[1]
    if cmd == "seed":
        asyncio.run(seed())
    elif cmd == "step":
        n = int(sys.argv[2]) if len(sys.argv) > 2 else 1
        asyncio.run(step(n))
    elif cmd == "status":
        asyncio.run(status())
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)


if __name__ == "__main__":
    main()
