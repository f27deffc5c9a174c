"""Back up and restore dynasties from the command line.

Usage:
    python scripts/dynasty_backup.py list               # Show save slots
    python scripts/dynasty_backup.py export [PATH]      # Write the active dynasty to PATH
    python scripts/dynasty_backup.py import FILE        # Import a snapshot as a new slot

PATH defaults to DYNASTY_SNAPSHOT_DIR; a directory gets the standard
``<school>-Dynasty-<year>-<date>.json`` filename. Uses DATABASE_URL.
"""

from __future__ import annotations

import asyncio
import pathlib
import sys

from dynastykeeper.config import Settings
from dynastykeeper.core.dynasties import list_dynasties
from dynastykeeper.core.session import DynastySession
from dynastykeeper.core.snapshot import export_snapshot, import_snapshot, write_snapshot
from dynastykeeper.core.teams import load_team_directory
from dynastykeeper.db.engine import create_engine, get_session, init_db
from dynastykeeper.db.repository import Repository


async def list_slots(settings: Settings) -> None:
    engine = create_engine(settings.database_url)
    await init_db(engine)
    async with get_session(engine) as session:
        summaries = await list_dynasties(Repository(session))
        if not summaries:
            print("No dynasties found.")
        else:
            print(f"{'School':<22} {'Coach':<20} {'Year':>5} {'W':>4} {'L':>4} {'Seasons':>8}")
            print("-" * 68)
            for s in summaries:
                print(
                    f"{s.school_name:<22} {s.coach_name:<20} {s.current_year:>5} "
                    f"{s.total_wins:>4} {s.total_losses:>4} {s.seasons_played:>8}"
                )
    await engine.dispose()


async def export(settings: Settings, target: str | None) -> None:
    engine = create_engine(settings.database_url)
    await init_db(engine)
    async with get_session(engine) as session:
        dynasty = await DynastySession.open(Repository(session))
        if dynasty.dynasty_id is None:
            print("No dynasty is loaded; nothing to export.")
        else:
            snapshot = await export_snapshot(dynasty)
            path = pathlib.Path(target or settings.dynasty_snapshot_dir)
            if target is None:
                path.mkdir(parents=True, exist_ok=True)
            written = write_snapshot(snapshot, path)
            print(f"Exported {len(snapshot.dynasty_data)} records to {written}")
    await engine.dispose()


async def import_file(settings: Settings, source: str) -> None:
    engine = create_engine(settings.database_url)
    await init_db(engine)
    teams = load_team_directory(settings.teams_file_path())
    async with get_session(engine) as session:
        dynasty = await DynastySession.open(Repository(session), teams)
        summary = await import_snapshot(dynasty, pathlib.Path(source))
        print(f"Imported {summary.school_name} ({summary.current_year}) as {summary.id}")
    await engine.dispose()


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        return

    settings = Settings()
    cmd = sys.argv[1]
    if cmd == "list":
        asyncio.run(list_slots(settings))
    elif cmd == "export":
        asyncio.run(export(settings, sys.argv[2] if len(sys.argv) > 2 else None))
    elif cmd == "import":
        if len(sys.argv) < 3:
            print("Usage: dynasty_backup.py import FILE")
            return
        try:
            asyncio.run(import_file(settings, sys.argv[2]))
        except ValueError as exc:
            print(f"Import rejected: {exc}")
            sys.exit(1)
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)


if __name__ == "__main__":
    main()
