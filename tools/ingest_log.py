"""
Ingest CLI: load a WoWCombatLog.txt or a PvPAnalyticsDB Lua export into the database.
Usage: python tools/ingest_log.py PATH [--database-url URL]
Prints one JSON line per match (file order); exit code 1 when ingestion fails.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent / "backend"
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))


def _match_line(match) -> str:
    return json.dumps(
        {
            "id": match.id,
            "unique_hash": match.unique_hash,
            "map_name": match.map_name,
            "game_mode": match.game_mode,
            "arena_match_id": match.arena_match_id,
            "created_on": match.created_on.isoformat(),
            "duration": match.duration,
        }
    )


def _cmd_ingest(args: argparse.Namespace) -> int:
    from core.config import get_settings
    from core.database import create_schema, dispose_database, get_database_manager, init_database
    from core.logging import setup_logging
    from ingestion.errors import IngestionError
    from ingestion.registry import ingest_log
    from services.wow_api_service import create_player_data_provider

    path = Path(args.path)
    if not path.is_file():
        print(f"No such file: {path}", file=sys.stderr)
        return 1

    async def _run() -> int:
        settings = get_settings()
        setup_logging(settings)
        await init_database(args.database_url or settings.database_url)
        provider = create_player_data_provider(settings)
        try:
            await create_schema()
            async with get_database_manager().session() as session:
                with path.open("rb") as stream:
                    matches = await ingest_log(session, stream, provider)
        except IngestionError as e:
            for m in e.matches:
                print(_match_line(m))
            print(f"Ingestion failed: {e}", file=sys.stderr)
            return 1
        finally:
            await provider.aclose()
            await dispose_database()

        for m in matches:
            print(_match_line(m))
        return 0

    return asyncio.run(_run())


def main() -> int:
    parser = argparse.ArgumentParser(prog="ingest_log", description="Ingest a combat log or addon export")
    parser.add_argument("path", help="WoWCombatLog.txt or PvPAnalyticsDB .lua file")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args()
    return _cmd_ingest(args)


if __name__ == "__main__":
    sys.exit(main())
