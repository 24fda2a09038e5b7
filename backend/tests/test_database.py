"""DatabaseManager: schema creation, commit/rollback of the session context."""

from __future__ import annotations

import pytest

from core.database import DatabaseManager, dispose_database, get_database_manager
from models import Base
from models.player import Player
from repositories.player_repo import PlayerRepository


@pytest.mark.asyncio
async def test_schema_has_match_store_tables(db):
    assert {"players", "matches", "match_results", "combat_log_entries"} <= set(Base.metadata.tables)
    async with db.session() as session:
        assert await PlayerRepository(session).list(Player) == []


@pytest.mark.asyncio
async def test_session_commits_on_success_and_rolls_back_on_error(db):
    async with db.session() as session:
        await PlayerRepository(session).add(Player(name="Alice", realm="Stormrage"))

    with pytest.raises(RuntimeError):
        async with db.session() as session:
            await PlayerRepository(session).add(Player(name="Bob", realm="Ravencrest"))
            raise RuntimeError("upload aborted")

    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
    assert [p.name for p in players] == ["Alice"]


@pytest.mark.asyncio
async def test_uninitialized_manager_raises():
    await dispose_database()
    with pytest.raises(RuntimeError):
        get_database_manager()
    with pytest.raises(RuntimeError):
        await DatabaseManager("sqlite+aiosqlite:///:memory:").create_schema()
