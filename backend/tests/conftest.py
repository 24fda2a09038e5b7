# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import pytest_asyncio  # noqa: E402

from core.database import DatabaseManager  # noqa: E402

IN_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database with the schema created; disposed after the test."""
    manager = DatabaseManager(IN_MEMORY_URL)
    await manager.init()
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def session(db):
    async with db.session() as s:
        yield s
