"""Upload API: POST /api/v1/logs/upload ingests a file and returns match summaries."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from core.config import Settings
from core.dependencies import get_app_settings, get_db_session, get_player_data_provider
from ingestion.errors import IngestionError
from main import app
from services.wow_api_service import NullPlayerDataProvider

COMBAT_LOG = "\n".join(
    [
        "1/15 20:30:00.000  ARENA_MATCH_START,123,559",
        '1/15 20:30:01.000  SPELL_DAMAGE,Player-1,"A-Stormrage-US",0x511,0x0,Player-2,"B-Proudmoore-US",0x548,0x0,116,"Frostbolt",0x10,4500',
        '1/15 20:32:00.000  ZONE_CHANGE,1,"Orgrimmar",0',
    ]
).encode("utf-8")


@pytest.fixture
def client_factory(db):
    """Builds an AsyncClient against the app with the test database and no enrichment."""

    async def override_session():
        async with db.session() as s:
            yield s

    async def override_provider():
        yield NullPlayerDataProvider()

    def _factory(settings: Settings = None) -> AsyncClient:
        app.dependency_overrides[get_db_session] = override_session
        app.dependency_overrides[get_player_data_provider] = override_provider
        if settings is not None:
            app.dependency_overrides[get_app_settings] = lambda: settings
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    yield _factory
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_upload_returns_match_summaries(client_factory):
    async with client_factory() as client:
        r = await client.post(
            "/api/v1/logs/upload",
            files={"file": ("WoWCombatLog.txt", COMBAT_LOG, "text/plain")},
        )
    assert r.status_code == 200
    assert r.headers["X-Match-Count"] == "1"
    data = r.json()
    assert len(data) == 1
    assert data[0]["map_name"] == "Nagrand Arena"
    assert data[0]["game_mode"] == "2v2"
    assert data[0]["arena_zone"] == 559
    assert data[0]["arena_match_id"] == "123"
    assert data[0]["duration"] == 120


@pytest.mark.asyncio
async def test_reupload_returns_same_match(client_factory):
    async with client_factory() as client:
        first = await client.post("/api/v1/logs/upload", files={"file": ("a.txt", COMBAT_LOG)})
        second = await client.post("/api/v1/logs/upload", files={"file": ("a.txt", COMBAT_LOG)})
    assert first.json()[0]["id"] == second.json()[0]["id"]


@pytest.mark.asyncio
async def test_missing_or_empty_file_is_rejected(client_factory):
    async with client_factory() as client:
        missing = await client.post("/api/v1/logs/upload")
        empty = await client.post("/api/v1/logs/upload", files={"file": ("empty.txt", b"")})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "No file provided"
    assert empty.status_code == 400


@pytest.mark.asyncio
async def test_oversized_file_is_rejected(client_factory):
    async with client_factory(Settings(max_upload_bytes=16)) as client:
        r = await client.post("/api/v1/logs/upload", files={"file": ("big.txt", COMBAT_LOG)})
    assert r.status_code == 413


@pytest.mark.asyncio
async def test_ingestion_failure_is_opaque_500(client_factory, monkeypatch):
    async def _failing_ingest(*args, **kwargs):
        raise IngestionError("database is locked")

    monkeypatch.setattr("routes.api_v1.logs.ingest_log", _failing_ingest)
    async with client_factory() as client:
        r = await client.post("/api/v1/logs/upload", files={"file": ("a.txt", COMBAT_LOG)})
    assert r.status_code == 500
    assert "locked" not in r.text


@pytest.mark.asyncio
async def test_health(client_factory):
    async with client_factory() as client:
        r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
