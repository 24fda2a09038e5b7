"""WoW profile API client against an httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from core.config import Settings
from services.wow_api_service import (
    NullPlayerDataProvider,
    WowApiService,
    create_player_data_provider,
    realm_slug,
)

SETTINGS = Settings(wow_api_client_id="id", wow_api_client_secret="secret")

PROFILE = {
    "name": "Alice",
    "level": 80,
    "realm": {"slug": "stormrage"},
    "character_class": {"name": "Priest"},
    "race": {"name": "Blood Elf"},
}


class _Api:
    """Records requests and answers token and profile calls."""

    def __init__(self, profile_status: int = 200, profile=PROFILE, token_status: int = 200) -> None:
        self.requests = []
        self.profile_status = profile_status
        self.profile = profile
        self.token_status = token_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status)
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 86399})
        return httpx.Response(self.profile_status, json=self.profile)

    def profile_requests(self):
        return [r for r in self.requests if r.url.path.startswith("/profile/")]

    def token_requests(self):
        return [r for r in self.requests if r.url.path == "/oauth/token"]


def _service(api: _Api) -> WowApiService:
    return WowApiService(SETTINGS, client=httpx.AsyncClient(transport=httpx.MockTransport(api)))


@pytest.mark.asyncio
async def test_profile_lookup_maps_fields_and_infers_faction():
    api = _Api()
    service = _service(api)

    data = await service.get_player_data("Stormrage", "Alice", "eu")

    assert data is not None
    assert data.class_name == "Priest"
    assert data.race == "Blood Elf"
    assert data.faction == "Horde"
    assert data.level == 80
    (request,) = api.profile_requests()
    assert request.url.host == "eu.api.blizzard.com"
    assert request.url.path == "/profile/wow/character/stormrage/alice"
    assert request.url.params["namespace"] == "profile-eu"
    assert request.headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_token_is_cached_per_region():
    api = _Api()
    service = _service(api)

    await service.get_player_data("Stormrage", "Alice", "eu")
    await service.get_player_data("Stormrage", "Bob", "eu")
    await service.get_player_data("Proudmoore", "Carol", "us")

    hosts = [r.url.host for r in api.token_requests()]
    assert hosts == ["eu.battle.net", "us.battle.net"]
    assert api.profile_requests()[-1].url.params["namespace"] == "profile-us"


@pytest.mark.asyncio
async def test_faction_from_api_wins_over_race():
    api = _Api(profile={**PROFILE, "faction": {"name": "Alliance"}})
    data = await _service(api).get_player_data("Stormrage", "Alice")
    assert data.faction == "Alliance"


@pytest.mark.asyncio
async def test_not_found_returns_none():
    assert await _service(_Api(profile_status=404)).get_player_data("Stormrage", "Nobody") is None


@pytest.mark.asyncio
async def test_server_error_returns_none():
    assert await _service(_Api(profile_status=503)).get_player_data("Stormrage", "Alice") is None


@pytest.mark.asyncio
async def test_token_failure_skips_lookup():
    api = _Api(token_status=401)
    assert await _service(api).get_player_data("Stormrage", "Alice") is None
    assert api.profile_requests() == []


@pytest.mark.asyncio
async def test_blank_realm_skips_lookup():
    api = _Api()
    assert await _service(api).get_player_data("", "Alice") is None
    assert api.requests == []


def test_realm_slug():
    assert realm_slug("Area 52") == "area-52"
    assert realm_slug("Kel'Thuzad") == "kelthuzad"
    assert realm_slug(" Stormrage ") == "stormrage"


@pytest.mark.asyncio
async def test_provider_factory():
    assert isinstance(create_player_data_provider(Settings()), NullPlayerDataProvider)
    provider = create_player_data_provider(SETTINGS)
    assert isinstance(provider, WowApiService)
    await provider.aclose()
