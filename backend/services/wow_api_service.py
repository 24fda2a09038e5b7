"""
Character profile lookups against the Blizzard WoW API, used to fill
class/faction for players that spell inference could not classify.

OAuth client-credentials tokens are cached per region and refreshed shortly
before they expire. Every failure is logged and reported as "no data";
enrichment is best effort and never aborts an ingestion.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from core.config import Settings
from ingestion.attribute_mappings import faction_for_race

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 55 * 60
TOKEN_REFRESH_MARGIN_SECONDS = 5 * 60


class WowPlayerData(BaseModel):
    """Subset of a character profile relevant to player enrichment."""

    name: str = Field(..., description="Character name as returned by the API")
    realm: str = Field("", description="Realm slug")
    class_name: Optional[str] = Field(None, description="Playable class name")
    race: Optional[str] = Field(None, description="Playable race name")
    faction: Optional[str] = Field(None, description="Alliance or Horde")
    level: Optional[int] = Field(None, ge=0, description="Character level")


class PlayerDataProvider(ABC):
    """Source of external character data for enrichment."""

    @abstractmethod
    async def get_player_data(
        self, realm: str, name: str, region: str = "eu"
    ) -> Optional[WowPlayerData]:
        """Return profile data, or None when unknown/unavailable. Must not raise for lookup failures."""
        ...

    async def aclose(self) -> None:
        return None


class NullPlayerDataProvider(PlayerDataProvider):
    """Used when no API credentials are configured."""

    async def get_player_data(
        self, realm: str, name: str, region: str = "eu"
    ) -> Optional[WowPlayerData]:
        return None


def realm_slug(realm: str) -> str:
    """Realm name as used in profile URLs: lowercase, spaces to dashes, apostrophes dropped."""
    return realm.strip().lower().replace(" ", "-").replace("'", "").replace("’", "")


def _parse_profile(payload: Dict[str, Any], name: str, realm: str) -> WowPlayerData:
    realm_data = payload.get("realm") if isinstance(payload.get("realm"), dict) else {}
    class_data = payload.get("character_class") if isinstance(payload.get("character_class"), dict) else {}
    race_data = payload.get("race") if isinstance(payload.get("race"), dict) else {}
    faction_data = payload.get("faction") if isinstance(payload.get("faction"), dict) else {}

    race = race_data.get("name") or None
    faction = faction_data.get("name") or faction_for_race(race)
    level = payload.get("level")
    return WowPlayerData(
        name=payload.get("name") or name,
        realm=realm_data.get("slug") or realm,
        class_name=class_data.get("name") or None,
        race=race,
        faction=faction,
        level=level if isinstance(level, int) else None,
    )


class WowApiService(PlayerDataProvider):
    """Blizzard profile API client (EU and US regions)."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.wow_api_timeout_seconds)
        self._owns_client = client is None
        self._tokens: Dict[str, Tuple[str, float]] = {}

    def _urls(self, region: str) -> Tuple[str, str]:
        if region.lower() == "eu":
            return self._settings.wow_api_eu_oauth_url, self._settings.wow_api_eu_base_url
        return self._settings.wow_api_us_oauth_url, self._settings.wow_api_us_base_url

    async def _access_token(self, region: str) -> Optional[str]:
        key = "eu" if region.lower() == "eu" else "us"
        cached = self._tokens.get(key)
        if cached and cached[1] - time.monotonic() > TOKEN_REFRESH_MARGIN_SECONDS:
            return cached[0]

        oauth_url, _ = self._urls(key)
        try:
            r = await self._client.post(
                oauth_url,
                data={"grant_type": "client_credentials"},
                auth=(self._settings.wow_api_client_id, self._settings.wow_api_client_secret),
            )
            r.raise_for_status()
            token = r.json().get("access_token")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to obtain WoW API OAuth token: %s", e)
            return None
        if not token:
            logger.error("OAuth token response missing access_token")
            return None

        self._tokens[key] = (token, time.monotonic() + TOKEN_LIFETIME_SECONDS)
        logger.debug("Obtained new WoW API token for region %s", key)
        return token

    async def get_player_data(
        self, realm: str, name: str, region: str = "eu"
    ) -> Optional[WowPlayerData]:
        if not realm or not name:
            return None
        token = await self._access_token(region)
        if token is None:
            logger.warning("No WoW API token; skipping lookup of %s-%s", name, realm)
            return None

        region = region.lower()
        _, base_url = self._urls(region)
        url = f"{base_url}/profile/wow/character/{realm_slug(realm)}/{name.lower()}"
        try:
            r = await self._client.get(
                url,
                params={"namespace": f"profile-{region}", "locale": "en_US"},
                headers={"Authorization": f"Bearer {token}"},
            )
            if r.status_code == 404:
                logger.debug("Character %s on %s not found in WoW API", name, realm)
                return None
            r.raise_for_status()
            payload = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("WoW API lookup failed for %s on %s: %s", name, realm, e)
            return None
        if not isinstance(payload, dict):
            return None
        return _parse_profile(payload, name, realm)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_player_data_provider(settings: Settings) -> PlayerDataProvider:
    """WowApiService when credentials are configured, otherwise a no-op provider."""
    if settings.wow_api_enabled:
        return WowApiService(settings)
    return NullPlayerDataProvider()
