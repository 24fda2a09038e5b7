from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.wow_api_service import PlayerDataProvider, create_player_data_provider

from .config import Settings, get_settings
from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


def get_app_settings() -> Settings:
    """FastAPI dependency returning the cached Settings (overridable in tests)."""
    return get_settings()


async def get_player_data_provider(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[PlayerDataProvider, None]:
    """Enrichment provider for one request; its HTTP client is closed afterwards."""
    provider = create_player_data_provider(settings)
    try:
        yield provider
    finally:
        await provider.aclose()
