"""Services: external collaborators of the ingestion pipeline."""

from .wow_api_service import (
    NullPlayerDataProvider,
    PlayerDataProvider,
    WowApiService,
    WowPlayerData,
    create_player_data_provider,
)

__all__ = [
    "NullPlayerDataProvider",
    "PlayerDataProvider",
    "WowApiService",
    "WowPlayerData",
    "create_player_data_provider",
]
