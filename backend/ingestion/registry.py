"""
Ingestion service registry: resolve the service for an upload format.

No side effects; services are built per call and own their own state.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Dict, List, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.base_service import BaseIngestionService
from ingestion.format_detector import detect_format
from ingestion.ingestion_service import CombatLogIngestionService
from ingestion.lua_ingestion_service import LuaIngestionService
from ingestion.schema import CombatLogFormat
from models.match import Match
from services.wow_api_service import PlayerDataProvider

logger = logging.getLogger(__name__)

_REGISTRY: Dict[CombatLogFormat, Type[BaseIngestionService]] = {
    CombatLogFormat.TRADITIONAL: CombatLogIngestionService,
    CombatLogFormat.LUA_TABLE: LuaIngestionService,
}


def get_ingestion_service(
    fmt: CombatLogFormat,
    session: AsyncSession,
    player_data_provider: Optional[PlayerDataProvider] = None,
) -> BaseIngestionService:
    """Return a new service for the given format. Raises KeyError if unknown."""
    if fmt not in _REGISTRY:
        raise KeyError(f"Unknown combat log format: {fmt}")
    return _REGISTRY[fmt](session, player_data_provider)


def register_ingestion_service(
    fmt: CombatLogFormat, service_cls: Type[BaseIngestionService]
) -> None:
    """Register a service class for a format (for tests or future formats)."""
    _REGISTRY[fmt] = service_cls


def list_formats() -> List[CombatLogFormat]:
    return list(_REGISTRY.keys())


async def ingest_log(
    session: AsyncSession,
    stream: BinaryIO,
    player_data_provider: Optional[PlayerDataProvider] = None,
) -> List[Match]:
    """Detect the upload format and ingest the stream with the matching service."""
    fmt = detect_format(stream)
    logger.info("Detected combat log format: %s", fmt.value)
    service = get_ingestion_service(fmt, session, player_data_provider)
    return await service.ingest(stream)
