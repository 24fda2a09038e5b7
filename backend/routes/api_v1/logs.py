"""POST /api/v1/logs/upload: ingest a combat log or addon export."""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from core.dependencies import get_app_settings, get_db_session, get_player_data_provider
from ingestion.errors import IngestionError, UnsupportedStreamError
from ingestion.registry import ingest_log
from services.wow_api_service import PlayerDataProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/logs", tags=["logs"])

MATCH_COUNT_HEADER = "X-Match-Count"


class MatchSummary(BaseModel):
    """One match returned by an upload (newly stored or already known)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Match id")
    unique_hash: str = Field(..., description="Deduplication hash")
    map_name: str = Field(..., description="Arena display name")
    arena_zone: int = Field(..., description="Arena zone id, 0 when unknown")
    game_mode: str = Field(..., description="2v2 | 3v3 | Skirmish | Shuffle | RBG")
    duration: int = Field(..., ge=0, description="Match length in seconds")
    created_on: datetime = Field(..., description="Match start")
    arena_match_id: Optional[str] = Field(None, description="Arena match id from the log, or generated for addon exports")


@router.post(
    "/upload",
    response_model=List[MatchSummary],
    summary="Upload a combat log",
    description="Detects the format (traditional WoWCombatLog or PvPAnalyticsDB Lua export), ingests every arena match and returns them in file order.",
)
async def post_logs_upload(
    response: Response,
    file: Optional[UploadFile] = File(None),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    player_data_provider: PlayerDataProvider = Depends(get_player_data_provider),
) -> List[MatchSummary]:
    """
    Ingest one uploaded file.

    - 400 when no file or an empty file is sent.
    - 413 when the file exceeds MAX_UPLOAD_BYTES.
    - 500 when ingestion fails; matches committed before the failure stay stored.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    content = await file.read(settings.max_upload_bytes + 1)
    if not content:
        raise HTTPException(status_code=400, detail="No file provided")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {settings.max_upload_bytes} byte upload limit",
        )

    logger.info("Upload %r received (%d bytes)", file.filename, len(content))
    try:
        matches = await ingest_log(session, io.BytesIO(content), player_data_provider)
    except UnsupportedStreamError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except IngestionError as e:
        logger.exception("Ingestion of %r failed after %d match(es)", file.filename, len(e.matches))
        raise HTTPException(status_code=500, detail="Combat log ingestion failed") from e

    response.headers[MATCH_COUNT_HEADER] = str(len(matches))
    return [MatchSummary.model_validate(m) for m in matches]
