"""
Ingestion of traditional combat logs.

Matches are segmented by a small state machine: ARENA_MATCH_START begins a
recording, the next ZONE_CHANGE (or end of file) finalizes it. Events seen
outside a recording are ignored. Every ZONE_CHANGE records the current zone,
which a match start without its own zone id falls back to. A match start
during a recording discards that recording and its staged players.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Optional

from ingestion import event_types as ev
from ingestion.arena_zones import get_name_or_default, to_arena_zone
from ingestion.base_service import BaseIngestionService, MatchContext, MatchRecording
from ingestion.combat_log_parser import parse_line
from models.match import Match

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"


class CombatLogIngestionService(BaseIngestionService):
    """Line-by-line ingestion of ``<timestamp>  EVENT,field,...`` logs."""

    async def _finalize_recording(self, recording: MatchRecording) -> Match:
        return await self._finalize(
            recording,
            MatchContext(
                map_name=get_name_or_default(recording.zone_id),
                arena_zone=to_arena_zone(recording.zone_id),
                arena_match_id=recording.arena_match_id,
            ),
        )

    async def _ingest_stream(self, stream: BinaryIO) -> None:
        reader = io.TextIOWrapper(stream, encoding="utf-8-sig", errors="replace")
        recording: Optional[MatchRecording] = None
        current_zone_id: Optional[int] = None
        skipped = 0
        try:
            for raw_line in reader:
                line = raw_line.strip()
                if not line or line.startswith(COMMENT_PREFIX):
                    continue

                event = parse_line(line)
                if event is None:
                    skipped += 1
                    continue

                if event.event_type == ev.ARENA_MATCH_START:
                    if recording is not None:
                        logger.debug("ARENA_MATCH_START while recording; previous match discarded")
                    self.player_cache.clear_pending()
                    zone_id = event.zone_id or current_zone_id
                    recording = MatchRecording(
                        start=event.timestamp,
                        end=event.timestamp,
                        arena_match_id=event.arena_match_id,
                        zone_id=zone_id,
                    )
                    logger.info("Arena match %s started in zone %s", event.arena_match_id, zone_id)
                elif event.event_type == ev.ZONE_CHANGE:
                    current_zone_id = event.zone_id
                    if recording is None:
                        continue
                    recording.end = event.timestamp
                    await self._finalize_recording(recording)
                    recording = None
                elif recording is not None:
                    recording.end = event.timestamp
                    self._record_event(event, recording)

            if recording is not None:
                await self._finalize_recording(recording)
        finally:
            # Leave the caller's stream open.
            reader.detach()

        if skipped:
            logger.debug("Skipped %d unparseable line(s)", skipped)
