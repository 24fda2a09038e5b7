"""
Ingestion of Lua-table exports produced by the in-game addon.

Each exported match carries its own start/end times, zone and bracket; its
log lines use the simplified grammar and are dated from the match start.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import BinaryIO, List, Optional

from ingestion import lua_table_parser
from ingestion.arena_zones import get_name_or_default, zone_from_name
from ingestion.attribute_mappings import class_for_id, spec_for_id
from ingestion.base_service import BaseIngestionService, MatchContext, MatchRecording
from ingestion.checksums import generated_arena_match_id
from ingestion.game_mode import parse_game_mode
from ingestion.schema import LuaMatchData, LuaPlayerData
from ingestion.simplified_parser import parse_line
from models.match import Match
from models.player import Player

logger = logging.getLogger(__name__)

LUA_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_lua_timestamp(value: str) -> Optional[datetime]:
    """``2025-11-20 00:33:57`` (or any ISO 8601 value) as a UTC datetime; None if unreadable."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, LUA_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def apply_lua_player_data(player: Player, data: LuaPlayerData) -> bool:
    """Fill blank class/faction/spec from an addon player record. Returns True if anything changed."""
    changed = False
    if not player.class_name:
        class_name = data.class_name or class_for_id(data.class_id)
        if class_name:
            player.class_name = class_name
            changed = True
    if not player.faction and data.faction:
        player.faction = data.faction
        changed = True
    if not player.spec:
        spec = spec_for_id(data.spec_id)
        if spec:
            player.spec = spec
            changed = True
    return changed


class LuaIngestionService(BaseIngestionService):
    """Ingestion of ``PvPAnalyticsDB = { ... }`` documents."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._root_players: List[LuaPlayerData] = []

    async def _apply_root_players(self) -> None:
        for data in self._root_players:
            player = self.player_cache.get_cached(data.name) if data.name else None
            if player is not None and player.id and apply_lua_player_data(player, data):
                self.player_cache.mark_for_update(player)

    async def _stage_root_players(self, root_players: List[LuaPlayerData]) -> None:
        self._root_players = [p for p in root_players if p.name and p.realm]
        for data in self._root_players:
            self.player_cache.get_or_add_pending(data.name, data.realm)
        await self.player_cache.batch_lookup()
        await self.player_cache.batch_persist()
        await self._apply_root_players()
        await self.player_cache.batch_persist()

    async def _ingest_match(self, lua_match: LuaMatchData) -> Optional[Match]:
        start = parse_lua_timestamp(lua_match.start_time)
        end = parse_lua_timestamp(lua_match.end_time)
        if start is None or end is None:
            logger.warning(
                "Skipping Lua match with unreadable times (start=%r, end=%r)",
                lua_match.start_time,
                lua_match.end_time,
            )
            return None

        arena_match_id = generated_arena_match_id(lua_match.zone, start, end, lua_match.mode)
        recording = MatchRecording(start=start, end=end, arena_match_id=arena_match_id)
        for line in lua_match.logs:
            event = parse_line(line, start)
            if event is not None:
                self._record_event(event, recording)

        arena_zone = zone_from_name(lua_match.zone)
        return await self._finalize(
            recording,
            MatchContext(
                map_name=get_name_or_default(arena_zone),
                arena_zone=arena_zone,
                arena_match_id=arena_match_id,
                game_mode=parse_game_mode(lua_match.mode),
            ),
        )

    async def _ingest_stream(self, stream: BinaryIO) -> None:
        lua_matches = lua_table_parser.parse(stream)
        logger.info("Lua export contains %d match block(s)", len(lua_matches))

        if lua_matches and lua_matches[0].players:
            await self._stage_root_players(lua_matches[0].players)

        for lua_match in lua_matches:
            await self._ingest_match(lua_match)
