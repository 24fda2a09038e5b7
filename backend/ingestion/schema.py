"""
Transient ingestion types owned by a single ingestion call.

Nothing here is persisted directly; orchestrators turn these into rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class CombatLogFormat(str, Enum):
    """On-disk encoding of an uploaded log."""

    TRADITIONAL = "traditional"
    LUA_TABLE = "lua_table"


@dataclass
class ParsedCombatLogEvent:
    """One parsed log line. String fields default to "" when absent."""

    timestamp: datetime
    event_type: str
    source_guid: str = ""
    source_name: str = ""
    target_guid: str = ""
    target_name: str = ""
    spell_id: Optional[int] = None
    spell_name: str = ""
    damage: Optional[int] = None
    healing: Optional[int] = None
    absorbed: Optional[int] = None
    zone_id: Optional[int] = None
    zone_name: str = ""
    arena_match_id: Optional[str] = None


@dataclass
class LuaPlayerData:
    """Player record from the root ``players`` table of the structured addon export."""

    guid: str
    name: str
    realm: str = ""
    class_id: Optional[int] = None
    class_name: str = ""
    spec_id: Optional[int] = None
    faction: str = ""
    kd_ratio: Optional[float] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    matches_played: Optional[int] = None
    total_damage: Optional[int] = None
    total_healing: Optional[int] = None
    interrupts_per_match: Optional[float] = None


@dataclass
class LuaMatchData:
    """One match block of a Lua-table export: raw log lines plus metadata strings."""

    logs: List[str] = field(default_factory=list)
    start_time: str = ""
    end_time: str = ""
    zone: str = ""
    faction: str = ""
    mode: str = ""
    players: List[LuaPlayerData] = field(default_factory=list)


@dataclass
class PendingPlayer:
    """A player staged for creation at the next batch point."""

    name: str
    realm: str = ""
    region: str = "eu"
