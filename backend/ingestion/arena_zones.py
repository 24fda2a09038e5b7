"""
Arena map lookups: zone id to display name, and addon zone names to zone ids.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from models.enums import ArenaZone

UNKNOWN_ARENA_NAME = "Unknown Arena"

ARENA_DISPLAY_NAMES: Mapping[ArenaZone, str] = MappingProxyType(
    {
        ArenaZone.BLOOD_RING: "Blood Ring",
        ArenaZone.DALARAN_ARENA: "Dalaran Arena",
        ArenaZone.RING_OF_VALOR: "Ring of Valor",
        ArenaZone.RUINS_OF_LORDAERON: "Ruins of Lordaeron",
        ArenaZone.NAGRAND_ARENA: "Nagrand Arena",
        ArenaZone.MUGAMBALA: "Mugambala",
        ArenaZone.THE_TIGERS_PEAK: "The Tiger's Peak",
        ArenaZone.TOLVIRON_ARENA: "Tol'viron Arena",
        ArenaZone.BLACK_ROOK_HOLD_ARENA: "Black Rook Hold Arena",
        ArenaZone.MALDRAXXUS_COLISEUM: "Maldraxxus Coliseum",
    }
)

# Zone names as the addon writes them (lowercased). Dornogal is logged for
# the Coliseum instance on current clients.
_ZONE_NAME_TO_ARENA: Mapping[str, ArenaZone] = MappingProxyType(
    {
        **{name.lower(): zone for zone, name in ARENA_DISPLAY_NAMES.items()},
        "tiger's peak": ArenaZone.THE_TIGERS_PEAK,
        "tol'viron": ArenaZone.TOLVIRON_ARENA,
        "black rook hold": ArenaZone.BLACK_ROOK_HOLD_ARENA,
        "dornogal": ArenaZone.MALDRAXXUS_COLISEUM,
    }
)

_ZONE_IDS = frozenset(int(z) for z in ArenaZone if z is not ArenaZone.UNKNOWN)


def is_arena_zone(zone_id: Optional[int]) -> bool:
    """True when zone_id is a known arena map."""
    return zone_id is not None and zone_id in _ZONE_IDS


def to_arena_zone(zone_id: Optional[int]) -> ArenaZone:
    if not is_arena_zone(zone_id):
        return ArenaZone.UNKNOWN
    return ArenaZone(zone_id)


def get_name_or_default(zone_id: Optional[int], fallback: str = UNKNOWN_ARENA_NAME) -> str:
    """Display name of an arena zone id, or fallback for unknown ids."""
    return ARENA_DISPLAY_NAMES.get(to_arena_zone(zone_id), fallback)


def zone_from_name(zone_name: str) -> ArenaZone:
    """Map an addon zone name (case-insensitive) to an ArenaZone; UNKNOWN if unmapped."""
    if not zone_name:
        return ArenaZone.UNKNOWN
    return _ZONE_NAME_TO_ARENA.get(zone_name.strip().lower(), ArenaZone.UNKNOWN)
