"""
Enumerations persisted on match rows.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class GameMode(str, Enum):
    """Arena bracket of a match; stored by value."""

    TWO_VS_TWO = "2v2"
    THREE_VS_THREE = "3v3"
    SKIRMISH = "Skirmish"
    SHUFFLE = "Shuffle"
    RBG = "RBG"


class ArenaZone(IntEnum):
    """Known arena maps keyed by the zone id the game client logs."""

    UNKNOWN = 0
    BLOOD_RING = 2759
    DALARAN_ARENA = 617
    RING_OF_VALOR = 618
    RUINS_OF_LORDAERON = 572
    NAGRAND_ARENA = 559
    MUGAMBALA = 6178
    THE_TIGERS_PEAK = 1505
    TOLVIRON_ARENA = 1504
    BLACK_ROOK_HOLD_ARENA = 1825
    MALDRAXXUS_COLISEUM = 3963
