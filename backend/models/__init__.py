"""SQLAlchemy models for ingested arena matches.

Importing this package registers every table on ``Base.metadata``.
"""

from .base import Base
from .combat_log_entry import CombatLogEntry
from .enums import ArenaZone, GameMode
from .match import Match
from .match_result import MatchResult
from .player import Player

__all__ = [
    "Base",
    "ArenaZone",
    "CombatLogEntry",
    "GameMode",
    "Match",
    "MatchResult",
    "Player",
]
