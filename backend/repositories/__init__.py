"""Repository layer for DB access only (CRUD + simple queries).

Repositories operate on the models in backend/models/, accept an AsyncSession
explicitly and never commit; the ingestion services own transactions.
"""

from .base import BaseRepository
from .combat_log_entry_repo import CombatLogEntryRepository
from .match_repo import MatchRepository
from .match_result_repo import MatchResultRepository
from .player_repo import PlayerRepository

__all__ = [
    "BaseRepository",
    "CombatLogEntryRepository",
    "MatchRepository",
    "MatchResultRepository",
    "PlayerRepository",
]
