from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.combat_log_entry import CombatLogEntry
from .base import BaseRepository


class CombatLogEntryRepository(BaseRepository[CombatLogEntry]):
    """Repository for CombatLogEntry entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_match(self, match_id: int) -> List[CombatLogEntry]:
        """Entries of one match in timestamp order."""
        stmt = (
            select(CombatLogEntry)
            .where(CombatLogEntry.match_id == match_id)
            .order_by(CombatLogEntry.timestamp, CombatLogEntry.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
