from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.player import Player
from .base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for Player entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: int) -> Optional[Player]:
        """Get player by ID."""
        return await super().get_by_id(Player, id)

    async def list_by_names(self, names: Sequence[str]) -> List[Player]:
        """Return players whose name is in names, ignoring case (one query)."""
        if not names:
            return []
        lowered = sorted({n.strip().lower() for n in names})
        stmt = select(Player).where(func.lower(Player.name).in_(lowered)).order_by(Player.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
