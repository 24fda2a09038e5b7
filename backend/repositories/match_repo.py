from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.match import Match
from .base import BaseRepository


class MatchRepository(BaseRepository[Match]):
    """Repository for Match entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: int) -> Optional[Match]:
        """Get match by ID."""
        return await super().get_by_id(Match, id)

    async def get_by_unique_hash(self, unique_hash: str) -> Optional[Match]:
        """Get match by dedup hash (uses unique index)."""
        stmt = select(Match).where(Match.unique_hash == unique_hash)
        result = await self.session.execute(stmt)
        return result.scalars().first()
