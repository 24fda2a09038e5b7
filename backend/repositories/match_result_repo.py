from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.match_result import MatchResult
from .base import BaseRepository


class MatchResultRepository(BaseRepository[MatchResult]):
    """Repository for MatchResult entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_match(self, match_id: int) -> List[MatchResult]:
        """Results of one match ordered by insertion."""
        stmt = (
            select(MatchResult)
            .where(MatchResult.match_id == match_id)
            .order_by(MatchResult.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
