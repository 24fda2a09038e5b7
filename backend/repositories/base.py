from __future__ import annotations

from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD helpers.

    No commits are performed here - commit responsibility is left to the
    service layer. Batch writes flush so database ids are assigned before
    the caller links dependent rows.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with an async session."""
        self.session = session

    async def add(self, entity: T) -> T:
        """Add an entity to the session and flush it (not committed)."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def add_range(self, entities: Iterable[T]) -> List[T]:
        """Add many entities in one flush (not committed)."""
        items = list(entities)
        if not items:
            return items
        self.session.add_all(items)
        await self.session.flush()
        return items

    async def update(self, entity: T) -> T:
        """Push pending attribute changes of a tracked entity (not committed)."""
        entity = await self.session.merge(entity)
        await self.session.flush()
        return entity

    async def update_range(self, entities: Iterable[T]) -> List[T]:
        """Push changes of many entities in one flush (not committed)."""
        items = list(entities)
        if not items:
            return items
        merged = [await self.session.merge(e) for e in items]
        await self.session.flush()
        return merged

    async def get_by_id(
        self, model: Type[T], id_value: str | int
    ) -> Optional[T]:
        """Get an entity by its primary key."""
        result = await self.session.get(model, id_value)
        return result

    async def list(
        self, model: Type[T], limit: int = 100, offset: int = 0
    ) -> List[T]:
        """List entities with pagination."""
        stmt = select(model).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_where(self, model: Type[T], *criteria: Any) -> List[T]:
        """List entities matching all given SQLAlchemy criteria."""
        stmt = select(model).where(*criteria)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, entity: T) -> None:
        """Delete an entity from the session (not committed)."""
        await self.session.delete(entity)
