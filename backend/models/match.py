from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .enums import ArenaZone, GameMode


class Match(Base):
    """One arena match reconstructed from a combat log.

    unique_hash identifies the same match across re-uploads (participants,
    start, end and arena match id).
    """

    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    ended_on: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    map_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    arena_zone: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(ArenaZone.UNKNOWN)
    )
    arena_match_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    game_mode: Mapped[str] = mapped_column(
        String(16), nullable=False, default=GameMode.TWO_VS_TWO.value
    )
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_ranked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ux_match_unique_hash", "unique_hash", unique=True),
        Index("ix_match_created_on", "created_on"),
    )
