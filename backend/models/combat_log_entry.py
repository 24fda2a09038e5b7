from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CombatLogEntry(Base):
    """A single combat event attributed to a match and a source player."""

    __tablename__ = "combat_log_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    source_player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False
    )
    target_player_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("players.id"), nullable=True
    )
    ability: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    damage_done: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    healing_done: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    crowd_control: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    __table_args__ = (
        Index("ix_combat_log_entry_match_ts", "match_id", "timestamp"),
    )
