from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class MatchResult(Base):
    """Per-participant row of a match.

    Team, ratings and winner flag are placeholders; ingestion does not compute them.
    """

    __tablename__ = "match_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    rating_before: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_after: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    spec: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    __table_args__ = (
        Index("ix_match_result_match", "match_id"),
        Index("ix_match_result_player", "player_id"),
    )
