from __future__ import annotations

from sqlalchemy import Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Player(Base):
    """A character seen in at least one ingested log.

    Identity is (name, realm) ignoring case. class_name, faction and spec are
    filled once (inference or enrichment) and never overwritten after they
    become non-blank.
    """

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    realm: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    class_name: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    faction: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    spec: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    def __repr__(self) -> str:
        return f"Player(id={self.id!r}, name={self.name!r}, realm={self.realm!r})"


Index(
    "ux_player_name_realm",
    func.lower(Player.name),
    func.lower(Player.realm),
    unique=True,
)
