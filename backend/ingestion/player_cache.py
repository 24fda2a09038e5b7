"""
Per-ingestion player cache that batches lookups and writes.

Names are matched case-insensitively. The cache lives for one ingestion
call; pending creates/updates are flushed at batch points (match
finalization and end of stream) so a file costs a handful of queries rather
than one per log line.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from ingestion.schema import PendingPlayer
from models.player import Player
from repositories.player_repo import PlayerRepository

logger = logging.getLogger(__name__)

LOOKUP_CHUNK_SIZE = 100


def _key(name: str) -> str:
    return name.strip().lower()


class PlayerCache:
    """Name -> Player cache with staged creates and updates."""

    def __init__(self, player_repo: PlayerRepository) -> None:
        self._repo = player_repo
        self._cache: Dict[str, Player] = {}
        self._pending_creates: Dict[str, PendingPlayer] = {}
        self._pending_updates: Dict[int, Player] = {}
        self._looked_up: Set[str] = set()
        self.created: List[Player] = []

    def get_cached(self, name: str) -> Optional[Player]:
        if not name:
            return None
        return self._cache.get(_key(name))

    def add_to_cache(self, player: Player) -> None:
        self._cache.setdefault(_key(player.name), player)

    def is_pending(self, name: str) -> bool:
        return bool(name) and _key(name) in self._pending_creates

    def get_or_add_pending(self, name: str, realm: str = "", region: str = "eu") -> PendingPlayer:
        """Stage a player for creation; a later sighting may supply a missing realm."""
        key = _key(name)
        pending = self._pending_creates.get(key)
        if pending is None:
            pending = PendingPlayer(name=name.strip(), realm=realm, region=region)
            self._pending_creates[key] = pending
        elif not pending.realm and realm:
            pending.realm = realm
            pending.region = region
        return pending

    def get_pending(self, name: str) -> Optional[PendingPlayer]:
        return self._pending_creates.get(_key(name)) if name else None

    def mark_for_update(self, player: Player) -> None:
        """Queue a persisted player's attribute changes; unsaved players are ignored."""
        if player.id:
            self._pending_updates[player.id] = player

    @property
    def pending_creates(self) -> List[PendingPlayer]:
        return list(self._pending_creates.values())

    @property
    def pending_updates(self) -> List[Player]:
        return list(self._pending_updates.values())

    async def batch_lookup(self) -> int:
        """Resolve staged names against the database in chunks. Returns how many were found."""
        names = [
            p.name
            for key, p in self._pending_creates.items()
            if key not in self._cache and key not in self._looked_up
        ]
        found = 0
        for start in range(0, len(names), LOOKUP_CHUNK_SIZE):
            chunk = names[start:start + LOOKUP_CHUNK_SIZE]
            for player in await self._repo.list_by_names(chunk):
                key = _key(player.name)
                if key not in self._cache:
                    self._cache[key] = player
                    found += 1
                self._pending_creates.pop(key, None)
            self._looked_up.update(_key(n) for n in chunk)
        if names:
            logger.debug("Player lookup: %d queried, %d found", len(names), found)
        return found

    async def batch_persist(self) -> List[Player]:
        """Create staged players that have a realm and push queued updates, then clear both."""
        to_create = [
            Player(name=p.name, realm=p.realm)
            for key, p in self._pending_creates.items()
            if p.realm and key not in self._cache
        ]
        created = await self._repo.add_range(to_create)
        for player in created:
            self.add_to_cache(player)
        self.created.extend(created)

        created_ids = {p.id for p in created}
        updates = [p for p in self._pending_updates.values() if p.id not in created_ids]
        await self._repo.update_range(updates)

        if created or updates:
            logger.debug("Player flush: %d created, %d updated", len(created), len(updates))
        self.clear_pending()
        return created

    def clear_pending(self) -> None:
        self._pending_creates.clear()
        self._pending_updates.clear()
