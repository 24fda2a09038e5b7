"""
Shared orchestration for both log formats: per-match recording, match
finalization with deduplication, end-of-file player flush and enrichment.

Each finalized match is committed on its own, so a failure or cancellation
later in the file leaves earlier matches persisted and discards only the
match in progress.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.checksums import match_hash
from ingestion.errors import IngestionError
from ingestion.game_mode import resolve_game_mode
from ingestion.player_cache import PlayerCache
from ingestion.player_info import (
    DEFAULT_REGION,
    determine_spec_for_match,
    extract_region,
    parse_player_name,
    update_player_from_spells,
)
from ingestion.schema import ParsedCombatLogEvent
from models.combat_log_entry import CombatLogEntry
from models.enums import ArenaZone, GameMode
from models.match import Match
from models.match_result import MatchResult
from models.player import Player
from repositories.combat_log_entry_repo import CombatLogEntryRepository
from repositories.match_repo import MatchRepository
from repositories.match_result_repo import MatchResultRepository
from repositories.player_repo import PlayerRepository
from services.wow_api_service import NullPlayerDataProvider, PlayerDataProvider, WowPlayerData

logger = logging.getLogger(__name__)

UNKNOWN_TEAM = "Unknown"


@dataclass
class BufferedEntry:
    """Combat event kept by player name until the match is finalized."""

    timestamp: datetime
    source_key: str
    target_key: Optional[str]
    ability: str
    damage_done: int = 0
    healing_done: int = 0


@dataclass
class MatchRecording:
    """Accumulators of the match currently being recorded."""

    start: datetime
    end: datetime
    arena_match_id: Optional[str] = None
    zone_id: Optional[int] = None
    # lowercased name -> name as first seen; insertion ordered
    participants: Dict[str, str] = field(default_factory=dict)
    spells: Dict[str, Dict[str, None]] = field(default_factory=dict)
    entries: List[BufferedEntry] = field(default_factory=list)

    def track_spell(self, key: str, spell_name: str) -> None:
        if spell_name:
            self.spells.setdefault(key, {})[spell_name] = None

    def spells_of(self, key: str) -> List[str]:
        return list(self.spells.get(key, {}))


@dataclass
class MatchContext:
    """Match-level values that differ between log formats."""

    map_name: str
    arena_zone: ArenaZone
    arena_match_id: Optional[str]
    game_mode: Optional[GameMode] = None


class BaseIngestionService(ABC):
    """Common ingestion flow; subclasses read their format and call record/finalize."""

    def __init__(
        self,
        session: AsyncSession,
        player_data_provider: Optional[PlayerDataProvider] = None,
    ) -> None:
        self.session = session
        self.player_repo = PlayerRepository(session)
        self.match_repo = MatchRepository(session)
        self.result_repo = MatchResultRepository(session)
        self.entry_repo = CombatLogEntryRepository(session)
        self.player_cache = PlayerCache(self.player_repo)
        self.player_data_provider = player_data_provider or NullPlayerDataProvider()
        self.matches: List[Match] = []
        self._regions: Dict[str, str] = {}

    @abstractmethod
    async def _ingest_stream(self, stream: BinaryIO) -> None:
        """Read the stream and finalize every match found in it."""
        ...

    async def ingest(self, stream: BinaryIO) -> List[Match]:
        """Ingest one upload and return its matches (new or already stored) in file order.

        I/O and persistence failures are raised as IngestionError; matches
        committed before the failure stay in the database.
        """
        try:
            await self._ingest_stream(stream)
            await self.player_cache.batch_persist()
            await self._enrich_created_players()
            await self.player_cache.batch_persist()
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            await self.session.rollback()
            logger.error("Ingestion aborted after %d match(es): %s", len(self.matches), e)
            raise IngestionError(
                f"Combat log ingestion failed: {e}", matches=self.matches
            ) from e
        except BaseException:
            await self.session.rollback()
            raise

        logger.info("Ingestion complete: %d match(es)", len(self.matches))
        return self.matches

    # --- recording --------------------------------------------------------

    def _register_player(self, raw_name: str, recording: MatchRecording) -> Optional[str]:
        """Stage raw_name for lookup and make it a participant; returns its key or None.

        A realm is only needed to create the player; a realm-less name may
        still resolve to a stored player at the next batch lookup.
        """
        name, realm = parse_player_name(raw_name)
        if not name:
            return None
        key = name.lower()
        if self.player_cache.get_cached(name) is None:
            region = extract_region(raw_name)
            self.player_cache.get_or_add_pending(name, realm, region)
            if realm:
                self._regions.setdefault(key, region)
        recording.participants.setdefault(key, name)
        return key

    def _record_event(self, event: ParsedCombatLogEvent, recording: MatchRecording) -> None:
        source_key = self._register_player(event.source_name, recording)
        target_key = self._register_player(event.target_name, recording)
        if source_key is None:
            return
        recording.track_spell(source_key, event.spell_name)
        recording.entries.append(
            BufferedEntry(
                timestamp=event.timestamp,
                source_key=source_key,
                target_key=target_key,
                ability=event.spell_name or event.event_type,
                damage_done=event.damage or 0,
                healing_done=event.healing or 0,
            )
        )

    # --- finalization -----------------------------------------------------

    async def _resolve_participants(self, recording: MatchRecording) -> Dict[str, Player]:
        await self.player_cache.batch_lookup()
        await self.player_cache.batch_persist()
        players: Dict[str, Player] = {}
        for key, name in recording.participants.items():
            player = self.player_cache.get_cached(name)
            if player is not None and player.id:
                players[key] = player
        for key, player in players.items():
            if update_player_from_spells(player, recording.spells_of(key)):
                self.player_cache.mark_for_update(player)
        await self.player_cache.batch_persist()
        return players

    async def _finalize(self, recording: MatchRecording, context: MatchContext) -> Match:
        """Persist a recorded match, or return the stored one when it was ingested before."""
        try:
            players = await self._resolve_participants(recording)
            game_mode = context.game_mode or resolve_game_mode(
                len(players), recording.arena_match_id
            )
            unique_hash = match_hash(
                (p.name for p in players.values()),
                recording.start,
                recording.end,
                context.arena_match_id,
            )

            existing = await self.match_repo.get_by_unique_hash(unique_hash)
            if existing is not None:
                logger.info("Match %s already ingested (hash %s)", existing.id, unique_hash[:12])
                await self.session.commit()
                self.matches.append(existing)
                return existing

            match = await self.match_repo.add(
                Match(
                    unique_hash=unique_hash,
                    created_on=recording.start,
                    ended_on=recording.end,
                    map_name=context.map_name,
                    arena_zone=int(context.arena_zone),
                    arena_match_id=context.arena_match_id,
                    game_mode=game_mode.value,
                    duration=int((recording.end - recording.start).total_seconds()),
                    is_ranked=True,
                )
            )

            entries = []
            for buffered in recording.entries:
                source = players.get(buffered.source_key)
                if source is None:
                    continue
                target = players.get(buffered.target_key) if buffered.target_key else None
                entries.append(
                    CombatLogEntry(
                        match_id=match.id,
                        timestamp=buffered.timestamp,
                        source_player_id=source.id,
                        target_player_id=target.id if target is not None else None,
                        ability=buffered.ability,
                        damage_done=buffered.damage_done,
                        healing_done=buffered.healing_done,
                        crowd_control="",
                    )
                )
            await self.entry_repo.add_range(entries)

            await self.result_repo.add_range(
                MatchResult(
                    match_id=match.id,
                    player_id=player.id,
                    team=UNKNOWN_TEAM,
                    rating_before=0,
                    rating_after=0,
                    is_winner=False,
                    spec=determine_spec_for_match(recording.spells_of(key)),
                )
                for key, player in players.items()
            )
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

        logger.info(
            "Persisted match %s (%s, %s, %d players, %d entries)",
            match.id,
            match.map_name,
            match.game_mode,
            len(players),
            len(entries),
        )
        self.matches.append(match)
        return match

    # --- enrichment -------------------------------------------------------

    @staticmethod
    def _apply_player_data(player: Player, data: WowPlayerData) -> bool:
        changed = False
        if not player.class_name and data.class_name:
            player.class_name = data.class_name
            changed = True
        if not player.faction and data.faction:
            player.faction = data.faction
            changed = True
        return changed

    async def _enrich_created_players(self) -> None:
        """Ask the provider about players created by this upload that still lack class or faction."""
        candidates = [
            p for p in self.player_cache.created if not p.class_name or not p.faction
        ]
        for player in candidates:
            region = self._regions.get(player.name.lower(), DEFAULT_REGION)
            try:
                data = await self.player_data_provider.get_player_data(
                    player.realm, player.name, region
                )
            except Exception as e:
                logger.warning("Enrichment failed for %s-%s: %s", player.name, player.realm, e)
                continue
            if data is not None and self._apply_player_data(player, data):
                self.player_cache.mark_for_update(player)
                logger.debug(
                    "Enriched %s: class=%s faction=%s",
                    player.name,
                    player.class_name,
                    player.faction,
                )
