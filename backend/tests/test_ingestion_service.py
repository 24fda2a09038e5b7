"""Traditional log ingestion: segmentation, persistence, dedup, enrichment, partial failure."""

from __future__ import annotations

import io
from typing import List, Optional, Tuple

import pytest

from ingestion.errors import IngestionError
from ingestion.ingestion_service import CombatLogIngestionService
from models.combat_log_entry import CombatLogEntry
from models.enums import ArenaZone, GameMode
from models.match import Match
from models.player import Player
from repositories.combat_log_entry_repo import CombatLogEntryRepository
from repositories.match_repo import MatchRepository
from repositories.match_result_repo import MatchResultRepository
from repositories.player_repo import PlayerRepository
from services.wow_api_service import PlayerDataProvider, WowPlayerData

A = '"A-Stormrage-US"'
B = '"B-Proudmoore-US"'


def _damage(ts: str, source: str, target: str, spell: str, amount: int) -> str:
    return f'{ts}  SPELL_DAMAGE,Player-1,{source},0x511,0x0,Player-2,{target},0x548,0x0,1,"{spell}",0x10,{amount}'


def _match_lines(day: str = "1/15", spells: Tuple[str, str] = ("Icy Veins", "Chaos Bolt")) -> List[str]:
    return [
        f"{day} 20:30:00.000  ARENA_MATCH_START,123,559",
        _damage(f"{day} 20:30:01.000", A, B, spells[0], 1000),
        _damage(f"{day} 20:30:02.000", B, A, spells[1], 2000),
        _damage(f"{day} 20:30:03.000", A, B, spells[0], 1500),
        _damage(f"{day} 20:30:04.000", B, A, spells[1], 2500),
        f'{day} 20:32:00.000  ZONE_CHANGE,1,"Orgrimmar",0',
    ]


def _stream(lines: List[str]) -> io.BytesIO:
    return io.BytesIO(("\n".join(lines) + "\n").encode("utf-8"))


async def _ingest(db, lines: List[str], provider: Optional[PlayerDataProvider] = None) -> List[Match]:
    async with db.session() as session:
        return await CombatLogIngestionService(session, provider).ingest(_stream(lines))


class _StaticProvider(PlayerDataProvider):
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, str]] = []

    async def get_player_data(self, realm: str, name: str, region: str = "eu") -> Optional[WowPlayerData]:
        self.calls.append((realm, name, region))
        return WowPlayerData(name=name, realm=realm, class_name="Rogue", faction="Horde")


class _BrokenProvider(PlayerDataProvider):
    async def get_player_data(self, realm: str, name: str, region: str = "eu") -> Optional[WowPlayerData]:
        raise RuntimeError("api down")


class _FailingRaw(io.RawIOBase):
    """Serves data once, then fails like a lost disk."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self._data is None:
            raise OSError("disk gone")
        n = len(self._data)
        b[:n] = self._data
        self._data = None
        return n


@pytest.mark.asyncio
async def test_single_match_end_to_end(db):
    matches = await _ingest(db, _match_lines())

    assert len(matches) == 1
    match = matches[0]
    assert match.duration == 120
    assert match.game_mode == GameMode.TWO_VS_TWO.value
    assert match.arena_zone == int(ArenaZone.NAGRAND_ARENA)
    assert match.map_name == "Nagrand Arena"
    assert match.arena_match_id == "123"
    assert len(match.unique_hash) == 64

    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
        results = await MatchResultRepository(session).list_for_match(match.id)
        entries = await CombatLogEntryRepository(session).list_for_match(match.id)

    assert sorted((p.name, p.realm) for p in players) == [("A", "Stormrage"), ("B", "Proudmoore")]
    assert len(results) == 2
    assert len(entries) == 4
    ids = {p.id for p in players}
    assert all(e.source_player_id in ids for e in entries)
    assert all(e.target_player_id in ids for e in entries)
    assert sum(e.damage_done for e in entries) == 7000

    by_name = {p.name: p for p in players}
    assert (by_name["A"].class_name, by_name["A"].spec) == ("Mage", "Frost")
    assert (by_name["B"].class_name, by_name["B"].spec) == ("Warlock", "Destruction")
    specs = {r.player_id: r.spec for r in results}
    assert specs[by_name["A"].id] == "Frost"


@pytest.mark.asyncio
async def test_reingest_returns_existing_match(db):
    first = await _ingest(db, _match_lines())
    second = await _ingest(db, _match_lines())

    assert [m.id for m in second] == [m.id for m in first]
    async with db.session() as session:
        assert len(await MatchRepository(session).list(Match)) == 1
        assert len(await CombatLogEntryRepository(session).list(CombatLogEntry)) == 4


@pytest.mark.asyncio
async def test_events_outside_a_match_and_comments_are_ignored(db):
    lines = [
        "# exported by the client",
        _damage("1/15 20:29:00.000", A, B, "Frostbolt", 999),
        "garbage line",
        *_match_lines(),
        _damage("1/15 20:33:00.000", A, B, "Frostbolt", 999),
    ]
    matches = await _ingest(db, lines)
    assert len(matches) == 1
    async with db.session() as session:
        entries = await CombatLogEntryRepository(session).list_for_match(matches[0].id)
    assert len(entries) == 4


@pytest.mark.asyncio
async def test_unterminated_match_finalized_at_end_of_file(db):
    matches = await _ingest(db, _match_lines()[:-1])
    assert len(matches) == 1
    assert matches[0].duration == 4


@pytest.mark.asyncio
async def test_realmless_names_are_not_participants(db):
    lines = [
        "1/15 20:30:00.000  ARENA_MATCH_START,777,572",
        _damage("1/15 20:30:01.000", A, '"Pet"', "Claw", 10),
        _damage("1/15 20:30:02.000", '"Pet"', A, "Claw", 10),
        '1/15 20:31:00.000  ZONE_CHANGE,1,"Orgrimmar",0',
    ]
    matches = await _ingest(db, lines)
    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
        entries = await CombatLogEntryRepository(session).list_for_match(matches[0].id)
    assert [p.name for p in players] == ["A"]
    assert len(entries) == 1
    assert entries[0].target_player_id is None
    assert matches[0].map_name == "Ruins of Lordaeron"


@pytest.mark.asyncio
async def test_unknown_zone_maps_to_unknown_arena(db):
    lines = _match_lines()
    lines[0] = "1/15 20:30:00.000  ARENA_MATCH_START,123,99999"
    matches = await _ingest(db, lines)
    assert matches[0].arena_zone == int(ArenaZone.UNKNOWN)
    assert matches[0].map_name == "Unknown Arena"


@pytest.mark.asyncio
async def test_created_players_without_class_are_enriched(db):
    provider = _StaticProvider()
    await _ingest(db, _match_lines(spells=("Frostbolt", "Shadow Bolt")), provider)

    assert sorted(provider.calls) == [("Proudmoore", "B", "us"), ("Stormrage", "A", "us")]
    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
    assert {(p.class_name, p.faction) for p in players} == {("Rogue", "Horde")}


@pytest.mark.asyncio
async def test_enrichment_failure_does_not_abort(db):
    matches = await _ingest(db, _match_lines(spells=("Frostbolt", "Shadow Bolt")), _BrokenProvider())
    assert len(matches) == 1


@pytest.mark.asyncio
async def test_io_failure_keeps_earlier_matches(db):
    data = ("\n".join(_match_lines()) + "\n").encode("utf-8")
    stream = io.BufferedReader(_FailingRaw(data))

    async with db.session() as session:
        with pytest.raises(IngestionError) as exc_info:
            await CombatLogIngestionService(session).ingest(stream)

    err = exc_info.value
    assert isinstance(err.__cause__, OSError)
    assert len(err.matches) == 1
    async with db.session() as session:
        assert len(await MatchRepository(session).list(Match)) == 1


@pytest.mark.asyncio
async def test_player_names_differing_in_case_are_one_player(db):
    await _ingest(db, _match_lines())
    lowered = [line.replace('"A-Stormrage-US"', '"a-Stormrage-US"') for line in _match_lines(day="1/16")]
    second = await _ingest(db, lowered)

    assert len(second) == 1
    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
        results = await MatchResultRepository(session).list_for_match(second[0].id)
    assert sorted((p.name, p.realm) for p in players) == [("A", "Stormrage"), ("B", "Proudmoore")]
    assert {r.player_id for r in results} == {p.id for p in players}


@pytest.mark.asyncio
async def test_match_start_without_zone_uses_last_zone_change(db):
    lines = _match_lines()
    lines[0] = "1/15 20:30:00.000  ARENA_MATCH_START,123"
    lines.insert(0, '1/15 20:29:00.000  ZONE_CHANGE,559,"Nagrand Arena",0')

    matches = await _ingest(db, lines)
    assert len(matches) == 1
    assert matches[0].arena_zone == int(ArenaZone.NAGRAND_ARENA)
    assert matches[0].map_name == "Nagrand Arena"


@pytest.mark.asyncio
async def test_restarted_match_discards_previous_recording(db):
    lines = [
        "1/15 20:20:00.000  ARENA_MATCH_START,122,572",
        _damage("1/15 20:20:01.000", '"C-Silvermoon-EU"', '"D-Silvermoon-EU"', "Mortal Strike", 500),
        *_match_lines(),
    ]
    matches = await _ingest(db, lines)

    assert len(matches) == 1
    assert matches[0].arena_match_id == "123"
    assert matches[0].duration == 120
    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
        entries = await CombatLogEntryRepository(session).list(CombatLogEntry)
    assert sorted(p.name for p in players) == ["A", "B"]
    assert len(entries) == 4


@pytest.mark.asyncio
async def test_realmless_sightings_resolve_stored_players(db):
    async with db.session() as session:
        await PlayerRepository(session).add_range(
            [Player(name="A", realm="Stormrage"), Player(name="B", realm="Proudmoore")]
        )
        await session.commit()

    lines = [line.replace("-Stormrage-US", "").replace("-Proudmoore-US", "") for line in _match_lines()]
    matches = await _ingest(db, lines)

    async with db.session() as session:
        players = await PlayerRepository(session).list(Player)
        entries = await CombatLogEntryRepository(session).list_for_match(matches[0].id)
        results = await MatchResultRepository(session).list_for_match(matches[0].id)
    assert len(players) == 2
    assert len(entries) == 4
    assert len(results) == 2
    ids = {p.id for p in players}
    assert {e.source_player_id for e in entries} == ids


@pytest.mark.asyncio
async def test_participant_order_does_not_change_match_hash(db):
    first = await _ingest(db, _match_lines())

    reordered = _match_lines()
    reordered[1] = _damage("1/15 20:30:01.000", B, A, "Chaos Bolt", 1000)
    second = await _ingest(db, reordered)

    assert second[0].unique_hash == first[0].unique_hash
    assert second[0].id == first[0].id
