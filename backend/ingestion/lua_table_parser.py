"""
Parser for Lua-table exports written by the in-game addon (``PvPAnalyticsDB = { ... }``).

Two layouts exist in the wild:

- the classic layout, one table per match with ``["Logs"]`` (simplified log
  lines) and ``StartTime``/``EndTime``/``Zone``/``Faction``/``Mode`` strings;
- the structured layout, with a root ``["players"]`` table and per-match
  ``["metadata"]``/``["players"]``/``["events"]`` tables.

The classic layout is read with one block regex first; when that finds
nothing, a line scanner that tracks brace depth takes over. Both produce the
same LuaMatchData shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Dict, List, Optional

from ingestion.schema import LuaMatchData, LuaPlayerData

LOG_LINE_MARKER = " - "

_MATCH_BLOCK = re.compile(
    r'\{[\s\S]*?\["Logs"\]\s*=\s*\{([\s\S]*?)\},'
    r'[\s\S]*?\["StartTime"\]\s*=\s*"([^"]+)",'
    r'[\s\S]*?\["EndTime"\]\s*=\s*"([^"]+)",'
    r'[\s\S]*?\["Zone"\]\s*=\s*"([^"]+)",'
    r'[\s\S]*?\["Faction"\]\s*=\s*"([^"]+)",'
    r'[\s\S]*?\["Mode"\]\s*=\s*"([^"]+)",'
    r'[\s\S]*?\}'
)
# Double-quoted Lua string honouring backslash escapes.
_QUOTED_STRING = re.compile(r'"([^"\\]*(?:\\.[^"\\]*)*)"')

_START_TIME = re.compile(r'\["StartTime"\]\s*=\s*"([^"]+)"')
_END_TIME = re.compile(r'\["EndTime"\]\s*=\s*"([^"]+)"')
_ZONE = re.compile(r'\["Zone"\]\s*=\s*"([^"]+)"')
_FACTION = re.compile(r'\["Faction"\]\s*=\s*"([^"]+)"')
_MODE = re.compile(r'\["Mode"\]\s*=\s*"([^"]+)"')

# Structured layout
_PLAYER_ID = re.compile(r'\["(Player-[^"]+)"\]\s*=\s*\{')
_PLAYER_REF = re.compile(r'\["(Player-[^"]+)"\]')
_EVENT_FIELD = re.compile(r'\["([^"]+)"\]\s*=\s*(.+)')
_META_DATE = re.compile(r'\["date"\]\s*=\s*"([^"]+)"')
_META_END = re.compile(r'\["endTime"\]\s*=\s*"([^"]+)"')
_META_MAP = re.compile(r'\["map"\]\s*=\s*"([^"]+)"')
_META_MODE = re.compile(r'\["mode"\]\s*=\s*"([^"]+)"')

_PLAYER_FIELDS = (
    (re.compile(r'\["name"\]\s*=\s*"([^"]+)"'), "name", str),
    (re.compile(r'\["realm"\]\s*=\s*"([^"]+)"'), "realm", str),
    (re.compile(r'\["classId"\]\s*=\s*"?(\d+)"?'), "class_id", int),
    (re.compile(r'\["class"\]\s*=\s*"([^"]+)"'), "class_name", str),
    (re.compile(r'\["specId"\]\s*=\s*(\d+)'), "spec_id", int),
    (re.compile(r'\["faction"\]\s*=\s*"([^"]+)"'), "faction", str),
    (re.compile(r'\["kdratio"\]\s*=\s*([\d.]+)'), "kd_ratio", float),
    (re.compile(r'\["losses"\]\s*=\s*(\d+)'), "losses", int),
    (re.compile(r'\["wins"\]\s*=\s*(\d+)'), "wins", int),
    (re.compile(r'\["matchesPlayed"\]\s*=\s*(\d+)'), "matches_played", int),
    (re.compile(r'\["totalDamage"\]\s*=\s*(\d+)'), "total_damage", int),
    (re.compile(r'\["totalHealing"\]\s*=\s*(\d+)'), "total_healing", int),
    (re.compile(r'\["interruptsPerMatch"\]\s*=\s*([\d.]+)'), "interrupts_per_match", float),
)

_BLOCK_OPENERS = frozenset({"PvPAnalyticsDB = {", '["matches"] = {', "{", "},"})


def unescape_lua_string(value: str) -> str:
    return value.replace('\\"', '"').replace("\\\\", "\\")


def _is_escaped(line: str, position: int) -> bool:
    backslashes = 0
    j = position - 1
    while j >= 0 and line[j] == "\\":
        backslashes += 1
        j -= 1
    return backslashes % 2 == 1


def brace_delta(line: str) -> int:
    """Net count of '{' minus '}' on a line, ignoring braces inside quoted strings."""
    delta = 0
    quote: Optional[str] = None
    for i, c in enumerate(line):
        if c in ('"', "'"):
            if _is_escaped(line, i):
                continue
            if quote is None:
                quote = c
            elif c == quote:
                quote = None
            continue
        if quote is not None:
            continue
        if c == "{":
            delta += 1
        elif c == "}":
            delta -= 1
    return delta


def _log_lines(logs_content: str) -> List[str]:
    lines = []
    for m in _QUOTED_STRING.finditer(logs_content):
        value = unescape_lua_string(m.group(1))
        if value.strip() and LOG_LINE_MARKER in value:
            lines.append(value)
    return lines


def _set_from(regex: re.Pattern, line: str, setter: Callable[[str], None]) -> None:
    m = regex.search(line)
    if m:
        setter(m.group(1).strip())


# --- classic layout -------------------------------------------------------


def parse_with_regex(content: str) -> List[LuaMatchData]:
    """Classic layout via the single block regex; [] when nothing matches."""
    return [
        LuaMatchData(
            logs=_log_lines(m.group(1)),
            start_time=m.group(2).strip(),
            end_time=m.group(3).strip(),
            zone=m.group(4).strip(),
            faction=m.group(5).strip(),
            mode=m.group(6).strip(),
        )
        for m in _MATCH_BLOCK.finditer(content)
    ]


@dataclass
class _ScanState:
    current: Optional[LuaMatchData] = None
    depth: int = 0
    in_logs: bool = False

    def reset(self) -> None:
        self.current = None
        self.depth = 0
        self.in_logs = False


def _starts_block(lines: List[str], index: int, trimmed: str) -> bool:
    if trimmed != "{" or index == 0:
        return False
    previous = lines[index - 1].strip()
    return previous in _BLOCK_OPENERS or previous.endswith("{")


def _scan_logs_line(line: str, trimmed: str, state: _ScanState) -> None:
    if '["Logs"]' in trimmed or "['Logs']" in trimmed:
        state.in_logs = True
        return
    if not state.in_logs:
        return
    m = _QUOTED_STRING.search(line)
    if m:
        value = unescape_lua_string(m.group(1))
        if LOG_LINE_MARKER in value:
            state.current.logs.append(value)
    if trimmed in ("},", "],"):
        state.in_logs = False


def _scan_metadata_line(line: str, match: LuaMatchData) -> None:
    _set_from(_START_TIME, line, lambda v: setattr(match, "start_time", v))
    _set_from(_END_TIME, line, lambda v: setattr(match, "end_time", v))
    _set_from(_ZONE, line, lambda v: setattr(match, "zone", v))
    _set_from(_FACTION, line, lambda v: setattr(match, "faction", v))
    _set_from(_MODE, line, lambda v: setattr(match, "mode", v))


def parse_manually(content: str) -> List[LuaMatchData]:
    """Classic layout via a line scanner tracking brace depth.

    A block is kept when it closes with at least one log line and a StartTime;
    a block still open at end of input is kept when it has log lines.
    """
    matches: List[LuaMatchData] = []
    lines = content.split("\n")
    state = _ScanState()

    for i, line in enumerate(lines):
        trimmed = line.strip()

        if state.current is None:
            if _starts_block(lines, i, trimmed):
                state.current = LuaMatchData()
                state.depth = 1
            continue

        state.depth += brace_delta(line)
        _scan_logs_line(line, trimmed, state)
        _scan_metadata_line(line, state.current)

        if state.depth <= 0:
            if state.current.logs and state.current.start_time:
                matches.append(state.current)
            state.reset()

    if state.current is not None and state.current.logs:
        matches.append(state.current)
    return matches


# --- structured layout ----------------------------------------------------


def is_structured_layout(content: str) -> bool:
    return '["matches"]' in content and '["metadata"]' in content


def _apply_player_fields(line: str, player: LuaPlayerData) -> None:
    for regex, attr, convert in _PLAYER_FIELDS:
        m = regex.search(line)
        if not m:
            continue
        try:
            setattr(player, attr, convert(m.group(1).strip()))
        except ValueError:
            continue


def parse_root_players(lines: List[str]) -> List[LuaPlayerData]:
    """Player records of the root ``["players"]`` table (before ``["matches"]``)."""
    players: List[LuaPlayerData] = []
    in_players = False
    players_depth = 0
    player_depth = 0
    current: Optional[LuaPlayerData] = None

    for line in lines:
        trimmed = line.strip()
        if trimmed.startswith('["matches"]'):
            break
        if not in_players:
            if trimmed.startswith('["players"]'):
                in_players = True
                players_depth = brace_delta(trimmed)
            continue

        delta = brace_delta(trimmed)
        players_depth += delta
        if players_depth <= 0:
            if current is not None:
                players.append(current)
            current = None
            in_players = False
            continue

        player_start = _PLAYER_ID.search(trimmed)
        if player_start:
            if current is not None:
                players.append(current)
            current = LuaPlayerData(guid=player_start.group(1), name="")
            player_depth = max(1, delta)
            continue
        if current is None:
            continue

        _apply_player_fields(trimmed, current)
        player_depth += delta
        if player_depth <= 0:
            players.append(current)
            current = None

    if current is not None:
        players.append(current)
    return players


def _format_event_time(value: str) -> str:
    try:
        seconds = float(value)
    except ValueError:
        return value
    try:
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc).strftime("%H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return f"{seconds:.0f}"


def event_to_log_line(event_lines: List[str]) -> str:
    """Render one structured event object as a simplified log line.

    Damage and heal events use the simplified grammar so the line parser can
    read them; anything else keeps a descriptive form.
    """
    data: Dict[str, str] = {}
    for line in event_lines:
        m = _EVENT_FIELD.search(line.strip())
        if not m:
            continue
        raw = m.group(2).strip().rstrip(",").strip()
        if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
            raw = raw[1:-1]
        data[m.group(1).lower()] = raw
    if not data:
        return ""

    time_text = _format_event_time(data["time"]) if "time" in data else "00:00:00"
    event_type = (data.get("type") or data.get("action") or "EVENT").upper()
    spell = data.get("spellname", "Unknown")
    source = data.get("source") or data.get("sourceguid") or "Unknown"
    dest = data.get("dest", "")
    amount = data.get("amount", "")
    amount_part = f" for {amount}" if amount.isdigit() else ""

    if "HEAL" in event_type:
        return f"{time_text} - HEAL: {source} healed with {spell}{amount_part}"
    if "DAMAGE" in event_type:
        target_part = f" on {dest}" if dest else ""
        return f"{time_text} - DAMAGE: {source} used {spell}{amount_part}{target_part}"
    line = f"{time_text} - {event_type}: {spell} from {source}"
    if dest:
        line += f" to {dest}"
    return line


@dataclass
class _StructuredMatchState:
    current: Optional[LuaMatchData] = None
    depth: int = 0
    player_ids: List[str] = field(default_factory=list)
    in_players: bool = False
    players_depth: int = 0
    in_events: bool = False
    events_depth: int = 0
    event_depth: int = 0
    event_lines: List[str] = field(default_factory=list)
    in_metadata: bool = False
    metadata_depth: int = 0


def _scan_match_players(trimmed: str, delta: int, state: _StructuredMatchState) -> None:
    if '["players"]' in trimmed:
        state.in_players = True
        state.players_depth = delta
        return
    if not state.in_players:
        return
    state.players_depth += delta
    m = _PLAYER_REF.search(trimmed)
    if m:
        state.player_ids.append(m.group(1))
    if state.players_depth <= 0:
        state.in_players = False


def _scan_events(line: str, trimmed: str, delta: int, state: _StructuredMatchState) -> None:
    if '["events"]' in trimmed:
        state.in_events = True
        state.events_depth = delta
        return
    if not state.in_events:
        return

    if state.event_depth > 0:
        state.event_lines.append(line)
        state.event_depth += delta
        if state.event_depth <= 0:
            log_line = event_to_log_line(state.event_lines)
            if log_line:
                state.current.logs.append(log_line)
            state.event_depth = 0
            state.event_lines = []
    elif trimmed == "{":
        state.event_lines = [line]
        state.event_depth = max(1, delta)

    state.events_depth += delta
    if state.events_depth <= 0:
        state.in_events = False
        state.event_depth = 0
        state.event_lines = []


def _scan_metadata(line: str, trimmed: str, delta: int, state: _StructuredMatchState) -> None:
    if '["metadata"]' in trimmed:
        state.in_metadata = True
        state.metadata_depth = delta
        return
    if not state.in_metadata:
        return
    match = state.current
    _set_from(_META_DATE, line, lambda v: setattr(match, "start_time", v))
    _set_from(_META_END, line, lambda v: setattr(match, "end_time", v))
    _set_from(_META_MAP, line, lambda v: setattr(match, "zone", v))
    _set_from(_META_MODE, line, lambda v: setattr(match, "mode", v))
    state.metadata_depth += delta
    if state.metadata_depth <= 0:
        state.in_metadata = False


def parse_structured(content: str) -> List[LuaMatchData]:
    """Structured layout: root players plus per-match metadata and events."""
    lines = content.split("\n")
    root_players = parse_root_players(lines)
    factions = {p.guid.lower(): p.faction for p in root_players if p.faction}

    def _finish(state: _StructuredMatchState) -> LuaMatchData:
        match = state.current
        for player_id in state.player_ids:
            faction = factions.get(player_id.lower())
            if faction:
                match.faction = faction
                break
        return match

    matches: List[LuaMatchData] = []
    state = _StructuredMatchState()
    in_matches = False

    for line in lines:
        trimmed = line.strip()
        if not in_matches:
            in_matches = trimmed.startswith('["matches"]')
            continue

        if state.current is None:
            if trimmed == "{":
                state = _StructuredMatchState(current=LuaMatchData(), depth=1)
            continue

        delta = brace_delta(line)
        state.depth += delta
        _scan_match_players(trimmed, delta, state)
        _scan_events(line, trimmed, delta, state)
        _scan_metadata(line, trimmed, delta, state)

        if state.depth <= 0:
            if state.current.logs:
                matches.append(_finish(state))
            state = _StructuredMatchState()

    if state.current is not None and state.current.logs:
        matches.append(_finish(state))

    for match in matches:
        match.players.extend(root_players)
    return matches


# --- entry points ---------------------------------------------------------


def parse_content(content: str) -> List[LuaMatchData]:
    """All matches in a Lua-table document, in document order."""
    if is_structured_layout(content):
        return parse_structured(content)
    matches = parse_with_regex(content)
    if not matches:
        matches = parse_manually(content)
    return matches


def parse(stream: BinaryIO) -> List[LuaMatchData]:
    """Read the whole stream (UTF-8, BOM tolerated) and parse it."""
    content = stream.read()
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig", errors="replace")
    return parse_content(content)
