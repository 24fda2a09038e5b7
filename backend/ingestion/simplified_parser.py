"""
Parser for the simplified per-match log lines embedded in Lua-table exports:

    12:34:56 - HEAL: Alice healed with Flash Heal for 1500
    08:00:01 - DAMAGE: Bob used Shadow Bolt for 900 on Charlie
    08:00:02 - |cffff8800INTERRUPT:|r Bob interrupted Charlie's Fear
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

from ingestion import event_types as ev
from ingestion.schema import ParsedCombatLogEvent

_LOG_PATTERN = re.compile(
    r"(\d{2}:\d{2}:\d{2})\s*-\s*(?:HEAL|DAMAGE):\s*(.+?)(?:\s+for\s+(\d+))?(?:\s+on\s+(.+?))?$",
    re.IGNORECASE,
)
_INTERRUPT_PATTERN = re.compile(
    r"(\d{2}:\d{2}:\d{2})\s*-\s*\|cffff8800INTERRUPT:\|r\s*(.+)$",
    re.IGNORECASE,
)
# Same line without the exact colour escape.
_INTERRUPT_PATTERN_ALT = re.compile(
    r"(\d{2}:\d{2}:\d{2})\s*-\s*.*?INTERRUPT.*?:\s*(.+)$",
    re.IGNORECASE,
)

_INTERRUPT_DETAILS = re.compile(r"^(.+?)\s+interrupted\s+(.+?)'s\s+(.+?)$", re.IGNORECASE)
_HEAL_DETAILS = re.compile(r"^(.+?)\s+healed\s+with\s+(.+?)(?:\s+for\s+\d+)?$", re.IGNORECASE)
_DAMAGE_DETAILS = re.compile(
    r"^(.+?)\s+used\s+(.+?)(?:\s+for\s+\d+)?(?:\s+on\s+.+)?$", re.IGNORECASE
)


def _timestamp(time_text: str, base_date: Union[date, datetime]) -> Optional[datetime]:
    try:
        time_of_day = datetime.strptime(time_text, "%H:%M:%S").time()
    except ValueError:
        return None
    tzinfo = base_date.tzinfo if isinstance(base_date, datetime) else None
    day = base_date.date() if isinstance(base_date, datetime) else base_date
    return datetime.combine(day, time_of_day, tzinfo=tzinfo)


def _parse_interrupt(match: re.Match, base_date: Union[date, datetime]) -> Optional[ParsedCombatLogEvent]:
    timestamp = _timestamp(match.group(1), base_date)
    if timestamp is None:
        return None
    details = _INTERRUPT_DETAILS.match(match.group(2).strip())
    if details is None:
        return None
    return ParsedCombatLogEvent(
        timestamp=timestamp,
        event_type=ev.SPELL_CAST_SUCCESS,
        source_name=details.group(1).strip(),
        target_name=details.group(2).strip(),
        spell_name=details.group(3).strip(),
    )


def parse_line(line: Optional[str], base_date: Union[date, datetime]) -> Optional[ParsedCombatLogEvent]:
    """Parse one simplified line. Only the date part of base_date is used.

    Returns None for blank, unrecognized or malformed lines.
    """
    if line is None or not line.strip():
        return None

    interrupt = _INTERRUPT_PATTERN.search(line) or _INTERRUPT_PATTERN_ALT.search(line)
    if interrupt is not None:
        return _parse_interrupt(interrupt, base_date)

    match = _LOG_PATTERN.search(line)
    if match is None:
        return None

    details = match.group(2)
    amount_text = match.group(3)
    target = match.group(4)

    lowered = details.lower()
    if "healed" in lowered:
        event_type, details_pattern = ev.SPELL_HEAL, _HEAL_DETAILS
    elif "used" in lowered:
        event_type, details_pattern = ev.SPELL_DAMAGE, _DAMAGE_DETAILS
    else:
        return None

    timestamp = _timestamp(match.group(1), base_date)
    if timestamp is None:
        return None

    event = ParsedCombatLogEvent(
        timestamp=timestamp,
        event_type=event_type,
        target_name=(target or "").strip(),
    )
    parsed_details = details_pattern.match(details)
    if parsed_details is not None:
        event.source_name = parsed_details.group(1).strip()
        event.spell_name = parsed_details.group(2).strip()

    if amount_text:
        amount = int(amount_text)
        if event_type == ev.SPELL_HEAL:
            event.healing = amount
        else:
            event.damage = amount
    return event
