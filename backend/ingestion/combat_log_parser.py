"""
Parser for the traditional combat log: one event per line,
``<timestamp>  <EVENT>,<field>,<field>,...``.

parse_line never raises; anything it cannot read comes back as None or as
empty/None fields on the returned event.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ingestion import event_types as ev
from ingestion.arena_zones import is_arena_zone
from ingestion.schema import ParsedCombatLogEvent

logger = logging.getLogger(__name__)

__all__ = ["parse_line", "parse_timestamp", "is_arena_zone"]

TIMESTAMP_SEPARATOR = "  "

# Tried in order. Formats without a year are prefixed with the current one.
_TIMESTAMP_FORMATS = (
    ("%m/%d/%Y %H:%M:%S.%f", False),
    ("%Y/%m/%d %H:%M:%S.%f", True),
    ("%Y/%m/%d %H:%M:%S", True),
    ("%m/%d/%Y %H:%M:%S", False),
)


def trim_quotes(value: str) -> str:
    return value.strip(' "')


def safe_field(fields: List[str], index: int) -> str:
    """Field at index with quotes/spaces trimmed, "" when out of range."""
    if index < 0 or index >= len(fields):
        return ""
    return trim_quotes(fields[index])


def parse_int(value: str) -> Optional[int]:
    value = trim_quotes(value)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_timestamp(text: str) -> Optional[datetime]:
    """Parse a log timestamp; the value is taken as UTC (the log carries no offset)."""
    text = text.strip()
    if not text:
        return None
    for fmt, needs_year in _TIMESTAMP_FORMATS:
        candidate = f"{datetime.now(timezone.utc).year}/{text}" if needs_year else text
        try:
            return datetime.strptime(candidate, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _amount_for(event_type: str, fields: List[str], event: ParsedCombatLogEvent) -> None:
    if event_type == ev.SWING_DAMAGE:
        event.damage = parse_int(safe_field(fields, ev.SWING_DAMAGE_AMOUNT))
    elif event_type in (ev.SPELL_DAMAGE, ev.RANGE_DAMAGE):
        event.damage = parse_int(safe_field(fields, ev.SPELL_DAMAGE_AMOUNT))
    elif event_type in ev.HEAL_EVENTS:
        event.healing = parse_int(safe_field(fields, ev.HEAL_AMOUNT))
    elif event_type == ev.SPELL_ABSORBED:
        event.absorbed = parse_int(safe_field(fields, ev.ABSORBED_AMOUNT))


def parse_line(line: Optional[str]) -> Optional[ParsedCombatLogEvent]:
    """Parse one traditional log line.

    Returns None only when the timestamp separator is missing or the
    timestamp is unreadable; an empty event type yields an event with
    ``event_type == ""``.
    """
    if line is None:
        return None

    parts = line.rstrip("\r\n").split(TIMESTAMP_SEPARATOR, 1)
    if len(parts) != 2:
        return None

    timestamp = parse_timestamp(parts[0])
    if timestamp is None:
        logger.debug("Unparseable timestamp %r", parts[0])
        return None

    fields = parts[1].split(",")
    event_type = fields[ev.EVENT_TYPE].strip()
    event = ParsedCombatLogEvent(timestamp=timestamp, event_type=event_type)
    if not event_type:
        return event

    if event_type == ev.ZONE_CHANGE:
        event.zone_id = parse_int(safe_field(fields, ev.ZONE_ID))
        event.zone_name = safe_field(fields, ev.ZONE_NAME)
        return event

    if event_type == ev.ARENA_MATCH_START:
        event.arena_match_id = safe_field(fields, ev.ARENA_MATCH_ID)
        event.zone_id = parse_int(safe_field(fields, ev.ARENA_ZONE_ID))
        return event

    event.source_guid = safe_field(fields, ev.SOURCE_GUID)
    event.source_name = safe_field(fields, ev.SOURCE_NAME)
    event.target_guid = safe_field(fields, ev.TARGET_GUID)
    event.target_name = safe_field(fields, ev.TARGET_NAME)
    event.spell_id = parse_int(safe_field(fields, ev.SPELL_ID))
    event.spell_name = safe_field(fields, ev.SPELL_NAME)
    _amount_for(event_type, fields, event)
    return event
