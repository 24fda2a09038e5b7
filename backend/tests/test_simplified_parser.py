"""Simplified (addon) log lines: heal, damage, interrupt; date comes from the base date."""

from __future__ import annotations

from datetime import date, datetime, timezone

from ingestion import event_types as ev
from ingestion.simplified_parser import parse_line

BASE = datetime(2025, 11, 20, 0, 33, 57, tzinfo=timezone.utc)


def test_heal_line():
    event = parse_line("00:34:10 - HEAL: Alice-Stormrage healed with Flash Heal for 1500", BASE)
    assert event.event_type == ev.SPELL_HEAL
    assert event.source_name == "Alice-Stormrage"
    assert event.spell_name == "Flash Heal"
    assert event.healing == 1500
    assert event.damage is None
    assert event.timestamp == datetime(2025, 11, 20, 0, 34, 10, tzinfo=timezone.utc)


def test_damage_line_with_target():
    event = parse_line("00:34:11 - DAMAGE: Bob-Ravencrest used Shadow Bolt for 900 on Alice-Stormrage", BASE)
    assert event.event_type == ev.SPELL_DAMAGE
    assert event.source_name == "Bob-Ravencrest"
    assert event.spell_name == "Shadow Bolt"
    assert event.damage == 900
    assert event.target_name == "Alice-Stormrage"


def test_damage_line_without_amount():
    event = parse_line("00:34:12 - DAMAGE: Bob used Fear", BASE)
    assert event.spell_name == "Fear"
    assert event.damage is None
    assert event.target_name == ""


def test_interrupt_line():
    event = parse_line("00:34:13 - |cffff8800INTERRUPT:|r Bob interrupted Charlie's Fear", BASE)
    assert event.event_type == ev.SPELL_CAST_SUCCESS
    assert event.source_name == "Bob"
    assert event.target_name == "Charlie"
    assert event.spell_name == "Fear"


def test_plain_date_base():
    event = parse_line("12:00:00 - HEAL: Alice healed with Renew", date(2024, 3, 1))
    assert event.timestamp == datetime(2024, 3, 1, 12, 0, 0)


def test_unrecognized_lines_return_none():
    assert parse_line("", BASE) is None
    assert parse_line(None, BASE) is None
    assert parse_line("hello world", BASE) is None
    assert parse_line("00:34:14 - DAMAGE: Bob casts Fear", BASE) is None
    assert parse_line("99:99:99 - HEAL: Alice healed with Renew", BASE) is None


def test_interrupt_line_without_details_is_dropped():
    assert parse_line("00:34:13 - |cffff8800INTERRUPT:|r Bob used Kick for 10", BASE) is None
