"""Player name parsing and spell-based attribute filling."""

from __future__ import annotations

import pytest

from ingestion.player_info import (
    determine_spec_for_match,
    extract_region,
    parse_player_name,
    update_player_from_spells,
)
from models.player import Player


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Name-Realm", ("Name", "Realm")),
        ("Name-Realm-US", ("Name", "Realm")),
        ("Name-Area-52-EU", ("Name", "Area-52")),
        ("Name", ("Name", "")),
        ('"Name-Realm"', ("Name", "Realm")),
        ("-Realm", ("", "Realm")),
        ("", ("", "")),
    ],
)
def test_parse_player_name(raw, expected):
    assert parse_player_name(raw) == expected


def test_extract_region():
    assert extract_region("Name-Realm-US") == "us"
    assert extract_region("Name-Realm-kr") == "kr"
    assert extract_region("Name-Realm") == "eu"


def test_update_fills_only_blank_attributes():
    player = Player(name="Alice", realm="Stormrage", class_name="", spec="", faction="")
    changed = update_player_from_spells(player, ["Penance", "Power Word: Shield", "Arcane Torrent"])
    assert changed is True
    assert player.class_name == "Priest"
    assert player.spec == "Discipline"
    assert player.faction == "Horde"

    player.class_name = "Mage"
    assert update_player_from_spells(player, ["Chaos Bolt"]) is False
    assert player.class_name == "Mage"
    assert player.spec == "Discipline"


def test_update_without_spells_changes_nothing():
    player = Player(name="Bob", realm="Ravencrest", class_name="", spec="", faction="")
    assert update_player_from_spells(player, []) is False
    assert update_player_from_spells(player, ["Unknown Spell"]) is False
    assert (player.class_name, player.spec, player.faction) == ("", "", "")


def test_determine_spec_for_match():
    assert determine_spec_for_match(["Chaos Bolt"]) == "Destruction"
    assert determine_spec_for_match(["Melee"]) == ""
