"""Game mode from participant count and from addon mode strings."""

from __future__ import annotations

import pytest

from ingestion.game_mode import parse_game_mode, resolve_game_mode
from models.enums import GameMode


@pytest.mark.parametrize(
    "count, arena_match_id, expected",
    [
        (4, None, GameMode.TWO_VS_TWO),
        (6, "Solo-SHUFFLE-42", GameMode.SHUFFLE),
        (6, "123", GameMode.THREE_VS_THREE),
        (6, None, GameMode.THREE_VS_THREE),
        (10, None, GameMode.SKIRMISH),
        (2, None, GameMode.TWO_VS_TWO),
        (7, "shuffle", GameMode.TWO_VS_TWO),
        (None, None, GameMode.TWO_VS_TWO),
    ],
)
def test_resolve_game_mode(count, arena_match_id, expected):
    assert resolve_game_mode(count, arena_match_id) is expected


def test_parse_game_mode():
    assert parse_game_mode("2v2") is GameMode.TWO_VS_TWO
    assert parse_game_mode(" 3V3 ") is GameMode.THREE_VS_THREE
    assert parse_game_mode("Shuffle") is GameMode.SHUFFLE
    assert parse_game_mode("rbg") is GameMode.RBG
    assert parse_game_mode("") is None
    assert parse_game_mode("5v5") is None
    assert parse_game_mode(None) is None
