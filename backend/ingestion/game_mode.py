"""
Game mode resolution from participant counts and addon mode strings.
"""

from __future__ import annotations

from typing import Optional

from models.enums import GameMode

_MODE_STRINGS = {
    "2v2": GameMode.TWO_VS_TWO,
    "3v3": GameMode.THREE_VS_THREE,
    "skirmish": GameMode.SKIRMISH,
    "rbg": GameMode.RBG,
    "shuffle": GameMode.SHUFFLE,
}


def resolve_game_mode(
    participant_count: Optional[int],
    arena_match_id: Optional[str] = None,
) -> GameMode:
    """Infer the bracket from how many distinct players took part.

    4 -> 2v2, 10 -> Skirmish, 6 -> Shuffle when the arena match id mentions
    "shuffle" (case-insensitive) and 3v3 otherwise. Any other count, including
    None, falls back to 2v2.
    """
    if participant_count == 4:
        return GameMode.TWO_VS_TWO
    if participant_count == 6:
        if arena_match_id and "shuffle" in arena_match_id.lower():
            return GameMode.SHUFFLE
        return GameMode.THREE_VS_THREE
    if participant_count == 10:
        return GameMode.SKIRMISH
    return GameMode.TWO_VS_TWO


def parse_game_mode(mode: Optional[str]) -> Optional[GameMode]:
    """Map a Lua ``Mode`` string to a GameMode; None when blank or unrecognized."""
    if not mode or not mode.strip():
        return None
    return _MODE_STRINGS.get(mode.strip().lower())
