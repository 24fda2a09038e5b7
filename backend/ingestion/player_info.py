"""
Player identity helpers: split raw log names into (name, realm) and fill
unknown player attributes from observed spells.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Tuple

from ingestion.attribute_mappings import (
    determine_class,
    determine_faction,
    determine_spec,
)
from models.player import Player

logger = logging.getLogger(__name__)

DEFAULT_REGION = "eu"

_REGION_SUFFIX = re.compile(r"-(EU|US|KR|TW|CN)$", re.IGNORECASE)


def _clean(raw: str) -> str:
    return (raw or "").strip(' "')


def parse_player_name(raw: str) -> Tuple[str, str]:
    """Split ``Name-Realm[-REGION]`` into (name, realm).

    Surrounding quotes/spaces and a trailing region code are dropped. Only the
    first dash separates name from realm, so hyphenated realms survive.
    No dash gives (raw, ""); a leading dash gives ("", rest).
    """
    value = _REGION_SUFFIX.sub("", _clean(raw))
    dash = value.find("-")
    if dash < 0:
        return value, ""
    return value[:dash], value[dash + 1:]


def extract_region(raw: str) -> str:
    """Lowercased region suffix of a raw name, ``"eu"`` when absent."""
    m = _REGION_SUFFIX.search(_clean(raw))
    return m.group(1).lower() if m else DEFAULT_REGION


def update_player_from_spells(player: Player, spells: Iterable[str]) -> bool:
    """Fill blank class/spec/faction of player from spells. Returns True if anything changed.

    Attributes that already hold a value are never overwritten.
    """
    spells = list(spells)
    if not spells:
        return False

    changed = False
    if not player.class_name:
        class_name = determine_class(spells)
        if class_name:
            player.class_name = class_name
            changed = True
    if not player.spec:
        spec = determine_spec(spells)
        if spec:
            player.spec = spec
            changed = True
    if not player.faction:
        faction = determine_faction(spells)
        if faction:
            player.faction = faction
            changed = True

    if changed:
        logger.debug(
            "Inferred attributes for %s: class=%s spec=%s faction=%s",
            player.name,
            player.class_name,
            player.spec,
            player.faction,
        )
    return changed


def determine_spec_for_match(spells: Iterable[str]) -> str:
    """Spec shown in one match (may differ from the player's stored spec); "" if unknown."""
    return determine_spec(spells) or ""
