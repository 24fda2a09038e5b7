"""
Combat log vocabulary: event type names and field positions of the
comma-separated traditional log format.
"""

from __future__ import annotations

# Event types
ZONE_CHANGE = "ZONE_CHANGE"
ARENA_MATCH_START = "ARENA_MATCH_START"
COMBATANT_INFO = "COMBATANT_INFO"
SWING_DAMAGE = "SWING_DAMAGE"
SWING_MISSED = "SWING_MISSED"
RANGE_DAMAGE = "RANGE_DAMAGE"
SPELL_DAMAGE = "SPELL_DAMAGE"
SPELL_MISSED = "SPELL_MISSED"
SPELL_HEAL = "SPELL_HEAL"
SPELL_PERIODIC_HEAL = "SPELL_PERIODIC_HEAL"
SPELL_AURA_APPLIED = "SPELL_AURA_APPLIED"
SPELL_AURA_REMOVED = "SPELL_AURA_REMOVED"
SPELL_AURA_APPLIED_DOSE = "SPELL_AURA_APPLIED_DOSE"
SPELL_AURA_REMOVED_DOSE = "SPELL_AURA_REMOVED_DOSE"
SPELL_CAST_START = "SPELL_CAST_START"
SPELL_CAST_SUCCESS = "SPELL_CAST_SUCCESS"
SPELL_CAST_FAILED = "SPELL_CAST_FAILED"
SPELL_ENERGIZE = "SPELL_ENERGIZE"
SPELL_ABSORBED = "SPELL_ABSORBED"
SPELL_DISPEL = "SPELL_DISPEL"
SPELL_SUMMON = "SPELL_SUMMON"
SPELL_CREATE = "SPELL_CREATE"

DAMAGE_EVENTS = frozenset({SWING_DAMAGE, RANGE_DAMAGE, SPELL_DAMAGE})
HEAL_EVENTS = frozenset({SPELL_HEAL, SPELL_PERIODIC_HEAL})

# Field positions after splitting the event payload on commas.
EVENT_TYPE = 0

# ZONE_CHANGE,<zone id>,<zone name>,...
ZONE_ID = 1
ZONE_NAME = 2

# ARENA_MATCH_START,<arena match id>,<zone id>,...
ARENA_MATCH_ID = 1
ARENA_ZONE_ID = 2

# Common unit/spell prefix shared by combat events.
SOURCE_GUID = 1
SOURCE_NAME = 2
TARGET_GUID = 5
TARGET_NAME = 6
SPELL_ID = 9
SPELL_NAME = 10

# Amount positions per event family.
SWING_DAMAGE_AMOUNT = 9
SPELL_DAMAGE_AMOUNT = 12
HEAL_AMOUNT = 12
ABSORBED_AMOUNT = 15
