"""
Spell and ability tables used to infer a player's class, spec and faction
from what they cast during a match.

Lookups are case-insensitive. When several observed spells match, the
winner is decided by the table's own declaration order (or by priority for
specs), never by the order in which spells were observed, so the result is
the same for every iteration order of the observed set.

Mappings follow the current retail expansion; abilities reworked by later
patches need to be revisited here.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

# Classes
PRIEST = "Priest"
WARLOCK = "Warlock"
MAGE = "Mage"
WARRIOR = "Warrior"
PALADIN = "Paladin"
HUNTER = "Hunter"
ROGUE = "Rogue"
DRUID = "Druid"
SHAMAN = "Shaman"
DEATH_KNIGHT = "Death Knight"
DEMON_HUNTER = "Demon Hunter"
EVOKER = "Evoker"
MONK = "Monk"

ALLIANCE = "Alliance"
HORDE = "Horde"

# Class-defining spells, in lookup order.
SPELL_TO_CLASS: Tuple[Tuple[str, str], ...] = (
    ("Arcane Intellect", MAGE),
    ("Polymorph", MAGE),
    ("Blink", MAGE),
    ("Counterspell", MAGE),
    ("Ice Block", MAGE),
    ("Combustion", MAGE),
    ("Icy Veins", MAGE),
    ("Time Warp", MAGE),
    ("Power Word: Shield", PRIEST),
    ("Shadow Word: Pain", PRIEST),
    ("Dispel Magic", PRIEST),
    ("Psychic Scream", PRIEST),
    ("Mind Control", PRIEST),
    ("Voidform", PRIEST),
    ("Shadowfiend", PRIEST),
    ("Soulstone", WARLOCK),
    ("Summon Imp", WARLOCK),
    ("Summon Voidwalker", WARLOCK),
    ("Summon Succubus", WARLOCK),
    ("Summon Felhunter", WARLOCK),
    ("Demonic Gateway", WARLOCK),
    ("Soulburn", WARLOCK),
    ("Chaos Bolt", WARLOCK),
    ("Charge", WARRIOR),
    ("Shield Slam", WARRIOR),
    ("Execute", WARRIOR),
    ("Whirlwind", WARRIOR),
    ("Battle Shout", WARRIOR),
    ("Recklessness", WARRIOR),
    ("Lay on Hands", PALADIN),
    ("Divine Shield", PALADIN),
    ("Hammer of Wrath", PALADIN),
    ("Consecration", PALADIN),
    ("Avenging Wrath", PALADIN),
    ("Word of Glory", PALADIN),
    ("Hunter's Mark", HUNTER),
    ("Aspect of the Cheetah", HUNTER),
    ("Aspect of the Hawk", HUNTER),
    ("Trap Launcher", HUNTER),
    ("Freezing Trap", HUNTER),
    ("Kill Command", HUNTER),
    ("Bestial Wrath", HUNTER),
    ("Stealth", ROGUE),
    ("Sap", ROGUE),
    ("Vanish", ROGUE),
    ("Kidney Shot", ROGUE),
    ("Blade Flurry", ROGUE),
    ("Shadow Dance", ROGUE),
    ("Adrenaline Rush", ROGUE),
    ("Bear Form", DRUID),
    ("Cat Form", DRUID),
    ("Travel Form", DRUID),
    ("Moonkin Form", DRUID),
    ("Rejuvenation", DRUID),
    ("Entangling Roots", DRUID),
    ("Innervate", DRUID),
    ("Tranquility", DRUID),
    ("Lightning Bolt", SHAMAN),
    ("Chain Lightning", SHAMAN),
    ("Earth Shock", SHAMAN),
    ("Frost Shock", SHAMAN),
    ("Windfury Weapon", SHAMAN),
    ("Totemic Recall", SHAMAN),
    ("Spirit Walk", SHAMAN),
    ("Death Grip", DEATH_KNIGHT),
    ("Death Coil", DEATH_KNIGHT),
    ("Army of the Dead", DEATH_KNIGHT),
    ("Anti-Magic Shell", DEATH_KNIGHT),
    ("Unholy Frenzy", DEATH_KNIGHT),
    ("Metamorphosis", DEMON_HUNTER),
    ("Chaos Strike", DEMON_HUNTER),
    ("Fel Rush", DEMON_HUNTER),
    ("Vengeful Retreat", DEMON_HUNTER),
    ("Imprison", DEMON_HUNTER),
    ("Roll", MONK),
    ("Flying Serpent Kick", MONK),
    ("Touch of Death", MONK),
    ("Storm, Earth, and Fire", MONK),
    ("Transcendence", MONK),
    ("Living Flame", EVOKER),
    ("Disintegrate", EVOKER),
    ("Deep Breath", EVOKER),
    ("Emerald Blossom", EVOKER),
)

# Spells unique enough to settle the class on their own; checked first.
HIGH_CONFIDENCE_CLASS_SPELLS: Tuple[str, ...] = (
    "Ice Block",
    "Death Grip",
    "Lay on Hands",
    "Metamorphosis",
    "Bear Form",
    "Cat Form",
    "Moonkin Form",
    "Stealth",
    "Vanish",
    "Summon Imp",
    "Summon Voidwalker",
    "Summon Succubus",
    "Summon Felhunter",
    "Demonic Gateway",
    "Bestial Wrath",
    "Kill Command",
    "Mind Control",
    "Voidform",
    "Charge",
    "Totemic Recall",
    "Roll",
    "Flying Serpent Kick",
    "Deep Breath",
    "Disintegrate",
)

# (spell, spec, priority); higher priority means a more definitive indicator.
SPELL_TO_SPEC: Tuple[Tuple[str, str, int], ...] = (
    ("Combustion", "Fire", 100),
    ("Icy Veins", "Frost", 100),
    ("Arcane Power", "Arcane", 100),
    ("Pyroblast", "Fire", 80),
    ("Ice Lance", "Frost", 80),
    ("Arcane Barrage", "Arcane", 80),
    ("Voidform", "Shadow", 100),
    ("Shadowfiend", "Shadow", 90),
    ("Penance", "Discipline", 100),
    ("Guardian Spirit", "Holy", 100),
    ("Lightwell", "Holy", 90),
    ("Chaos Bolt", "Destruction", 100),
    ("Hand of Gul'dan", "Demonology", 100),
    ("Haunt", "Affliction", 100),
    ("Drain Soul", "Affliction", 80),
    ("Shield Slam", "Protection", 100),
    ("Recklessness", "Fury", 100),
    ("Colossus Smash", "Arms", 100),
    ("Raging Blow", "Fury", 90),
    ("Mortal Strike", "Arms", 90),
    ("Word of Glory", "Protection", 100),
    ("Hammer of Wrath", "Retribution", 100),
    ("Light of Dawn", "Holy", 100),
    ("Shield of Vengeance", "Retribution", 90),
    ("Consecration", "Protection", 80),
    ("Kill Command", "Beast Mastery", 100),
    ("Bestial Wrath", "Beast Mastery", 100),
    ("Explosive Shot", "Marksmanship", 100),
    ("Black Arrow", "Survival", 100),
    ("Carve", "Survival", 90),
    ("Shadow Dance", "Subtlety", 100),
    ("Adrenaline Rush", "Outlaw", 100),
    ("Blade Flurry", "Outlaw", 100),
    ("Envenom", "Assassination", 100),
    ("Mutilate", "Assassination", 90),
    ("Bear Form", "Guardian", 100),
    ("Cat Form", "Feral", 100),
    ("Moonkin Form", "Balance", 100),
    ("Tranquility", "Restoration", 100),
    ("Innervate", "Restoration", 90),
    ("Lava Burst", "Elemental", 100),
    ("Stormstrike", "Enhancement", 100),
    ("Riptide", "Restoration", 100),
    ("Chain Heal", "Restoration", 90),
    ("Frost Strike", "Frost", 100),
    ("Scourge Strike", "Unholy", 100),
    ("Heart Strike", "Blood", 100),
    ("Death Strike", "Blood", 90),
    ("Chaos Strike", "Havoc", 100),
    ("Soul Cleave", "Vengeance", 100),
    ("Immolation Aura", "Havoc", 90),
    ("Storm, Earth, and Fire", "Windwalker", 100),
    ("Touch of Death", "Windwalker", 100),
    ("Guard", "Brewmaster", 100),
    ("Soothing Mist", "Mistweaver", 100),
    ("Disintegrate", "Devastation", 100),
    ("Emerald Blossom", "Preservation", 100),
    ("Deep Breath", "Devastation", 90),
)

# Racial abilities, in lookup order.
ABILITY_TO_RACE: Tuple[Tuple[str, str], ...] = (
    ("Shadowmeld", "Night Elf"),
    ("Every Man for Himself", "Human"),
    ("Will to Survive", "Human"),
    ("Stoneform", "Dwarf"),
    ("Escape Artist", "Gnome"),
    ("Gift of the Naaru", "Draenei"),
    ("Darkflight", "Worgen"),
    ("Two Forms", "Worgen"),
    ("Blood Fury", "Orc"),
    ("Will of the Forsaken", "Undead"),
    ("Cannibalize", "Undead"),
    ("War Stomp", "Tauren"),
    ("Berserking", "Troll"),
    ("Arcane Torrent", "Blood Elf"),
    ("Rocket Jump", "Goblin"),
    ("Rocket Barrage", "Goblin"),
    ("Quaking Palm", "Pandaren"),
    ("Arcane Pulse", "Nightborne"),
    ("Bull Rush", "Highmountain Tauren"),
    ("Light's Judgment", "Lightforged Draenei"),
    ("Spatial Rift", "Void Elf"),
    ("Fireblood", "Dark Iron Dwarf"),
    ("Ancestral Call", "Mag'har Orc"),
    ("Haymaker", "Kul Tiran"),
    ("Regeneratin'", "Zandalari Troll"),
    ("Hyper Organic Light Originator", "Mechagnome"),
    ("Make Camp", "Vulpera"),
    ("Tail Swipe", "Dracthyr"),
)

# Pandaren and Dracthyr pick a side in game, so they decide nothing here.
RACE_TO_FACTION: Mapping[str, str] = MappingProxyType(
    {
        "human": ALLIANCE,
        "dwarf": ALLIANCE,
        "night elf": ALLIANCE,
        "gnome": ALLIANCE,
        "draenei": ALLIANCE,
        "worgen": ALLIANCE,
        "void elf": ALLIANCE,
        "lightforged draenei": ALLIANCE,
        "dark iron dwarf": ALLIANCE,
        "kul tiran": ALLIANCE,
        "mechagnome": ALLIANCE,
        "orc": HORDE,
        "undead": HORDE,
        "tauren": HORDE,
        "troll": HORDE,
        "blood elf": HORDE,
        "goblin": HORDE,
        "nightborne": HORDE,
        "highmountain tauren": HORDE,
        "mag'har orc": HORDE,
        "zandalari troll": HORDE,
        "vulpera": HORDE,
    }
)

_CLASS_BY_SPELL: Mapping[str, str] = MappingProxyType(
    {spell.lower(): cls for spell, cls in SPELL_TO_CLASS}
)


def _normalized(spells: Iterable[str]) -> frozenset:
    return frozenset(s.strip().lower() for s in spells if s and s.strip())


def faction_for_race(race: Optional[str]) -> Optional[str]:
    """Alliance/Horde for a race name; None for unknown or neutral races."""
    if not race:
        return None
    return RACE_TO_FACTION.get(race.strip().lower())


def determine_class(spells: Iterable[str]) -> Optional[str]:
    """Class implied by observed spells: high-confidence spells first, then any class spell."""
    observed = _normalized(spells)
    if not observed:
        return None
    for spell in HIGH_CONFIDENCE_CLASS_SPELLS:
        if spell.lower() in observed:
            return _CLASS_BY_SPELL[spell.lower()]
    for spell, cls in SPELL_TO_CLASS:
        if spell.lower() in observed:
            return cls
    return None


def determine_spec(spells: Iterable[str]) -> Optional[str]:
    """Spec with the highest-priority observed indicator; ties go to the alphabetically first spec."""
    observed = _normalized(spells)
    if not observed:
        return None
    best: Dict[str, int] = {}
    for spell, spec, priority in SPELL_TO_SPEC:
        if spell.lower() in observed and priority > best.get(spec, -1):
            best[spec] = priority
    if not best:
        return None
    return min(best.items(), key=lambda item: (-item[1], item[0]))[0]


def determine_race(spells: Iterable[str]) -> Optional[str]:
    observed = _normalized(spells)
    for ability, race in ABILITY_TO_RACE:
        if ability.lower() in observed:
            return race
    return None


def determine_faction(spells: Iterable[str]) -> Optional[str]:
    """Faction implied by the first racial ability (table order) that was observed."""
    observed = _normalized(spells)
    for ability, race in ABILITY_TO_RACE:
        if ability.lower() not in observed:
            continue
        faction = faction_for_race(race)
        if faction:
            return faction
    return None


# Specialization ids reported by the addon's structured export.
SPEC_ID_TO_SPEC: Mapping[int, str] = MappingProxyType(
    {
        62: "Arcane",
        63: "Fire",
        64: "Frost",
        65: "Holy",
        66: "Protection",
        70: "Retribution",
        71: "Arms",
        72: "Fury",
        73: "Protection",
        102: "Balance",
        103: "Feral",
        104: "Guardian",
        105: "Restoration",
        250: "Blood",
        251: "Frost",
        252: "Unholy",
        253: "Beast Mastery",
        254: "Marksmanship",
        255: "Survival",
        256: "Discipline",
        257: "Holy",
        258: "Shadow",
        259: "Assassination",
        260: "Outlaw",
        261: "Subtlety",
        262: "Elemental",
        263: "Enhancement",
        264: "Restoration",
        265: "Affliction",
        266: "Demonology",
        267: "Destruction",
        268: "Brewmaster",
        269: "Windwalker",
        270: "Mistweaver",
        577: "Havoc",
        581: "Vengeance",
        1467: "Devastation",
        1468: "Preservation",
        1473: "Augmentation",
    }
)


def spec_for_id(spec_id: Optional[int]) -> Optional[str]:
    if spec_id is None:
        return None
    return SPEC_ID_TO_SPEC.get(spec_id)


# Class ids of the structured export; used when the class name is blank.
CLASS_ID_TO_CLASS: Mapping[int, str] = MappingProxyType(
    {
        1: "Warrior",
        2: "Paladin",
        3: "Hunter",
        4: "Rogue",
        5: "Priest",
        6: "Death Knight",
        7: "Shaman",
        8: "Mage",
        9: "Warlock",
        10: "Monk",
        11: "Druid",
        12: "Demon Hunter",
        13: "Evoker",
    }
)


def class_for_id(class_id: Optional[int]) -> Optional[str]:
    if class_id is None:
        return None
    return CLASS_ID_TO_CLASS.get(class_id)
