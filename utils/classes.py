"""
Playable classes and races, and the derived stats they produce.
"""
from typing import Dict, Optional

from config import (
    BASE_HEALTH, HEALTH_PER_VITALITY, HEALTH_PER_CONSTITUTION,
    BASE_MANA, MANA_PER_INTELLIGENCE, MANA_PER_WISDOM, STAT_NAMES,
)

CLASSES = {
    "warrior": {
        "name": "Warrior",
        "emoji": "🛡️",
        "description": "Strong and durable frontline fighters.",
        "base": {
            "strength": 8, "agility": 3, "intelligence": 2, "vitality": 7, "durability": 6,
            "charisma": 2, "dexterity": 3, "constitution": 6, "wisdom": 2,
        },
    },
    "mage": {
        "name": "Mage",
        "emoji": "🪄",
        "description": "Masters of arcane and elemental power.",
        "base": {
            "strength": 1, "agility": 3, "intelligence": 8, "vitality": 3, "durability": 2,
            "charisma": 4, "dexterity": 3, "constitution": 2, "wisdom": 7,
        },
    },
    "rogue": {
        "name": "Rogue",
        "emoji": "🗡️",
        "description": "Quick blades that strike from the shadows.",
        "base": {
            "strength": 5, "agility": 8, "intelligence": 3, "vitality": 4, "durability": 3,
            "charisma": 3, "dexterity": 7, "constitution": 3, "wisdom": 2,
        },
    },
    "ranged": {
        "name": "Ranger",
        "emoji": "🏹",
        "description": "Sharp-eyed archers who keep their distance.",
        "base": {
            "strength": 4, "agility": 6, "intelligence": 3, "vitality": 4, "durability": 3,
            "charisma": 3, "dexterity": 8, "constitution": 3, "wisdom": 4,
        },
    },
}

RACES = {
    "human": {
        "name": "Human",
        "emoji": "🧍",
        "description": "Balanced and adaptable.",
        "mods": {stat: 1 for stat in STAT_NAMES},
    },
    "elf": {
        "name": "Elf",
        "emoji": "🌲",
        "description": "Graceful and wise, but physically frail.",
        "mods": {
            "strength": -1, "agility": 3, "intelligence": 2, "vitality": 1, "durability": 0,
            "charisma": 2, "dexterity": 2, "constitution": 0, "wisdom": 3,
        },
    },
}


def get_class(class_id: str) -> Optional[dict]:
    return CLASSES.get(class_id)


def get_race(race_id: str) -> Optional[dict]:
    return RACES.get(race_id)


def build_character_stats(class_id: str, race_id: str) -> Dict[str, int]:
    """
    Combine a class's base attributes with a race's modifiers.

    Args:
        class_id: Key into CLASSES
        race_id: Key into RACES

    Returns:
        dict: The nine attributes plus health, max_health, mana and max_mana

    Raises:
        ValueError: If the class or race is unknown
    """
    class_data = get_class(class_id)
    race_data = get_race(race_id)
    if class_data is None or race_data is None:
        raise ValueError(f"Invalid class ({class_id}) or race ({race_id})")

    stats = {
        stat: class_data["base"][stat] + race_data["mods"].get(stat, 0)
        for stat in STAT_NAMES
    }

    max_health = max_health_for(stats["vitality"], stats["constitution"])
    max_mana = max_mana_for(stats["intelligence"], stats["wisdom"])
    stats.update(health=max_health, max_health=max_health, mana=max_mana, max_mana=max_mana)
    return stats


def max_health_for(vitality: int, constitution: int) -> int:
    return BASE_HEALTH + vitality * HEALTH_PER_VITALITY + constitution * HEALTH_PER_CONSTITUTION


def max_mana_for(intelligence: int, wisdom: int) -> int:
    return BASE_MANA + intelligence * MANA_PER_INTELLIGENCE + wisdom * MANA_PER_WISDOM
