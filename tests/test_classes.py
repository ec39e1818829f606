import pytest

from config import STAT_NAMES
from utils.classes import CLASSES, RACES, build_character_stats, max_health_for, max_mana_for


def test_human_warrior_stats():
    stats = build_character_stats("warrior", "human")
    assert stats["strength"] == 9
    assert stats["vitality"] == 8
    assert stats["max_health"] == stats["health"] == 154
    assert stats["max_mana"] == stats["mana"] == 65


def test_every_combination_has_all_attributes():
    for class_id in CLASSES:
        for race_id in RACES:
            stats = build_character_stats(class_id, race_id)
            assert all(stat in stats for stat in STAT_NAMES)
            assert stats["max_health"] == max_health_for(stats["vitality"], stats["constitution"])
            assert stats["max_mana"] == max_mana_for(stats["intelligence"], stats["wisdom"])


def test_unknown_class_or_race():
    with pytest.raises(ValueError):
        build_character_stats("bard", "human")
    with pytest.raises(ValueError):
        build_character_stats("mage", "dwarf")
