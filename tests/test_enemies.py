from collections import Counter
from dataclasses import FrozenInstanceError

import pytest

from tests.conftest import ScriptedRandom
from utils.enemies import ENEMY_TYPES, enemy_level_band, select_enemy, selection_weight


def test_level_band_floors_at_one():
    assert enemy_level_band(1) == (1, 3)
    assert enemy_level_band(2) == (1, 4)
    assert enemy_level_band(7) == (5, 9)


def test_selection_weights_favor_low_levels():
    weights = {enemy.name: selection_weight(enemy) for enemy in ENEMY_TYPES}
    assert weights == {"Goblin": 4, "Orc": 2, "Troll": 1, "Dragon": 1}


def test_select_enemy_stays_inside_band():
    for draw in (0.0, 0.3, 0.6, 0.99):
        enemy = select_enemy(1, 3, rng=ScriptedRandom([draw]))
        assert enemy.name in ("Goblin", "Orc")


def test_select_enemy_uses_weighted_pool():
    # Goblin x4 then Orc x2
    picks = [select_enemy(1, 3, rng=ScriptedRandom([(i + 0.5) / 6])).name for i in range(6)]
    assert Counter(picks) == {"Goblin": 4, "Orc": 2}


def test_select_enemy_falls_back_to_first_entry():
    enemy = select_enemy(50, 60, rng=ScriptedRandom())
    assert enemy is ENEMY_TYPES[0]


def test_catalog_entries_are_immutable():
    goblin = ENEMY_TYPES[0]
    with pytest.raises(FrozenInstanceError):
        goblin.health = 1
    assert goblin.health == 30
