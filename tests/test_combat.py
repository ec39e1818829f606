import random

from tests.conftest import ScriptedRandom
from utils.combat import (
    EnemyCombatant, PlayerCombatant, Role, compute_attack, compute_damage, round_half_up,
)
from utils.enemies import ENEMY_TYPES

GOBLIN, ORC, TROLL, DRAGON = ENEMY_TYPES


def make_player(**overrides):
    stats = dict(
        id=1, name="Aria", strength=9, dexterity=4, agility=4, constitution=7,
        wisdom=3, intelligence=3, health=154, max_health=154, mana=65, max_mana=65,
    )
    stats.update(overrides)
    return PlayerCombatant.from_character(stats)


def test_damage_is_never_below_one():
    assert compute_damage(1, 100, False) == 1
    assert compute_damage(0, 0, True) == 1


def test_damage_rounds_halves_up():
    assert compute_damage(10, 5, False) == 7  # 10 - 3.0 = 7
    assert compute_damage(6.5, 0, False) == 7
    assert compute_damage(6.4, 0, False) == 6


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_critical_multiplies_offense_only():
    assert compute_damage(10, 5, True) == 12  # 15 - 3.0


def test_player_attack_against_goblin():
    player = make_player()
    enemy = EnemyCombatant.from_archetype(GOBLIN)

    result = compute_attack(player, enemy, ScriptedRandom())

    # 9*0.7 + 4*0.3 = 7.5 offense against 2*0.6 = 1.2 mitigation
    assert result.damage == 6
    assert not result.is_critical
    assert not result.was_dodged


def test_player_critical_hit():
    player = make_player()
    enemy = EnemyCombatant.from_archetype(GOBLIN)

    result = compute_attack(player, enemy, ScriptedRandom([0.0]))

    # 7.5 * 1.5 - 1.2 = 10.05
    assert result.is_critical
    assert result.damage == 10


def test_enemies_never_dodge():
    player = make_player()
    enemy = EnemyCombatant.from_archetype(DRAGON)
    rng = ScriptedRandom([0.99], default=0.0)

    result = compute_attack(player, enemy, rng)

    assert not result.was_dodged
    # Crit roll only, no dodge roll for an enemy defender
    assert rng.calls == 1


def test_player_can_dodge():
    player = make_player(agility=20)
    enemy = EnemyCombatant.from_archetype(ORC)

    result = compute_attack(enemy, player, ScriptedRandom([0.99, 0.05]))

    assert result.was_dodged


def test_enemy_attack_jitter_bounds():
    player = make_player()
    enemy = EnemyCombatant.from_archetype(TROLL)
    rng = random.Random(1234)

    # Troll attack 12 * [0.9, 1.1] against player defense 5.0, crit at most x1.5
    for _ in range(200):
        result = compute_attack(enemy, player, rng)
        if result.was_dodged:
            continue
        assert 8 <= result.damage <= 17


def test_combatant_roles():
    assert make_player().role is Role.PLAYER
    enemy = EnemyCombatant.from_archetype(GOBLIN)
    assert enemy.role is Role.ENEMY
    assert enemy.name == "Goblin"
    assert enemy.max_health == 30
    assert enemy.dodge_chance() == 0.0


def test_player_crit_and_dodge_chances():
    player = make_player(dexterity=10, agility=10)
    assert abs(player.crit_chance() - 0.10) < 1e-9
    assert abs(player.dodge_chance() - 0.05) < 1e-9
