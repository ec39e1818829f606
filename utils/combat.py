"""
Combat math: combatant snapshots and the attack roll.

Players and enemies are separate combatant types. Each one states its own
offense, defense, critical and dodge formulas, so the asymmetries between
the two sides (enemy jitter, player-only dodge) live in one place each.
"""
import math
import random
from dataclasses import dataclass
from enum import Enum

from config import (
    PLAYER_STRENGTH_ATTACK, PLAYER_DEXTERITY_ATTACK,
    PLAYER_CONSTITUTION_DEFENSE, PLAYER_DEXTERITY_DEFENSE,
    ENEMY_ATTACK_VARIANCE, ENEMY_DEFENSE_VARIANCE,
    BASE_CRIT_CHANCE, CRIT_PER_DEXTERITY, DODGE_PER_AGILITY,
    CRIT_MULTIPLIER, DEFENSE_MITIGATION,
)
from utils.enemies import EnemyArchetype


class Role(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class PlayerCombatant:
    """Battle-local working copy of a character record."""

    character_id: int
    name: str
    strength: int
    dexterity: int
    agility: int
    constitution: int
    wisdom: int
    intelligence: int
    health: int
    max_health: int
    mana: int
    max_mana: int
    weapon_bonus: float = 0
    armor_bonus: float = 0

    role = Role.PLAYER

    @classmethod
    def from_character(cls, character: dict) -> "PlayerCombatant":
        return cls(
            character_id=character["id"],
            name=character["name"],
            strength=character["strength"],
            dexterity=character["dexterity"],
            agility=character["agility"],
            constitution=character["constitution"],
            wisdom=character["wisdom"],
            intelligence=character["intelligence"],
            health=character["health"],
            max_health=character["max_health"],
            mana=character["mana"],
            max_mana=character["max_mana"],
            weapon_bonus=character.get("weapon_bonus", 0),
            armor_bonus=character.get("armor_bonus", 0),
        )

    def offense(self, rng) -> float:
        return (self.strength * PLAYER_STRENGTH_ATTACK
                + self.dexterity * PLAYER_DEXTERITY_ATTACK
                + self.weapon_bonus)

    def defense(self, rng) -> float:
        return (self.constitution * PLAYER_CONSTITUTION_DEFENSE
                + self.dexterity * PLAYER_DEXTERITY_DEFENSE
                + self.armor_bonus)

    def crit_chance(self) -> float:
        return BASE_CRIT_CHANCE + self.dexterity * CRIT_PER_DEXTERITY

    def dodge_chance(self) -> float:
        return self.agility * DODGE_PER_AGILITY


@dataclass
class EnemyCombatant:
    """Battle instance of an enemy archetype with its own health pool."""

    archetype: EnemyArchetype
    health: int

    role = Role.ENEMY

    @classmethod
    def from_archetype(cls, archetype: EnemyArchetype) -> "EnemyCombatant":
        return cls(archetype=archetype, health=archetype.health)

    @property
    def name(self) -> str:
        return self.archetype.name

    @property
    def max_health(self) -> int:
        return self.archetype.health

    def offense(self, rng) -> float:
        return self.archetype.attack * rng.uniform(*ENEMY_ATTACK_VARIANCE)

    def defense(self, rng) -> float:
        return self.archetype.defense * rng.uniform(*ENEMY_DEFENSE_VARIANCE)

    def crit_chance(self) -> float:
        return BASE_CRIT_CHANCE

    def dodge_chance(self) -> float:
        # Enemies never dodge
        return 0.0


@dataclass(frozen=True)
class AttackResult:
    damage: int
    is_critical: bool
    was_dodged: bool


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_damage(offense: float, defense: float, is_critical: bool) -> int:
    """Apply the critical multiplier and defense mitigation. Never below 1."""
    multiplier = CRIT_MULTIPLIER if is_critical else 1
    return round_half_up(max(1, offense * multiplier - defense * DEFENSE_MITIGATION))


def compute_attack(attacker, defender, rng=random) -> AttackResult:
    """
    Roll one attack from attacker against defender.

    Args:
        attacker: PlayerCombatant or EnemyCombatant
        defender: PlayerCombatant or EnemyCombatant
        rng: Source of randomness (random module or random.Random)

    Returns:
        AttackResult: damage, critical flag and dodge flag. When was_dodged is
        set the damage value must be ignored by the caller.
    """
    offense = attacker.offense(rng)
    defense = defender.defense(rng)

    is_critical = rng.random() < attacker.crit_chance()
    damage = compute_damage(offense, defense, is_critical)

    # Only player defenders get a dodge roll
    was_dodged = defender.role is Role.PLAYER and rng.random() < defender.dodge_chance()

    return AttackResult(damage=damage, is_critical=is_critical, was_dodged=was_dodged)
