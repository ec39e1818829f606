"""
Static enemy catalog and level-banded enemy selection.
"""
import logging
import random
from dataclasses import dataclass
from typing import Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnemyArchetype:
    """Immutable enemy template. Battles copy its health into a combatant."""

    id: int
    name: str
    level: int
    health: int
    attack: int
    defense: int
    xp: int
    gold: int
    attack_phrases: Tuple[str, ...]
    death_phrase: str


ENEMY_TYPES = (
    EnemyArchetype(
        id=1,
        name="Goblin",
        level=1,
        health=30,
        attack=5,
        defense=2,
        xp=15,
        gold=10,
        attack_phrases=("swings a rusty dagger", "throws a rock", "scratches at you"),
        death_phrase="collapses in a heap of green limbs",
    ),
    EnemyArchetype(
        id=2,
        name="Orc",
        level=3,
        health=60,
        attack=8,
        defense=4,
        xp=30,
        gold=20,
        attack_phrases=("swings a crude axe", "charges with a roar", "punches wildly"),
        death_phrase="lets out a final bellow before falling",
    ),
    EnemyArchetype(
        id=3,
        name="Troll",
        level=5,
        health=100,
        attack=12,
        defense=6,
        xp=50,
        gold=35,
        attack_phrases=("swings a massive club", "regenerates some health", "stomps the ground"),
        death_phrase="slowly crumbles into dust",
    ),
    EnemyArchetype(
        id=4,
        name="Dragon",
        level=10,
        health=200,
        attack=20,
        defense=10,
        xp=100,
        gold=100,
        attack_phrases=("breathes a cone of fire", "swipes with razor claws", "tail whips you"),
        death_phrase="lets out a final roar before collapsing",
    ),
)


def enemy_level_band(level: int) -> Tuple[int, int]:
    """Return the (min, max) enemy level range for a character of the given level."""
    return max(1, level - 2), level + 2


def selection_weight(enemy: EnemyArchetype) -> int:
    # Low-level enemies show up more often; the bias flattens out from level 4.
    return max(1, 5 - enemy.level)


def select_enemy(min_level: int, max_level: int,
                 catalog: Sequence[EnemyArchetype] = ENEMY_TYPES, rng=random) -> EnemyArchetype:
    """
    Pick a random enemy whose level falls inside [min_level, max_level].

    Args:
        min_level: Lowest acceptable enemy level
        max_level: Highest acceptable enemy level
        catalog: Enemy archetypes to choose from
        rng: Source of randomness (random module or random.Random)

    Returns:
        EnemyArchetype: The chosen archetype, or the first catalog entry if none qualify
    """
    eligible = [enemy for enemy in catalog if min_level <= enemy.level <= max_level]

    if not eligible:
        logger.debug(f"No enemies between levels {min_level}-{max_level}, using {catalog[0].name}")
        return catalog[0]

    # Replicate each archetype by its weight, then draw uniformly
    pool = [enemy for enemy in eligible for _ in range(selection_weight(enemy))]
    return pool[int(rng.random() * len(pool))]
