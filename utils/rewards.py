"""
Battle rewards and the experience curve.
"""
import math
from dataclasses import dataclass

from config import (
    BASE_XP, XP_PER_LEVEL, STAT_POINTS_PER_LEVEL,
    DEFEAT_XP_SHARE, ROUND_CAP_XP_SHARE,
)


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp: int
    levels_gained: int


@dataclass(frozen=True)
class SettlementResult:
    """What a grant of experience did to a character."""

    leveled_up: bool
    new_level: int
    levels_gained: int
    remaining_xp: int
    stat_points_granted: int
    stat_points: int
    gold: int = 0
    health: int = 0


def xp_to_next_level(level: int) -> int:
    """XP needed to advance from the given level to the next."""
    return BASE_XP + level * XP_PER_LEVEL


def apply_xp(level: int, xp: int, amount: int) -> LevelProgress:
    """
    Add experience and roll over as many level thresholds as it covers.

    Args:
        level: Current level
        xp: XP already banked toward the next level
        amount: XP being granted

    Returns:
        LevelProgress: The new level, the XP left over and how many levels were gained
    """
    xp += amount
    gained = 0

    while xp >= xp_to_next_level(level):
        xp -= xp_to_next_level(level)
        level += 1
        gained += 1

    return LevelProgress(level=level, xp=xp, levels_gained=gained)


def stat_points_for(levels_gained: int) -> int:
    return levels_gained * STAT_POINTS_PER_LEVEL


def victory_rewards(enemy):
    return enemy.xp, enemy.gold


def defeat_rewards(enemy):
    # A consolation trickle of XP, never gold
    return math.floor(enemy.xp * DEFEAT_XP_SHARE), 0


def round_cap_rewards(enemy, rounds_fought: int, max_rounds: int):
    share = ROUND_CAP_XP_SHARE * min(1, rounds_fought / max_rounds)
    return math.floor(enemy.xp * share), 0
