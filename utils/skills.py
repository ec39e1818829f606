"""
Skill definitions, learning, and in-battle skill effects.
"""
import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional

from config import (
    SKILL_STRENGTH_SCALING, SKILL_DEXTERITY_SCALING, SKILL_DAMAGE_VARIANCE,
    REGENERATION_SKILL_ID, REGENERATION_HEAL_SHARE,
)
from utils.combat import round_half_up
from utils.errors import SkillFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Skill:
    id: int
    name: str
    description: str
    class_id: str
    level_required: int = 1
    mana_cost: int = 0
    cooldown: int = 0
    is_passive: bool = False
    unlocked: bool = False
    skill_level: Optional[int] = None


@dataclass(frozen=True)
class SkillResult:
    success: bool
    message: str
    failure: Optional[SkillFailure] = None
    skill: Optional[Skill] = None
    damage: int = 0
    healing: int = 0
    remaining_mana: Optional[int] = None


FALLBACK_SKILLS = {
    "warrior": (
        Skill(101, "Provoking Shout", "Taunts enemies to attack you for 3 rounds (+50% threat generation)",
              "warrior", level_required=1, mana_cost=10, cooldown=8),
        Skill(102, "Regeneration", "Heals 15% of max HP over 10 seconds",
              "warrior", level_required=3, mana_cost=15, cooldown=20),
    ),
    "ranged": (
        Skill(201, "Explosive Arrow", "Shoots an arrow that explodes on impact (150% damage in AoE)",
              "ranged", level_required=1, mana_cost=20, cooldown=12),
    ),
    "rogue": (
        Skill(301, "Backstab", "Deals 250% damage when attacking from behind",
              "rogue", level_required=1, mana_cost=0, cooldown=0, is_passive=True),
    ),
    "mage": (
        Skill(401, "Arcane Bolt", "Hurls a bolt of raw arcane energy",
              "mage", level_required=1, mana_cost=12, cooldown=4),
        Skill(402, "Frost Nova", "Blasts the area with freezing air",
              "mage", level_required=4, mana_cost=25, cooldown=15),
    ),
}


def find_fallback_skill(skill_id, class_id=None) -> Optional[Skill]:
    for key, skills in FALLBACK_SKILLS.items():
        if class_id and key != class_id:
            continue
        for skill in skills:
            if skill.id == skill_id:
                return skill
    return None


def roll_skill_damage(character: dict, rng=random) -> int:
    """Generic active-skill damage: (STR*0.5 + DEX*0.3) scaled by a 75-125% roll."""
    base = (character["strength"] * SKILL_STRENGTH_SCALING
            + character["dexterity"] * SKILL_DEXTERITY_SCALING)
    return max(1, round_half_up(base * rng.uniform(*SKILL_DAMAGE_VARIANCE)))


def regeneration_amount(character: dict) -> int:
    return int(character["max_health"] * REGENERATION_HEAL_SHARE)


class SkillHandler:
    """
    Resolves which skills a character can learn or use, and applies them.
    Game-logic failures come back as SkillResult values, never as exceptions.
    """

    def __init__(self, db_manager, rng=random):
        self.db = db_manager
        self.rng = rng

    async def get_skill(self, skill_id, class_id=None) -> Optional[Skill]:
        """Look up an authored skill, falling back to the hardcoded kits."""
        skill = await self.db.get_skill(skill_id)
        if skill is not None and (class_id is None or skill.class_id == class_id):
            return skill
        return find_fallback_skill(skill_id, class_id)

    async def skills_for_class(self, class_id) -> List[Skill]:
        """Skills a class can learn, lowest level requirement first."""
        skills = await self.db.get_class_skills(class_id)
        if skills:
            return skills
        return sorted(FALLBACK_SKILLS.get(class_id, ()), key=lambda skill: skill.level_required)

    async def learned_skills(self, character_id) -> List[Skill]:
        """Skills a character has unlocked, annotated with their skill level."""
        rows = await self.db.get_character_skill_rows(character_id)
        learned = []
        for skill_id, row in rows.items():
            skill = await self.get_skill(skill_id)
            if skill is None:
                logger.warning(f"Character {character_id} knows unknown skill {skill_id}")
                continue
            learned.append(replace(skill, unlocked=row["unlocked"], skill_level=row["skill_level"]))
        return sorted(learned, key=lambda skill: skill.level_required)

    async def active_skills(self, character_id) -> List[Skill]:
        """Learned skills that can be picked as a battle action."""
        return [skill for skill in await self.learned_skills(character_id)
                if skill.unlocked and not skill.is_passive]

    async def learn_skill(self, character_id, skill_id) -> SkillResult:
        """
        Teach a character a skill from their class's list.

        The existence check and the insert happen in one transaction, so two
        concurrent calls for the same pair record it once.
        """
        async with self.db.transaction():
            character = await self.db.get_character_by_id(character_id)
            if character is None:
                return SkillResult(False, "Character not found", SkillFailure.CHARACTER_NOT_FOUND)

            skill = await self.get_skill(skill_id, character["class_id"])
            if skill is None:
                return SkillResult(False, "Skill not available for your class", SkillFailure.UNKNOWN_SKILL)

            if await self.db.has_character_skill(character_id, skill_id):
                return SkillResult(False, f"You already know {skill.name}", SkillFailure.ALREADY_KNOWN, skill)

            if character["level"] < skill.level_required:
                return SkillResult(
                    False,
                    f"Requires level {skill.level_required} (you're level {character['level']})",
                    SkillFailure.LEVEL_TOO_LOW,
                    skill,
                )

            await self.db.add_character_skill(character_id, skill_id)

        logger.info(f"Character {character_id} learned {skill.name} ({skill_id})")
        return SkillResult(True, f"🎉 Successfully learned: {skill.name}", skill=skill)

    async def use_skill(self, character_id, skill_id, target=None) -> SkillResult:
        """
        Invoke a learned active skill.

        Mana is deducted from the stored character straight away. The caller
        applies the returned damage or healing to its own battle state.
        """
        rows = await self.db.get_character_skill_rows(character_id)
        if skill_id not in rows or not rows[skill_id]["unlocked"]:
            return SkillResult(False, "You haven't learned that skill", SkillFailure.NOT_LEARNED)

        skill = await self.get_skill(skill_id)
        if skill is None:
            return SkillResult(False, "Unknown skill", SkillFailure.UNKNOWN_SKILL)

        if skill.is_passive:
            return SkillResult(False, f"{skill.name} is always active", SkillFailure.PASSIVE, skill)

        async with self.db.transaction():
            character = await self.db.get_character_by_id(character_id)
            if character is None:
                return SkillResult(False, "Character not found", SkillFailure.CHARACTER_NOT_FOUND, skill)

            remaining = await self.db.spend_mana(character_id, skill.mana_cost)
            if remaining is None:
                return SkillResult(
                    False,
                    f"Not enough mana ({character['mana']}/{skill.mana_cost} MP)",
                    SkillFailure.INSUFFICIENT_MANA,
                    skill,
                    remaining_mana=character["mana"],
                )

        if skill.id == REGENERATION_SKILL_ID:
            healing = regeneration_amount(character)
            return SkillResult(True, f"restores {healing} HP", skill=skill,
                               healing=healing, remaining_mana=remaining)

        damage = roll_skill_damage(character, self.rng)
        target_name = getattr(target, "name", "the target")
        return SkillResult(True, f"hits {target_name} for {damage} damage", skill=skill,
                           damage=damage, remaining_mana=remaining)
