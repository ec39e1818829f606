import asyncio
import copy
import logging
import os
import pickle
from contextlib import asynccontextmanager
from pathlib import Path

from config import (
    DATABASE_PATH, STAT_NAMES, LEVEL_UP_FULL_HEAL,
    HEALTH_PER_VITALITY, HEALTH_PER_CONSTITUTION,
    MANA_PER_INTELLIGENCE, MANA_PER_WISDOM,
)
from utils.classes import build_character_stats
from utils.errors import CharacterNotFound, StorageFailure
from utils.rewards import SettlementResult, apply_xp, stat_points_for

logger = logging.getLogger(__name__)

# Raising one of these stats also raises a derived pool by the given amount per point
DERIVED_STAT_GAINS = {
    "vitality": ("health", HEALTH_PER_VITALITY),
    "constitution": ("health", HEALTH_PER_CONSTITUTION),
    "intelligence": ("mana", MANA_PER_INTELLIGENCE),
    "wisdom": ("mana", MANA_PER_WISDOM),
}


def empty_database():
    return {
        "characters": {},
        "skills": {},
        "character_skills": {},
        "next_character_id": 1,
    }


class DatabaseManager:
    """
    Manages persistence of characters, skills and learned skills.
    Uses pickle for data storage between sessions.

    All writes go through transaction(): the data is snapshotted first and
    restored if anything inside the block (including the save) fails.
    """

    def __init__(self, db_path=None):
        """Initialize the database manager."""
        self.db_path = Path(db_path or DATABASE_PATH)
        self.data = empty_database()
        self._lock = asyncio.Lock()
        self._owner = None

    async def initialize(self):
        """Initialize the database and load existing data if available."""
        if self.db_path.exists():
            try:
                with open(self.db_path, 'rb') as f:
                    self.data = pickle.load(f)
            except (OSError, pickle.UnpicklingError, EOFError) as e:
                raise StorageFailure(f"Could not load database from {self.db_path}") from e
            logger.info(f"Loaded database with {len(self.data['characters'])} characters")
        else:
            logger.info("No existing database found. Creating new database.")
            await self.save_data()

    async def save_data(self):
        """Save the current data to disk, replacing the old file only once the new one is complete."""
        tmp_path = self.db_path.with_name(self.db_path.name + ".tmp")
        try:
            with open(tmp_path, 'wb') as f:
                pickle.dump(self.data, f)
            os.replace(tmp_path, self.db_path)
        except (OSError, pickle.PicklingError) as e:
            logger.error(f"Error saving database: {e}")
            raise StorageFailure("Could not save database") from e
        logger.debug("Database saved successfully")

    @asynccontextmanager
    async def transaction(self):
        """
        Run a block of writes atomically.

        A transaction opened by a task that already holds one joins the outer
        transaction; only the outermost one commits or rolls back.
        """
        task = asyncio.current_task()
        if self._owner is task:
            yield
            return

        async with self._lock:
            self._owner = task
            snapshot = copy.deepcopy(self.data)
            try:
                yield
                await self.save_data()
            except BaseException:
                self.data = snapshot
                raise
            finally:
                self._owner = None

    # Characters

    def _character(self, user_id):
        user_id = str(user_id)
        if user_id not in self.data["characters"]:
            raise CharacterNotFound(user_id)
        return self.data["characters"][user_id]

    def _character_by_id(self, character_id):
        for character in self.data["characters"].values():
            if character["id"] == character_id:
                return character
        raise CharacterNotFound(character_id)

    async def get_character(self, user_id):
        """Get a copy of a user's character, or None if they have not created one."""
        character = self.data["characters"].get(str(user_id))
        return dict(character) if character else None

    async def get_character_by_id(self, character_id):
        """Get a copy of a character by its character ID, or None."""
        try:
            return dict(self._character_by_id(character_id))
        except CharacterNotFound:
            return None

    async def get_all_characters(self):
        """Get copies of all characters keyed by user ID."""
        return {user_id: dict(character) for user_id, character in self.data["characters"].items()}

    async def create_character(self, user_id, name, gender, race_id, class_id):
        """
        Create a new level 1 character for a user.

        Raises:
            ValueError: If the user already has a character or the class/race is unknown
        """
        user_id = str(user_id)
        stats = build_character_stats(class_id, race_id)

        async with self.transaction():
            if user_id in self.data["characters"]:
                raise ValueError("You already have a character!")

            character_id = self.data["next_character_id"]
            self.data["next_character_id"] = character_id + 1

            self.data["characters"][user_id] = {
                "id": character_id,
                "user_id": user_id,
                "name": name,
                "gender": gender,
                "race_id": race_id,
                "class_id": class_id,
                "level": 1,
                "xp": 0,
                "gold": 0,
                "stat_points": 0,
                **stats,
            }

        logger.info(f"Created character {name} (ID: {character_id}) for user {user_id}")
        return await self.get_character(user_id)

    async def update_character_stat(self, user_id, stat, value):
        """Set a specific field on a user's character."""
        async with self.transaction():
            character = self._character(user_id)
            character[stat] = value
        return dict(character)

    async def adjust_character_stat(self, user_id, stat, delta, minimum=None, maximum=None):
        """Add delta to a field, clamped to the optional bounds. Returns the new value."""
        async with self.transaction():
            character = self._character(user_id)
            value = character[stat] + delta
            if minimum is not None:
                value = max(minimum, value)
            if maximum is not None:
                value = min(maximum, value)
            character[stat] = value
        return value

    async def spend_mana(self, character_id, cost):
        """
        Decrement a character's mana by cost if they can afford it.

        Returns:
            int or None: Remaining mana, or None if they could not afford it
        """
        async with self.transaction():
            character = self._character_by_id(character_id)
            if character["mana"] < cost:
                return None
            character["mana"] -= cost
            return character["mana"]

    async def upgrade_character_stat(self, user_id, stat, amount=1):
        """
        Spend stat points to raise one attribute.

        Returns:
            dict: success flag plus old/new values and remaining points, or an error message
        """
        if stat not in STAT_NAMES:
            return {"success": False, "error": f"Invalid stat name: {stat}"}
        if amount < 1:
            return {"success": False, "error": "Amount must be at least 1"}

        async with self.transaction():
            character = self._character(user_id)

            if character["stat_points"] < amount:
                return {
                    "success": False,
                    "error": f"Not enough stat points (have {character['stat_points']}, need {amount})",
                }

            old_value = character[stat]
            character[stat] += amount
            character["stat_points"] -= amount

            if stat in DERIVED_STAT_GAINS:
                pool, per_point = DERIVED_STAT_GAINS[stat]
                character[f"max_{pool}"] += amount * per_point
                character[pool] += amount * per_point

        return {
            "success": True,
            "old_value": old_value,
            "new_value": character[stat],
            "remaining_points": character["stat_points"],
        }

    async def restore_character(self, user_id):
        """Fully restore a character's health and mana."""
        async with self.transaction():
            character = self._character(user_id)
            character["health"] = character["max_health"]
            character["mana"] = character["max_mana"]
        return dict(character)

    async def regenerate_all(self, stat, amount):
        """Add amount to stat for every character, capped at its max. Returns how many changed."""
        changed = 0
        async with self.transaction():
            for character in self.data["characters"].values():
                cap = character[f"max_{stat}"]
                if character[stat] < cap:
                    character[stat] = min(character[stat] + amount, cap)
                    changed += 1
        return changed

    # Experience and settlement

    def _grant_xp(self, character, amount):
        progress = apply_xp(character["level"], character["xp"], amount)
        points = stat_points_for(progress.levels_gained)

        character["xp"] = progress.xp
        character["level"] = progress.level
        character["stat_points"] += points

        if progress.levels_gained and LEVEL_UP_FULL_HEAL:
            character["health"] = character["max_health"]

        if progress.levels_gained:
            logger.info(f"Character {character['id']} reached level {progress.level}")

        return SettlementResult(
            leveled_up=progress.levels_gained > 0,
            new_level=progress.level,
            levels_gained=progress.levels_gained,
            remaining_xp=progress.xp,
            stat_points_granted=points,
            stat_points=character["stat_points"],
            gold=character["gold"],
            health=character["health"],
        )

    async def add_xp(self, user_id, amount):
        """
        Grant experience to a user's character, applying any level-ups.

        Raises:
            CharacterNotFound: If the user has no character
        """
        async with self.transaction():
            character = self._character(user_id)
            return self._grant_xp(character, amount)

    async def settle_battle(self, user_id, final_health, xp, gold):
        """Write a finished battle's health, gold and experience back in one step."""
        async with self.transaction():
            character = self._character(user_id)
            character["health"] = max(0, min(final_health, character["max_health"]))
            character["gold"] += gold
            return self._grant_xp(character, xp)

    # Skills

    async def add_skill(self, skill):
        """Store an authored skill definition."""
        async with self.transaction():
            self.data["skills"][skill.id] = skill

    async def get_skill(self, skill_id):
        return self.data["skills"].get(skill_id)

    async def get_class_skills(self, class_id):
        """Authored skills for a class, lowest level requirement first."""
        skills = [skill for skill in self.data["skills"].values() if skill.class_id == class_id]
        return sorted(skills, key=lambda skill: skill.level_required)

    async def get_character_skill_rows(self, character_id):
        """Learned-skill rows for a character as {skill_id: {unlocked, skill_level}}."""
        rows = self.data["character_skills"].get(character_id, {})
        return {skill_id: dict(row) for skill_id, row in rows.items()}

    async def has_character_skill(self, character_id, skill_id):
        return skill_id in self.data["character_skills"].get(character_id, {})

    async def add_character_skill(self, character_id, skill_id):
        """
        Record that a character learned a skill.

        Raises:
            ValueError: If the pair already exists
        """
        async with self.transaction():
            rows = self.data["character_skills"].setdefault(character_id, {})
            if skill_id in rows:
                raise ValueError(f"Character {character_id} already knows skill {skill_id}")
            rows[skill_id] = {"unlocked": True, "skill_level": 1}

    async def count_learned_skills(self):
        return sum(len(rows) for rows in self.data["character_skills"].values())
