"""
Error types shared by the game logic and the command layer.
"""
from enum import Enum


class RPGError(Exception):
    """Base class for all bot errors."""


class CharacterNotFound(RPGError):
    """Raised when a character record does not exist."""

    def __init__(self, key):
        super().__init__(f"Character {key} not found")
        self.key = key


class StorageFailure(RPGError):
    """Raised when a persistence round-trip fails."""


class PresentationFailure(RPGError):
    """Raised when the battle message or its buttons can no longer be shown."""


class BattleInterrupted(RPGError):
    """
    Raised when a battle is aborted by an infrastructure failure.
    Carries the battle log up to the point of failure.
    """

    def __init__(self, battle_log, message="Battle interrupted"):
        super().__init__(message)
        self.battle_log = list(battle_log)


class InvalidTransition(RPGError):
    """Raised when the battle state machine receives an event it cannot handle."""


class SkillFailure(Enum):
    CHARACTER_NOT_FOUND = "character_not_found"
    UNKNOWN_SKILL = "unknown_skill"
    ALREADY_KNOWN = "already_known"
    LEVEL_TOO_LOW = "level_too_low"
    NOT_LEARNED = "not_learned"
    INSUFFICIENT_MANA = "insufficient_mana"
    PASSIVE = "passive"
