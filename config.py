"""
Configuration settings for the Discord RPG battle bot.
"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# General settings
DEFAULT_PREFIX = os.getenv("COMMAND_PREFIX", "rpg ")
DATABASE_PATH = os.getenv("DATABASE_PATH", "rpg_database.pkl")
KEEP_ALIVE_PORT = int(os.getenv("KEEP_ALIVE_PORT", "8080"))
HEALER_ROLE_ID = int(os.getenv("HEALER_ROLE_ID", "0"))
SESSION_SECRET = os.getenv("SESSION_SECRET", "default-secret-key")

# Regeneration settings
HP_REGEN_RATE = 5  # HP points per cycle
HP_REGEN_INTERVAL = 5 * 60  # 5 minutes in seconds
MANA_REGEN_RATE = 5  # Mana points per cycle
MANA_REGEN_INTERVAL = 3 * 60  # 3 minutes in seconds

# Derived stats
BASE_HEALTH = 100
HEALTH_PER_VITALITY = 5
HEALTH_PER_CONSTITUTION = 2
BASE_MANA = 50
MANA_PER_INTELLIGENCE = 3
MANA_PER_WISDOM = 2

STAT_NAMES = (
    "strength", "intelligence", "dexterity", "constitution",
    "vitality", "wisdom", "agility", "durability", "charisma",
)

STAT_ALIASES = {
    "str": "strength",
    "int": "intelligence",
    "dex": "dexterity",
    "con": "constitution",
    "vit": "vitality",
    "wis": "wisdom",
    "agi": "agility",
    "dur": "durability",
    "cha": "charisma",
}

# Level settings
BASE_XP = 100
XP_PER_LEVEL = 50
STAT_POINTS_PER_LEVEL = 5
LEVEL_UP_FULL_HEAL = True
MAX_XP_GRANT = 10000

# Battle settings
BATTLE_MODES = ("manual", "quick", "hybrid")
MANUAL_MAX_ROUNDS = 15
HYBRID_MAX_ROUNDS = 10
QUICK_MAX_ROUNDS = 30
TURN_TIMEOUT = 60  # seconds to pick an action
MAX_CONSECUTIVE_TIMEOUTS = 3
HYBRID_SKILL_CHANCE = 0.4
BATTLE_COOLDOWN = 5 * 60  # 5 minutes in seconds
COOLDOWN_CLEANUP_CHANCE = 0.1

# Reward settings
DEFEAT_XP_SHARE = 0.3
ROUND_CAP_XP_SHARE = 0.5

# Combat formulas
PLAYER_STRENGTH_ATTACK = 0.7
PLAYER_DEXTERITY_ATTACK = 0.3
PLAYER_CONSTITUTION_DEFENSE = 0.6
PLAYER_DEXTERITY_DEFENSE = 0.2
ENEMY_ATTACK_VARIANCE = (0.9, 1.1)
ENEMY_DEFENSE_VARIANCE = (0.8, 1.2)
BASE_CRIT_CHANCE = 0.05
CRIT_PER_DEXTERITY = 0.005
DODGE_PER_AGILITY = 0.005
CRIT_MULTIPLIER = 1.5
DEFENSE_MITIGATION = 0.6

# Skill formulas
SKILL_STRENGTH_SCALING = 0.5
SKILL_DEXTERITY_SCALING = 0.3
SKILL_DAMAGE_VARIANCE = (0.75, 1.25)
REGENERATION_SKILL_ID = 102
REGENERATION_HEAL_SHARE = 0.15

# Battle log chunking
BATTLE_LOG_CHUNK_SIZE = 1500
EMBED_DESCRIPTION_LIMIT = 4000
