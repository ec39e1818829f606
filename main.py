import asyncio
import logging
import os
import pickle
from pathlib import Path

from dotenv import load_dotenv

from bot import setup_bot
from config import DATABASE_PATH
from keep_alive import keep_alive

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set once the bot is running so the stats endpoint can report live cooldowns
running_bot = None


def load_stats(db_path=DATABASE_PATH, cooldowns=None):
    """Read bot statistics from the saved database."""
    db_path = Path(db_path)
    active_cooldowns = cooldowns.active_count() if cooldowns is not None else 0
    if not db_path.exists():
        return {
            'characters': 0,
            'skills_learned': 0,
            'active_cooldowns': active_cooldowns
        }

    with open(db_path, 'rb') as f:
        data = pickle.load(f)

    return {
        'characters': len(data.get('characters', {})),
        'skills_learned': sum(len(rows) for rows in data.get('character_skills', {}).values()),
        'active_cooldowns': active_cooldowns
    }


def current_stats():
    cooldowns = running_bot.cooldowns if running_bot is not None else None
    return load_stats(cooldowns=cooldowns)


async def main():
    """
    Main entry point for the Discord RPG bot.
    """
    global running_bot

    bot_token = os.getenv("DISCORD_BOT_TOKEN")
    if not bot_token:
        logger.error("No Discord bot token found in environment variables. Please set DISCORD_BOT_TOKEN.")
        return

    try:
        # Setup and connect the bot
        running_bot = await setup_bot()

        logger.info("Starting Discord bot with token...")
        await running_bot.start(bot_token)
    except Exception as e:
        logger.error(f"Error starting bot: {e}")


if __name__ == "__main__":
    # Start the keep-alive web server in a separate thread
    keep_alive(stats_provider=current_stats)

    # Run the Discord bot
    logger.info("Starting Discord RPG Battle Bot")
    asyncio.run(main())
