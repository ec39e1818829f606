import asyncio
import discord
import logging
from discord.ext import commands

# Import cogs
from cogs.admin import Admin
from cogs.combat import Combat
from cogs.profile import Profile
from cogs.skills import Skills
from config import (
    DEFAULT_PREFIX, HP_REGEN_RATE, HP_REGEN_INTERVAL, MANA_REGEN_RATE, MANA_REGEN_INTERVAL,
)
from utils.cooldowns import CooldownTracker
from utils.db_manager import DatabaseManager
from utils.errors import StorageFailure
from utils.helpers import format_duration
from utils.skills import SkillHandler

# Configure logging
logger = logging.getLogger(__name__)


async def setup_bot(db_manager=None):
    """
    Set up and configure the Discord bot with all necessary cogs and settings.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True

    bot = commands.Bot(command_prefix=DEFAULT_PREFIX, intents=intents)

    # Initialize database
    bot.db_manager = db_manager or DatabaseManager()
    await bot.db_manager.initialize()

    bot.skill_handler = SkillHandler(bot.db_manager)
    bot.cooldowns = CooldownTracker()

    # Store background tasks
    bot.background_tasks = []
    bot.synced = False

    @bot.event
    async def on_ready():
        """
        Event handler for when the bot is ready and connected to Discord.
        """
        logger.info(f"Logged in as {bot.user.name} (ID: {bot.user.id})")
        logger.info("------")

        if not bot.synced:
            synced = await bot.tree.sync()
            bot.synced = True
            logger.info(f"Synced {len(synced)} slash commands")

            # Start background task for HP and Mana regeneration
            bot.background_tasks.append(bot.loop.create_task(regenerate_stats(bot)))

        # Set the bot's activity status
        await bot.change_presence(activity=discord.Game(name=f"RPG Adventure | {DEFAULT_PREFIX}help"))

    @bot.event
    async def on_command_error(ctx, error):
        """
        Global error handler for the bot.
        """
        if isinstance(error, commands.CommandOnCooldown):
            await ctx.send(f"This command is on cooldown. Try again in {format_duration(error.retry_after)}.")
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(f"Missing required argument: {error.param.name}")
        elif isinstance(error, commands.BadArgument):
            await ctx.send(f"Invalid argument: {error}")
        elif isinstance(error, commands.CommandNotFound):
            await ctx.send(f"Command not found. Use `{DEFAULT_PREFIX}help` to see available commands.")
        elif isinstance(error, commands.MissingPermissions):
            await ctx.send("You don't have the required permissions to use this command.")
        else:
            logger.error(f"Command error in {ctx.command}: {error}", exc_info=error)
            await ctx.send("❌ An error occurred while executing that command.")

    # Add cogs to the bot
    await bot.add_cog(Combat(bot))
    await bot.add_cog(Profile(bot))
    await bot.add_cog(Skills(bot))
    await bot.add_cog(Admin(bot))

    return bot


async def regenerate_stats(bot):
    """
    Background task for regenerating HP and Mana for all characters.
    """
    logger.info("Starting stats regeneration task")

    hp_timer = 0
    mana_timer = 0

    while not bot.is_closed():
        await asyncio.sleep(60)  # Check every minute

        # Increment timers
        hp_timer += 60
        mana_timer += 60

        try:
            # HP regeneration cycle
            if hp_timer >= HP_REGEN_INTERVAL:
                hp_timer = 0
                changed = await bot.db_manager.regenerate_all("health", HP_REGEN_RATE)
                logger.debug(f"HP regeneration cycle completed for {changed} characters")

            # Mana regeneration cycle
            if mana_timer >= MANA_REGEN_INTERVAL:
                mana_timer = 0
                changed = await bot.db_manager.regenerate_all("mana", MANA_REGEN_RATE)
                logger.debug(f"Mana regeneration cycle completed for {changed} characters")
        except StorageFailure as e:
            logger.error(f"Regeneration cycle failed: {e}")
