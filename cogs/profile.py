import discord
import logging
from discord.ext import commands

from utils.classes import CLASSES, RACES
from utils.embeds import create_profile_embed, create_stats_embed, create_upgrade_embed
from utils.errors import StorageFailure
from utils.helpers import resolve_stat_name
from config import STAT_NAMES

logger = logging.getLogger(__name__)


class Profile(commands.Cog):
    """
    Character management for the RPG bot.
    Handles creating characters, displaying profiles and spending stat points.
    """

    def __init__(self, bot):
        self.bot = bot

    @commands.hybrid_command(name="create")
    async def create(self, ctx, class_id: str, race_id: str, gender: str, *, name: str):
        """
        Create your character.

        Usage: rpg create <class> <race> <gender> <name>
        """
        class_id, race_id = class_id.lower(), race_id.lower()

        if class_id not in CLASSES or race_id not in RACES:
            await ctx.send(f"❌ Unknown class or race. Classes: {', '.join(CLASSES)}. "
                           f"Races: {', '.join(RACES)}.")
            return

        try:
            character = await self.bot.db_manager.create_character(
                ctx.author.id, name, gender.lower(), race_id, class_id
            )
        except ValueError as e:
            await ctx.send(f"❌ {e}")
            return
        except StorageFailure as e:
            logger.error(f"Failed to create character for {ctx.author.id}: {e}")
            await ctx.send("⚠️ Character creation failed. Please try again later.")
            return

        await ctx.send(embed=create_profile_embed(ctx.author, character))

    @commands.hybrid_command(name="profile", aliases=["char", "character"])
    async def profile(self, ctx, user: discord.Member = None):
        """
        Display your character profile or another user's.

        Usage: rpg profile or rpg profile @username
        """
        # If no user specified, show the command author's profile
        if user is None:
            user = ctx.author

        character = await self.bot.db_manager.get_character(user.id)
        if character is None:
            await ctx.send(f"❌ {user.display_name} doesn't have a character yet! Use `create` to make one.")
            return

        await ctx.send(embed=create_profile_embed(user, character))

    @commands.hybrid_command(name="stats")
    async def stats(self, ctx):
        """
        Display your character's attributes.

        Usage: rpg stats
        """
        character = await self.bot.db_manager.get_character(ctx.author.id)
        if character is None:
            await ctx.send("❌ You don't have a character yet! Use `create` to make one.")
            return

        await ctx.send(embed=create_stats_embed(character))

    @commands.hybrid_command(name="upgrade", aliases=["up", "skillpoint", "sp"])
    async def upgrade(self, ctx, stat: str, amount: int = 1):
        """
        Spend stat points on an attribute.

        Usage: rpg upgrade <stat> [amount]
        """
        selected_stat = resolve_stat_name(stat)
        if selected_stat is None:
            await ctx.send(f"❌ Invalid stat. Available stats: {', '.join(STAT_NAMES)}")
            return

        if amount < 1:
            await ctx.send("❌ Please provide a valid positive number for the amount.")
            return

        character = await self.bot.db_manager.get_character(ctx.author.id)
        if character is None:
            await ctx.send("❌ You don't have a character yet! Use `create` to make one.")
            return

        try:
            result = await self.bot.db_manager.upgrade_character_stat(ctx.author.id, selected_stat, amount)
        except StorageFailure as e:
            logger.error(f"Failed to upgrade {selected_stat} for {ctx.author.id}: {e}")
            await ctx.send("❌ An error occurred while upgrading your stat.")
            return

        if not result["success"]:
            await ctx.send(f"❌ Failed to upgrade stat: {result['error']}")
            return

        await ctx.send(embed=create_upgrade_embed(selected_stat, amount, result))
