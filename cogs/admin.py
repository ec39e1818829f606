import discord
import logging
from discord.ext import commands

from config import HEALER_ROLE_ID, MAX_XP_GRANT
from utils.errors import CharacterNotFound, StorageFailure

logger = logging.getLogger(__name__)


class Admin(commands.Cog):
    """
    Admin commands for the RPG bot.
    Special commands that can only be used by authorized roles.
    """

    def __init__(self, bot):
        self.bot = bot

        # Special role ID for healing command
        self.healing_role_id = HEALER_ROLE_ID

    async def heal_check(self, ctx):
        """Special check for heal command."""
        # Always allow bot owner
        if await self.bot.is_owner(ctx.author):
            return True

        # Check for healing role
        if ctx.guild:
            user_roles = [role.id for role in ctx.author.roles]
            return self.healing_role_id in user_roles

        return False

    async def moderator_check(self, ctx):
        """Check if user can manage the server."""
        # Always allow bot owner
        if await self.bot.is_owner(ctx.author):
            return True

        if ctx.guild:
            return ctx.author.guild_permissions.administrator or ctx.author.guild_permissions.manage_guild

        return False

    @commands.command(name="heal")
    async def heal(self, ctx, user: discord.Member = None):
        """
        Fully restore HP and Mana for a user's character.
        Only available to the healing role.

        Usage: rpg heal or rpg heal @username
        """
        if not await self.heal_check(ctx):
            await ctx.send("You don't have permission to use this command. It's restricted to the Healer role only.")
            return

        # If no user specified, use the command author
        if user is None:
            user = ctx.author

        try:
            await self.bot.db_manager.restore_character(user.id)
        except CharacterNotFound:
            await ctx.send(f"{user.display_name} doesn't have a character.")
            return
        except StorageFailure as e:
            logger.error(f"Failed to heal {user.id}: {e}")
            await ctx.send("❌ An error occurred while healing.")
            return

        await ctx.send(f"✨ {user.mention}'s HP and Mana have been fully restored!")

    @commands.command(name="grantexp")
    async def grant_exp(self, ctx, user: discord.Member, amount: int):
        """
        Grant experience points to a user's character.
        Only available to server managers and the bot owner.
        Max 10,000 EXP per grant.

        Usage: rpg grantexp @username <amount>
        """
        if not await self.moderator_check(ctx):
            await ctx.send("You don't have permission to use this command. It's restricted to server managers only.")
            return

        # Limit amount to the maximum grant
        amount = min(amount, MAX_XP_GRANT)

        if amount <= 0:
            await ctx.send("The EXP amount must be positive.")
            return

        try:
            result = await self.bot.db_manager.add_xp(user.id, amount)
        except CharacterNotFound:
            await ctx.send(f"{user.display_name} doesn't have a character.")
            return
        except StorageFailure as e:
            logger.error(f"Failed to grant EXP to {user.id}: {e}")
            await ctx.send("❌ An error occurred while granting EXP.")
            return

        if result.leveled_up:
            await ctx.send(f"Granted {amount} EXP to {user.mention}. They leveled up to Level {result.new_level} "
                           f"and gained {result.stat_points_granted} stat points! 🎉")
        else:
            await ctx.send(f"Granted {amount} EXP to {user.mention}. Current level: {result.new_level}")
