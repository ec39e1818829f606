import discord
import logging
from discord import app_commands
from discord.ext import commands

from config import BATTLE_COOLDOWN, TURN_TIMEOUT, EMBED_DESCRIPTION_LIMIT
from utils.battle import ATTACK, FLEE, ActionPolicy, BattleEngine, BattleMode, use_skill_action
from utils.embeds import create_battle_result_embed, create_battle_turn_embed
from utils.enemies import enemy_level_band
from utils.errors import BattleInterrupted, PresentationFailure, StorageFailure
from utils.helpers import chunk_battle_log, format_duration

logger = logging.getLogger(__name__)

# Basic attack and flee take two of the 25 component slots
MAX_SKILL_BUTTONS = 23


class ActionButton(discord.ui.Button):
    """A button that resolves the battle view with one player action."""

    def __init__(self, action, **kwargs):
        super().__init__(**kwargs)
        self.action = action

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if view.choice is not None:
            await interaction.response.defer()
            return

        view.choice = self.action
        view.disable_all()
        await interaction.response.edit_message(view=view)
        view.stop()


class BattleActionView(discord.ui.View):
    """Buttons for one round: basic attack, one per active skill, and flee."""

    def __init__(self, owner_id, skills, mana, timeout=TURN_TIMEOUT):
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self.choice = None

        self.add_item(ActionButton(ATTACK, label="⚔️ Basic Attack", style=discord.ButtonStyle.primary))
        for skill in skills[:MAX_SKILL_BUTTONS]:
            self.add_item(ActionButton(
                use_skill_action(skill.id),
                label=f"{skill.name} ({skill.mana_cost} MP)",
                style=discord.ButtonStyle.success,
                disabled=skill.mana_cost > mana,
            ))
        self.add_item(ActionButton(FLEE, label="🏃 Flee", style=discord.ButtonStyle.danger))

    def disable_all(self):
        for child in self.children:
            child.disabled = True

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.owner_id:
            await interaction.response.send_message("⚠️ This isn't your battle!", ephemeral=True)
            return False
        return True


class BattlePrompt(ActionPolicy):
    """
    Asks the player for an action through buttons on a single battle message.
    Returns None if nobody clicks before the turn timeout.
    """

    def __init__(self, ctx, timeout=TURN_TIMEOUT):
        self.ctx = ctx
        self.timeout = timeout
        self.message = None
        self.view = None

    async def choose_action(self, session, skills):
        self.view = BattleActionView(self.ctx.author.id, skills, session.player.mana, self.timeout)
        embed = create_battle_turn_embed(session)

        try:
            if self.message is None:
                self.message = await self.ctx.send(embed=embed, view=self.view)
            else:
                await self.message.edit(embed=embed, view=self.view)
        except discord.HTTPException as e:
            self.view.stop()
            raise PresentationFailure(f"Could not update the battle message: {e}") from e

        timed_out = await self.view.wait()
        if timed_out or self.view.choice is None:
            return None
        return self.view.choice

    async def close(self, session):
        if self.view is not None:
            self.view.stop()
        if self.message is not None:
            try:
                await self.message.edit(view=None)
            except discord.HTTPException as e:
                logger.warning(f"Could not clear battle buttons: {e}")


class Combat(commands.Cog):
    """
    PvE battle system for the RPG bot.
    Handles the battle command in manual, quick and hybrid modes.
    """

    def __init__(self, bot):
        self.bot = bot
        self.engine = BattleEngine(bot.skill_handler)
        # Users with a battle in progress
        self.active_battles = set()

    @commands.hybrid_command(name="battle", aliases=["fight", "combat"])
    @app_commands.describe(mode="manual, quick or hybrid")
    async def battle(self, ctx, mode: str = "manual"):
        """
        Start a battle against an enemy near your level.

        Usage: rpg battle [manual|quick|hybrid]
        """
        await ctx.defer()
        user_id = ctx.author.id

        # Get character data
        character = await self.bot.db_manager.get_character(user_id)
        if character is None:
            await ctx.send("❌ You need to create a character first! Use `create`.")
            return

        if user_id in self.active_battles:
            await ctx.send("⚔️ You're already in a battle!")
            return

        # Check if on cooldown
        if self.bot.cooldowns.is_on_cooldown(user_id):
            remaining = self.bot.cooldowns.remaining_seconds(user_id)
            await ctx.send(f"⏳ You're on cooldown! Please wait {format_duration(remaining)}.")
            return

        if character["health"] <= 0:
            await ctx.send("🩹 You're too wounded to fight. Rest a while and try again.")
            return

        battle_mode = BattleMode.parse(mode)
        prompt = BattlePrompt(ctx) if battle_mode is BattleMode.MANUAL else None

        self.active_battles.add(user_id)
        try:
            outcome = await self.engine.run_battle(
                character, enemy_level_band(character["level"]), battle_mode, prompt
            )
            settlement = await self.bot.db_manager.settle_battle(
                user_id, outcome.final_player_hp, outcome.xp_earned, outcome.gold_earned
            )
        except BattleInterrupted as e:
            await self.send_battle_log(ctx, e.battle_log)
            await ctx.send("❌ An error occurred during battle. Please try again.")
            return
        except StorageFailure as e:
            logger.error(f"Could not save battle result for {user_id}: {e}")
            await ctx.send("❌ An error occurred while saving your battle. No rewards were applied.")
            return
        finally:
            self.active_battles.discard(user_id)

        self.bot.cooldowns.arm(user_id, BATTLE_COOLDOWN)

        if len("\n".join(outcome.battle_log)) > EMBED_DESCRIPTION_LIMIT:
            await self.send_battle_log(ctx, outcome.battle_log)

        embed = create_battle_result_embed(outcome, settlement)
        await ctx.send(embed=embed)

    async def send_battle_log(self, ctx, battle_log):
        for chunk in chunk_battle_log(battle_log):
            await ctx.send(chunk)
