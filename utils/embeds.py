import discord

from utils.classes import get_class, get_race
from utils.helpers import tail_battle_log
from utils.rewards import xp_to_next_level

STAT_DESCRIPTIONS = {
    "strength": "Increases physical damage",
    "intelligence": "Increases magical power and maximum mana",
    "dexterity": "Improves accuracy and critical hit chance",
    "constitution": "Improves physical defense and maximum health",
    "vitality": "Increases maximum health points",
    "wisdom": "Improves maximum mana",
    "agility": "Increases dodge chance",
    "durability": "Reduces damage taken",
    "charisma": "Improves NPC interactions and shop prices",
}


def create_progress_bar(current, maximum, length=10, filled_char="█", empty_char="░"):
    """Create a text-based progress bar."""
    if maximum <= 0:
        return empty_char * length

    # Calculate how many blocks should be filled
    progress = min(maximum, max(0, current))
    filled_length = int(length * progress / maximum)

    return filled_char * filled_length + empty_char * (length - filled_length)


def describe_origin(character):
    class_data = get_class(character["class_id"]) or {"name": character["class_id"], "emoji": ""}
    race_data = get_race(character["race_id"]) or {"name": character["race_id"], "emoji": ""}
    return f"{race_data['emoji']} {race_data['name']} {class_data['emoji']} {class_data['name']}"


def create_profile_embed(user, character):
    """
    Create an embed for displaying a character's profile.

    Args:
        user: The discord.User or discord.Member who owns the character
        character: The character record from the database

    Returns:
        discord.Embed: The formatted profile embed
    """
    embed = discord.Embed(
        title=f"{character['name']}'s Profile",
        description=f"Level {character['level']} {describe_origin(character)}",
        color=discord.Color.blue()
    )

    # Add user avatar if available
    if user is not None and user.avatar:
        embed.set_thumbnail(url=user.avatar.url)

    embed.add_field(
        name=f"❤️ HP: {character['health']}/{character['max_health']}",
        value=create_progress_bar(character['health'], character['max_health']),
        inline=False
    )
    embed.add_field(
        name=f"✨ MP: {character['mana']}/{character['max_mana']}",
        value=create_progress_bar(character['mana'], character['max_mana']),
        inline=False
    )

    needed = xp_to_next_level(character['level'])
    embed.add_field(
        name=f"XP: {character['xp']}/{needed}",
        value=create_progress_bar(character['xp'], needed),
        inline=False
    )
    embed.add_field(name="Gold", value=f"🪙 {character['gold']}", inline=True)
    embed.add_field(name="Stat Points", value=str(character['stat_points']), inline=True)

    embed.set_footer(text="Use stats to see your attributes")
    return embed


def create_stats_embed(character):
    """Create an embed listing a character's attributes."""
    embed = discord.Embed(
        title=f"{character['name']}'s Attributes",
        description=f"Unspent stat points: **{character['stat_points']}**",
        color=discord.Color.dark_teal()
    )

    for stat, description in STAT_DESCRIPTIONS.items():
        embed.add_field(
            name=f"{stat.capitalize()}: {character[stat]}",
            value=description,
            inline=True
        )

    embed.set_footer(text="Use upgrade <stat> [amount] to spend stat points")
    return embed


def create_upgrade_embed(stat, amount, result):
    """Create an embed for a successful stat upgrade."""
    embed = discord.Embed(
        title="Stat Points Allocated!",
        description=f"You've upgraded your **{stat.capitalize()}** by **{amount}** points!",
        color=discord.Color.green()
    )
    embed.add_field(name="Change", value=f"{result['old_value']} → {result['new_value']}", inline=True)
    embed.add_field(name="Remaining Points", value=str(result['remaining_points']), inline=True)
    embed.set_footer(text=STAT_DESCRIPTIONS.get(stat, "Improves character abilities"))
    return embed


def format_skill_details(skill):
    details = (f"**Type:** {'Passive' if skill.is_passive else 'Active'} | "
               f"**Cost:** {skill.mana_cost} MP | "
               f"**Cooldown:** {skill.cooldown}s")
    if skill.skill_level:
        details += f" | **Level:** {skill.skill_level}"
    return details


def create_skills_embed(title, skills, learned_skill_ids):
    """Create an embed listing a class's skills and which ones are learned."""
    embed = discord.Embed(title=title, color=discord.Color.blue())

    if not skills:
        embed.description = "No skills available for your class yet!"
        return embed

    for skill in skills:
        learned = skill.id in learned_skill_ids
        status = "Learned" if learned else f"Requires Level {skill.level_required}"
        embed.add_field(
            name=f"{skill.name} (ID: {skill.id}) {'✅' if learned else '🔒'}",
            value=f"{skill.description}\n{format_skill_details(skill)}\n**Status:** {status}",
            inline=False
        )

    return embed


def create_learned_skills_embed(skills):
    """Create an embed listing a character's learned skills."""
    embed = discord.Embed(
        title="Your Learned Skills",
        description=f"Total skills learned: {len(skills)}",
        color=discord.Color.teal()
    )
    for skill in skills:
        embed.add_field(
            name=f"{skill.name} (ID: {skill.id})",
            value=format_skill_details(skill),
            inline=False
        )
    return embed


def create_battle_turn_embed(session):
    """Create the embed shown while the player picks an action."""
    player, enemy = session.player, session.enemy
    embed = discord.Embed(
        title=f"Your Turn - Round {session.round}/{session.max_rounds}",
        description=tail_battle_log(session.log),
        color=discord.Color.orange()
    )
    embed.add_field(
        name="Your Stats",
        value=f"❤️ HP: {player.health}/{player.max_health}\n✨ MP: {player.mana}/{player.max_mana}",
        inline=True
    )
    embed.add_field(
        name=enemy.name,
        value=f"❤️ HP: {enemy.health}/{enemy.max_health}\n"
              f"{create_progress_bar(enemy.health, enemy.max_health)}",
        inline=True
    )
    return embed


RESULT_LABELS = {
    "victory": "🏆 Victory!",
    "defeat": "☠️ Defeat!",
    "fled": "🏃 Fled",
    "timed_out": "⏰ Abandoned",
    "round_cap_reached": "🕒 Draw",
}


def create_battle_result_embed(outcome, settlement=None):
    """
    Create the embed summarising a finished battle.

    Args:
        outcome: The BattleOutcome from the battle engine
        settlement: The SettlementResult from saving the rewards, if any

    Returns:
        discord.Embed: The formatted result embed
    """
    embed = discord.Embed(
        title=f"Battle against {outcome.enemy.name}",
        description=tail_battle_log(outcome.battle_log),
        color=discord.Color.green() if outcome.victory else discord.Color.red()
    )

    embed.add_field(name="Result", value=RESULT_LABELS[outcome.state.value], inline=True)
    embed.add_field(name="Rounds", value=str(outcome.rounds_fought), inline=True)
    embed.add_field(name="Your HP", value=f"{outcome.final_player_hp}/{outcome.max_player_hp}", inline=True)

    if outcome.xp_earned or outcome.gold_earned:
        embed.add_field(name="XP Earned", value=str(outcome.xp_earned), inline=True)
        embed.add_field(name="Gold Earned", value=str(outcome.gold_earned), inline=True)

    if settlement is not None and settlement.leveled_up:
        embed.add_field(name="Level Up!", value=f"New level: {settlement.new_level} 🎉", inline=True)
        embed.add_field(name="Stat Points", value=f"+{settlement.stat_points_granted} points", inline=True)

    return embed
