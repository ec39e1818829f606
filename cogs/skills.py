import logging
from discord.ext import commands

from utils.embeds import create_learned_skills_embed, create_skills_embed
from utils.errors import StorageFailure

logger = logging.getLogger(__name__)

LEARN_WORDS = ("learn", "add", "acquire")
MINE_WORDS = ("mine", "my-skills", "myskills", "learned", "known")


class Skills(commands.Cog):
    """
    Skill management for the RPG bot.
    Handles listing, learning and viewing skills.
    """

    def __init__(self, bot):
        self.bot = bot

    @property
    def skill_handler(self):
        return self.bot.skill_handler

    @commands.hybrid_command(name="skills", aliases=["abilities", "skill"])
    async def skills(self, ctx, action: str = "list", skill_id: int = None):
        """
        Manage your character skills.

        Usage: rpg skills [list|learn <id>|mine]
        """
        character = await self.bot.db_manager.get_character(ctx.author.id)
        if character is None:
            await ctx.send("❌ You need to create a character first! Use `create`.")
            return

        action = action.lower()
        if action in LEARN_WORDS:
            await self.learn(ctx, character, skill_id)
        elif action in MINE_WORDS:
            await self.my_skills(ctx, character)
        else:
            await self.list_skills(ctx, character)

    async def list_skills(self, ctx, character):
        available = await self.skill_handler.skills_for_class(character["class_id"])
        learned = await self.skill_handler.learned_skills(character["id"])

        embed = create_skills_embed(
            f"Available {character['class_id'].capitalize()} Skills",
            available,
            {skill.id for skill in learned},
        )
        await ctx.send(embed=embed)

    async def learn(self, ctx, character, skill_id):
        if skill_id is None:
            await ctx.send("❌ Please provide a valid skill ID! Example: `skills learn 101`")
            return

        try:
            result = await self.skill_handler.learn_skill(character["id"], skill_id)
        except StorageFailure as e:
            logger.error(f"Failed to learn skill {skill_id} for character {character['id']}: {e}")
            await ctx.send("❌ An error occurred while learning the skill.")
            return

        if result.success:
            await ctx.send(f"🎉 Successfully learned: **{result.skill.name}** (ID: {skill_id})")
        else:
            await ctx.send(f"❌ {result.message}")

    async def my_skills(self, ctx, character):
        skills = await self.skill_handler.learned_skills(character["id"])
        if not skills:
            await ctx.send("You haven't learned any skills yet!")
            return

        await ctx.send(embed=create_learned_skills_embed(skills))
