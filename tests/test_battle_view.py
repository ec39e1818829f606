from types import SimpleNamespace

import discord
import pytest

from tests.conftest import run
from cogs.combat import MAX_SKILL_BUTTONS, BattleActionView, BattlePrompt
from utils.battle import ATTACK, FLEE, BattleMode, BattleSession, use_skill_action
from utils.combat import EnemyCombatant, PlayerCombatant
from utils.enemies import ENEMY_TYPES
from utils.errors import PresentationFailure
from utils.skills import Skill


class UnreachableChannel:
    """Context whose messages can no longer be sent."""

    def __init__(self, user_id=1000):
        self.author = SimpleNamespace(id=user_id)

    async def send(self, content=None, **kwargs):
        raise discord.HTTPException(SimpleNamespace(status=404, reason="Not Found"), "Unknown Message")


def build_view(skills, mana):
    async def scenario():
        return BattleActionView(owner_id=1000, skills=skills, mana=mana, timeout=5)

    return run(scenario())


def make_session():
    player = PlayerCombatant(
        character_id=1, name="Aria", strength=9, dexterity=4, agility=4, constitution=7,
        wisdom=3, intelligence=3, health=154, max_health=154, mana=65, max_mana=65,
    )
    return BattleSession(player, EnemyCombatant.from_archetype(ENEMY_TYPES[0]), BattleMode.MANUAL)


def test_view_offers_attack_skills_and_flee():
    skills = [
        Skill(101, "Provoking Shout", "", "warrior", mana_cost=10),
        Skill(102, "Regeneration", "", "warrior", mana_cost=15),
    ]

    view = build_view(skills, mana=12)

    actions = [child.action for child in view.children]
    assert actions == [ATTACK, use_skill_action(101), use_skill_action(102), FLEE]
    assert [child.disabled for child in view.children] == [False, False, True, False]
    assert view.children[1].label == "Provoking Shout (10 MP)"


def test_view_caps_skill_buttons():
    skills = [Skill(500 + i, f"Skill {i}", "", "mage") for i in range(30)]

    view = build_view(skills, mana=100)

    assert len(view.children) == MAX_SKILL_BUTTONS + 2


def test_prompt_reports_discord_errors_as_presentation_failures():
    prompt = BattlePrompt(UnreachableChannel(), timeout=5)

    async def scenario():
        await prompt.choose_action(make_session(), [])

    with pytest.raises(PresentationFailure) as excinfo:
        run(scenario())

    assert isinstance(excinfo.value.__cause__, discord.HTTPException)
    assert prompt.view.is_finished()
    assert prompt.message is None
