from types import SimpleNamespace

import discord

from tests.conftest import FakeClock, ScriptedRandom, run
from cogs.combat import Combat
from config import BATTLE_COOLDOWN
from utils.battle import BattleEngine
from utils.cooldowns import CooldownTracker
from utils.errors import StorageFailure
from utils.skills import SkillHandler

# With ScriptedRandom's defaults a level 1 character is matched against an
# Orc. A quick battle kills it in 12 hits and takes 11 hits of 5 in return.


class RecordingContext:
    """Collects what the battle command sends to the channel."""

    def __init__(self, user_id=1000, fail_views=False):
        self.author = SimpleNamespace(id=user_id)
        self.fail_views = fail_views
        self.sent = []

    async def defer(self):
        pass

    async def send(self, content=None, *, embed=None, view=None):
        if view is not None and self.fail_views:
            raise discord.HTTPException(SimpleNamespace(status=403, reason="Forbidden"), "Missing Access")
        self.sent.append(SimpleNamespace(content=content, embed=embed))

    @property
    def texts(self):
        return [message.content for message in self.sent if message.content]


def make_cog(db):
    bot = SimpleNamespace(
        db_manager=db,
        skill_handler=SkillHandler(db, rng=ScriptedRandom()),
        cooldowns=CooldownTracker(clock=FakeClock(), rng=ScriptedRandom(default=0.5)),
    )
    cog = Combat(bot)
    cog.engine = BattleEngine(bot.skill_handler, rng=ScriptedRandom())
    return cog


def battle(cog, ctx, mode="quick"):
    run(Combat.battle.callback(cog, ctx, mode))


def record_settlements(db, monkeypatch):
    calls = []
    settle = db.settle_battle

    async def recording(user_id, final_health, xp, gold):
        calls.append((user_id, final_health, xp, gold))
        return await settle(user_id, final_health, xp, gold)

    monkeypatch.setattr(db, "settle_battle", recording)
    return calls


def test_victory_is_settled_and_arms_cooldown(db, warrior, monkeypatch):
    settlements = record_settlements(db, monkeypatch)
    cog = make_cog(db)
    ctx = RecordingContext()

    battle(cog, ctx)

    assert settlements == [(1000, 99, 30, 20)]
    character = run(db.get_character(1000))
    assert (character["health"], character["xp"], character["gold"]) == (99, 30, 20)
    assert cog.bot.cooldowns.remaining_seconds(1000) == BATTLE_COOLDOWN == 300
    assert ctx.sent[-1].embed.title == "Battle against Orc"
    assert not cog.active_battles


def test_defeat_still_arms_cooldown(db, warrior, monkeypatch):
    run(db.update_character_stat(1000, "health", 4))
    settlements = record_settlements(db, monkeypatch)
    cog = make_cog(db)

    battle(cog, RecordingContext())

    assert settlements == [(1000, 0, 9, 0)]
    assert run(db.get_character(1000))["health"] == 0
    assert cog.bot.cooldowns.remaining_seconds(1000) == 300


def test_battle_refused_while_on_cooldown(db, warrior):
    cog = make_cog(db)
    cog.bot.cooldowns.arm(1000, BATTLE_COOLDOWN)
    ctx = RecordingContext()

    battle(cog, ctx)

    assert len(ctx.sent) == 1
    assert "5 minutes" in ctx.texts[0]
    character = run(db.get_character(1000))
    assert (character["health"], character["xp"]) == (154, 0)


def test_cooldown_expires(db, warrior):
    cog = make_cog(db)
    cog.bot.cooldowns.arm(1000, BATTLE_COOLDOWN)
    cog.bot.cooldowns.clock.advance(BATTLE_COOLDOWN)

    battle(cog, RecordingContext())

    assert run(db.get_character(1000))["xp"] == 30


def test_second_battle_refused_while_one_is_running(db, warrior):
    cog = make_cog(db)
    cog.active_battles.add(1000)
    ctx = RecordingContext()

    battle(cog, ctx)

    assert ctx.texts == ["⚔️ You're already in a battle!"]
    assert cog.active_battles == {1000}
    assert cog.bot.cooldowns.remaining_seconds(1000) == 0


def test_wounded_character_cannot_fight(db, warrior):
    run(db.update_character_stat(1000, "health", 0))
    cog = make_cog(db)
    ctx = RecordingContext()

    battle(cog, ctx)

    assert "too wounded" in ctx.texts[0]
    assert run(db.get_character(1000))["xp"] == 0
    assert cog.bot.cooldowns.remaining_seconds(1000) == 0


def test_battle_without_character(db):
    ctx = RecordingContext()

    battle(make_cog(db), ctx)

    assert "create a character" in ctx.texts[0]


def test_failed_settlement_applies_nothing(db, warrior, monkeypatch):
    async def broken_settle(user_id, final_health, xp, gold):
        raise StorageFailure("disk full")

    monkeypatch.setattr(db, "settle_battle", broken_settle)
    cog = make_cog(db)
    ctx = RecordingContext()

    battle(cog, ctx)

    assert "No rewards were applied" in ctx.texts[-1]
    assert cog.bot.cooldowns.remaining_seconds(1000) == 0
    assert not cog.active_battles
    assert run(db.get_character(1000))["xp"] == 0


def test_lost_battle_message_sends_log_so_far(db, warrior):
    cog = make_cog(db)
    ctx = RecordingContext(fail_views=True)

    battle(cog, ctx, mode="manual")

    assert ctx.texts[0].startswith("⚔️ Manual battle against Orc (Level 3) begins!")
    assert "**Round 1**" in ctx.texts[0]
    assert ctx.texts[-1] == "❌ An error occurred during battle. Please try again."
    assert cog.bot.cooldowns.remaining_seconds(1000) == 0
    assert not cog.active_battles
    assert run(db.get_character(1000))["xp"] == 0
