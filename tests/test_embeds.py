from utils.battle import BattleMode, BattleOutcome, BattleState
from utils.embeds import create_battle_result_embed, create_profile_embed, create_progress_bar
from utils.enemies import ENEMY_TYPES
from utils.rewards import SettlementResult


def make_outcome(state, xp=0, gold=0):
    return BattleOutcome(
        state=state, mode=BattleMode.QUICK, enemy=ENEMY_TYPES[0],
        battle_log=["⚔️ start", "Final HP - You: 10/154 | Goblin: 0/30"],
        final_player_hp=10, final_enemy_hp=0, max_player_hp=154,
        xp_earned=xp, gold_earned=gold, rounds_fought=5,
    )


def fields(embed):
    return {field.name: field.value for field in embed.fields}


def test_progress_bar():
    assert create_progress_bar(5, 10) == "█████░░░░░"
    assert create_progress_bar(-3, 10) == "░" * 10
    assert create_progress_bar(50, 10) == "█" * 10
    assert create_progress_bar(1, 0) == "░" * 10


def test_victory_embed_shows_rewards_and_level_up():
    settlement = SettlementResult(
        leveled_up=True, new_level=2, levels_gained=1, remaining_xp=0,
        stat_points_granted=5, stat_points=5,
    )

    embed = create_battle_result_embed(make_outcome(BattleState.VICTORY, xp=15, gold=10), settlement)

    values = fields(embed)
    assert values["Result"] == "🏆 Victory!"
    assert values["XP Earned"] == "15"
    assert values["Gold Earned"] == "10"
    assert values["Stat Points"] == "+5 points"
    assert "Final HP" in embed.description


def test_fled_embed_has_no_reward_fields():
    values = fields(create_battle_result_embed(make_outcome(BattleState.FLED)))
    assert values["Result"] == "🏃 Fled"
    assert "XP Earned" not in values


def test_profile_embed(warrior):
    embed = create_profile_embed(None, warrior)
    assert embed.title == "Aria's Profile"
    assert "Human" in embed.description and "Warrior" in embed.description
    assert "❤️ HP: 154/154" in fields(embed)
