from utils.enemies import ENEMY_TYPES
from utils.rewards import (
    apply_xp, defeat_rewards, round_cap_rewards, stat_points_for,
    victory_rewards, xp_to_next_level,
)

GOBLIN, ORC, TROLL, DRAGON = ENEMY_TYPES


def test_xp_curve():
    assert xp_to_next_level(1) == 150
    assert xp_to_next_level(2) == 200
    assert xp_to_next_level(10) == 600


def test_exact_threshold_levels_up_with_nothing_left():
    progress = apply_xp(1, 0, 150)
    assert progress.level == 2
    assert progress.xp == 0
    assert progress.levels_gained == 1
    assert stat_points_for(progress.levels_gained) == 5


def test_large_grant_rolls_over_several_levels():
    # 150 to reach level 2, 200 more to reach level 3
    progress = apply_xp(1, 0, 375)
    assert progress.level == 3
    assert progress.xp == 25
    assert progress.levels_gained == 2
    assert stat_points_for(progress.levels_gained) == 10


def test_partial_grant_banks_xp():
    progress = apply_xp(3, 40, 50)
    assert progress.level == 3
    assert progress.xp == 90
    assert progress.levels_gained == 0


def test_victory_pays_full_rewards():
    assert victory_rewards(ORC) == (30, 20)


def test_defeat_pays_share_of_xp_and_no_gold():
    assert defeat_rewards(GOBLIN) == (4, 0)
    assert defeat_rewards(DRAGON) == (30, 0)


def test_round_cap_rewards_scale_with_rounds_fought():
    assert round_cap_rewards(TROLL, 15, 15) == (25, 0)
    assert round_cap_rewards(TROLL, 10, 10) == (25, 0)
    assert round_cap_rewards(DRAGON, 5, 10) == (25, 0)
