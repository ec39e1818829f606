from tests.conftest import FakeClock, ScriptedRandom
from utils.cooldowns import CooldownTracker


def make_tracker(clock, cleanup_chance=0.0):
    return CooldownTracker(clock=clock, rng=ScriptedRandom(default=0.5), cleanup_chance=cleanup_chance)


def test_fresh_user_is_not_on_cooldown():
    tracker = make_tracker(FakeClock())
    assert not tracker.is_on_cooldown(42)
    assert tracker.remaining_seconds(42) == 0


def test_cooldown_expires_after_duration():
    clock = FakeClock()
    tracker = make_tracker(clock)

    tracker.arm(42, 300)
    assert tracker.is_on_cooldown(42)
    assert tracker.remaining_seconds(42) == 300

    clock.advance(299.5)
    assert tracker.is_on_cooldown(42)
    assert tracker.remaining_seconds(42) == 1

    clock.advance(0.5)
    assert not tracker.is_on_cooldown(42)
    assert tracker.remaining_seconds(42) == 0


def test_int_and_str_ids_share_an_entry():
    tracker = make_tracker(FakeClock())
    tracker.arm(42, 300)
    assert tracker.is_on_cooldown("42")


def test_rearming_restarts_the_cooldown():
    clock = FakeClock()
    tracker = make_tracker(clock)

    tracker.arm(42, 300)
    clock.advance(200)
    tracker.arm(42, 300)

    assert tracker.remaining_seconds(42) == 300


def test_purge_removes_only_expired_entries():
    clock = FakeClock()
    tracker = make_tracker(clock)

    tracker.arm(1, 100)
    tracker.arm(2, 500)
    clock.advance(200)

    assert tracker.purge_expired() == 1
    assert set(tracker.store) == {"2"}
    assert tracker.active_count() == 1


def test_arm_sweeps_when_cleanup_roll_hits():
    clock = FakeClock()
    tracker = make_tracker(clock, cleanup_chance=1.0)

    tracker.arm(1, 10)
    clock.advance(60)
    tracker.arm(2, 300)

    assert "1" not in tracker.store
    assert tracker.is_on_cooldown(2)
