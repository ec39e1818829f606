import asyncio

import pytest

from utils.db_manager import DatabaseManager


class ScriptedRandom:
    """
    Stand-in for the random module with predictable draws.

    random() pops queued values and then repeats `default`. uniform() returns
    the midpoint of its range and choice() the first element.
    """

    def __init__(self, values=(), default=0.99):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    def uniform(self, a, b):
        return (a + b) / 2

    def choice(self, seq):
        return seq[0]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "rpg_database.pkl"


@pytest.fixture
def db(db_path):
    manager = DatabaseManager(db_path)
    run(manager.initialize())
    return manager


@pytest.fixture
def warrior(db):
    """A level 1 human warrior owned by user 1000 (154 HP, 65 MP)."""
    return run(db.create_character(1000, "Aria", "female", "human", "warrior"))
