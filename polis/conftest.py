# polis/conftest.py
import random

import pytest

from polis.database import load_data
from polis.engine import GameEngine, GameState


@pytest.fixture(scope="session")
def db():
    return load_data()


@pytest.fixture
def engine(db):
    return GameEngine(db, random.Random(1234))


@pytest.fixture
def snapshot(db):
    """A fresh Athens game under Tyranny (no gold/food multipliers)."""
    game = GameState.create(db, 'Athens', 'Tyranny', 1, random.Random(99))
    return game.get_state()


@pytest.fixture
def game(snapshot, db):
    return GameState(snapshot, db['config'])
