# polis/engine/__init__.py

"""
Polis Game Engine Module
"""

from .core import GameEngine
from .game_state import GameState
from .policy_manager import PolicyManager
from .economy import EconomyManager
from .diplomacy import DiplomacyManager
from .government import GovernmentManager
from .happiness import HappinessCalculator
from .event_manager import EventManager

__all__ = [
    'GameEngine',
    'GameState',
    'PolicyManager',
    'EconomyManager',
    'DiplomacyManager',
    'GovernmentManager',
    'HappinessCalculator',
    'EventManager',
]
