# polis/__init__.py
"""Turn-based Greek city-state management engine."""

from .engine import GameEngine

__all__ = ['GameEngine']
