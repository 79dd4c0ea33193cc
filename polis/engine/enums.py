# polis/engine/enums.py
"""Canonical enumerations shared by every engine subsystem."""

from enum import Enum


class ResourceKind(str, Enum):
    """Resources tracked for every city-state."""
    GOLD = "gold"
    FOOD = "food"
    POPULATION = "population"
    MILITARY = "military"
    HAPPINESS = "happiness"


class GovernmentType(str, Enum):
    DEMOCRACY = "Democracy"
    OLIGARCHY = "Oligarchy"
    TYRANNY = "Tyranny"
    ARISTOCRACY = "Aristocracy"
    TIMOCRACY = "Timocracy"
    CONSTITUTIONAL_MONARCHY = "ConstitutionalMonarchy"


class PolicyCategory(str, Enum):
    ECONOMIC = "Economic"
    MILITARY = "Military"
    CULTURAL = "Cultural"
    DIPLOMATIC = "Diplomatic"


class RelationshipStatus(str, Enum):
    NEUTRAL = "Neutral"
    FRIENDLY = "Friendly"
    ALLIED = "Allied"
    HOSTILE = "Hostile"
    WAR = "War"


class EventType(str, Enum):
    POLITICAL = "Political"
    MILITARY = "Military"
    ECONOMIC = "Economic"
    DISASTER = "Disaster"
    CULTURAL = "Cultural"


class EventSeverity(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    WARNING = "Warning"
    DANGER = "Danger"


class CityStateName(str, Enum):
    ATHENS = "Athens"
    SPARTA = "Sparta"
    THEBES = "Thebes"
    CORINTH = "Corinth"


TRADE_TREATY = "Trade"
