# polis/engine/happiness.py

import math

from .enums import EventSeverity, PolicyCategory, RelationshipStatus
from .resources import clamp

# Contribution of each event severity to the recent-events factor
SEVERITY_WEIGHTS = {
    EventSeverity.POSITIVE.value: 3,
    EventSeverity.DANGER.value: -5,
    EventSeverity.WARNING.value: -2,
}


class HappinessCalculator:
    """Derives the diagnostic happiness-factor breakdown of the player city.

    The factors are informational: the authoritative happiness value is moved
    by the flat modifier path of the economy step, never by this breakdown.
    """

    def __init__(self, game_state, db):
        self.game_state = game_state
        self.db = db

    def calculate_factors(self, gold_income):
        """Recompute every factor from this turn's values."""
        state = self.game_state.get_state()
        resources = self.game_state.resources
        population = resources['population']

        # Tax level based on gold production relative to population
        effective_tax_rate = gold_income / (population / 100)
        taxation = clamp(10 - math.floor(effective_tax_rate / 2), -20, 10)

        # Food security based on food reserves per thousand citizens
        food_per_capita = resources['food'] / (population / 1000)
        food_security = clamp(math.floor(food_per_capita) - 10, -20, 20)

        # Too much military makes citizens uneasy
        military_ratio = resources['military'] / (population / 100)
        military_presence = clamp(5 - math.floor(military_ratio), -10, 10)

        cultural = sum(
            1 for p in state['policies']
            if p.get('active') and p['category'] == PolicyCategory.CULTURAL
        )
        cultural_investment = min(20, cultural * 5)

        at_war = self.game_state.count_relationships(RelationshipStatus.WAR)
        war_weariness = max(-30, -10 * at_war)

        stability = self.db.get('political_stability', {}).get(self.game_state.player['government'], 0)
        political_stability = clamp(stability, -15, 15)

        event_effect = sum(SEVERITY_WEIGHTS.get(e['severity'], 0) for e in state['events'][:5])
        recent_events = clamp(event_effect, -20, 20)

        factors = {
            "taxation_level": taxation,
            "food_security": food_security,
            "military_presence": military_presence,
            "cultural_investment": cultural_investment,
            "war_weariness": war_weariness,
            "political_stability": political_stability,
            "recent_events": recent_events,
        }
        resources['happiness_factors'] = factors
        return factors
