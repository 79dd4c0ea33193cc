# polis/engine/economy.py

import logging
import math

from .enums import EventSeverity, EventType, ResourceKind, TRADE_TREATY
from .government import GovernmentManager
from .happiness import HappinessCalculator
from .policy_manager import PolicyManager, stack_modifiers
from .resources import clamp_resources

logger = logging.getLogger(__name__)

PRODUCED = (
    ResourceKind.GOLD.value,
    ResourceKind.FOOD.value,
    ResourceKind.POPULATION.value,
    ResourceKind.MILITARY.value,
)


def base_generation(resources):
    """Flat per-turn production shared by player and AI city-states."""
    return {
        "gold": math.floor(resources['population'] / 100),
        "food": math.floor(resources['population'] / 50),
        "population": math.floor(resources['food'] / 100),
        "military": math.floor(resources['population'] / 200),
    }


class EconomyManager:
    """Per-turn resource recalculation for the player and the AI city-states."""

    def __init__(self, game_state, db, rng):
        self.game_state = game_state
        self.db = db
        self.config = db.get('config', {})
        self.rng = rng

    def clamp_player(self):
        clamp_resources(self.game_state.resources, self.config.get('min_population', 1000))

    def update_resources(self):
        """Apply production, policy and government modifiers, trade and upkeep to the player city.

        Returns the income produced this turn, keyed by resource.
        """
        resources = self.game_state.resources
        base = base_generation(resources)

        policies = PolicyManager(self.game_state, self.db)
        government = GovernmentManager(self.game_state, self.db, self.rng)

        # Flat policy effects land before any modifier
        policies.apply_passive_effects()

        modifiers = policies.calculate_modifiers()
        stack_modifiers(modifiers, government.get_modifiers())

        income = {kind: math.floor(base[kind] * modifiers[kind]) for kind in PRODUCED}

        # Trade agreements pay a flat bonus after modifiers
        partners = sum(1 for r in self.game_state.get_state()['relationships'] if TRADE_TREATY in r['treaties'])
        income['gold'] += partners * self.config.get('trade_bonus', 50)

        for kind, amount in income.items():
            resources[kind] += amount
        resources['happiness'] += modifiers[ResourceKind.HAPPINESS.value]

        # Consumption and military upkeep
        resources['food'] -= math.floor(resources['population'] / 20)
        resources['gold'] -= math.floor(resources['military'] / 10)

        self.clamp_player()

        HappinessCalculator(self.game_state, self.db).calculate_factors(income['gold'])

        self._check_famine()
        self._check_unrest()
        self.clamp_player()

        logger.debug("Turn %s income: %s", self.game_state.get_state()['turn'], income)
        return income

    def _check_famine(self):
        resources = self.game_state.resources
        if resources['food'] != 0:
            return

        self.game_state.add_event(
            'Food Shortage',
            'Your city is experiencing a food shortage. Population growth has stopped, '
            'and happiness is decreasing.',
            EventType.ECONOMIC,
            EventSeverity.DANGER,
        )
        resources['happiness'] -= self.config.get('famine_happiness_penalty', 15)
        resources['population'] -= math.floor(resources['population'] * self.config.get('famine_population_loss', 0.05))
        logger.info("Food shortage on turn %s", self.game_state.get_state()['turn'])

    def _check_unrest(self):
        resources = self.game_state.resources
        threshold = self.config.get('unrest_threshold', 20)
        if resources['happiness'] >= threshold:
            return

        chance = self.config.get('unrest_base_chance', 0.2) + 0.01 * (threshold - resources['happiness'])
        if self.rng.random() >= chance:
            return

        self.game_state.add_event(
            'Civil Unrest',
            'Your citizens are unhappy and have taken to the streets. Production has decreased.',
            EventType.POLITICAL,
            EventSeverity.WARNING,
        )
        loss = self.config.get('unrest_production_loss', 0.1)
        resources['gold'] -= math.floor(resources['gold'] * loss)
        resources['food'] -= math.floor(resources['food'] * loss)

    def update_ai_city_states(self):
        """Simplified growth for AI city-states: flat base generation, no modifiers."""
        min_population = self.config.get('min_population', 1000)
        min_military = self.config.get('ai_min_military', 100)

        for city in self.game_state.get_state()['other_city_states']:
            resources = city['resources']

            # Each rate reads the value updated just before it
            resources['gold'] += math.floor(resources['population'] / 100)
            resources['food'] += math.floor(resources['population'] / 50)
            resources['population'] += math.floor(resources['food'] / 100)
            resources['military'] += math.floor(resources['population'] / 200)

            clamp_resources(resources, min_population, min_military)

    def clamp_ai_city_states(self):
        min_population = self.config.get('min_population', 1000)
        min_military = self.config.get('ai_min_military', 100)
        for city in self.game_state.get_state()['other_city_states']:
            clamp_resources(city['resources'], min_population, min_military)
