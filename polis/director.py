# polis/director.py

import logging
import random

from polis.engine.resources import apply_effects, clamp_resources
from polis.rules import RuleEngine

logger = logging.getLogger(__name__)


class EventDirector:
    """Proposes at most one random narrative event per call."""

    def __init__(self, event_list, config=None, rng=None):
        self.all_events = event_list
        self.config = config or {}
        self.rng = rng or random.Random()
        logger.info("Director init: %d event templates in memory.", len(self.all_events))

    def generate(self, game_state):
        """
        Receives a GameState wrapper for the turn being built.
        Returns the new event (already at the head of the log) or None.
        """
        if self.rng.random() > self.config.get('event_chance', 0.5):
            return None  # No event this turn

        # 1. RULES LAYER
        candidates = RuleEngine.filter_viable(self.all_events, game_state.get_state())
        if not candidates:
            logger.warning("No viable event templates.")
            return None

        # 2. PICK
        template = self.rng.choice(candidates)
        choices = template.get('choices')

        event = game_state.add_event(
            template['title'],
            template['description'],
            template['type'],
            template['severity'],
            effects=template.get('effects'),
            choices=choices,
        )

        # 3. IMMEDIATE EFFECTS (events with choices wait for the player)
        if template.get('effects') and not choices:
            resources = game_state.resources
            apply_effects(resources, template['effects'])
            clamp_resources(resources, self.config.get('min_population', 1000))

        logger.info("Event selected: %s", event['title'])
        return event
