# polis/engine/event_manager.py

import logging

from .diplomacy import DiplomacyManager
from .enums import RelationshipStatus
from .resources import apply_effects, clamp_resources

logger = logging.getLogger(__name__)


class EventManager:
    """Resolves the player's pick among an event's choices."""

    def __init__(self, game_state, db, rng):
        self.game_state = game_state
        self.db = db
        self.rng = rng

    def apply_choice(self, event_id, choice_index):
        """Apply a choice and close the event. Unknown events and bad indexes are ignored."""
        ev = self.game_state.get_event(event_id)
        if not ev:
            return {"status": "error", "msg": "Event not found"}

        choices = ev.get('choices')
        if not choices:
            return {"status": "error", "msg": "Event has no choices"}

        if isinstance(choice_index, bool) or not isinstance(choice_index, int) \
                or not 0 <= choice_index < len(choices):
            return {"status": "error", "msg": "Choice not found"}

        choice = choices[choice_index]

        # Apply effects, clamped like any other event effect
        resources = self.game_state.resources
        apply_effects(resources, choice.get('effects', {}))
        clamp_resources(resources, self.db['config'].get('min_population', 1000))

        outcome = choice.get('outcome')
        if outcome:
            self._apply_outcome(outcome)

        # Record decision and close the event
        ev['description'] += f" You chose to {choice['text']}."
        del ev['choices']

        logger.info("Turn %s: chose '%s' in '%s'", self.game_state.get_state()['turn'], choice['text'], ev['title'])
        return {"status": "ok", "msg": f"Decision: {choice['text']}"}

    def _apply_outcome(self, outcome):
        relationship = self.game_state.get_relationship(outcome.get('city_state'))
        if not relationship:
            return

        status = outcome.get('status')
        # An alliance offer accepted after hostilities resumed has no effect
        if status == RelationshipStatus.ALLIED and relationship['status'] in (
                RelationshipStatus.WAR, RelationshipStatus.HOSTILE):
            return
        DiplomacyManager(self.game_state, self.db, self.rng).set_status(relationship, status)
