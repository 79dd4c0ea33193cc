# polis/engine/government.py

import logging

from .enums import EventSeverity, EventType, GovernmentType

logger = logging.getLogger(__name__)


class GovernmentManager:
    """Government modifiers, government-specific turn events, and regime changes."""

    def __init__(self, game_state, db, rng):
        self.game_state = game_state
        self.db = db
        self.config = db.get('config', {})
        self.rng = rng

    @property
    def government(self):
        return self.game_state.player['government']

    def get_modifiers(self):
        """Modifier row for the player's government (multiplier deltas, flat happiness)."""
        return self.db.get('government_modifiers', {}).get(self.government, {})

    def process_government_effects(self):
        """Roll the per-turn event of the current government, if it has one."""
        government = self.government

        if government == GovernmentType.DEMOCRACY:
            self._check_elections()
        elif government == GovernmentType.OLIGARCHY:
            self._check_corruption()
        elif government == GovernmentType.TYRANNY:
            self._check_rebellion()
        # Aristocracy, Timocracy and ConstitutionalMonarchy only carry modifiers

    def _check_elections(self):
        interval = self.config.get('election_interval', 5)
        if self.game_state.get_state()['turn'] % interval != 0:
            return

        self.game_state.add_event(
            'Democratic Elections',
            'It is time for elections in your democracy. The citizens are voting on new policies.',
            EventType.POLITICAL,
            EventSeverity.NEUTRAL,
            choices=[
                {"text": 'Support economic policies', "effects": {"gold": 100, "happiness": 5}},
                {"text": 'Support military policies', "effects": {"military": 50, "happiness": -5}},
                {"text": 'Support cultural policies', "effects": {"happiness": 15, "gold": -50}},
            ],
        )

    def _check_corruption(self):
        if self.rng.random() >= self.config.get('corruption_chance', 0.1):
            return

        self.game_state.add_event(
            'Corruption Scandal',
            'A corruption scandal has been uncovered among the ruling elite.',
            EventType.POLITICAL,
            EventSeverity.WARNING,
            choices=[
                {"text": 'Cover it up', "effects": {"gold": -100, "happiness": -10}},
                {"text": 'Prosecute the corrupt officials', "effects": {"gold": -50, "happiness": 5}},
            ],
        )

    def _check_rebellion(self):
        happiness = self.game_state.resources['happiness']
        chance = 0.05 + (0.01 * (100 - happiness)) / 10
        if self.rng.random() >= chance:
            return

        self.game_state.add_event(
            'Rebellion Attempt',
            'A group of citizens has attempted to overthrow your tyrannical rule.',
            EventType.POLITICAL,
            EventSeverity.DANGER,
            choices=[
                {"text": 'Crush the rebellion with force', "effects": {"military": -50, "happiness": -15}},
                {"text": 'Appease the people with concessions', "effects": {"gold": -200, "happiness": 10}},
            ],
        )

    def change_government(self, government):
        try:
            government = GovernmentType(government).value
        except ValueError:
            return {"status": "error", "msg": f"Unknown government: {government}"}

        if government == self.government:
            return {"status": "error", "msg": f"Already a {government}"}

        self.game_state.player['government'] = government
        self.game_state.add_event(
            'Government Changed',
            f"Your city-state has transitioned to a {government}.",
            EventType.POLITICAL,
            EventSeverity.NEUTRAL,
        )
        logger.info("Government changed to %s", government)
        return {"status": "ok", "msg": f"Your city-state is now a {government}."}
