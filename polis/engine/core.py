# polis/engine/core.py

import copy
import logging
import math
import random

from polis.director import EventDirector

from .diplomacy import DiplomacyManager
from .economy import EconomyManager
from .enums import CityStateName, EventSeverity, EventType, GovernmentType
from .event_manager import EventManager
from .game_state import GameState
from .government import GovernmentManager
from .policy_manager import PolicyManager
from .resources import clamp, find_shortfall

logger = logging.getLogger(__name__)


def insufficient(resource, required, available):
    """Result describing a cost the player cannot pay."""
    return {
        "status": "error",
        "msg": f"Not enough {resource}: requires {required}, have {available} "
               f"({required - available} short)",
        "resource": resource,
        "required": required,
        "available": available,
    }


class GameEngine:
    """Main game engine coordinating all subsystems.

    Every public method takes a game snapshot and returns a new one; the
    snapshot passed in is never modified. Player actions return a
    ``(snapshot, result)`` pair where ``result['status']`` is ``"ok"`` or
    ``"error"``; on error the returned snapshot equals the input.
    """

    def __init__(self, db, rng=None):
        self.db = db
        self.config = db.get('config', {})
        self.rng = rng or random.Random()

        # Event generator shares the engine's random source
        self.director = EventDirector(db.get('events', []), self.config, self.rng)

    def _load(self, snapshot):
        return GameState(snapshot, self.config)

    def _act(self, snapshot, action):
        game = self._load(snapshot)
        result = action(game)
        if result['status'] != 'ok':
            # Rejected actions return the input untouched
            logger.debug("Action rejected: %s", result['msg'])
            return copy.deepcopy(snapshot), result

        game.touch()
        return game.get_state(), result

    # --- Game lifecycle ---

    def new_game(self, city_name, government, user_id=1):
        """Found a new city-state. Returns (snapshot or None, result)."""
        try:
            city_name = CityStateName(city_name).value
            government = GovernmentType(government).value
        except ValueError as e:
            return None, {"status": "error", "msg": str(e)}

        game = GameState.create(self.db, city_name, government, user_id, self.rng)
        logger.info("New game %s: %s under %s", game.get_state()['id'], city_name, government)
        return game.get_state(), {"status": "ok", "msg": f"You are now the ruler of {city_name}."}

    def _run_turn(self, game):
        game.increment_turn()

        economy = EconomyManager(game, self.db, self.rng)
        diplomacy = DiplomacyManager(game, self.db, self.rng)

        # Fixed order: economy, AI growth, diplomacy, government, wars
        economy.update_resources()
        economy.update_ai_city_states()
        diplomacy.check_ai_aggression()
        diplomacy.update_relationships()
        GovernmentManager(game, self.db, self.rng).process_government_effects()
        diplomacy.process_wars()

        # Floors hold at the end of every turn, battles included
        economy.clamp_player()
        economy.clamp_ai_city_states()

    def process_turn(self, snapshot):
        """Advance the simulation by one turn."""
        game = self._load(snapshot)
        self._run_turn(game)
        return game.get_state()

    def end_turn(self, snapshot):
        """Process a turn, then let the director possibly add a random event."""
        game = self._load(snapshot)
        self._run_turn(game)
        self.director.generate(game)

        state = game.get_state()
        logger.info("Turn %s completed. The year is now %s BCE.", state['turn'], state['year'])
        return state

    def generate_event(self, snapshot):
        """Run the event director alone. Returns (snapshot, event or None)."""
        game = self._load(snapshot)
        event = self.director.generate(game)
        return game.get_state(), event

    def apply_choice(self, snapshot, event_id, choice_index):
        return self._act(snapshot, lambda game: EventManager(game, self.db, self.rng).apply_choice(event_id, choice_index))

    # --- Policies ---

    def add_policy(self, snapshot, policy):
        return self._act(snapshot, lambda game: PolicyManager(game, self.db).add_policy(policy))

    def remove_policy(self, snapshot, policy_id):
        return self._act(snapshot, lambda game: PolicyManager(game, self.db).remove_policy(policy_id))

    def toggle_policy(self, snapshot, policy_id):
        return self._act(snapshot, lambda game: PolicyManager(game, self.db).toggle_policy(policy_id))

    def set_tax_rate(self, snapshot, rate):
        def action(game):
            max_rate = self.config.get('max_tax_rate', 50)
            if isinstance(rate, bool) or not isinstance(rate, int) or not 0 <= rate <= max_rate:
                return {"status": "error", "msg": f"Tax rate must be between 0 and {max_rate}"}

            policies = PolicyManager(game, self.db)
            tier = policies.tax_tier(rate)
            if not tier:
                return {"status": "error", "msg": f"No taxation tier covers {rate}%"}

            # Only one taxation policy at a time
            existing = policies.find_taxation_policy()
            if existing:
                policies.remove_policy(existing['id'])

            income = math.floor(math.floor(game.resources['population'] / 10) * rate / 100)
            return policies.add_policy({
                "name": tier['name'],
                "description": tier['description'],
                "effects": {"gold": income, "happiness": tier['happiness']},
                "category": "Economic",
            })

        return self._act(snapshot, action)

    # --- City actions ---

    def build_structure(self, snapshot, structure_id):
        def action(game):
            structure = next((s for s in self.db.get('structures', []) if s['id'] == structure_id), None)
            if not structure:
                return {"status": "error", "msg": f"Unknown structure: {structure_id}"}

            shortfall = find_shortfall(game.resources, structure['cost'])
            if shortfall:
                return insufficient(*shortfall)

            # Deduct the costs
            for resource, amount in structure['cost'].items():
                game.resources[resource] -= amount

            game.add_event(
                'Structure Built',
                f"You have built a new {structure['name']}.",
                EventType.ECONOMIC,
                EventSeverity.POSITIVE,
            )

            # The structure keeps paying out as a policy
            PolicyManager(game, self.db).add_policy({
                "name": structure['name'],
                "description": f"This structure provides various bonuses for {structure['category'].lower()}.",
                "effects": structure['effects'],
                "category": structure['category'],
            })
            return {"status": "ok", "msg": f"A new {structure['name']} has been constructed."}

        return self._act(snapshot, action)

    def train_units(self, snapshot, unit_id):
        def action(game):
            unit = next((u for u in self.db.get('units', []) if u['id'] == unit_id), None)
            if not unit:
                return {"status": "error", "msg": f"Unknown unit: {unit_id}"}

            shortfall = find_shortfall(game.resources, {"gold": unit['cost']})
            if shortfall:
                return insufficient(*shortfall)

            game.resources['gold'] -= unit['cost']
            game.resources['military'] += unit['amount']

            game.add_event(
                'Military Training',
                f"You have trained {unit['amount']} new military units.",
                EventType.MILITARY,
                EventSeverity.POSITIVE,
            )
            return {"status": "ok", "msg": f"{unit['amount']} new {unit['name']} have joined your forces."}

        return self._act(snapshot, action)

    def hold_festival(self, snapshot):
        def action(game):
            cost = self.config.get('festival_cost', 200)
            boost = self.config.get('festival_happiness', 15)

            shortfall = find_shortfall(game.resources, {"gold": cost})
            if shortfall:
                return insufficient(*shortfall)

            game.resources['gold'] -= cost
            game.resources['happiness'] = clamp(game.resources['happiness'] + boost, 0, 100)

            game.add_event(
                'Festival Held',
                f"You held a grand festival, boosting citizen happiness by {boost}.",
                EventType.CULTURAL,
                EventSeverity.POSITIVE,
            )
            return {"status": "ok", "msg": "The citizens are pleased with the celebrations."}

        return self._act(snapshot, action)

    def change_government(self, snapshot, government):
        return self._act(snapshot, lambda game: GovernmentManager(game, self.db, self.rng).change_government(government))

    # --- Diplomacy ---

    def declare_war(self, snapshot, city_state):
        return self._act(snapshot, lambda game: DiplomacyManager(game, self.db, self.rng).declare_war(city_state))

    def make_peace(self, snapshot, city_state):
        return self._act(snapshot, lambda game: DiplomacyManager(game, self.db, self.rng).make_peace(city_state))

    def establish_trade(self, snapshot, city_state):
        return self._act(snapshot, lambda game: DiplomacyManager(game, self.db, self.rng).establish_trade(city_state))
