# polis/engine/game_state.py

import copy
import uuid
from datetime import datetime

from .enums import EventSeverity, EventType, GovernmentType, RelationshipStatus
from .resources import empty_happiness_factors, make_resources


def now_iso():
    return datetime.now().isoformat()


class GameState:
    """Manages one game snapshot and the mutations a turn applies to it.

    The wrapper always works on its own deep copy, so the snapshot handed in
    by the caller is never modified.
    """

    def __init__(self, snapshot, config=None):
        self.config = config or {}
        self.state = copy.deepcopy(snapshot)

    @classmethod
    def create(cls, db, city_name, government, user_id, rng):
        """Build the opening snapshot for a new game."""
        config = db['config']
        year = config.get('starting_year', 450)
        start = config.get('starting_resources', {})
        cities = {c['name']: c for c in db['cities']}

        player = {
            "id": str(uuid.uuid4()),
            "name": city_name,
            "government": GovernmentType(government).value,
            "resources": dict(make_resources(**start), happiness_factors=empty_happiness_factors()),
            "location": dict(cities[city_name]['location']),
            "is_player_owned": True,
        }

        others = []
        for name, city in cities.items():
            if name == city_name:
                continue
            others.append({
                "id": str(uuid.uuid4()),
                "name": name,
                "government": rng.choice([
                    GovernmentType.DEMOCRACY.value,
                    GovernmentType.OLIGARCHY.value,
                    GovernmentType.TYRANNY.value,
                ]),
                "resources": cls._random_resources(config, rng),
                "location": dict(city['location']),
                "is_player_owned": False,
            })

        timestamp = now_iso()
        game = cls({
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "turn": 1,
            "year": year,
            "player_city_state": player,
            "other_city_states": others,
            "relationships": [
                {"city_state": c['name'], "status": RelationshipStatus.NEUTRAL.value, "treaties": []}
                for c in others
            ],
            "policies": [],
            "events": [],
            "created_at": timestamp,
            "updated_at": timestamp,
        }, config)

        game.add_event(
            'City State Founded',
            f"Your city-state of {city_name} has been established under a {government} "
            "government. May the gods favor your rule!",
            EventType.POLITICAL,
            EventSeverity.POSITIVE,
        )
        return game

    @staticmethod
    def _random_resources(config, rng):
        # Each range is (base, spread): base + randrange(spread)
        ranges = config.get('ai_resource_ranges', {})
        values = {}
        for key, (base, spread) in ranges.items():
            values[key] = base + rng.randrange(spread)
        return make_resources(**values)

    def get_state(self):
        """Return the current snapshot."""
        return self.state

    @property
    def player(self):
        return self.state['player_city_state']

    @property
    def resources(self):
        return self.state['player_city_state']['resources']

    def get_city(self, name):
        """Find a non-player city-state by name."""
        return next((c for c in self.state['other_city_states'] if c['name'] == name), None)

    def get_relationship(self, name):
        return next((r for r in self.state['relationships'] if r['city_state'] == name), None)

    def get_policy(self, policy_id):
        return next((p for p in self.state['policies'] if p['id'] == policy_id), None)

    def get_event(self, event_id):
        return next((e for e in self.state['events'] if e['id'] == event_id), None)

    def count_relationships(self, status):
        return sum(1 for r in self.state['relationships'] if r['status'] == status)

    def increment_turn(self):
        """Advance to the next turn. Years count down (BCE)."""
        self.state['turn'] += 1
        self.state['year'] -= 1
        self.touch()

    def touch(self):
        self.state['updated_at'] = now_iso()

    def add_event(self, title, description, event_type, severity, effects=None, choices=None):
        """Create an event stamped with the current turn/year and put it at the head of the log."""
        event = {
            "id": str(uuid.uuid4()),
            "turn": self.state['turn'],
            "year": self.state['year'],
            "title": title,
            "description": description,
            "type": EventType(event_type).value,
            "severity": EventSeverity(severity).value,
        }
        if effects is not None:
            event['effects'] = dict(effects)
        if choices is not None:
            event['choices'] = copy.deepcopy(choices)
        self.prepend_event(event)
        return event

    def prepend_event(self, event):
        """Put an event at the head of the log (most recent first)."""
        events = self.state['events']
        events.insert(0, event)

        limit = self.config.get('event_log_limit', 0)
        if limit and len(events) > limit:
            del events[limit:]
