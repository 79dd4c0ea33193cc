# polis/rules.py

class RuleEngine:
    """
    Deterministic Filters (Hard Constraints).
    Prevents the director from proposing events that make no sense for the current state.
    """

    @staticmethod
    def condition_holds(condition, resources):
        """Evaluate a template condition such as {"stat": "happiness", "below": 40}."""
        if not condition:
            return True

        value = resources.get(condition.get('stat'))
        if value is None:
            return False
        if 'below' in condition and not value < condition['below']:
            return False
        if 'above' in condition and not value > condition['above']:
            return False
        return True

    @staticmethod
    def filter_viable(event_list, gamestate):
        resources = gamestate['player_city_state']['resources']
        return [
            ev for ev in event_list
            if RuleEngine.condition_holds(ev.get('condition'), resources)
        ]
