# polis/engine/resources.py

from .enums import ResourceKind

HAPPINESS_MIN = 0
HAPPINESS_MAX = 100

FACTOR_KEYS = (
    'taxation_level',
    'food_security',
    'military_presence',
    'cultural_investment',
    'war_weariness',
    'political_stability',
    'recent_events',
)


def clamp(value, low, high):
    return max(low, min(high, value))


def make_resources(gold=0, food=0, population=0, military=0, happiness=0):
    """Build a resource ledger with every ResourceKind present."""
    return {
        ResourceKind.GOLD.value: gold,
        ResourceKind.FOOD.value: food,
        ResourceKind.POPULATION.value: population,
        ResourceKind.MILITARY.value: military,
        ResourceKind.HAPPINESS.value: happiness,
    }


def empty_happiness_factors():
    return {key: 0 for key in FACTOR_KEYS}


def apply_effects(resources, effects):
    """Add each effect delta onto the ledger. Unknown keys are ignored."""
    if not effects:
        return
    for kind in ResourceKind:
        delta = effects.get(kind.value)
        if delta:
            resources[kind.value] = resources.get(kind.value, 0) + int(delta)


def clamp_resources(resources, min_population=1000, min_military=0):
    """Ensure the ledger respects the resource floors and the happiness range."""
    resources['gold'] = max(0, resources['gold'])
    resources['food'] = max(0, resources['food'])
    resources['military'] = max(min_military, resources['military'])

    # Population can't go below a minimum threshold
    resources['population'] = max(min_population, resources['population'])

    if 'happiness' in resources:
        resources['happiness'] = clamp(resources['happiness'], HAPPINESS_MIN, HAPPINESS_MAX)


def find_shortfall(resources, cost):
    """Return (resource, required, available) for the first unaffordable cost, else None."""
    for kind in ResourceKind:
        required = cost.get(kind.value, 0)
        available = resources.get(kind.value, 0)
        if required > 0 and available < required:
            return kind.value, required, available
    return None
