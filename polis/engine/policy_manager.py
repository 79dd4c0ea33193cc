# polis/engine/policy_manager.py

import logging
import uuid

from .enums import EventSeverity, EventType, PolicyCategory, ResourceKind
from .resources import apply_effects

logger = logging.getLogger(__name__)


def base_modifiers():
    """Neutral modifier set: multipliers for produced resources, flat happiness."""
    return {
        ResourceKind.GOLD.value: 1.0,
        ResourceKind.FOOD.value: 1.0,
        ResourceKind.POPULATION.value: 1.0,
        ResourceKind.MILITARY.value: 1.0,
        ResourceKind.HAPPINESS.value: 0,
    }


def stack_modifiers(modifiers, deltas):
    """Add a modifier table row (multiplier deltas, flat happiness) onto a modifier set."""
    for kind in ResourceKind:
        modifiers[kind.value] += deltas.get(kind.value, 0)


class PolicyManager:
    """Manages policies, their effects, and validation."""

    def __init__(self, game_state, db):
        self.game_state = game_state
        self.db = db

    def get_active_policies(self):
        return [p for p in self.game_state.get_state()['policies'] if p.get('active')]

    def count_active(self, category):
        return sum(1 for p in self.get_active_policies() if p['category'] == category)

    def apply_passive_effects(self):
        """Apply flat effects from active policies."""
        resources = self.game_state.resources
        for policy in self.get_active_policies():
            apply_effects(resources, policy.get('effects', {}))

    def calculate_modifiers(self):
        """Stack the category modifiers of every active policy."""
        modifiers = base_modifiers()
        table = self.db.get('category_modifiers', {})
        for policy in self.get_active_policies():
            stack_modifiers(modifiers, table.get(policy['category'], {}))
        return modifiers

    def add_policy(self, policy):
        """Enact a policy and record it in the event log."""
        if not isinstance(policy, dict):
            return {"status": "error", "msg": "Policy must be an object"}

        try:
            category = PolicyCategory(policy.get('category')).value
        except ValueError:
            return {"status": "error", "msg": f"Invalid policy category: {policy.get('category')}"}

        name = policy.get('name')
        if not name:
            return {"status": "error", "msg": "Policy needs a name"}

        policy_id = policy.get('id') or str(uuid.uuid4())
        if self.game_state.get_policy(policy_id):
            return {"status": "error", "msg": f"Policy {policy_id} already exists"}

        raw_effects = policy.get('effects') or {}
        try:
            effects = {k.value: int(raw_effects[k.value]) for k in ResourceKind if k.value in raw_effects}
        except (TypeError, ValueError):
            return {"status": "error", "msg": "Policy effects must be whole numbers"}

        entry = {
            "id": policy_id,
            "name": name,
            "description": policy.get('description', ''),
            "effects": effects,
            "category": category,
            "active": policy.get('active', True),
        }
        self.game_state.get_state()['policies'].append(entry)

        self.game_state.add_event(
            'New Policy Enacted',
            f"You have enacted the {name} policy: {entry['description']}",
            EventType.POLITICAL,
            EventSeverity.NEUTRAL,
        )
        logger.info("Policy enacted: %s (%s)", name, category)
        return {"status": "ok", "msg": f"Enacted: {name}", "policy_id": policy_id}

    def remove_policy(self, policy_id):
        """Repeal a policy. Unknown ids leave the state untouched."""
        policies = self.game_state.get_state()['policies']
        policy = self.game_state.get_policy(policy_id)
        if not policy:
            return {"status": "error", "msg": "Policy not found"}

        policies.remove(policy)
        self.game_state.add_event(
            'Policy Repealed',
            f"You have repealed the {policy['name']} policy.",
            EventType.POLITICAL,
            EventSeverity.NEUTRAL,
        )
        return {"status": "ok", "msg": f"Repealed: {policy['name']}"}

    def toggle_policy(self, policy_id):
        """Suspend or resume a policy without removing it."""
        policy = self.game_state.get_policy(policy_id)
        if not policy:
            return {"status": "error", "msg": "Policy not found"}

        policy['active'] = not policy['active']
        msg = f"{'Resumed' if policy['active'] else 'Suspended'}: {policy['name']}"
        return {"status": "ok", "msg": msg}

    def find_taxation_policy(self):
        return next(
            (p for p in self.game_state.get_state()['policies']
             if p['category'] == PolicyCategory.ECONOMIC.value and 'Taxation' in p['name']),
            None,
        )

    def tax_tier(self, rate):
        """Pick the taxation tier covering a rate."""
        for tier in self.db.get('tax_tiers', []):
            if rate <= tier['max_rate']:
                return tier
        return None
