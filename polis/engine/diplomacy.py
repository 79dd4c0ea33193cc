# polis/engine/diplomacy.py

import logging
import math

from .enums import EventSeverity, EventType, RelationshipStatus, TRADE_TREATY

logger = logging.getLogger(__name__)


class DiplomacyManager:
    """Relationship drift, battles, AI aggression and the player's diplomatic actions."""

    def __init__(self, game_state, db, rng):
        self.game_state = game_state
        self.db = db
        self.config = db.get('config', {})
        self.rng = rng

    def set_status(self, relationship, status):
        """Move a relationship to a new status. War voids any trade treaty."""
        relationship['status'] = RelationshipStatus(status).value
        if status == RelationshipStatus.WAR and TRADE_TREATY in relationship['treaties']:
            relationship['treaties'].remove(TRADE_TREATY)

    # --- Per-turn drift ---

    def update_relationships(self):
        for relationship in self.game_state.get_state()['relationships']:
            name = relationship['city_state']
            status = relationship['status']

            if status == RelationshipStatus.WAR:
                if self.rng.random() < self.config.get('peace_offer_chance', 0.1):
                    self.game_state.add_event(
                        'Peace Offer',
                        f"{name} has offered a peace treaty.",
                        EventType.MILITARY,
                        EventSeverity.NEUTRAL,
                        choices=[
                            {
                                "text": 'Accept Peace',
                                "effects": {"happiness": 5},
                                "outcome": {"city_state": name, "status": RelationshipStatus.NEUTRAL.value},
                            },
                            {"text": 'Reject Offer', "effects": {"military": 50}},
                        ],
                    )

            # Trade agreements improve relationships over time
            if (TRADE_TREATY in relationship['treaties']
                    and status not in (RelationshipStatus.ALLIED, RelationshipStatus.WAR)):
                if self.rng.random() >= self.config.get('relation_improve_chance', 0.1):
                    continue

                if status == RelationshipStatus.NEUTRAL:
                    self.set_status(relationship, RelationshipStatus.FRIENDLY)
                    self.game_state.add_event(
                        'Improved Relations',
                        f"Relations with {name} have improved to Friendly.",
                        EventType.POLITICAL,
                        EventSeverity.POSITIVE,
                    )
                elif status == RelationshipStatus.FRIENDLY:
                    if self.rng.random() < self.config.get('alliance_offer_chance', 0.2):
                        # Allied status is only granted through the player's choice
                        self.game_state.add_event(
                            'Alliance Offer',
                            f"{name} has offered an alliance.",
                            EventType.POLITICAL,
                            EventSeverity.POSITIVE,
                            choices=[
                                {
                                    "text": 'Accept Alliance',
                                    "effects": {"happiness": 10},
                                    "outcome": {"city_state": name, "status": RelationshipStatus.ALLIED.value},
                                },
                                {"text": 'Decline Politely', "effects": {}},
                            ],
                        )

    def check_ai_aggression(self):
        """Strong AI city-states may turn a hostile relationship into war."""
        player_military = self.game_state.resources['military']
        ratio = self.config.get('ai_aggression_ratio', 1.5)

        for city in self.game_state.get_state()['other_city_states']:
            relationship = self.game_state.get_relationship(city['name'])
            if not relationship or relationship['status'] != RelationshipStatus.HOSTILE:
                continue
            if city['resources']['military'] <= player_military * ratio:
                continue
            if self.rng.random() >= self.config.get('ai_aggression_chance', 0.2):
                continue

            self.set_status(relationship, RelationshipStatus.WAR)
            self.game_state.add_event(
                'War Declared',
                f"{city['name']} has declared war on your city-state.",
                EventType.MILITARY,
                EventSeverity.DANGER,
            )
            logger.info("%s declared war on the player", city['name'])

    # --- War resolution ---

    def process_wars(self):
        at_war = [r for r in self.game_state.get_state()['relationships'] if r['status'] == RelationshipStatus.WAR]

        for relationship in at_war:
            enemy = self.game_state.get_city(relationship['city_state'])
            if not enemy:
                continue
            if self.rng.random() < self.config.get('battle_chance', 0.3):
                self.resolve_battle(relationship, enemy)

    def resolve_battle(self, relationship, enemy):
        """Fight one battle between the player and an enemy city-state."""
        player = self.game_state.resources
        foe = enemy['resources']

        player_strength = player['military']
        enemy_strength = foe['military']

        # Each side fights at 80% to 120% of its actual strength
        player_effective = player_strength * self.rng.uniform(0.8, 1.2)
        enemy_effective = enemy_strength * self.rng.uniform(0.8, 1.2)

        if player_effective > enemy_effective:
            ratio = player_effective / enemy_effective if enemy_effective else 0
            enemy_losses = math.floor(enemy_strength * (0.1 + ratio * 0.1))
            player_losses = math.floor(player_strength * 0.05)

            player['military'] = max(0, player_strength - player_losses)
            foe['military'] = max(0, enemy_strength - enemy_losses)

            gold_captured = math.floor(foe['gold'] * 0.1)
            player['gold'] += gold_captured
            foe['gold'] -= gold_captured

            event = self.game_state.add_event(
                'Victory in Battle',
                f"Your forces have defeated {enemy['name']} in battle. You lost {player_losses} troops "
                f"but the enemy lost {enemy_losses}. You captured {gold_captured} gold.",
                EventType.MILITARY,
                EventSeverity.POSITIVE,
            )
        else:
            ratio = enemy_effective / player_effective if player_effective else 0
            player_losses = math.floor(player_strength * (0.1 + ratio * 0.1))
            enemy_losses = math.floor(enemy_strength * 0.05)

            player['military'] = max(0, player_strength - player_losses)
            foe['military'] = max(0, enemy_strength - enemy_losses)

            # Lost gold is not captured by the enemy
            gold_lost = math.floor(player['gold'] * 0.05)
            player['gold'] -= gold_lost

            event = self.game_state.add_event(
                'Defeat in Battle',
                f"Your forces have been defeated by {enemy['name']} in battle. You lost {player_losses} troops "
                f"while the enemy lost {enemy_losses}. You lost {gold_lost} gold.",
                EventType.MILITARY,
                EventSeverity.DANGER,
            )

        logger.info("Battle against %s: %s", enemy['name'], event['title'])

        # One side can no longer keep fighting
        exhaustion = self.config.get('war_exhaustion_military', 100)
        if player['military'] < exhaustion or foe['military'] < exhaustion:
            self.set_status(relationship, RelationshipStatus.HOSTILE)
            self.game_state.add_event(
                'War Ended',
                f"The war with {enemy['name']} has ended due to one side's inability to continue fighting.",
                EventType.MILITARY,
                EventSeverity.POSITIVE,
            )
        return event

    # --- Player actions ---

    def declare_war(self, name):
        relationship = self.game_state.get_relationship(name)
        if not relationship:
            return {"status": "error", "msg": f"Unknown city-state: {name}"}
        if relationship['status'] == RelationshipStatus.WAR:
            return {"status": "error", "msg": f"Already at war with {name}"}

        self.set_status(relationship, RelationshipStatus.WAR)
        self.game_state.add_event(
            'War Declared',
            f"You have declared war on {name}.",
            EventType.MILITARY,
            EventSeverity.DANGER,
        )
        return {"status": "ok", "msg": f"Your city-state is now at war with {name}."}

    def make_peace(self, name):
        relationship = self.game_state.get_relationship(name)
        if not relationship:
            return {"status": "error", "msg": f"Unknown city-state: {name}"}
        if relationship['status'] not in (RelationshipStatus.WAR, RelationshipStatus.HOSTILE):
            return {"status": "error", "msg": f"Not in conflict with {name}"}

        self.set_status(relationship, RelationshipStatus.NEUTRAL)
        self.game_state.add_event(
            'Peace Established',
            f"You have made peace with {name}.",
            EventType.MILITARY,
            EventSeverity.POSITIVE,
        )
        return {"status": "ok", "msg": f"Your city-state is now at peace with {name}."}

    def establish_trade(self, name):
        relationship = self.game_state.get_relationship(name)
        if not relationship:
            return {"status": "error", "msg": f"Unknown city-state: {name}"}

        # Can't trade with enemies
        if relationship['status'] == RelationshipStatus.WAR:
            return {"status": "error", "msg": f"You are at war with {name}."}
        if TRADE_TREATY in relationship['treaties']:
            return {"status": "error", "msg": f"You already have a trade agreement with {name}."}

        relationship['treaties'].append(TRADE_TREATY)
        if relationship['status'] == RelationshipStatus.NEUTRAL:
            self.set_status(relationship, RelationshipStatus.FRIENDLY)

        bonus = self.config.get('trade_bonus', 50)
        self.game_state.add_event(
            'Trade Route Established',
            f"You have established a trade route with {name}, increasing income by {bonus} gold per turn.",
            EventType.ECONOMIC,
            EventSeverity.POSITIVE,
        )
        return {"status": "ok", "msg": f"A profitable trade route has been established with {name}."}
