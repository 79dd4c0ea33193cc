# polis/test_diplomacy.py
import copy
import math

from polis.engine import DiplomacyManager, GameEngine
from polis.engine.enums import RelationshipStatus
from polis.testing import FixedRandom, set_resources


def go_to_war(game, name):
    relationship = game.get_relationship(name)
    relationship['status'] = RelationshipStatus.WAR.value
    return relationship, game.get_city(name)


class TestBattles:

    def test_stronger_player_wins(self, game, db):
        rng = FixedRandom(roll=0.0)
        relationship, enemy = go_to_war(game, 'Sparta')
        set_resources(game.resources, military=1000, gold=1000)
        set_resources(enemy['resources'], military=400, gold=500)

        DiplomacyManager(game, db, rng).process_wars()

        ratio = (1000 * rng.uniform(0.8, 1.2)) / (400 * rng.uniform(0.8, 1.2))
        expected_enemy = 400 - math.floor(400 * (0.1 + ratio * 0.1))

        event = game.get_state()['events'][0]
        assert event['title'] == 'Victory in Battle'
        assert event['severity'] == 'Positive'
        assert game.resources['military'] == 950
        assert enemy['resources']['military'] == expected_enemy
        assert game.resources['gold'] == 1050
        assert enemy['resources']['gold'] == 450
        assert relationship['status'] == 'War'

    def test_weaker_player_loses_gold_and_troops(self, game, db):
        rng = FixedRandom(roll=0.0)
        relationship, enemy = go_to_war(game, 'Thebes')
        set_resources(game.resources, military=150, gold=1000)
        set_resources(enemy['resources'], military=1000, gold=500)

        DiplomacyManager(game, db, rng).resolve_battle(relationship, enemy)

        titles = [e['title'] for e in game.get_state()['events']]
        assert titles[:2] == ['War Ended', 'Defeat in Battle']
        assert game.resources['gold'] == 950
        assert enemy['resources']['gold'] == 500
        assert enemy['resources']['military'] == 950
        assert game.resources['military'] < 100
        assert relationship['status'] == 'Hostile'

    def test_exhausted_enemy_ends_the_war(self, game, db):
        relationship, enemy = go_to_war(game, 'Corinth')
        set_resources(game.resources, military=500)
        set_resources(enemy['resources'], military=105)

        DiplomacyManager(game, db, FixedRandom()).resolve_battle(relationship, enemy)

        assert enemy['resources']['military'] < 100
        assert relationship['status'] == 'Hostile'
        assert game.get_state()['events'][0]['title'] == 'War Ended'

    def test_military_never_goes_negative(self, game, db):
        relationship, enemy = go_to_war(game, 'Sparta')
        set_resources(game.resources, military=10000)
        set_resources(enemy['resources'], military=100)

        DiplomacyManager(game, db, FixedRandom()).resolve_battle(relationship, enemy)

        assert enemy['resources']['military'] == 0

    def test_no_battle_when_roll_misses(self, game, db):
        go_to_war(game, 'Sparta')
        before = copy.deepcopy(game.get_state())

        DiplomacyManager(game, db, FixedRandom(roll=0.99)).process_wars()

        assert game.get_state() == before


class TestRelationshipDrift:

    def test_war_may_bring_a_peace_offer(self, game, db):
        go_to_war(game, 'Sparta')

        DiplomacyManager(game, db, FixedRandom(roll=0.0)).update_relationships()

        offer = game.get_state()['events'][0]
        assert offer['title'] == 'Peace Offer'
        assert [c['text'] for c in offer['choices']] == ['Accept Peace', 'Reject Offer']

    def test_trade_partners_warm_up(self, game, db):
        relationship = game.get_relationship('Thebes')
        relationship['treaties'].append('Trade')

        DiplomacyManager(game, db, FixedRandom(roll=0.0)).update_relationships()

        assert relationship['status'] == 'Friendly'
        assert game.get_state()['events'][0]['title'] == 'Improved Relations'

    def test_friendly_partner_offers_alliance_without_allying(self, game, db):
        relationship = game.get_relationship('Thebes')
        relationship['status'] = RelationshipStatus.FRIENDLY.value
        relationship['treaties'].append('Trade')

        DiplomacyManager(game, db, FixedRandom(roll=0.0)).update_relationships()

        assert relationship['status'] == 'Friendly'
        offer = game.get_state()['events'][0]
        assert offer['title'] == 'Alliance Offer'
        assert offer['choices'][0]['outcome'] == {"city_state": 'Thebes', "status": 'Allied'}

    def test_strong_hostile_neighbour_declares_war(self, game, db):
        relationship = game.get_relationship('Sparta')
        relationship['status'] = RelationshipStatus.HOSTILE.value
        relationship['treaties'].append('Trade')
        set_resources(game.resources, military=100)
        set_resources(game.get_city('Sparta')['resources'], military=400)

        DiplomacyManager(game, db, FixedRandom(roll=0.0)).check_ai_aggression()

        assert relationship['status'] == 'War'
        assert relationship['treaties'] == []
        assert game.get_state()['events'][0]['title'] == 'War Declared'

    def test_weak_hostile_neighbour_stays_put(self, game, db):
        relationship = game.get_relationship('Sparta')
        relationship['status'] = RelationshipStatus.HOSTILE.value
        set_resources(game.resources, military=1000)
        set_resources(game.get_city('Sparta')['resources'], military=400)

        DiplomacyManager(game, db, FixedRandom(roll=0.0)).check_ai_aggression()

        assert relationship['status'] == 'Hostile'


class TestDiplomaticActions:

    def test_trade_refused_while_at_war(self, db, snapshot):
        snapshot['relationships'][0]['status'] = 'War'
        before = copy.deepcopy(snapshot)
        name = snapshot['relationships'][0]['city_state']

        state, result = GameEngine(db, FixedRandom()).establish_trade(snapshot, name)

        assert result['status'] == 'error'
        assert state == before

    def test_trade_only_once_per_partner(self, db, snapshot):
        engine = GameEngine(db, FixedRandom())
        name = snapshot['relationships'][0]['city_state']

        state, result = engine.establish_trade(snapshot, name)
        assert result['status'] == 'ok'
        relationship = next(r for r in state['relationships'] if r['city_state'] == name)
        assert relationship['treaties'] == ['Trade']
        assert relationship['status'] == 'Friendly'

        again, result = engine.establish_trade(state, name)
        assert result['status'] == 'error'
        assert again == state

    def test_declaring_war_voids_trade(self, db, snapshot):
        engine = GameEngine(db, FixedRandom())
        name = snapshot['relationships'][0]['city_state']
        state, _ = engine.establish_trade(snapshot, name)

        state, result = engine.declare_war(state, name)

        relationship = next(r for r in state['relationships'] if r['city_state'] == name)
        assert result['status'] == 'ok'
        assert relationship['status'] == 'War'
        assert 'Trade' not in relationship['treaties']

    def test_peace_only_from_conflict(self, db, snapshot):
        engine = GameEngine(db, FixedRandom())
        name = snapshot['relationships'][0]['city_state']

        _, result = engine.make_peace(snapshot, name)
        assert result['status'] == 'error'

        state, _ = engine.declare_war(snapshot, name)
        state, result = engine.make_peace(state, name)
        assert result['status'] == 'ok'
        assert state['relationships'][0]['status'] == 'Neutral'

    def test_unknown_city_state_is_rejected(self, db, snapshot):
        before = copy.deepcopy(snapshot)

        state, result = GameEngine(db, FixedRandom()).declare_war(snapshot, 'Atlantis')

        assert result['status'] == 'error'
        assert state == before
