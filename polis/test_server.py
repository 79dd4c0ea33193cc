# polis/test_server.py
import pytest

from polis.engine import GameEngine
from polis.server import create_app
from polis.testing import FixedRandom


@pytest.fixture
def client(db):
    app = create_app(db=db, engine=GameEngine(db, FixedRandom(roll=0.99)))
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def record(client):
    resp = client.post('/api/games/new', json={"city_state": 'Athens', "government": 'Democracy', "user_id": 1})
    assert resp.status_code == 201
    return resp.get_json()


def test_new_game_is_stored(client, record):
    assert record['game_state']['player_city_state']['name'] == 'Athens'

    listing = client.get('/api/games').get_json()
    assert [r['id'] for r in listing] == [record['id']]


def test_new_game_validation(client):
    assert client.post('/api/games/new', json={"city_state": 'Athens'}).status_code == 400
    resp = client.post('/api/games/new', json={"city_state": 'Rome', "government": 'Democracy'})
    assert resp.status_code == 400
    assert resp.get_json()['status'] == 'error'


def test_end_turn_advances_stored_game(client, record):
    resp = client.post(f"/api/games/{record['id']}/end-turn")

    assert resp.status_code == 200
    game = resp.get_json()['game_state']
    assert game['turn'] == 2
    assert game['year'] == 449


def test_action_success_and_failure(client, record):
    resp = client.post(f"/api/games/{record['id']}/actions/festival")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['result']['status'] == 'ok'
    assert body['game']['game_state']['player_city_state']['resources']['gold'] == 800

    resp = client.post(f"/api/games/{record['id']}/actions/build", json={"structure": 'colosseum'})
    assert resp.status_code == 400
    assert resp.get_json()['status'] == 'error'

    assert client.post(f"/api/games/{record['id']}/actions/build", json={}).status_code == 400
    assert client.post(f"/api/games/{record['id']}/actions/teleport").status_code == 404


def test_choose_event_option(client, record):
    game = record['game_state']
    game['events'].insert(0, {
        "id": 'vote',
        "turn": 1,
        "year": 450,
        "title": 'Vote',
        "description": 'The assembly gathers.',
        "type": 'Political',
        "severity": 'Neutral',
        "choices": [{"text": 'Fund the fleet', "effects": {"gold": -100}}],
    })
    client.put(f"/api/games/{record['id']}", json={"game_state": game})

    resp = client.post(f"/api/games/{record['id']}/events/vote/choose", json={"choice_index": 0})

    assert resp.status_code == 200
    state = resp.get_json()['game']['game_state']
    assert state['player_city_state']['resources']['gold'] == 900
    assert 'choices' not in state['events'][0]


def test_history_download(client, record):
    resp = client.get(f"/api/games/{record['id']}/history")

    assert resp.status_code == 200
    assert resp.mimetype == 'text/plain'
    assert 'athens_history.txt' in resp.headers['Content-Disposition']
    assert 'City State Founded' in resp.get_data(as_text=True)


def test_game_crud(client):
    resp = client.post('/api/games', json={"user_id": 3, "game_state": {"turn": 1}})
    assert resp.status_code == 201
    record_id = resp.get_json()['id']

    resp = client.put(f"/api/games/{record_id}", json={"game_state": {"turn": 2}})
    assert resp.get_json()['game_state'] == {"turn": 2}

    assert client.delete(f"/api/games/{record_id}").status_code == 204
    assert client.get(f"/api/games/{record_id}").status_code == 404
    assert client.delete(f"/api/games/{record_id}").status_code == 404


def test_multiplayer_flow(client):
    resp = client.post('/api/multiplayer/create', json={
        "game_state_id": 1, "user_id": 'u1', "username": 'Pericles', "city_state": 'Athens',
    })
    assert resp.status_code == 201
    sid = resp.get_json()['id']

    client.post(f"/api/multiplayer/join/{sid}", json={"user_id": 'u2', "username": 'Leonidas', "city_state": 'Sparta'})

    assert client.post(f"/api/multiplayer/{sid}/use-action", json={"user_id": 'u2'}).status_code == 400
    resp = client.post(f"/api/multiplayer/{sid}/use-action", json={"user_id": 'u1'})
    assert resp.get_json()['players'][0]['actions_remaining'] == 2

    session = client.post(f"/api/multiplayer/{sid}/end-turn").get_json()
    assert session['players'][1]['is_current_turn'] is True
    assert session['turn_number'] == 2

    session = client.post(f"/api/multiplayer/{sid}/disconnect", json={"user_id": 'u2'}).get_json()
    assert session['players'][0]['is_current_turn'] is True

    assert client.get(f"/api/multiplayer/{sid}").status_code == 200
    assert client.get('/api/multiplayer/nope').status_code == 404
    assert client.post('/api/multiplayer/create', json={}).status_code == 400


def test_malformed_policy_is_a_bad_request(client, record):
    resp = client.post(f"/api/games/{record['id']}/actions/add-policy", json={"policy": 'Bread'})

    assert resp.status_code == 400
    assert resp.get_json()['status'] == 'error'
    stored = client.get(f"/api/games/{record['id']}").get_json()
    assert stored['game_state']['policies'] == []
