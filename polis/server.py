# polis/server.py

import logging

from flask import Flask, jsonify, request, make_response

from polis.database import load_data
from polis.engine import GameEngine
from polis.history import export_history, history_filename
from polis.multiplayer import SessionStore
from polis.storage import MemStorage

logger = logging.getLogger(__name__)

# Player actions reachable over HTTP: name -> (engine method, request field or None)
ACTIONS = {
    'build': ('build_structure', 'structure'),
    'train': ('train_units', 'unit'),
    'tax': ('set_tax_rate', 'rate'),
    'festival': ('hold_festival', None),
    'declare-war': ('declare_war', 'city_state'),
    'make-peace': ('make_peace', 'city_state'),
    'trade': ('establish_trade', 'city_state'),
    'government': ('change_government', 'government'),
    'add-policy': ('add_policy', 'policy'),
    'remove-policy': ('remove_policy', 'policy_id'),
    'toggle-policy': ('toggle_policy', 'policy_id'),
}


def missing_fields(body, *fields):
    return [f for f in fields if body.get(f) in (None, '')]


def create_app(db=None, storage=None, sessions=None, engine=None):
    """Build the Flask app around injected storage, session store and engine."""
    app = Flask(__name__)

    db = db or load_data()
    storage = storage or MemStorage()
    sessions = sessions or SessionStore.from_config(db['config'])
    engine = engine or GameEngine(db)

    app.extensions['polis'] = {"db": db, "storage": storage, "sessions": sessions, "engine": engine}

    def body():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def bad_request(msg):
        return jsonify({"message": msg}), 400

    def not_found(what):
        return jsonify({"message": f"{what} not found"}), 404

    def save(record, game_state):
        return storage.update_game_state(record['id'], game_state)

    # --- GAME STATES ---

    @app.route('/api/games', methods=['GET'])
    def list_games():
        return jsonify(storage.get_all_game_states())

    @app.route('/api/games/<int:game_id>', methods=['GET'])
    def get_game(game_id):
        record = storage.get_game_state(game_id)
        if not record:
            return not_found('Game')
        return jsonify(record)

    @app.route('/api/games', methods=['POST'])
    def create_game():
        d = body()
        missing = missing_fields(d, 'user_id', 'game_state')
        if missing:
            return bad_request(f"Missing required fields: {', '.join(missing)}")
        return jsonify(storage.create_game_state(d['user_id'], d['game_state'])), 201

    @app.route('/api/games/<int:game_id>', methods=['PUT'])
    def update_game(game_id):
        d = body()
        if missing_fields(d, 'game_state'):
            return bad_request("Missing required fields: game_state")
        record = storage.update_game_state(game_id, d['game_state'])
        if not record:
            return not_found('Game')
        return jsonify(record)

    @app.route('/api/games/<int:game_id>', methods=['DELETE'])
    def delete_game(game_id):
        if not storage.delete_game_state(game_id):
            return not_found('Game')
        return '', 204

    @app.route('/api/games/new', methods=['POST'])
    def new_game():
        d = body()
        missing = missing_fields(d, 'city_state', 'government')
        if missing:
            return bad_request(f"Missing required fields: {', '.join(missing)}")

        user_id = d.get('user_id', 1)
        game_state, result = engine.new_game(d['city_state'], d['government'], user_id)
        if result['status'] != 'ok':
            return jsonify(result), 400

        record = storage.create_game_state(user_id, game_state)
        logger.info("Stored game record %s for user %s", record['id'], user_id)
        return jsonify(record), 201

    # --- TURNS & ACTIONS ---

    @app.route('/api/games/<int:game_id>/end-turn', methods=['POST'])
    def end_turn(game_id):
        record = storage.get_game_state(game_id)
        if not record:
            return not_found('Game')
        return jsonify(save(record, engine.end_turn(record['game_state'])))

    @app.route('/api/games/<int:game_id>/actions/<action>', methods=['POST'])
    def game_action(game_id, action):
        record = storage.get_game_state(game_id)
        if not record:
            return not_found('Game')
        if action not in ACTIONS:
            return not_found(f"Action '{action}'")

        method, field = ACTIONS[action]
        d = body()
        args = []
        if field:
            if field not in d:
                return bad_request(f"Missing required fields: {field}")
            args.append(d[field])

        game_state, result = getattr(engine, method)(record['game_state'], *args)
        if result['status'] != 'ok':
            return jsonify(result), 400
        return jsonify({"result": result, "game": save(record, game_state)})

    @app.route('/api/games/<int:game_id>/events/<event_id>/choose', methods=['POST'])
    def choose_event_option(game_id, event_id):
        record = storage.get_game_state(game_id)
        if not record:
            return not_found('Game')

        d = body()
        if 'choice_index' not in d:
            return bad_request("Missing required fields: choice_index")

        game_state, result = engine.apply_choice(record['game_state'], event_id, d['choice_index'])
        if result['status'] != 'ok':
            return jsonify(result), 400
        return jsonify({"result": result, "game": save(record, game_state)})

    @app.route('/api/games/<int:game_id>/history', methods=['GET'])
    def history(game_id):
        record = storage.get_game_state(game_id)
        if not record:
            return not_found('Game')

        resp = make_response(export_history(record['game_state']))
        resp.mimetype = 'text/plain'
        resp.headers['Content-Disposition'] = f"attachment; filename={history_filename(record['game_state'])}"
        return resp

    # --- MULTIPLAYER ---

    @app.route('/api/multiplayer/create', methods=['POST'])
    def create_session():
        d = body()
        missing = missing_fields(d, 'game_state_id', 'user_id', 'username', 'city_state')
        if missing:
            return bad_request(f"Missing required fields: {', '.join(missing)}")
        session = sessions.create_session(d['game_state_id'], d['user_id'], d['username'], d['city_state'])
        return jsonify(session), 201

    @app.route('/api/multiplayer/join/<session_id>', methods=['POST'])
    def join_session(session_id):
        d = body()
        missing = missing_fields(d, 'user_id', 'username', 'city_state')
        if missing:
            return bad_request(f"Missing required fields: {', '.join(missing)}")
        session = sessions.join_session(session_id, d['user_id'], d['username'], d['city_state'])
        if not session:
            return not_found('Session')
        return jsonify(session)

    @app.route('/api/multiplayer/<session_id>/end-turn', methods=['POST'])
    def end_session_turn(session_id):
        session = sessions.end_turn(session_id)
        if not session:
            return not_found('Session')
        return jsonify(session)

    @app.route('/api/multiplayer/<session_id>/use-action', methods=['POST'])
    def use_action(session_id):
        d = body()
        if missing_fields(d, 'user_id'):
            return bad_request("Missing required fields: user_id")
        if not sessions.get_session(session_id):
            return not_found('Session')
        if not sessions.use_action(session_id, d['user_id']):
            return bad_request("Cannot use action (not your turn or no actions remaining)")
        return jsonify(sessions.get_session(session_id))

    @app.route('/api/multiplayer/<session_id>', methods=['GET'])
    def get_session(session_id):
        session = sessions.get_session(session_id)
        if not session:
            return not_found('Session')
        return jsonify(session)

    @app.route('/api/multiplayer/<session_id>/disconnect', methods=['POST'])
    def disconnect(session_id):
        d = body()
        if missing_fields(d, 'user_id'):
            return bad_request("Missing required fields: user_id")
        session = sessions.disconnect_player(session_id, d['user_id'])
        if not session:
            return not_found('Session')
        return jsonify(session)

    return app
