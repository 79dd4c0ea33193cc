# polis/multiplayer.py

import logging
import threading
import uuid
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

MAX_ACTIONS_PER_TURN = 3
TURN_TIME_LIMIT = 120  # seconds, stored for clients; not enforced
SESSION_MAX_IDLE = timedelta(hours=24)


class SessionStore:
    """
    In-process registry of multiplayer sessions.
    Tracks whose turn it is and how many actions remain; knows nothing about game rules.
    """

    def __init__(self, max_actions=MAX_ACTIONS_PER_TURN, turn_time_limit=TURN_TIME_LIMIT,
                 max_idle=SESSION_MAX_IDLE, clock=datetime.now):
        self.max_actions = max_actions
        self.turn_time_limit = turn_time_limit
        self.max_idle = max_idle
        self.clock = clock
        self._sessions = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            max_actions=config.get('max_actions_per_turn', MAX_ACTIONS_PER_TURN),
            turn_time_limit=config.get('turn_time_limit', TURN_TIME_LIMIT),
            max_idle=timedelta(hours=config.get('session_max_idle_hours', 24)),
        )

    def _new_player(self, user_id, username, city_state, is_current_turn):
        return {
            "id": user_id,
            "username": username,
            "city_state": city_state,
            "is_current_turn": is_current_turn,
            "actions_remaining": self.max_actions,
            "is_connected": True,
            "last_active": self.clock(),
        }

    def create_session(self, game_state_id, host_user_id, host_username, host_city_state):
        """Open a session with the host as sole player, holding the turn."""
        now = self.clock()
        session = {
            "id": str(uuid.uuid4()),
            "game_state_id": game_state_id,
            "players": [self._new_player(host_user_id, host_username, host_city_state, True)],
            "turn_number": 1,
            "turn_time_limit": self.turn_time_limit,
            "current_turn_started_at": now,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._sessions[session['id']] = session
        logger.info("Session %s created by %s", session['id'], host_username)
        return session

    def get_session(self, session_id):
        return self._sessions.get(session_id)

    def join_session(self, session_id, user_id, username, city_state):
        session = self._sessions.get(session_id)
        if not session:
            return None

        now = self.clock()
        # Reconnect players already in the session
        existing = next((p for p in session['players'] if p['id'] == user_id), None)
        if existing:
            existing['is_connected'] = True
            existing['last_active'] = now
        else:
            session['players'].append(self._new_player(user_id, username, city_state, False))
            logger.info("%s joined session %s", username, session_id)

        session['updated_at'] = now
        return session

    def end_turn(self, session_id):
        """Pass the turn to the next connected player, wrapping around."""
        session = self._sessions.get(session_id)
        if not session:
            return None

        players = session['players']
        current = next((i for i, p in enumerate(players) if p['is_current_turn']), None)
        if current is None:
            return None

        players[current]['is_current_turn'] = False
        players[current]['actions_remaining'] = self.max_actions

        # The scan ends on the current player, who keeps the turn if still connected
        next_index = None
        for step in range(1, len(players) + 1):
            candidate = (current + step) % len(players)
            if players[candidate]['is_connected']:
                next_index = candidate
                break

        if next_index is None:
            # Nobody is connected: leave the turn where it was
            players[current]['is_current_turn'] = True
            return session

        now = self.clock()
        players[next_index]['is_current_turn'] = True
        session['turn_number'] += 1
        session['current_turn_started_at'] = now
        session['updated_at'] = now
        return session

    def use_action(self, session_id, user_id):
        """Spend one action of the player holding the turn."""
        session = self._sessions.get(session_id)
        if not session:
            return False

        player = next((p for p in session['players'] if p['id'] == user_id and p['is_current_turn']), None)
        if not player or player['actions_remaining'] <= 0:
            return False

        player['actions_remaining'] -= 1
        session['updated_at'] = self.clock()
        return True

    def disconnect_player(self, session_id, user_id):
        session = self._sessions.get(session_id)
        if not session:
            return None

        player = next((p for p in session['players'] if p['id'] == user_id), None)
        if not player:
            return None

        player['is_connected'] = False
        session['updated_at'] = self.clock()
        logger.info("%s disconnected from session %s", player['username'], session_id)

        # A disconnected player cannot hold the turn
        if player['is_current_turn']:
            return self.end_turn(session_id)
        return session

    def is_player_turn(self, session_id, user_id):
        session = self._sessions.get(session_id)
        if not session:
            return False
        player = next((p for p in session['players'] if p['id'] == user_id), None)
        return player['is_current_turn'] if player else False

    def get_actions_remaining(self, session_id, user_id):
        session = self._sessions.get(session_id)
        if not session:
            return 0
        player = next((p for p in session['players'] if p['id'] == user_id), None)
        return player['actions_remaining'] if player else 0

    def cleanup_sessions(self, now=None):
        """Delete sessions untouched for longer than the idle limit. Returns how many were removed."""
        now = now or self.clock()
        with self._lock:
            stale = [sid for sid, s in self._sessions.items() if now - s['updated_at'] > self.max_idle]
            for sid in stale:
                del self._sessions[sid]
        if stale:
            logger.info("Removed %d stale sessions", len(stale))
        return len(stale)

    def __len__(self):
        return len(self._sessions)


class SessionSweeper:
    """Runs SessionStore.cleanup_sessions on a fixed interval using timer threads."""

    def __init__(self, store, interval=3600):
        self.store = store
        self.interval = interval
        self._timer = None
        self._stopped = True

    def start(self):
        self._stopped = False
        self._schedule()

    def _schedule(self):
        if self._stopped:
            return
        self._timer = threading.Timer(self.interval, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self):
        try:
            self.store.cleanup_sessions()
        except Exception:
            logger.exception("Session sweep failed")
        self._schedule()

    def stop(self):
        self._stopped = True
        if self._timer:
            self._timer.cancel()
            self._timer = None
