# polis/storage.py

import copy
import itertools
import threading
from datetime import datetime


class MemStorage:
    """In-memory store for users and game-state records.

    Game states are opaque JSON blobs to the store; nothing is persisted
    across restarts.
    """

    def __init__(self):
        self.users = {}
        self.game_states = {}
        self._user_ids = itertools.count(1)
        self._game_ids = itertools.count(1)
        self._lock = threading.Lock()

    # User operations

    def get_user(self, user_id):
        return self.users.get(user_id)

    def get_user_by_username(self, username):
        return next((u for u in self.users.values() if u['username'] == username), None)

    def create_user(self, username, password):
        with self._lock:
            user = {"id": next(self._user_ids), "username": username, "password": password}
            self.users[user['id']] = user
        return user

    # Game state operations

    def get_game_state(self, record_id):
        return self.game_states.get(record_id)

    def get_all_game_states(self):
        return list(self.game_states.values())

    def create_game_state(self, user_id, game_state):
        now = datetime.now()
        with self._lock:
            record = {
                "id": next(self._game_ids),
                "user_id": user_id,
                "game_state": copy.deepcopy(game_state),
                "created_at": now,
                "updated_at": now,
            }
            self.game_states[record['id']] = record
        return record

    def update_game_state(self, record_id, game_state):
        record = self.game_states.get(record_id)
        if not record:
            return None

        record['game_state'] = copy.deepcopy(game_state)
        record['updated_at'] = datetime.now()
        return record

    def delete_game_state(self, record_id):
        with self._lock:
            return self.game_states.pop(record_id, None) is not None
