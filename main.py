# main.py

import logging

from polis.database import load_data
from polis.engine import GameEngine
from polis.multiplayer import SessionStore, SessionSweeper
from polis.server import create_app
from polis.storage import MemStorage

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# --- INITIALIZATION ---
print(">>> POLIS: Initializing system...")
DB = load_data()

ENGINE = GameEngine(DB)
STORAGE = MemStorage()
SESSIONS = SessionStore.from_config(DB['config'])
SWEEPER = SessionSweeper(SESSIONS, DB['config'].get('session_sweep_interval', 3600))

app = create_app(DB, STORAGE, SESSIONS, ENGINE)

print(">>> POLIS: Ready.")

if __name__ == '__main__':
    SWEEPER.start()
    try:
        # Requests are served one at a time, so turns on a game never overlap
        app.run(debug=False, port=5000, threaded=False)
    finally:
        SWEEPER.stop()
