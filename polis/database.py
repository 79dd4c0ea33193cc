# polis/database.py
import json
import logging
import os

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


class ConfigError(Exception):
    """Raised when the rules configuration cannot be loaded."""


def load_data(base_path=None):
    """
    Reads JSON files from the 'data' folder and combines them into a single dictionary.
    """
    base_path = base_path or DATA_DIR

    def read(filename, default):
        path = os.path.join(base_path, filename)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            logger.warning("File not found: %s", path)
            return default
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            return default

    config = read('config.json', {})
    if not config.get('rules'):
        raise ConfigError(f"No rules found in {os.path.join(base_path, 'config.json')}")

    catalog = read('policies.json', {})

    # Assembles the unified structure
    db = {
        "config": config['rules'],
        "category_modifiers": config.get('category_modifiers', {}),
        "government_modifiers": config.get('government_modifiers', {}),
        "political_stability": config.get('political_stability', {}),
        "structures": catalog.get('structures', []),
        "units": catalog.get('units', []),
        "tax_tiers": catalog.get('tax_tiers', []),
        "cities": read('cities.json', []),
        "events": read('events.json', []),
    }

    # Simple validation
    if not db['events']:
        logger.warning("No event templates loaded.")
    if not db['cities']:
        logger.warning("No city-states loaded.")

    return db
