# polis/history.py
from collections import defaultdict


def export_history(game_state):
    """Format the event log as a plain-text chronicle grouped by year."""
    city = game_state['player_city_state']['name']
    lines = [f"HISTORY OF {city.upper()}", ""]

    events_by_year = defaultdict(list)
    for event in game_state['events']:
        events_by_year[event['year']].append(event)

    # BCE years count down, so the most recent year is the smallest number
    for year in sorted(events_by_year):
        lines.append(f"--- {year} BCE ---")
        lines.append("")
        for event in sorted(events_by_year[year], key=lambda e: e['turn'], reverse=True):
            lines.append(f"[Turn {event['turn']}] {event['title']}")
            lines.append(event['description'])
            lines.append("")

    return "\n".join(lines)


def history_filename(game_state):
    return f"{game_state['player_city_state']['name'].lower()}_history.txt"
