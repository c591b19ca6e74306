"""**********************************************************************************
 * Title: save_manager.py
 *
 * @version 1.1.0
 * -------------------------------------------------------------------------------
 * Description:
 * Persists player progress as JSON in a key/value store. The store is any
 * dict-like object (an in-memory dict by default), so the storage medium is
 * left to the host. Saves are validated before they are written, stamped with
 * the format version and the time of play, and migrated forward when an older
 * version is loaded. Moves are stored as {"row", "col"} objects.
 **********************************************************************************"""

# --- IMPORTS ---
import json
import logging
from datetime import datetime, timezone

from colorsame.constants import CURRENT_SAVE_VERSION, SAVE_KEY


class InvalidSaveError(ValueError):
    """Raised when a save state fails structural validation."""


# --- MOVE ENCODING ---
def moves_to_json(moves):
    return [{'row': r, 'col': c} for r, c in moves]


def moves_from_json(moves):
    return [(m['row'], m['col']) for m in moves or []]


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _version_tuple(version):
    try:
        return tuple(int(part) for part in str(version).split('.'))
    except ValueError:
        return (0,)


def _empty_stats():
    return {'total_moves': 0, 'total_time': 0, 'perfect_levels': 0, 'hints_used': 0}


def _is_count(value, minimum):
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


class SaveManager:
    def __init__(self, store=None, key=SAVE_KEY):
        self.store = store if store is not None else {}
        self.key = key

    def save(self, state):
        """
        Validates and writes a save state, stamping version and last_played.

        :param dict state: The save state; modified in place with the stamps.
        :raises InvalidSaveError: If the state is structurally invalid.
        """
        state['version'] = CURRENT_SAVE_VERSION
        state['last_played'] = _now_iso()
        if not self.is_valid(state):
            logging.error(f"Refusing to save invalid state for level {state.get('current_level')}")
            raise InvalidSaveError("Invalid save state")

        self.store[self.key] = json.dumps(state)
        logging.info(
            f"Game saved: level {state['current_level']}, {state['total_points']} points, "
            f"{len(state['completed_levels'])} levels completed"
        )

    def load(self):
        """
        Reads the save, returning None when it is missing, unparsable or invalid.

        :rtype: dict | None
        """
        serialized = self.store.get(self.key)
        if not serialized:
            logging.info("No saved game found")
            return None

        try:
            parsed = json.loads(serialized)
        except (TypeError, ValueError) as e:
            logging.error(f"Failed to parse save data: {e}")
            return None

        if not self.is_valid(parsed):
            logging.warning("Invalid save data detected")
            return None

        if parsed.get('version') != CURRENT_SAVE_VERSION:
            logging.info(f"Migrating save from version {parsed.get('version')} to {CURRENT_SAVE_VERSION}")
            parsed = self.migrate(parsed)

        logging.info(f"Game loaded: level {parsed['current_level']}, {parsed['total_points']} points")
        return parsed

    def clear(self):
        self.store.pop(self.key, None)
        logging.info("Save data cleared")

    def has_save(self):
        return self.store.get(self.key) is not None

    def migrate(self, old_save):
        """Rebuilds an older save in the current format. Mid-level games are not carried over."""
        stats = old_save.get('stats') or {}
        migrated = {
            'current_level': old_save.get('current_level') or 1,
            'total_points': old_save.get('total_points') or 0,
            'level_points': old_save.get('level_points') or 0,
            'completed_levels': list(old_save.get('completed_levels') or []),
            'last_played': old_save.get('last_played') or _now_iso(),
            'version': CURRENT_SAVE_VERSION,
            'stats': {name: stats.get(name) or 0 for name in _empty_stats()},
        }
        if _version_tuple(old_save.get('version', '0')) < (1, 0, 0) and not old_save.get('stats'):
            migrated['stats'] = _empty_stats()
        return migrated

    def is_valid(self, save):
        if not isinstance(save, dict):
            return False
        if any(name not in save for name in ('current_level', 'total_points', 'completed_levels')):
            return False
        if not _is_count(save['current_level'], 1):
            return False
        if not isinstance(save['total_points'], (int, float)) or isinstance(save['total_points'], bool) \
                or save['total_points'] < 0:
            return False
        if not isinstance(save['completed_levels'], list):
            return False
        return all(_is_count(level, 1) for level in save['completed_levels'])

    @staticmethod
    def create_save_state(current_level, total_points, level_points, completed_levels, stats=None):
        return {
            'current_level': current_level,
            'total_points': total_points,
            'level_points': level_points,
            'completed_levels': list(completed_levels),
            'last_played': _now_iso(),
            'version': CURRENT_SAVE_VERSION,
            'stats': dict(stats) if stats else _empty_stats(),
        }


def current_game_snapshot(state):
    """Builds the mid-level current_game section of a save from a session state."""
    return {
        'grid': [list(row) for row in state.grid],
        'target_grid': [list(row) for row in state.solved],
        'moves': state.moves,
        'time': state.time,
        'optimal_path': moves_to_json(state.optimal_path),
        'hints_enabled': state.hints_enabled,
        'undo_count': state.undo_count,
        'player_moves': moves_to_json(state.player_moves),
        'initial_grid': state.initial_grid,
    }
