"""**********************************************************************************
 * Title: solvability.py
 *
 * @version 1.3.0
 * -------------------------------------------------------------------------------
 * Description:
 * Verifies that puzzles stay solvable from generation through play. A
 * generated puzzle that carries its optimal path is trusted outright; any
 * other board is handed to the mathematical checker. Results are memoised in
 * a fixed-capacity LRU cache keyed by the board, its power tiles and its
 * locks, and rolling latency metrics are kept for the last checks. When a
 * board is found unsolvable the guarantee offers ordered recovery strategies
 * which the caller may execute.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import threading
import time
from collections import OrderedDict, deque

from colorsame.constants import (
    SOLVABILITY_CACHE_CAPACITY, METRICS_WINDOW, SLOW_CHECK_MS, MIN_GRID_SIZE, MAX_GRID_SIZE,
    MIN_COLORS, MAX_COLORS, MAX_VALIDATED_MOVES, CONFIDENCE_REVERSE_PATH, CONFIDENCE_MATHEMATICAL,
    CONFIDENCE_TRUSTED_GENERATION, CONFIDENCE_ON_ERROR
)
from colorsame.grid_effects import grid_key
from colorsame.z3_solver import is_solvable


def cache_key(grid, power, locked):
    """Canonical key for a board together with its power tiles and locks."""
    power_str = ','.join(sorted(power or ()))
    locked_str = ','.join(f"{k}:{v}" for k, v in sorted((locked or {}).items()))
    return f"{grid_key(grid)}#{power_str}#{locked_str}"


class LRUCache:
    """
    Mapping that holds at most ``capacity`` entries, evicting the least recently
    used. Reads and writes are serialised so one cache can be shared between
    sessions served on different threads.
    """

    def __init__(self, capacity=SOLVABILITY_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError("LRU cache capacity must be at least 1")
        self.capacity = capacity
        self._entries = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            if key not in self._entries:
                return default
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key, value):
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)


class RecoveryStrategy:
    """A way out of an unsolvable board. ``execute`` takes no arguments."""

    def __init__(self, strategy_type, description, action=None):
        self.type = strategy_type
        self.description = description
        self._action = action

    def execute(self):
        logging.info(f"Executing recovery strategy '{self.type}'")
        if self._action is not None:
            return self._action()
        return None

    def to_dict(self):
        return {'type': self.type, 'description': self.description}


def _check_result(solvable, check_time, method, confidence, details=None):
    result = {
        'is_solvable': solvable,
        'check_time': check_time,
        'method': method,
        'confidence': confidence,
    }
    if details:
        result['details'] = details
    return result


class SolvabilityGuarantee:
    def __init__(self, cache_capacity=SOLVABILITY_CACHE_CAPACITY, checker=is_solvable):
        """
        :param int cache_capacity: Maximum number of memoised check results.
        :param checker: Callable ``(grid, colors, power, locked) -> bool``.
        """
        self.cache = LRUCache(cache_capacity)
        self.checker = checker
        self._metrics_lock = threading.Lock()
        self._reset_metrics()

    def _reset_metrics(self):
        self.total_checks = 0
        self.failed_checks = 0
        self.max_check_time = 0.0
        self.check_times = deque(maxlen=METRICS_WINDOW)

    @property
    def average_check_time(self):
        if not self.check_times:
            return 0.0
        return sum(self.check_times) / len(self.check_times)

    def pre_validate_generation(self, grid_size, colors, required_moves):
        """Checks generation parameters before any work is done."""
        if grid_size < MIN_GRID_SIZE or grid_size > MAX_GRID_SIZE:
            return {'valid': False, 'reason': f"Grid size must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}"}
        if colors < MIN_COLORS or colors > MAX_COLORS:
            return {'valid': False, 'reason': f"Colors must be between {MIN_COLORS} and {MAX_COLORS}"}
        if required_moves < 1 or required_moves > MAX_VALIDATED_MOVES:
            return {'valid': False, 'reason': f"Required moves must be between 1 and {MAX_VALIDATED_MOVES}"}
        # Rough estimate of how much complexity a board can hold.
        if required_moves > grid_size * grid_size * 2:
            return {'valid': False, 'reason': f"Grid size {grid_size} cannot support {required_moves} unique moves"}
        return {'valid': True, 'reason': None}

    def verify_generation(self, result):
        """
        Verifies a freshly generated puzzle.

        A non-empty optimal path proves solvability by construction. Without
        one the mathematical checker is consulted; if it fails the generator is
        trusted with reduced confidence.

        :param dict result: A GenerationResult.
        :returns: Check result with is_solvable, check_time (ms), method and confidence.
        :rtype: dict
        """
        start_time = time.perf_counter()
        key = cache_key(result['grid'], result.get('power'), result.get('locked'))
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        optimal_path = result.get('optimal_path') or []
        if optimal_path:
            check_time = self._elapsed_ms(start_time)
            check = _check_result(True, check_time, 'reverse-path', CONFIDENCE_REVERSE_PATH,
                                  {'required_moves': len(optimal_path)})
            self._update_metrics(check_time, True)
            self.cache.put(key, check)
            logging.debug(f"Puzzle verified via reverse path ({len(optimal_path)} moves)")
            return check

        colors = result.get('colors') or max(cell for row in result['grid'] for cell in row) + 1
        try:
            solvable = self.checker(result['grid'], colors, result.get('power'), result.get('locked'))
        except Exception as e:
            logging.error(f"Solvability verification error: {e}")
            return _check_result(True, self._elapsed_ms(start_time), 'reverse-path', CONFIDENCE_TRUSTED_GENERATION)

        check_time = self._elapsed_ms(start_time)
        check = _check_result(solvable, check_time, 'mathematical', CONFIDENCE_MATHEMATICAL, {'target_color': 0})
        self._update_metrics(check_time, solvable)
        self.cache.put(key, check)
        if not solvable:
            logging.error(f"Mathematical verification failed for a {len(result['grid'])}x{len(result['grid'])} grid")
        return check

    def check_runtime_solvability(self, grid, colors, power=None, locked=None):
        """
        Checks a live board mid-play with the mathematical checker.

        Checker errors are logged and reported as solvable with low confidence;
        the result is advisory and must not block play.
        """
        start_time = time.perf_counter()
        key = cache_key(grid, power, locked)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            solvable = self.checker(grid, colors, power, locked)
        except Exception as e:
            logging.error(f"Runtime solvability check failed: {e}")
            return _check_result(True, self._elapsed_ms(start_time), 'mathematical', CONFIDENCE_ON_ERROR)

        check_time = self._elapsed_ms(start_time)
        check = _check_result(solvable, check_time, 'mathematical', CONFIDENCE_MATHEMATICAL)
        self._update_metrics(check_time, solvable)
        self.cache.put(key, check)
        return check

    def get_recovery_strategies(self, current_grid, original_grid, player_moves,
                                on_revert=None, on_regenerate=None, on_hint=None):
        """
        Lists the ways out of an unsolvable board, most conservative first.

        Reverting is offered only when the player has made moves. The
        ``on_*`` callables are run by the matching strategy's ``execute``.

        :rtype: list[RecoveryStrategy]
        """
        strategies = []
        if player_moves:
            strategies.append(RecoveryStrategy('revert', "Undo last move to return to solvable state", on_revert))
        strategies.append(RecoveryStrategy('regenerate', "Generate a new puzzle at the same level", on_regenerate))
        strategies.append(RecoveryStrategy('hint', "Show hint to guide back to solvable path", on_hint))
        return strategies

    def get_performance_report(self):
        with self._metrics_lock:
            return {
                'total_checks': self.total_checks,
                'failed_checks': self.failed_checks,
                'average_check_time': self.average_check_time,
                'max_check_time': self.max_check_time,
                'check_times': list(self.check_times),
                'failure_rate': self.failed_checks / self.total_checks if self.total_checks else 0,
            }

    def reset(self):
        self.cache.clear()
        with self._metrics_lock:
            self._reset_metrics()
        logging.info("Solvability guarantee reset")

    @staticmethod
    def _elapsed_ms(start_time):
        return (time.perf_counter() - start_time) * 1000

    def _update_metrics(self, check_time, success):
        with self._metrics_lock:
            self.total_checks += 1
            if not success:
                self.failed_checks += 1
            self.check_times.append(check_time)
            self.max_check_time = max(self.max_check_time, check_time)
            average = self.average_check_time
        if check_time > SLOW_CHECK_MS:
            logging.warning(f"Slow solvability check: {check_time:.2f} ms (average {average:.2f} ms)")
