"""**********************************************************************************
 * Title: game_session.py
 *
 * @version 1.0.4
 * -------------------------------------------------------------------------------
 * Description:
 * Runs one player's session. The session owns the services a game needs (the
 * generator, the constraint manager, the solvability guarantee, the solver
 * and the save manager), all passed in at construction so they can be shared
 * or replaced, and feeds actions through the pure reducer. Everything with a
 * side effect lives here: saving progress, recording performance for the
 * adaptive constraints, hints and live solvability checks. A failed save is
 * logged and never disturbs the game in memory.
 * Every public method holds the session lock, so requests served on separate
 * threads apply their actions one after another.
 **********************************************************************************"""

# --- IMPORTS ---
import functools
import logging
import threading
from collections import defaultdict

from colorsame.action_handlers import dispatch, initial_state
from colorsame.bfs_solver import BfsSolver, next_hint
from colorsame.constraint_manager import ConstraintManager
from colorsame.game_state import (
    NEW_GAME, CONTINUE_GAME, LOAD_SAVE, CLICK, UNDO, RESET, TICK, LOCK_DECR, WIN, PAUSE, NEXT_LEVEL,
    TOGGLE_HINTS, SHOW_MODAL, ACTIVE
)
from colorsame.puzzle_generator import PuzzleGenerator
from colorsame.save_manager import SaveManager, current_game_snapshot
from colorsame.solvability import SolvabilityGuarantee


def synchronized(method):
    """Runs a session method while holding that session's lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class GameSession:
    def __init__(self, generator=None, constraints=None, solvability=None, solver=None, save_manager=None):
        self.generator = generator or PuzzleGenerator()
        self.constraints = constraints or ConstraintManager()
        self.solvability = solvability or SolvabilityGuarantee()
        self.solver = solver or BfsSolver()
        self.save_manager = save_manager or SaveManager()
        self.state = initial_state()
        self.attempts = defaultdict(int)
        self._failure_recorded = False
        # Re-entrant: click and hint dispatch further actions while holding it.
        self.lock = threading.RLock()

    @synchronized
    def dispatch(self, action):
        self.state = dispatch(self.state, action)
        return self.state

    # --- Game Lifecycle ---

    @synchronized
    def new_game(self, level=None):
        """
        Generates, verifies and starts a level.

        :param int level: Level to start; defaults to the session's current level.
        :raises GenerationError: If the generator could not build the level.
        """
        level = level or self.state.level
        puzzle = self.generator.generate(level)

        check = self.solvability.verify_generation(puzzle)
        if not check['is_solvable']:
            logging.error(f"Generated level {level} failed verification ({check['method']})")

        constraints = self.constraints.get_constraints_for_level(level, len(puzzle['optimal_path']))
        self.attempts[level] += 1
        self._failure_recorded = False
        return self.dispatch({'type': NEW_GAME, 'puzzle': puzzle, 'constraints': constraints})

    @synchronized
    def continue_game(self):
        """Resumes from the stored save. Returns None when there is nothing to resume."""
        saved = self.save_manager.load()
        if saved is None:
            return None
        level = saved['current_level']
        puzzle = self.generator.generate(level)
        constraints = self.constraints.get_constraints_for_level(level, len(puzzle['optimal_path']))
        self.attempts[level] += 1
        self._failure_recorded = False
        return self.dispatch({'type': CONTINUE_GAME, 'saved': saved, 'puzzle': puzzle, 'constraints': constraints})

    @synchronized
    def load_save(self):
        saved = self.save_manager.load()
        if saved is None:
            return None
        return self.dispatch({'type': LOAD_SAVE, 'saved': saved})

    @synchronized
    def next_level(self):
        return self.dispatch({'type': NEXT_LEVEL})

    # --- Play ---

    @synchronized
    def click(self, row, col):
        """
        Clicks a cell. A completed move decrements locks and autosaves; a
        winning move is scored and saved straight away.
        """
        before = self.state
        after = self.dispatch({'type': CLICK, 'row': row, 'col': col})
        if after is before:
            if before.phase == ACTIVE and before.move_limit and before.moves >= before.move_limit:
                self._record_failure()
            return after

        self.dispatch({'type': LOCK_DECR})
        if self.state.won:
            self.dispatch({'type': WIN})
            self._on_win()
        else:
            self._autosave()
        return self.state

    @synchronized
    def undo(self):
        return self.dispatch({'type': UNDO})

    @synchronized
    def reset(self):
        state = self.dispatch({'type': RESET})
        self.attempts[state.level] += 1
        return state

    @synchronized
    def tick(self):
        state = self.dispatch({'type': TICK})
        if state.time_up:
            self._record_failure()
        return state

    @synchronized
    def pause(self, paused=None):
        action = {'type': PAUSE}
        if paused is not None:
            action['paused'] = paused
        return self.dispatch(action)

    @synchronized
    def toggle_hints(self, enabled=None):
        action = {'type': TOGGLE_HINTS}
        if enabled is not None:
            action['enabled'] = enabled
        return self.dispatch(action)

    @synchronized
    def show_modal(self, modal):
        return self.dispatch({'type': SHOW_MODAL, 'modal': modal})

    # --- Hints and Solvability ---

    @synchronized
    def hint(self):
        """Suggests the next move. Asking for a hint turns hints on for the level."""
        state = self.state
        if not state.started:
            return {'move': None, 'on_optimal_path': False, 'source': 'idle'}
        if not state.hints_enabled:
            state = self.toggle_hints(True)
        return next_hint(state.grid, state.power, state.locked, state.colors,
                         state.optimal_path, state.player_moves, self.solver)

    @synchronized
    def check_solvability(self):
        """
        Checks the live board. When it looks unsolvable the recovery strategies
        are attached, wired to this session's undo, new_game and hint.
        """
        state = self.state
        if not state.started:
            return None
        check = dict(self.solvability.check_runtime_solvability(state.grid, state.colors, state.power, state.locked))
        if not check['is_solvable']:
            check['strategies'] = self.solvability.get_recovery_strategies(
                state.grid, state.initial_grid, state.player_moves,
                on_revert=self.undo,
                on_regenerate=lambda: self.new_game(state.level),
                on_hint=self.hint,
            )
        return check

    # --- Side Effects ---

    def _performance_record(self, completed):
        state = self.state
        return {
            'level': state.level,
            'attempts': max(1, self.attempts[state.level]),
            'completed': completed,
            'moves_used': state.moves,
            'optimal_moves': len(state.optimal_path),
            'time_used': state.time,
            'hints_used': state.hints_enabled,
        }

    def _record_failure(self):
        if self._failure_recorded:
            return
        self._failure_recorded = True
        self.constraints.update_performance(self._performance_record(completed=False))

    def _on_win(self):
        state = self.state
        self.constraints.update_performance(self._performance_record(completed=True))
        stats = {
            'total_moves': state.moves,
            'total_time': state.time,
            'perfect_levels': 1 if state.moves == len(state.optimal_path) else 0,
            'hints_used': 1 if state.hints_enabled else 0,
        }
        save_state = self.save_manager.create_save_state(
            state.level + 1, state.total_points, 0, state.completed_levels, stats
        )
        self._save(save_state, "level completion")

    def _autosave(self):
        state = self.state
        if not state.started or state.won or state.moves == 0:
            return
        save_state = self.save_manager.create_save_state(
            state.level, state.total_points, state.level_points, state.completed_levels,
            {'total_moves': state.moves, 'total_time': state.time, 'perfect_levels': 0,
             'hints_used': 1 if state.hints_enabled else 0}
        )
        save_state['current_game'] = current_game_snapshot(state)
        self._save(save_state, "autosave")

    def _save(self, save_state, reason):
        try:
            self.save_manager.save(save_state)
        except Exception as e:
            logging.error(f"Failed to save game ({reason}): {e}")
