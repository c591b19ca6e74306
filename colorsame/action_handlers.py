# action_handlers.py
# Description: The session reducer. Each handler takes the current state and an
# action dict and returns the next state; the input state is never modified.

import logging
from dataclasses import replace

from colorsame.constants import TUTORIAL_LEVEL_MAX, UNLIMITED_UNDOS
from colorsame.game_state import (
    SessionState, default_max_undos, NEW_GAME, CONTINUE_GAME, LOAD_SAVE, CLICK, UNDO, RESET, TICK,
    LOCK_DECR, WIN, PAUSE, NEXT_LEVEL, TOGGLE_HINTS, SHOW_MODAL
)
from colorsame.grid_effects import apply_click, clone_grid, is_locked, is_winning_state, pos_to_key
from colorsame.history_manager import HistoryManager, make_snapshot
from colorsame.level_config import get_level_config
from colorsame.save_manager import moves_from_json
from colorsame.scoring import calculate_level_score


def _idle_puzzle():
    """Puzzle fields cleared whenever the session returns to idle."""
    return {
        'grid': [], 'solved': [], 'power': frozenset(), 'locked': {}, 'solution': [],
        'generation_history': [], 'optimal_path': [], 'player_moves': [],
        'history': HistoryManager(None),
        'moves': 0, 'time': 0, 'started': False, 'won': False, 'paused': False, 'scored': False,
        'time_up': False, 'undo_count': 0, 'score': None, 'modal': None,
    }


def _is_tutorial(level):
    return 1 <= level <= TUTORIAL_LEVEL_MAX


def _constraint_fields(level, constraints):
    constraints = constraints or {}
    undo_limit = constraints.get('undo_limit')
    return {
        'max_undos': undo_limit if undo_limit is not None else default_max_undos(level),
        'move_limit': constraints.get('move_limit'),
        'time_limit': constraints.get('time_limit'),
        'time_bonus': constraints.get('time_bonus'),
        'show_timer': constraints.get('show_timer', False),
        'tutorial_message': constraints.get('tutorial_message'),
    }


# --- Game Lifecycle Handlers ---

def handle_new_game(state, action):
    """
    Starts a level from a GenerationResult.

    The payload carries 'puzzle' (the GenerationResult) and optionally
    'constraints' from the constraint manager; the reducer itself never
    consults services.
    """
    puzzle = action['puzzle']
    level = puzzle.get('level', 1)
    hints = _is_tutorial(level)
    optimal_path = [tuple(m) for m in puzzle.get('optimal_path') or puzzle['solution']]
    locked = dict(puzzle.get('locked') or {})

    constraints = _constraint_fields(level, action.get('constraints'))
    if constraints['tutorial_message']:
        logging.info(f"Constraint tutorial for level {level}: {constraints['tutorial_message']}")

    return replace(
        state,
        level=level,
        colors=puzzle.get('colors') or get_level_config(level)['colors'],
        grid=clone_grid(puzzle['grid']),
        solved=clone_grid(puzzle['solved']),
        power=frozenset(puzzle.get('power') or ()),
        locked=locked,
        solution=[tuple(m) for m in puzzle['solution']],
        generation_history=[tuple(m) for m in puzzle.get('generation_history') or []],
        optimal_path=optimal_path,
        player_moves=[tuple(m) for m in puzzle.get('player_moves') or []],
        history=HistoryManager(make_snapshot(puzzle['grid'], locked, 0, [])),
        moves=0, time=0, started=True, won=False, paused=False, scored=False, time_up=False,
        undo_count=0, score=None, modal=None,
        hints_enabled=hints, show_hints=hints,
        **constraints,
    )


def handle_continue_game(state, action):
    """
    Resumes from a save. A saved mid-level game is restored move for move;
    otherwise a fresh game starts at the saved level with the given puzzle.
    """
    saved, puzzle = action['saved'], action['puzzle']
    progression = {
        'total_points': saved.get('total_points', 0),
        'level_points': saved.get('level_points', 0),
        'completed_levels': list(saved.get('completed_levels', [])),
        'save_loaded': True,
    }
    current_game = saved.get('current_game')
    if not current_game:
        puzzle = dict(puzzle, level=saved['current_level'])
        return replace(handle_new_game(state, {'puzzle': puzzle, 'constraints': action.get('constraints')}),
                       **progression)

    level = saved['current_level']
    locked = dict(puzzle.get('locked') or {})
    initial_grid = current_game.get('initial_grid') or current_game['grid']
    constraints = _constraint_fields(level, action.get('constraints'))
    hints = current_game.get('hints_enabled', _is_tutorial(level))
    optimal_path = moves_from_json(current_game.get('optimal_path'))

    return replace(
        state,
        level=level,
        colors=puzzle.get('colors') or get_level_config(level)['colors'],
        grid=clone_grid(current_game['grid']),
        solved=clone_grid(current_game.get('target_grid') or puzzle['solved']),
        power=frozenset(puzzle.get('power') or ()),
        locked=locked,
        solution=list(optimal_path),
        generation_history=list(reversed(optimal_path)),
        optimal_path=optimal_path,
        player_moves=moves_from_json(current_game.get('player_moves')),
        history=HistoryManager(make_snapshot(initial_grid, locked, 0, [])),
        moves=current_game.get('moves', 0),
        time=current_game.get('time', 0),
        started=True, won=False, paused=False, scored=False, time_up=False,
        undo_count=current_game.get('undo_count', 0), score=None, modal=None,
        hints_enabled=hints, show_hints=hints or _is_tutorial(level),
        **constraints,
        **progression,
    )


def handle_load_save(state, action):
    saved = action['saved']
    return replace(
        state,
        level=saved['current_level'],
        total_points=saved.get('total_points', 0),
        level_points=saved.get('level_points', 0),
        completed_levels=list(saved.get('completed_levels', [])),
        save_loaded=True,
        **_idle_puzzle(),
    )


def handle_next_level(state, action):
    return replace(
        state,
        level=state.level + 1,
        level_points=0,
        hints_enabled=False,
        show_hints=False,
        **_idle_puzzle(),
    )


# --- Play Handlers ---

def handle_click(state, action):
    """
    Applies a click. Clicks on a locked cell or past the move cap are ignored.

    The pre-move snapshot is pushed onto the undo stack and the win predicate
    is re-evaluated on the new board.
    """
    row, col = action['row'], action['col']
    if is_locked(state.locked, row, col):
        return state
    if state.move_limit and state.moves >= state.move_limit:
        logging.info(f"Move limit reached: {state.moves}/{state.move_limit}")
        return state

    history = state.history.copy()
    history.add_snapshot(make_snapshot(state.grid, state.locked, state.moves, state.player_moves))

    is_power = pos_to_key(row, col) in state.power
    grid = apply_click(state.grid, row, col, state.colors, is_power, state.locked)
    player_moves = state.player_moves + [(row, col)]
    won = is_winning_state(grid)
    if won:
        logging.info(f"Level {state.level} solved in {state.moves + 1} moves (optimal {len(state.optimal_path)})")

    return replace(state, grid=grid, moves=state.moves + 1, player_moves=player_moves, won=won,
                   history=history, modal=None)


def handle_lock_decr(state, action):
    locked = {key: count - 1 for key, count in state.locked.items() if count > 1}
    return replace(state, locked=locked)


def handle_tick(state, action):
    time = state.time + 1
    if state.time_limit and time >= state.time_limit:
        logging.info(f"Time limit reached: {time}/{state.time_limit}")
        return replace(state, time=time, won=False, paused=True, time_up=True, modal='time_up')
    return replace(state, time=time)


def handle_undo(state, action):
    if not state.history.can_undo():
        return state
    if state.max_undos != UNLIMITED_UNDOS and state.undo_count >= state.max_undos:
        return state

    history = state.history.copy()
    snapshot = history.undo()
    return replace(
        state,
        grid=clone_grid(snapshot['grid']),
        locked=dict(snapshot['locked']),
        moves=snapshot['moves'],
        player_moves=list(snapshot['player_moves']),
        history=history,
        undo_count=state.undo_count + 1,
    )


def handle_reset(state, action):
    """Returns to the generation-time board. Elapsed time and pause are kept."""
    history = state.history.copy()
    history.reset()
    return replace(
        state,
        grid=state.initial_grid,
        locked=state.initial_locked,
        moves=0,
        player_moves=[],
        history=history,
        undo_count=0,
        won=False,
        time_up=False,
        score=None,
        modal=None,
    )


def handle_win(state, action):
    """Scores the solved level and adds it to the player's progression."""
    if state.scored:
        return state
    score = calculate_level_score(
        level=state.level,
        moves=state.moves,
        optimal_moves=len(state.optimal_path),
        time=state.time,
        hints_used=state.hints_enabled,
        undo_used=state.undo_count > 0,
    )
    return replace(
        state,
        scored=True,
        score=score,
        level_points=score['total_points'],
        total_points=state.total_points + score['total_points'],
        completed_levels=state.completed_levels + [state.level],
    )


# --- UI Flag Handlers ---

def handle_pause(state, action):
    return replace(state, paused=action.get('paused', not state.paused))


def handle_toggle_hints(state, action):
    enabled = action.get('enabled', not state.hints_enabled)
    return replace(state, hints_enabled=enabled, show_hints=enabled or state.level == 1)


def handle_show_modal(state, action):
    return replace(state, modal=action.get('modal'))


HANDLERS = {
    NEW_GAME: handle_new_game,
    CONTINUE_GAME: handle_continue_game,
    LOAD_SAVE: handle_load_save,
    NEXT_LEVEL: handle_next_level,
    CLICK: handle_click,
    LOCK_DECR: handle_lock_decr,
    TICK: handle_tick,
    UNDO: handle_undo,
    RESET: handle_reset,
    WIN: handle_win,
    PAUSE: handle_pause,
    TOGGLE_HINTS: handle_toggle_hints,
    SHOW_MODAL: handle_show_modal,
}


def dispatch(state, action):
    """
    Applies an action to a session state.

    Unknown actions and actions the current phase does not accept return the
    state unchanged.

    :param SessionState state: The current state.
    :param dict action: Action with a 'type' key plus its payload.
    :returns: The next state.
    :rtype: SessionState
    """
    handler = HANDLERS.get(action.get('type'))
    if handler is None or not state.accepts(action['type']):
        return state
    return handler(state, action)


def initial_state():
    return SessionState()
