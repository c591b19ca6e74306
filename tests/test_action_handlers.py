# tests/test_action_handlers.py
import pytest

from conftest import make_puzzle
from colorsame.action_handlers import dispatch, initial_state
from colorsame.constants import UNLIMITED_UNDOS
from colorsame.game_state import ACTIVE, IDLE, PAUSED, WON, default_max_undos

CROSS = [[0, 1, 0], [1, 1, 1], [0, 1, 0]]


def start(grid=CROSS, solution=((1, 1),), constraints=None, **kwargs):
    puzzle = make_puzzle(grid, list(solution), **kwargs)
    return dispatch(initial_state(), {'type': 'NEW_GAME', 'puzzle': puzzle, 'constraints': constraints})


def click(state, row, col):
    return dispatch(state, {'type': 'CLICK', 'row': row, 'col': col})


def test_new_game_starts_active():
    assert initial_state().phase == IDLE
    state = start()
    assert state.phase == ACTIVE
    assert state.grid == CROSS
    assert state.moves == 0
    assert state.optimal_path == [(1, 1)]
    assert state.initial_grid == CROSS


def test_click_then_undo_round_trip():
    state = click(start(), 0, 0)
    before = state
    after = dispatch(click(state, 2, 2), {'type': 'UNDO'})
    assert after.grid == before.grid
    assert after.moves == before.moves
    assert after.player_moves == before.player_moves
    assert after.undo_count == 1


def test_two_by_two_scenario():
    state = start(grid=[[1, 0], [0, 0]], solution=[(1, 1)])
    state = click(state, 0, 0)
    assert state.grid == [[0, 1], [1, 0]]
    assert state.phase == ACTIVE
    state = click(state, 1, 1)
    assert not state.won
    state = click(state, 0, 0)
    assert state.grid == [[1, 1], [1, 1]]
    assert state.phase == WON
    assert click(state, 0, 1) is state


def test_reducer_does_not_modify_its_input():
    state = start()
    click(state, 1, 1)
    assert state.grid == CROSS
    assert state.moves == 0
    assert state.player_moves == []


def test_move_limit_ignores_extra_clicks():
    state = start(constraints={'move_limit': 2})
    state = click(click(state, 0, 0), 0, 0)
    assert state.moves == 2
    assert click(state, 2, 2) is state


def test_time_limit_pauses_without_winning():
    state = start(constraints={'time_limit': 3, 'show_timer': True})
    for _ in range(3):
        state = dispatch(state, {'type': 'TICK'})
    assert state.time == 3
    assert state.time_up
    assert state.phase == PAUSED
    assert not state.won
    assert state.modal == 'time_up'
    assert dispatch(state, {'type': 'TICK'}) is state


def test_locked_cells_and_lock_countdown():
    state = start(locked={'0-0': 2, '2-2': 1})
    assert click(state, 0, 0) is state
    state = dispatch(state, {'type': 'LOCK_DECR'})
    assert state.locked == {'0-0': 1}
    state = dispatch(state, {'type': 'LOCK_DECR'})
    assert state.locked == {}


def test_undo_budget():
    state = start(constraints={'undo_limit': 1})
    state = click(click(state, 0, 0), 2, 2)
    state = dispatch(state, {'type': 'UNDO'})
    assert state.moves == 1
    assert dispatch(state, {'type': 'UNDO'}) is state


def test_undo_with_empty_history_is_a_no_op():
    state = start()
    assert dispatch(state, {'type': 'UNDO'}) is state


@pytest.mark.parametrize("level, budget", [(1, UNLIMITED_UNDOS), (10, UNLIMITED_UNDOS), (11, 10), (30, 10),
                                           (31, 12), (100, 5), (200, 1)])
def test_default_undo_budget(level, budget):
    assert default_max_undos(level) == budget


def test_reset_restores_initial_board_and_keeps_time():
    state = start()
    state = dispatch(state, {'type': 'TICK'})
    state = click(click(state, 0, 0), 2, 1)
    state = dispatch(state, {'type': 'RESET'})
    assert state.grid == CROSS
    assert state.moves == 0
    assert state.player_moves == []
    assert state.undo_count == 0
    assert state.time == 1
    assert dispatch(state, {'type': 'UNDO'}) is state


def test_win_scores_once():
    state = click(start(level=20), 1, 1)
    assert state.won
    state = dispatch(state, {'type': 'WIN'})
    assert state.scored
    assert state.score['total_points'] == state.level_points > 0
    assert state.total_points == state.level_points
    assert state.completed_levels == [20]
    assert dispatch(state, {'type': 'WIN'}) is state


def test_win_is_only_legal_once_solved():
    state = start()
    assert dispatch(state, {'type': 'WIN'}) is state


def test_next_level_returns_to_idle():
    state = start(level=20)
    assert dispatch(state, {'type': 'NEXT_LEVEL'}) is state
    state = dispatch(dispatch(click(state, 1, 1), {'type': 'WIN'}), {'type': 'NEXT_LEVEL'})
    assert state.phase == IDLE
    assert state.level == 21
    assert state.grid == []
    assert state.completed_levels == [20]


def test_pause_blocks_clicks():
    state = dispatch(start(), {'type': 'PAUSE'})
    assert state.phase == PAUSED
    assert click(state, 1, 1) is state
    state = dispatch(state, {'type': 'PAUSE', 'paused': False})
    assert state.phase == ACTIVE


def test_unknown_and_idle_actions_leave_state_unchanged():
    state = initial_state()
    assert click(state, 0, 0) is state
    assert dispatch(state, {'type': 'TICK'}) is state
    assert dispatch(state, {'type': 'EXPLODE'}) is state
    assert dispatch(state, {}) is state


def test_hints_default_on_tutorial_levels_and_toggle():
    assert start(level=2).hints_enabled
    state = start(level=12)
    assert not state.hints_enabled
    state = dispatch(state, {'type': 'TOGGLE_HINTS'})
    assert state.hints_enabled and state.show_hints
    state = dispatch(state, {'type': 'TOGGLE_HINTS', 'enabled': False})
    assert not state.hints_enabled


def test_show_modal():
    state = dispatch(start(), {'type': 'SHOW_MODAL', 'modal': 'tutorial'})
    assert state.modal == 'tutorial'


def test_load_save_restores_progression():
    saved = {'current_level': 14, 'total_points': 900, 'level_points': 0, 'completed_levels': [12, 13]}
    state = dispatch(start(), {'type': 'LOAD_SAVE', 'saved': saved})
    assert state.phase == IDLE
    assert state.level == 14
    assert state.total_points == 900
    assert state.save_loaded


def test_continue_game_restores_mid_level_board():
    # The regenerated puzzle has its own path; the saved one wins.
    puzzle = make_puzzle(CROSS, [(0, 2), (2, 0)], level=14)
    saved = {
        'current_level': 14, 'total_points': 900, 'level_points': 0, 'completed_levels': [13],
        'current_game': {
            'grid': [[1, 0, 0], [0, 0, 0], [0, 0, 0]], 'target_grid': [[0] * 3 for _ in range(3)],
            'moves': 3, 'time': 42, 'optimal_path': [{'row': 1, 'col': 1}], 'hints_enabled': False,
            'undo_count': 1, 'player_moves': [{'row': 0, 'col': 0}, {'row': 0, 'col': 1}, {'row': 1, 'col': 0}],
            'initial_grid': CROSS,
        },
    }
    state = dispatch(initial_state(), {'type': 'CONTINUE_GAME', 'saved': saved, 'puzzle': puzzle})
    assert state.phase == ACTIVE
    assert state.grid == [[1, 0, 0], [0, 0, 0], [0, 0, 0]]
    assert state.moves == 3
    assert state.time == 42
    assert state.player_moves == [(0, 0), (0, 1), (1, 0)]
    assert state.optimal_path == [(1, 1)]
    assert state.solution == state.optimal_path
    assert state.generation_history == list(reversed(state.optimal_path))
    assert state.total_points == 900
    assert dispatch(state, {'type': 'RESET'}).grid == CROSS


def test_continue_game_without_current_game_starts_fresh():
    puzzle = make_puzzle(CROSS, [(1, 1)], level=1)
    saved = {'current_level': 14, 'total_points': 900, 'level_points': 0, 'completed_levels': [13]}
    state = dispatch(initial_state(), {'type': 'CONTINUE_GAME', 'saved': saved, 'puzzle': puzzle})
    assert state.phase == ACTIVE
    assert state.level == 14
    assert state.grid == CROSS
    assert state.total_points == 900
