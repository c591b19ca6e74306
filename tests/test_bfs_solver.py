# tests/test_bfs_solver.py
import random

from colorsame.bfs_solver import BfsSolver, bfs_solve, is_on_optimal_path, next_hint
from colorsame.grid_effects import apply_click, is_winning_state
from colorsame.puzzle_generator import PuzzleGenerator


def test_single_move_puzzle():
    grid = [[0, 1, 0], [1, 1, 1], [0, 1, 0]]
    result = bfs_solve(grid, colors=2)
    assert result['solution'] == [(1, 1)]


def test_solution_is_no_longer_than_generated_path():
    puzzle = PuzzleGenerator(rng=random.Random(8), tutorials=None).generate(4)
    result = bfs_solve(puzzle['grid'], puzzle['power'], puzzle['locked'], puzzle['colors'])
    assert 1 <= len(result['solution']) <= len(puzzle['optimal_path'])
    grid = puzzle['grid']
    for row, col in result['solution']:
        grid = apply_click(grid, row, col, puzzle['colors'])
    assert is_winning_state(grid)


def test_solved_grid_needs_no_moves():
    assert bfs_solve([[2, 2, 2], [2, 2, 2], [2, 2, 2]], colors=3)['solution'] == []


def test_state_bound_returns_empty_solution():
    grid = [[0, 1, 0], [1, 1, 1], [0, 1, 0]]
    result = BfsSolver(max_states=1).solve(grid, colors=2)
    assert result['solution'] == []
    assert result['states_explored'] == 1


def test_locked_cells_are_never_clicked():
    grid = [[0, 1, 0], [1, 1, 1], [0, 1, 0]]
    result = bfs_solve(grid, locked={'1-1': 3}, colors=2)
    assert (1, 1) not in result['solution']


def test_prefix_detection():
    path = [(0, 0), (1, 1), (2, 2)]
    assert is_on_optimal_path(path, [])
    assert is_on_optimal_path(path, [(0, 0), (1, 1)])
    assert not is_on_optimal_path(path, [(1, 1)])
    assert not is_on_optimal_path(path, path + [(0, 1)])


def test_hint_follows_optimal_path_then_searches():
    puzzle = PuzzleGenerator(rng=random.Random(2), tutorials=None).generate(3)
    path = puzzle['optimal_path']
    hint = next_hint(puzzle['grid'], puzzle['power'], puzzle['locked'], puzzle['colors'], path, [])
    assert hint == {'move': path[0], 'on_optimal_path': True, 'source': 'optimal_path'}

    off_path = next(
        (r, c) for r in range(3) for c in range(3) if (r, c) != path[0]
    )
    grid = apply_click(puzzle['grid'], off_path[0], off_path[1], puzzle['colors'])
    hint = next_hint(grid, puzzle['power'], puzzle['locked'], puzzle['colors'], path, [off_path])
    assert hint['on_optimal_path'] is False
    assert hint['source'] == 'bfs'
    assert hint['move'] is not None


def test_hint_on_solved_grid():
    hint = next_hint([[1, 1], [1, 1]], set(), {}, 2, [(0, 0)], [(0, 0)])
    assert hint['move'] is None
