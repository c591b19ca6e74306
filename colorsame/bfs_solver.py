# --- File: colorsame/bfs_solver.py ---
# Description: Bounded breadth-first search for the shortest click sequence
# that turns a board into a single color, plus hint selection for a session.

import logging
from collections import deque

from colorsame.constants import BFS_MAX_STATES, BFS_MAX_DEPTH
from colorsame.grid_effects import apply_click, grid_key, is_locked, is_winning_state, pos_to_key


class BfsSolver:
    def __init__(self, max_states=BFS_MAX_STATES, max_depth=BFS_MAX_DEPTH):
        self.max_states, self.max_depth = max_states, max_depth

    def solve(self, grid, power=None, locked=None, colors=2):
        """
        Searches for a shortest solution from the given board.

        Locked cells cannot be clicked and their counters are held fixed during
        the search. An empty solution means the bound was hit or nothing was
        found; it does not prove the board is unsolvable.

        :param list[list[int]] grid: Board to solve.
        :param set power: Power tile keys.
        :param dict locked: Map of "row-col" keys to lock counters.
        :param int colors: Palette size.
        :returns: dict with 'solution' (list of (row, col)) and 'states_explored'.
        :rtype: dict
        """
        power, locked = power or set(), locked or {}
        size = len(grid)
        visited = set()
        queue = deque([(grid, [])])

        while queue and len(visited) < self.max_states:
            state, path = queue.popleft()
            if is_winning_state(state):
                return {'solution': path, 'states_explored': len(visited)}

            key = grid_key(state)
            if key in visited or len(path) >= self.max_depth:
                continue
            visited.add(key)

            for r in range(size):
                for c in range(size):
                    if is_locked(locked, r, c):
                        continue
                    next_state = apply_click(state, r, c, colors, pos_to_key(r, c) in power, locked)
                    if grid_key(next_state) not in visited:
                        queue.append((next_state, path + [(r, c)]))

        logging.info(f"BFS found no solution after exploring {len(visited)} states")
        return {'solution': [], 'states_explored': len(visited)}


def bfs_solve(grid, power=None, locked=None, colors=2):
    """Solves with the default bounds."""
    return BfsSolver().solve(grid, power, locked, colors)


def is_on_optimal_path(optimal_path, player_moves):
    """True while the player's moves are a prefix of the optimal path."""
    if len(player_moves) > len(optimal_path):
        return False
    return all(tuple(move) == tuple(expected) for move, expected in zip(player_moves, optimal_path))


def next_hint(grid, power, locked, colors, optimal_path, player_moves, solver=None):
    """
    Picks the next move to suggest.

    While the player is still following the optimal path the hint is simply
    its next step. Once they have diverged a fresh shortest path is searched
    from the current board.

    :returns: dict with 'move' ((row, col) or None), 'on_optimal_path' and 'source'.
    :rtype: dict
    """
    if is_winning_state(grid):
        return {'move': None, 'on_optimal_path': True, 'source': 'solved'}

    if is_on_optimal_path(optimal_path, player_moves) and len(player_moves) < len(optimal_path):
        return {'move': tuple(optimal_path[len(player_moves)]), 'on_optimal_path': True, 'source': 'optimal_path'}

    solver = solver or BfsSolver()
    result = solver.solve(grid, power, locked, colors)
    move = result['solution'][0] if result['solution'] else None
    return {'move': move, 'on_optimal_path': False, 'source': 'bfs'}
