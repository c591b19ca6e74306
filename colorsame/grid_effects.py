# --- File: colorsame/grid_effects.py ---
# Description: Pure grid operations. Colors are integers modulo the palette
# size; a click adds one to every affected cell, a reverse click subtracts one.

CROSS_DELTAS = [(0, 0), (-1, 0), (1, 0), (0, -1), (0, 1)]
POWER_DELTAS = [(dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1)]


def clone_grid(grid):
    return [list(row) for row in grid]


def next_color(color, total):
    return (color + 1) % total


def pos_to_key(row, col):
    return f"{row}-{col}"


def key_to_pos(key):
    row, col = key.split('-')
    return int(row), int(col)


def grid_key(grid):
    """Canonical string encoding of a grid, e.g. '010|111|010'."""
    return '|'.join(''.join(str(cell) for cell in row) for row in grid)


def is_winning_state(grid):
    """True when every cell holds the same color. An empty grid never wins."""
    if not grid or not grid[0]:
        return False
    first = grid[0][0]
    return all(cell == first for row in grid for cell in row)


def is_locked(locked, row, col):
    return locked.get(pos_to_key(row, col), 0) > 0


def affected_cells(row, col, size, is_power):
    """
    Lists the in-bounds cells a click influences.

    A normal click touches itself and its four orthogonal neighbours; a power
    click touches the full 3x3 block. Cells off the board are dropped.

    :param int row: Clicked row.
    :param int col: Clicked column.
    :param int size: Board dimension.
    :param bool is_power: Whether the clicked cell is a power tile.
    :returns: List of (row, col) tuples.
    """
    deltas = POWER_DELTAS if is_power else CROSS_DELTAS
    cells = []
    for dr, dc in deltas:
        nr, nc = row + dr, col + dc
        if 0 <= nr < size and 0 <= nc < size:
            cells.append((nr, nc))
    return cells


def effect_matrix(row, col, size, is_power):
    """Builds a 0/1 matrix marking the cells a click changes."""
    matrix = [[0] * size for _ in range(size)]
    for r, c in affected_cells(row, col, size, is_power):
        matrix[r][c] = 1
    return matrix


def _shift(grid, row, col, colors, is_power, locked, step):
    size = len(grid)
    new_grid = clone_grid(grid)
    locked = locked or {}
    for r, c in affected_cells(row, col, size, is_power):
        if is_locked(locked, r, c):
            continue
        new_grid[r][c] = (new_grid[r][c] + step) % colors
    return new_grid


def apply_click(grid, row, col, colors, is_power=False, locked=None):
    """
    Applies a player click and returns a new grid; the input is not modified.

    :param list[list[int]] grid: Current board.
    :param int row: Clicked row.
    :param int col: Clicked column.
    :param int colors: Palette size (the modulus).
    :param bool is_power: Whether the clicked cell is a power tile.
    :param dict locked: Map of "row-col" keys to remaining lock counters.
    :returns: The board after the click.
    :rtype: list[list[int]]
    """
    return _shift(grid, row, col, colors, is_power, locked, 1)


def apply_reverse_click(grid, row, col, colors, is_power=False, locked=None):
    """Inverse of apply_click: every affected unlocked cell steps back one color."""
    return _shift(grid, row, col, colors, is_power, locked, -1)
