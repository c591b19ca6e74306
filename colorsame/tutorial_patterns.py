# --- File: colorsame/tutorial_patterns.py ---
# Description: Hand-made puzzles for the first levels. Each pattern is solved
# by tapping its solution in order, using the level's own palette.

import copy

from colorsame.constants import TUTORIAL_LEVEL_MAX
from colorsame.level_config import get_level_config

TUTORIAL_PATTERNS = {
    1: {
        'level': 1,
        'initial_grid': [[0, 1, 0],
                         [1, 1, 1],
                         [0, 1, 0]],
        'solution': [(1, 1)],
    },
    2: {
        'level': 2,
        'initial_grid': [[1, 0, 0],
                         [0, 1, 1],
                         [0, 1, 0]],
        'solution': [(0, 0), (1, 1)],
    },
    3: {
        'level': 3,
        'initial_grid': [[1, 0, 0],
                         [0, 1, 0],
                         [0, 0, 1]],
        'solution': [(0, 0), (1, 1), (2, 2)],
    },
}


def is_tutorial_level(level):
    return 1 <= level <= TUTORIAL_LEVEL_MAX and level in TUTORIAL_PATTERNS


def get_tutorial_pattern(level):
    """
    Returns a fresh copy of the tutorial pattern for a level, or None.

    :param int level: The level number.
    :returns: dict with level, initial_grid, target_grid, solution and colors.
    :rtype: dict | None
    """
    pattern = TUTORIAL_PATTERNS.get(level)
    if pattern is None:
        return None
    size = len(pattern['initial_grid'])
    return {
        'level': level,
        'initial_grid': copy.deepcopy(pattern['initial_grid']),
        'target_grid': [[0] * size for _ in range(size)],
        'solution': list(pattern['solution']),
        'colors': get_level_config(level)['colors'],
    }


def get_tutorial_complete_message(level):
    if not is_tutorial_level(level):
        return ""
    return f"{level}/{TUTORIAL_LEVEL_MAX}"
