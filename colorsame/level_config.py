"""**********************************************************************************
 * Title: level_config.py
 *
 * @version 1.1.0
 * -------------------------------------------------------------------------------
 * Description:
 * Deterministic mapping from a level number to its difficulty profile. The
 * grid grows at fixed milestones, the palette cycles between two and five
 * colors (stepping back down right after a grid increase), and the number of
 * scramble moves is always kept within the count of meaningfully distinct
 * click states for the board.
 **********************************************************************************"""

# --- IMPORTS ---
import math

from colorsame.constants import (
    GRID_SIZE_STEPS, GRID_GROWTH_START, GRID_GROWTH_INTERVAL, MAX_CURVE_GRID_SIZE,
    COLOR_STEPS, COLOR_CYCLE_START, COLOR_CYCLE_LENGTH, COLOR_CYCLE, TUTORIAL_LEVEL_MAX
)

MILESTONE_DESCRIPTIONS = {
    10: "3 colors unlocked!",
    19: "4 colors unlocked!",
    28: "4×4 grid",
    33: "3 colors on 4×4",
    49: "4 colors on 4×4",
    65: "5×5 grid",
    71: "Harder puzzles",
    76: "4 colors on 5×5",
    101: "6×6",
    151: "7×7",
    201: "8×8",
}


def normalize_level(level):
    """Coerces any numeric level to an integer of at least 1."""
    try:
        return max(1, math.floor(level))
    except (TypeError, ValueError):
        return 1


def grid_size_for_level(level):
    for last_level, size in GRID_SIZE_STEPS:
        if level <= last_level:
            return size
    return min(MAX_CURVE_GRID_SIZE, 7 + (level - GRID_GROWTH_START) // GRID_GROWTH_INTERVAL)


def colors_for_level(level):
    for last_level, colors in COLOR_STEPS:
        if level <= last_level:
            return colors
    cycle = (level - COLOR_CYCLE_START) % COLOR_CYCLE_LENGTH
    for upper, colors in COLOR_CYCLE:
        if cycle < upper:
            return colors
    return COLOR_CYCLE[-1][1]


def max_meaningful_moves(grid_size, colors):
    """Number of distinct single-cell click states: size² × (colors − 1)."""
    return grid_size * grid_size * (colors - 1)


def required_moves_for_level(level, grid_size, colors):
    max_moves = max_meaningful_moves(grid_size, colors)
    if level <= max_moves:
        return level
    progress = (level - 1) / 100
    return min(math.floor(max_moves * 0.5 + progress * max_moves * 0.5), max_moves)


def get_level_config(level):
    """
    Builds the difficulty profile for a level.

    The function is total: any input is coerced to an integer level >= 1 and
    a complete profile is always returned.

    :param int level: The level number (1-based).
    :returns: The difficulty profile.
    :rtype: dict
    """
    level = normalize_level(level)
    grid_size = grid_size_for_level(level)
    colors = colors_for_level(level)

    return {
        'level': level,
        'grid_size': grid_size,
        'colors': colors,
        'required_moves': required_moves_for_level(level, grid_size, colors),
        # Power and locked tiles are switched off for every level. The
        # generator and the session still honour non-zero counts.
        'power_tiles': 0,
        'locked_tiles': 0,
        'hints_enabled': level <= TUTORIAL_LEVEL_MAX,
        'time_limit': 0,
    }


def get_level_milestone_description(level):
    """
    Returns a short description of what changes at this level, or None.

    :param int level: The level number.
    :rtype: str | None
    """
    if level in MILESTONE_DESCRIPTIONS:
        return MILESTONE_DESCRIPTIONS[level]
    if level > GRID_GROWTH_START:
        new_size = grid_size_for_level(level)
        if new_size > grid_size_for_level(level - 1):
            return f"Grid expanded to {new_size}×{new_size}!"
    return None


def calculate_level_xp(config, moves_used, hints_used):
    """
    XP reward for completing a level.

    :param dict config: Profile from get_level_config.
    :param int moves_used: Moves the player actually made.
    :param bool hints_used: Whether hints were shown during the level.
    :rtype: int
    """
    base_xp = 100 + config['level'] * 10
    efficiency = config['required_moves'] / moves_used if moves_used > 0 else 1
    if efficiency >= 1:
        efficiency_bonus = math.floor(base_xp * 0.5)
    elif efficiency >= 0.8:
        efficiency_bonus = math.floor(base_xp * 0.25)
    else:
        efficiency_bonus = 0
    hint_penalty = 0.5 if hints_used else 1
    return math.floor((base_xp + efficiency_bonus) * hint_penalty)
