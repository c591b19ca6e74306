# --- File: colorsame/scoring.py ---
# Description: Points awarded for a completed level.

import logging

from colorsame.constants import TUTORIAL_LEVEL_MAX, TUTORIAL_BASE_POINTS, BASE_POINTS, BASE_POINTS_STEP, BASE_POINTS_TIER


def _round(value):
    # Halves round up.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def get_base_points(level):
    if 1 <= level <= TUTORIAL_LEVEL_MAX:
        return TUTORIAL_BASE_POINTS
    return BASE_POINTS + ((level - 1) // BASE_POINTS_TIER) * BASE_POINTS_STEP


def calculate_move_bonus(moves, optimal_moves, base_points):
    """+50% of base for matching the optimal count, more for beating it, -10% per extra move."""
    if moves == optimal_moves:
        return _round(base_points * 0.5)
    if moves < optimal_moves:
        return _round(base_points * (0.5 + (optimal_moves - moves) * 0.2))
    penalty_factor = max(0, 1 - (moves - optimal_moves) * 0.1)
    return _round(base_points * 0.5 * penalty_factor)


def calculate_time_bonus(time, base_points):
    if time < 30:
        return _round(base_points * 0.2)
    if time < 60:
        return _round(base_points * 0.1)
    return 0


def calculate_perfect_bonus(hints_used, base_points):
    return 0 if hints_used else base_points


def calculate_power_tile_bonus(power_tiles_used_optimally, base_points):
    return _round(base_points * 0.1 * power_tiles_used_optimally)


def apply_penalties(total_points, undo_used):
    return _round(total_points * 0.75) if undo_used else total_points


def calculate_level_score(level, moves, optimal_moves, time, hints_used, undo_used, power_tiles_used_optimally=0):
    """
    Computes the points breakdown for a finished level.

    Hints on a non-tutorial level forfeit every point. Otherwise the bonuses
    are summed with the base and the undo penalty is applied last.

    :param int level: The level number.
    :param int moves: Moves the player made.
    :param int optimal_moves: Length of the optimal path.
    :param int time: Elapsed seconds.
    :param bool hints_used: Whether hints were shown.
    :param bool undo_used: Whether undo was used.
    :param int power_tiles_used_optimally: Power tiles clicked on the optimal path.
    :returns: dict with base_points, move_bonus, time_bonus, perfect_bonus and total_points.
    :rtype: dict
    """
    if hints_used and level > TUTORIAL_LEVEL_MAX:
        logging.debug(f"Hints used on level {level}: zero points awarded")
        return {'base_points': 0, 'move_bonus': 0, 'time_bonus': 0, 'perfect_bonus': 0, 'total_points': 0}

    base_points = get_base_points(level)
    move_bonus = calculate_move_bonus(moves, optimal_moves, base_points)
    time_bonus = calculate_time_bonus(time, base_points)
    perfect_bonus = calculate_perfect_bonus(hints_used, base_points)
    power_tile_bonus = calculate_power_tile_bonus(power_tiles_used_optimally, base_points)

    total_points = apply_penalties(base_points + move_bonus + time_bonus + perfect_bonus + power_tile_bonus, undo_used)
    logging.debug(f"Level {level} scored {total_points} points")
    return {
        'base_points': base_points,
        'move_bonus': move_bonus,
        'time_bonus': time_bonus,
        'perfect_bonus': perfect_bonus,
        'total_points': total_points,
    }


def format_points(points):
    """Shortens large totals: 999, 1.2k, 12k, 1.2M, 12M."""
    if points < 1000:
        return str(points)
    if points < 10000:
        return f"{points / 1000:.1f}k"
    if points < 1000000:
        return f"{_round(points / 1000)}k"
    if points < 10000000:
        return f"{points / 1000000:.1f}M"
    return f"{_round(points / 1000000)}M"
