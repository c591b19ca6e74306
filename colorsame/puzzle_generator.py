"""**********************************************************************************
 * Title: puzzle_generator.py
 *
 * @version 2.0.3
 * -------------------------------------------------------------------------------
 * Description:
 * Builds scrambled puzzles that are solvable in a known number of moves. The
 * generator starts from the solved all-zero board and applies exactly N
 * reverse clicks chosen at random; replaying those clicks as normal clicks in
 * the opposite order returns the board to the solved state, so every puzzle
 * ships with its optimal path. Tutorial levels are served verbatim from the
 * tutorial pattern collaborator. The module can also be run from the command
 * line to print a generated level.
 *
 * Usage:
 *   python -m colorsame.puzzle_generator 42
 *   python -m colorsame.puzzle_generator 120 --seed 7
 **********************************************************************************"""

# --- IMPORTS ---
import argparse
import logging
import random

from colorsame import tutorial_patterns
from colorsame.constants import (
    MAX_GENERATION_ATTEMPTS, REUSE_THRESHOLD, MIN_TOP_CANDIDATES, LOCK_MIN_MOVES, LOCK_MAX_MOVES
)
from colorsame.grid_effects import apply_reverse_click, clone_grid, pos_to_key
from colorsame.level_config import get_level_config


# --- ERRORS ---
class GenerationError(RuntimeError):
    """Raised when every generation attempt for a level has been exhausted."""

    def __init__(self, level, attempts):
        super().__init__(f"Failed to generate level {level} after {attempts} attempts")
        self.level = level
        self.attempts = attempts


# --- RESULT BUILDING ---
def build_generation_result(level, colors, grid, solved, power, locked, generation_history):
    """
    Assembles the GenerationResult dictionary.

    The optimal path is the generation history reversed and the solution is the
    same sequence; the player's move list starts empty.

    :rtype: dict
    """
    optimal_path = list(reversed(generation_history))
    return {
        'level': level,
        'colors': colors,
        'grid': grid,
        'solved': solved,
        'power': set(power),
        'locked': dict(locked),
        'solution': list(optimal_path),
        'generation_history': list(generation_history),
        'optimal_path': optimal_path,
        'player_moves': [],
    }


def result_from_tutorial(pattern):
    """Converts a tutorial pattern into a GenerationResult, keeping its solution as-is."""
    solution = list(pattern['solution'])
    return build_generation_result(
        pattern['level'], pattern['colors'], clone_grid(pattern['initial_grid']),
        clone_grid(pattern['target_grid']), set(), {}, list(reversed(solution))
    )


# --- LOCKED TILE PLACEMENT ---
def place_locked_tiles(grid, optimal_path, power, count, rng):
    """
    Picks cells to lock after a puzzle has been scrambled.

    Candidates never sit on the optimal path or on a power tile and must
    already show the target color, so the certified solution is unaffected.
    Each lock lasts 2-4 moves, capped below the solution length so it always
    expires in time.

    :param list[list[int]] grid: The scrambled board.
    :param list optimal_path: Certified solution as (row, col) tuples.
    :param set power: Power tile keys.
    :param int count: Number of tiles to lock.
    :param random.Random rng: Randomness source.
    :returns: Map of "row-col" keys to lock counters.
    :rtype: dict
    """
    locked = {}
    if count <= 0 or len(optimal_path) < 2:
        return locked

    path_keys = {pos_to_key(r, c) for r, c in optimal_path}
    size = len(grid)
    candidates = [
        pos_to_key(r, c) for r in range(size) for c in range(size)
        if pos_to_key(r, c) not in path_keys and pos_to_key(r, c) not in power and grid[r][c] == 0
    ]
    rng.shuffle(candidates)

    max_lock_moves = min(len(optimal_path) - 1, LOCK_MAX_MOVES)
    for key in candidates[:count]:
        locked[key] = min(LOCK_MIN_MOVES + rng.randint(0, LOCK_MAX_MOVES - LOCK_MIN_MOVES), max_lock_moves)
    return locked


# --- GENERATOR ---
class PuzzleGenerator:
    """Generates level puzzles with a certified optimal path."""

    def __init__(self, rng=None, tutorials=tutorial_patterns, max_attempts=MAX_GENERATION_ATTEMPTS):
        """
        :param random.Random rng: Randomness source; pass a seeded instance for reproducible puzzles.
        :param tutorials: Object exposing is_tutorial_level() and get_tutorial_pattern(); None disables tutorials.
        :param int max_attempts: Attempts before a GenerationError is raised.
        """
        self.rng = rng if rng is not None else random.Random()
        self.tutorials = tutorials
        self.max_attempts = max_attempts

    def generate(self, level=1):
        """
        Generates the puzzle for a level.

        :param int level: The level number (1-based).
        :returns: The GenerationResult dictionary.
        :rtype: dict
        :raises GenerationError: If no attempt produced a puzzle.
        """
        if self.tutorials is not None and self.tutorials.is_tutorial_level(level):
            pattern = self.tutorials.get_tutorial_pattern(level)
            if pattern:
                logging.info(f"Using tutorial pattern for level {level}")
                return result_from_tutorial(pattern)

        return self.generate_from_config(get_level_config(level))

    def generate_from_config(self, config):
        for attempt in range(self.max_attempts):
            result = self._attempt(config)
            if result is not None:
                logging.info(
                    f"Generated level {config['level']}: {config['grid_size']}x{config['grid_size']}, "
                    f"{config['colors']} colors, {len(result['optimal_path'])} moves (attempt {attempt + 1})"
                )
                return result
            logging.warning(f"Generation attempt {attempt + 1} for level {config['level']} ran out of candidates")

        logging.error(f"Giving up on level {config['level']} after {self.max_attempts} attempts")
        raise GenerationError(config['level'], self.max_attempts)

    def _place_power_tiles(self, size, count):
        if count <= 0:
            return set()
        positions = [pos_to_key(r, c) for r in range(size) for c in range(size)]
        return set(self.rng.sample(positions, min(count, len(positions))))

    def _attempt(self, config):
        """One generation attempt. Returns None when no legal candidate remains."""
        size, colors = config['grid_size'], config['colors']
        required_moves = config['required_moves']

        solved = [[0] * size for _ in range(size)]
        power = self._place_power_tiles(size, config['power_tiles'])
        grid = clone_grid(solved)
        history = []

        if config['level'] == 1 and required_moves == 1:
            # Level 1 is always a single tap in the centre.
            center = size // 2
            history.append((center, center))
            grid = apply_reverse_click(grid, center, center, colors, pos_to_key(center, center) in power)
        else:
            used = set()
            click_counts = {}
            reuse_threshold = int(required_moves * REUSE_THRESHOLD)

            for move_num in range(required_moves):
                candidates = [(r, c) for r in range(size) for c in range(size)]
                self.rng.shuffle(candidates)
                if move_num < reuse_threshold:
                    # Stable sort keeps the shuffle order within each group.
                    candidates.sort(key=lambda pos: pos in used)

                top = candidates[:max(MIN_TOP_CANDIDATES, size)]
                selected = self._first_clickable(top, click_counts, colors)
                if selected is None:
                    selected = self._first_clickable(candidates, click_counts, colors)
                if selected is None:
                    return None

                used.add(selected)
                click_counts[selected] = click_counts.get(selected, 0) + 1
                row, col = selected
                grid = apply_reverse_click(grid, row, col, colors, pos_to_key(row, col) in power)
                history.append(selected)

        optimal_path = list(reversed(history))
        locked = place_locked_tiles(grid, optimal_path, power, config['locked_tiles'], self.rng)
        return build_generation_result(config['level'], colors, grid, solved, power, locked, history)

    @staticmethod
    def _first_clickable(candidates, click_counts, colors):
        # A cell clicked colors-1 times would wrap back to a no-op on the next click.
        for candidate in candidates:
            if click_counts.get(candidate, 0) < colors - 1:
                return candidate
        return None


# --- TERMINAL OUTPUT ---
def display_terminal_grid(grid, title, power=None):
    """Prints the grid to the terminal, marking power tiles with '*'."""
    if not grid:
        return
    power = power or set()
    print(f"\n--- {title} ---")
    for r, row in enumerate(grid):
        cells = []
        for c, value in enumerate(row):
            symbol = f"{value}*" if pos_to_key(r, c) in power else str(value)
            cells.append(f"{symbol:^3}")
        print(" ".join(cells))
    print("-----------------\n")


def main():
    parser = argparse.ArgumentParser(description="Generate a color puzzle for a level and print its optimal path.")
    parser.add_argument('level', type=int, help='Level number (1-based).')
    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible generation.')
    parser.add_argument('--no-tutorials', action='store_true', help='Generate levels 1-3 instead of using tutorial patterns.')
    args = parser.parse_args()

    tutorials = None if args.no_tutorials else tutorial_patterns
    generator = PuzzleGenerator(rng=random.Random(args.seed), tutorials=tutorials)
    result = generator.generate(args.level)

    config = get_level_config(args.level)
    print(f"Level {config['level']}: {len(result['grid'])}x{len(result['grid'])}, {result['colors']} colors")
    display_terminal_grid(result['grid'], "Scrambled", result['power'])
    path = " -> ".join(f"({r},{c})" for r, c in result['optimal_path'])
    print(f"Optimal path ({len(result['optimal_path'])} moves): {path}")


if __name__ == "__main__":
    main()
