# --- File: colorsame/z3_solver.py ---
import logging
import time

from z3 import Int, Solver, Sum, sat

from colorsame.grid_effects import affected_cells, is_locked, pos_to_key


def format_duration(seconds):
    """Renders a solve time as ms, seconds or minutes depending on its size."""
    if seconds < 1:
        return f"{seconds * 1000:.2f} ms"
    minutes, rest = divmod(seconds, 60)
    if not minutes:
        return f"{rest:.3f} s"
    return f"{int(minutes)} min {rest:.2f} s"


class Z3ColorSolver:
    """
    Decides whether a board can reach a single color by posing the click counts
    as a linear system modulo the palette size.

    Every click on a cell adds one to each cell it affects, so only the number
    of clicks per cell matters and each count lives in [0, colors). Locked cells
    cannot be clicked and must already hold the target color.
    """

    def __init__(self, grid, colors, power=None, locked=None):
        self.grid, self.dim, self.colors = grid, len(grid), colors
        self.power, self.locked = power or set(), locked or {}

    def _influences(self):
        influences = {(r, c): [] for r in range(self.dim) for c in range(self.dim)}
        for r in range(self.dim):
            for c in range(self.dim):
                for cell in affected_cells(r, c, self.dim, pos_to_key(r, c) in self.power):
                    influences[cell].append((r, c))
        return influences

    def solve(self, target=None):
        """
        Finds click counts that make every cell equal to ``target``.

        :param int target: Target color; every color is tried when omitted.
        :returns: Grid of click counts per cell, or None when no target is reachable.
        :rtype: list[list[int]] | None
        """
        targets = range(self.colors) if target is None else [target]
        influences = self._influences()
        start_time = time.monotonic()

        for goal in targets:
            s = Solver()
            clicks = [[Int(f"x_{r}_{c}") for c in range(self.dim)] for r in range(self.dim)]
            for r in range(self.dim):
                for c in range(self.dim):
                    # Rule: a click count is a residue, locked cells are never clicked
                    s.add(clicks[r][c] >= 0, clicks[r][c] < self.colors)
                    if is_locked(self.locked, r, c):
                        s.add(clicks[r][c] == 0)
            for (r, c), sources in influences.items():
                if is_locked(self.locked, r, c):
                    if self.grid[r][c] != goal:
                        break
                    continue
                # Rule: the cell's value plus the clicks reaching it lands on the goal color
                total = Sum([clicks[i][j] for i, j in sources])
                s.add((self.grid[r][c] + total) % self.colors == goal)
            else:
                if s.check() == sat:
                    model = s.model()
                    counts = [[model.evaluate(clicks[r][c], model_completion=True).as_long() for c in range(self.dim)] for r in range(self.dim)]
                    logging.debug(f"Z3 solve time: {format_duration(time.monotonic() - start_time)}")
                    return counts

        logging.debug(f"Z3 solve time (no solution): {format_duration(time.monotonic() - start_time)}")
        return None

    def is_solvable(self):
        return self.solve() is not None


def counts_to_moves(counts):
    """Expands a click-count grid into a flat move list (order is irrelevant)."""
    return [(r, c) for r, row in enumerate(counts) for c, n in enumerate(row) for _ in range(n)]


def is_solvable(grid, colors, power=None, locked=None):
    return Z3ColorSolver(grid, colors, power, locked).is_solvable()
