# tests/conftest.py
import random
import sys
import threading
from pathlib import Path

import pytest

# Add project root to sys.path so "colorsame" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from colorsame.game_session import GameSession  # noqa: E402
from colorsame.puzzle_generator import PuzzleGenerator  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def generator(rng):
    return PuzzleGenerator(rng=rng)


@pytest.fixture
def session(generator):
    return GameSession(generator=generator)


def make_puzzle(grid, solution, colors=2, level=5, power=None, locked=None):
    """Hand-built GenerationResult for reducer tests."""
    size = len(grid)
    return {
        'level': level,
        'colors': colors,
        'grid': [list(row) for row in grid],
        'solved': [[0] * size for _ in range(size)],
        'power': set(power or ()),
        'locked': dict(locked or {}),
        'solution': list(solution),
        'generation_history': list(reversed(solution)),
        'optimal_path': list(solution),
        'player_moves': [],
    }


@pytest.fixture
def fast_switching():
    """Forces frequent thread switches so unsynchronised updates get interleaved."""
    interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    yield
    sys.setswitchinterval(interval)


def run_threads(target, count=8):
    """Runs target(worker_index) on count threads and re-raises the first failure."""
    errors = []

    def run(worker):
        try:
            target(worker)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=run, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]
