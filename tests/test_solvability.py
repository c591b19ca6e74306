# tests/test_solvability.py
import logging
import time

import pytest

from colorsame.solvability import LRUCache, SolvabilityGuarantee, cache_key
from conftest import run_threads


def generated(grid, path):
    return {'grid': grid, 'power': set(), 'locked': {}, 'optimal_path': path, 'colors': 2}


def test_reverse_path_is_trusted_and_cached():
    calls = []
    guarantee = SolvabilityGuarantee(checker=lambda *args: calls.append(args) or True)
    result = generated([[0, 1, 0], [1, 1, 1], [0, 1, 0]], [(1, 1)])

    check = guarantee.verify_generation(result)
    assert check['is_solvable'] is True
    assert check['method'] == 'reverse-path'
    assert check['confidence'] == 1.0
    assert guarantee.verify_generation(result) is check
    assert calls == []
    assert guarantee.get_performance_report()['total_checks'] == 1


def test_mathematical_fallback_without_path():
    guarantee = SolvabilityGuarantee(checker=lambda grid, colors, power, locked: False)
    check = guarantee.verify_generation(generated([[1, 0], [0, 0]], []))
    assert check['is_solvable'] is False
    assert check['method'] == 'mathematical'
    assert check['confidence'] == 0.95
    assert guarantee.get_performance_report()['failure_rate'] == 1.0


def test_checker_errors_assume_solvable():
    def broken(*args):
        raise RuntimeError("solver crashed")

    guarantee = SolvabilityGuarantee(checker=broken)
    verify = guarantee.verify_generation(generated([[1, 0], [0, 0]], []))
    assert verify['is_solvable'] is True
    assert verify['confidence'] == 0.8

    runtime = guarantee.check_runtime_solvability([[1, 0], [0, 0]], 2)
    assert runtime['is_solvable'] is True
    assert runtime['confidence'] == 0.5
    assert guarantee.get_performance_report()['total_checks'] == 0


def test_runtime_check_uses_z3_by_default():
    guarantee = SolvabilityGuarantee()
    check = guarantee.check_runtime_solvability([[0, 1, 0], [1, 1, 1], [0, 1, 0]], 2)
    assert check['is_solvable'] is True
    assert check['method'] == 'mathematical'


def test_slow_checks_are_logged(caplog):
    def slow(*args):
        time.sleep(0.12)
        return True

    guarantee = SolvabilityGuarantee(checker=slow)
    with caplog.at_level(logging.WARNING):
        guarantee.check_runtime_solvability([[0, 0], [0, 1]], 2)
    assert "Slow solvability check" in caplog.text


def test_cache_is_bounded():
    guarantee = SolvabilityGuarantee(cache_capacity=2, checker=lambda *args: True)
    for value in range(3):
        guarantee.check_runtime_solvability([[value, 0], [0, 0]], 3)
    assert len(guarantee.cache) == 2
    assert cache_key([[0, 0], [0, 0]], set(), {}) not in guarantee.cache


def test_lru_eviction_order():
    cache = LRUCache(2)
    cache.put('a', 1)
    cache.put('b', 2)
    assert cache.get('a') == 1
    cache.put('c', 3)
    assert 'a' in cache
    assert 'b' not in cache
    with pytest.raises(ValueError):
        LRUCache(0)


def test_cache_key_is_canonical():
    first = cache_key([[0, 1], [1, 0]], {'1-1', '0-0'}, {'0-1': 2, '0-0': 1})
    second = cache_key([[0, 1], [1, 0]], {'0-0', '1-1'}, {'0-0': 1, '0-1': 2})
    assert first == second == "01|10#0-0,1-1#0-0:1,0-1:2"


def test_metrics_window():
    guarantee = SolvabilityGuarantee(checker=lambda *args: True)
    for value in range(120):
        guarantee.check_runtime_solvability([[value % 7, value // 7], [0, 0]], 20)
    report = guarantee.get_performance_report()
    assert report['total_checks'] == 120
    assert len(report['check_times']) == 100


@pytest.mark.parametrize("size, colors, moves, valid", [
    (3, 2, 5, True), (2, 2, 5, False), (21, 2, 5, False), (5, 1, 5, False), (5, 8, 5, False),
    (5, 3, 0, False), (10, 3, 101, False), (3, 3, 19, False), (3, 3, 18, True),
])
def test_pre_validation(size, colors, moves, valid):
    assert SolvabilityGuarantee().pre_validate_generation(size, colors, moves)['valid'] is valid


def test_recovery_strategies():
    guarantee = SolvabilityGuarantee()
    executed = []
    strategies = guarantee.get_recovery_strategies(
        [[0]], [[1]], [(0, 0)],
        on_revert=lambda: executed.append('revert'),
        on_hint=lambda: executed.append('hint'),
    )
    assert [s.type for s in strategies] == ['revert', 'regenerate', 'hint']
    for strategy in strategies:
        strategy.execute()
    assert executed == ['revert', 'hint']

    assert [s.type for s in guarantee.get_recovery_strategies([[0]], [[1]], [])] == ['regenerate', 'hint']


def test_reset():
    guarantee = SolvabilityGuarantee(checker=lambda *args: True)
    guarantee.check_runtime_solvability([[0, 1], [1, 0]], 2)
    guarantee.reset()
    assert len(guarantee.cache) == 0
    assert guarantee.get_performance_report()['total_checks'] == 0


def test_shared_guarantee_counts_every_check(fast_switching):
    guarantee = SolvabilityGuarantee(cache_capacity=5000, checker=lambda grid, colors, power, locked: grid[1][0] % 2 == 0)

    def check_boards(worker):
        for i in range(200):
            guarantee.check_runtime_solvability([[worker], [i]], 2)

    run_threads(check_boards)
    report = guarantee.get_performance_report()
    assert report['total_checks'] == 8 * 200
    assert report['failed_checks'] == 8 * 100
    assert len(guarantee.cache) == 8 * 200
