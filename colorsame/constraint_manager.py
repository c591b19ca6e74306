# --- File: colorsame/constraint_manager.py ---
# Description: Introduces play constraints gradually as levels climb and eases
# or tightens them from the player's recent results.

import copy
import logging
import math
import threading
from collections import deque

from colorsame.constants import (
    CONSTRAINT_MILESTONES, MOVE_LIMIT_TYPES, TIME_AWARENESS, TIME_BONUS, TIME_LIMIT_SOFT, UNDO_LIMIT,
    HINT_COST, ADAPTIVE_MIN_LEVEL, PERFORMANCE_WINDOW, RECENT_LEVELS, STRUGGLE_MESSAGE, EXCEL_MESSAGE
)


def _efficiency(record):
    if record['moves_used'] <= 0:
        return 1
    return record['optimal_moves'] / record['moves_used']


def _empty_constraints():
    return {
        'move_limit': None,
        'time_limit': None,
        'time_bonus': None,
        'undo_limit': None,
        'show_timer': False,
        'hints_have_cost': False,
        'tutorial_message': None,
    }


class ConstraintManager:
    def __init__(self, milestones=None, window=PERFORMANCE_WINDOW):
        self.milestones = sorted(copy.deepcopy(milestones or CONSTRAINT_MILESTONES), key=lambda m: m['level'])
        self.recent_levels = deque(maxlen=window)
        self._lock = threading.Lock()

    def get_constraints_for_level(self, level, optimal_moves):
        """
        Builds the constraints active at a level.

        Every milestone up to and including the level is folded in order, so
        later move caps replace earlier ones. The milestone's tutorial copy is
        attached only on the exact level that introduces it.

        :param int level: The level number.
        :param int optimal_moves: Length of the puzzle's optimal path.
        :returns: dict with move_limit, time_limit, time_bonus, undo_limit, show_timer,
            hints_have_cost and tutorial_message.
        :rtype: dict
        """
        constraints = _empty_constraints()
        for milestone in self.milestones:
            if milestone['level'] > level:
                break

            kind, value = milestone['type'], milestone['value']
            if kind in MOVE_LIMIT_TYPES:
                constraints['move_limit'] = math.ceil(optimal_moves * value)
            elif kind == TIME_AWARENESS:
                constraints['show_timer'] = True
            elif kind == TIME_BONUS:
                constraints['time_bonus'] = dict(value)
                constraints['show_timer'] = True
            elif kind == TIME_LIMIT_SOFT:
                constraints['time_limit'] = value
                constraints['show_timer'] = True
            elif kind == UNDO_LIMIT:
                constraints['undo_limit'] = value
            elif kind == HINT_COST:
                constraints['hints_have_cost'] = True

            if milestone['level'] == level and milestone.get('tutorial'):
                constraints['tutorial_message'] = milestone['tutorial']
                logging.info(f"Level {level} introduces constraint '{kind}'")

        return self._apply_adaptive_difficulty(constraints, level)

    def update_performance(self, record):
        """
        Records how a level went.

        :param dict record: level, attempts, completed, moves_used, optimal_moves,
            time_used and hints_used.
        """
        with self._lock:
            self.recent_levels.append(dict(record))
        logging.info(f"Performance updated for level {record['level']}: efficiency {_efficiency(record):.2f}")

    def is_struggling(self):
        recent = self._recent()
        if len(recent) < 3:
            return False
        failures = sum(1 for r in recent if not r['completed'] or r['attempts'] > 3)
        if failures >= 3:
            return True
        return sum(_efficiency(r) for r in recent) / len(recent) < 0.5

    def is_excelling(self):
        recent = self._recent()
        if len(recent) < RECENT_LEVELS:
            return False
        if not all(r['completed'] and r['attempts'] == 1 for r in recent):
            return False
        if sum(_efficiency(r) for r in recent) / len(recent) < 0.8:
            return False
        return not any(r['hints_used'] for r in recent)

    def _recent(self):
        with self._lock:
            return list(self.recent_levels)[-RECENT_LEVELS:]

    def _apply_adaptive_difficulty(self, constraints, level):
        if level <= ADAPTIVE_MIN_LEVEL:
            return constraints

        if self.is_struggling():
            logging.info(f"Player struggling at level {level}: easing constraints")
            if constraints['move_limit']:
                constraints['move_limit'] = math.ceil(constraints['move_limit'] * 1.2)
            if constraints['time_limit']:
                constraints['time_limit'] = math.ceil(constraints['time_limit'] * 1.5)
            if not constraints['tutorial_message']:
                constraints['tutorial_message'] = STRUGGLE_MESSAGE
        elif self.is_excelling():
            logging.info(f"Player excelling at level {level}: tightening constraints")
            if constraints['move_limit']:
                limit = constraints['move_limit']
                constraints['move_limit'] = max(limit - 2, math.ceil(limit * 0.9))
            if not constraints['tutorial_message']:
                constraints['tutorial_message'] = EXCEL_MESSAGE
        return constraints

    def get_tutorial_for_constraint(self, constraint_type):
        for milestone in self.milestones:
            if milestone['type'] == constraint_type:
                return milestone.get('tutorial')
        return None

    def has_new_constraint(self, level):
        """True if this exact level introduces a milestone."""
        return any(m['level'] == level for m in self.milestones)

    def get_next_milestone(self, level):
        for milestone in self.milestones:
            if milestone['level'] > level:
                return dict(milestone)
        return None
