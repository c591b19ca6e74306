# game_state.py
# Description: The session state value and the table of actions each phase accepts.

from dataclasses import dataclass, field

from colorsame.constants import UNLIMITED_UNDOS
from colorsame.history_manager import HistoryManager

IDLE = 'idle'
ACTIVE = 'active'
PAUSED = 'paused'
WON = 'won'

NEW_GAME = 'NEW_GAME'
CONTINUE_GAME = 'CONTINUE_GAME'
LOAD_SAVE = 'LOAD_SAVE'
CLICK = 'CLICK'
UNDO = 'UNDO'
RESET = 'RESET'
TICK = 'TICK'
LOCK_DECR = 'LOCK_DECR'
WIN = 'WIN'
PAUSE = 'PAUSE'
NEXT_LEVEL = 'NEXT_LEVEL'
TOGGLE_HINTS = 'TOGGLE_HINTS'
SHOW_MODAL = 'SHOW_MODAL'

# Actions that may start or replace a game from any phase.
_ALWAYS = {NEW_GAME, CONTINUE_GAME, LOAD_SAVE, TOGGLE_HINTS, SHOW_MODAL}

LEGAL_ACTIONS = {
    IDLE: _ALWAYS,
    ACTIVE: _ALWAYS | {CLICK, UNDO, RESET, TICK, LOCK_DECR, PAUSE},
    PAUSED: _ALWAYS | {RESET, PAUSE},
    WON: _ALWAYS | {WIN, NEXT_LEVEL, PAUSE},
}


def default_max_undos(level):
    """Unlimited undos early on, then a budget that shrinks every ten levels."""
    if level <= 10:
        return UNLIMITED_UNDOS
    if level <= 30:
        return 10
    return max(1, 15 - level // 10)


@dataclass(frozen=True)
class SessionState:
    """
    Everything a play session knows. Instances are never modified; the reducer
    returns a new value for every accepted action.
    """
    level: int = 1
    colors: int = 2
    grid: list = field(default_factory=list)
    solved: list = field(default_factory=list)
    power: frozenset = frozenset()
    locked: dict = field(default_factory=dict)
    solution: list = field(default_factory=list)
    generation_history: list = field(default_factory=list)
    optimal_path: list = field(default_factory=list)
    player_moves: list = field(default_factory=list)
    history: HistoryManager = field(default_factory=lambda: HistoryManager(None))

    moves: int = 0
    time: int = 0
    started: bool = False
    won: bool = False
    paused: bool = False
    scored: bool = False
    time_up: bool = False

    undo_count: int = 0
    max_undos: int = UNLIMITED_UNDOS
    move_limit: int = None
    time_limit: int = None
    time_bonus: dict = None
    show_timer: bool = False
    tutorial_message: str = None

    hints_enabled: bool = False
    show_hints: bool = False
    modal: str = None

    score: dict = None
    level_points: int = 0
    total_points: int = 0
    completed_levels: list = field(default_factory=list)
    save_loaded: bool = False

    @property
    def phase(self):
        if not self.started:
            return IDLE
        if self.won:
            return WON
        if self.paused:
            return PAUSED
        return ACTIVE

    @property
    def initial_grid(self):
        initial = self.history.initial_state
        return [list(row) for row in initial['grid']] if initial else []

    @property
    def initial_locked(self):
        initial = self.history.initial_state
        return dict(initial['locked']) if initial else {}

    def accepts(self, action_type):
        return action_type in LEGAL_ACTIONS[self.phase]

    def to_dict(self):
        """JSON-friendly view for the presentation layer."""
        return {
            'phase': self.phase,
            'level': self.level,
            'colors': self.colors,
            'grid': self.grid,
            'power': sorted(self.power),
            'locked': dict(self.locked),
            'optimal_moves': len(self.optimal_path),
            'player_moves': [{'row': r, 'col': c} for r, c in self.player_moves],
            'moves': self.moves,
            'time': self.time,
            'won': self.won,
            'paused': self.paused,
            'time_up': self.time_up,
            'undo_count': self.undo_count,
            'max_undos': self.max_undos,
            'can_undo': self.history.can_undo(),
            'move_limit': self.move_limit,
            'time_limit': self.time_limit,
            'time_bonus': self.time_bonus,
            'show_timer': self.show_timer,
            'tutorial_message': self.tutorial_message,
            'hints_enabled': self.hints_enabled,
            'show_hints': self.show_hints,
            'modal': self.modal,
            'score': self.score,
            'level_points': self.level_points,
            'total_points': self.total_points,
            'completed_levels': list(self.completed_levels),
        }
