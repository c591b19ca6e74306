# --- File: colorsame/history_manager.py ---
import copy


def make_snapshot(grid, locked, moves, player_moves):
    return {
        'grid': [list(row) for row in grid],
        'locked': dict(locked),
        'moves': moves,
        'player_moves': list(player_moves),
    }


class HistoryManager:
    """
    Undo stack of pre-move snapshots plus the generation-time snapshot that
    RESET returns to. Snapshots hold grid, locked, moves and player_moves.
    """

    def __init__(self, initial_state):
        self.initial_state = copy.deepcopy(initial_state)
        self.snapshots = []

    def add_snapshot(self, snapshot):
        self.snapshots.append(copy.deepcopy(snapshot))

    def undo(self):
        """Pops and returns the most recent snapshot, or None if there is none."""
        if not self.can_undo():
            return None
        return self.snapshots.pop()

    def can_undo(self): return len(self.snapshots) > 0

    def reset(self, initial_state=None):
        if initial_state is not None:
            self.initial_state = copy.deepcopy(initial_state)
        self.snapshots = []

    def copy(self):
        manager = HistoryManager.__new__(HistoryManager)
        manager.initial_state = self.initial_state
        manager.snapshots = list(self.snapshots)
        return manager

    def __len__(self):
        return len(self.snapshots)
