"""**********************************************************************************
 * Title: constants.py
 *
 * @version 1.2.0
 * -------------------------------------------------------------------------------
 * Description:
 * This file contains all the static data and constants for the color puzzle
 * engine. It centralizes configuration values and definitions, such as the
 * level thresholds of the difficulty curve, the generation and search bounds,
 * the solvability cache limits, the constraint milestone schedule and the
 * save format version.
 **********************************************************************************"""

# --- GRID LIMITS ---
MIN_GRID_SIZE = 3
MAX_GRID_SIZE = 20
MAX_CURVE_GRID_SIZE = 10
MIN_COLORS = 2
MAX_COLORS = 7

# --- DIFFICULTY CURVE ---
# (last level of the band, grid size) pairs, checked in order.
GRID_SIZE_STEPS = [(27, 3), (64, 4), (100, 5), (150, 6), (200, 7)]
# Past the last step the grid grows by one every GRID_GROWTH_INTERVAL levels.
GRID_GROWTH_START = 200
GRID_GROWTH_INTERVAL = 50

# (last level of the band, colors) pairs. Colors drop back right after a
# grid size increase.
COLOR_STEPS = [(9, 2), (18, 3), (27, 4), (32, 2), (48, 3), (64, 4), (75, 3), (100, 4)]
COLOR_CYCLE_START = 101
COLOR_CYCLE_LENGTH = 30
COLOR_CYCLE = [(10, 3), (20, 4), (30, 5)]

TUTORIAL_LEVEL_MAX = 3

# --- GENERATION ---
MAX_GENERATION_ATTEMPTS = 50
REUSE_THRESHOLD = 0.6
MIN_TOP_CANDIDATES = 3
LOCK_MIN_MOVES = 2
LOCK_MAX_MOVES = 4

# --- BFS SOLVER ---
BFS_MAX_STATES = 10000
BFS_MAX_DEPTH = 30

# --- SOLVABILITY GUARANTEE ---
SOLVABILITY_CACHE_CAPACITY = 1000
METRICS_WINDOW = 100
SLOW_CHECK_MS = 100.0
CONFIDENCE_REVERSE_PATH = 1.0
CONFIDENCE_MATHEMATICAL = 0.95
CONFIDENCE_TRUSTED_GENERATION = 0.8
CONFIDENCE_ON_ERROR = 0.5
MAX_VALIDATED_MOVES = 100

# --- CONSTRAINTS ---
MOVE_LIMIT_SOFT = 'move_limit_soft'
MOVE_LIMIT_MEDIUM = 'move_limit_medium'
MOVE_LIMIT_TIGHT = 'move_limit_tight'
TIME_AWARENESS = 'time_awareness'
TIME_BONUS = 'time_bonus'
TIME_LIMIT_SOFT = 'time_limit_soft'
UNDO_LIMIT = 'undo_limit'
HINT_COST = 'hint_cost'

MOVE_LIMIT_TYPES = (MOVE_LIMIT_SOFT, MOVE_LIMIT_MEDIUM, MOVE_LIMIT_TIGHT)

CONSTRAINT_MILESTONES = [
    {'level': 31, 'type': MOVE_LIMIT_SOFT, 'value': 3.0, 'mode': 'soft',
     'tutorial': "Great job! Did you know experts solve this in fewer moves? No pressure though!"},
    {'level': 35, 'type': MOVE_LIMIT_MEDIUM, 'value': 2.5, 'mode': 'medium',
     'tutorial': "You're getting efficient! Try to beat the target moves for bonus points!"},
    {'level': 41, 'type': TIME_AWARENESS, 'value': None, 'mode': 'soft',
     'tutorial': "New feature: See how fast you can solve puzzles! No time limit, just for fun!"},
    {'level': 45, 'type': TIME_BONUS, 'value': {'under60s': 500, 'under120s': 250}, 'mode': 'medium',
     'tutorial': "Quick solving earns bonus points! But take your time if needed."},
    {'level': 91, 'type': MOVE_LIMIT_TIGHT, 'value': 1.5, 'mode': 'full',
     'tutorial': "Master challenge: Can you match the expert move count?"},
    {'level': 101, 'type': UNDO_LIMIT, 'value': 5, 'mode': 'medium',
     'tutorial': "Pro mode: Limited undos available. Think before you click!"},
]

ADAPTIVE_MIN_LEVEL = 30
PERFORMANCE_WINDOW = 10
RECENT_LEVELS = 5
STRUGGLE_MESSAGE = "Take your time! The game adjusts to your pace."
EXCEL_MESSAGE = "You're doing great! Here's a little extra challenge."

# --- SESSION ---
UNLIMITED_UNDOS = -1

# --- SCORING ---
TUTORIAL_BASE_POINTS = 50
BASE_POINTS = 100
BASE_POINTS_STEP = 100
BASE_POINTS_TIER = 50

# --- SAVES ---
CURRENT_SAVE_VERSION = '1.1.0'
SAVE_KEY = 'colorMeSame_save'
