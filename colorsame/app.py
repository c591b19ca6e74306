# --- File: colorsame/app.py ---
import logging
import random
import threading
import uuid

from flask import Flask, jsonify, request
from flask_cors import CORS

from colorsame.constraint_manager import ConstraintManager
from colorsame.game_session import GameSession
from colorsame.level_config import get_level_config, get_level_milestone_description
from colorsame.puzzle_generator import GenerationError, PuzzleGenerator

app = Flask(__name__)
CORS(app)

SESSIONS = {}
SESSIONS_LOCK = threading.Lock()

# Session actions that take no payload.
SIMPLE_ACTIONS = {
    'undo': GameSession.undo,
    'reset': GameSession.reset,
    'tick': GameSession.tick,
    'pause': GameSession.pause,
    'next_level': GameSession.next_level,
}


def _get_session(session_id):
    with SESSIONS_LOCK:
        return SESSIONS.get(session_id)


def _session_not_found():
    return jsonify({'error': 'Unknown session'}), 404


@app.route('/api/new_game', methods=['POST'])
def new_game():
    try:
        data = request.get_json(silent=True) or {}
        level, seed = data.get('level', 1), data.get('seed')
        if not isinstance(level, int) or level < 1:
            return jsonify({'error': 'level must be a positive integer'}), 400
        if seed is not None and not isinstance(seed, int):
            return jsonify({'error': 'seed must be an integer'}), 400

        session = GameSession(generator=PuzzleGenerator(rng=random.Random(seed)))
        state = session.new_game(level)
        session_id = uuid.uuid4().hex
        with SESSIONS_LOCK:
            SESSIONS[session_id] = session
        return jsonify({'sessionId': session_id, 'state': state.to_dict()})
    except GenerationError as e:
        logging.error(f"Error in /api/new_game: {e}")
        return jsonify({'error': f'Could not build level {e.level}'}), 500
    except Exception as e:
        logging.error(f"Error in /api/new_game: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/<session_id>/click', methods=['POST'])
def click(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    try:
        data = request.get_json(silent=True) or {}
        row, col = data.get('row'), data.get('col')
        with session.lock:
            size = len(session.state.grid)
            if not all(isinstance(v, int) and 0 <= v < size for v in (row, col)):
                return jsonify({'error': 'row and col must be integers inside the grid'}), 400
            state = session.click(row, col)
        return jsonify({'state': state.to_dict()})
    except Exception as e:
        logging.error(f"Error in /api/{session_id}/click: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/<session_id>/<action>', methods=['POST'])
def session_action(session_id, action):
    if action not in SIMPLE_ACTIONS:
        return jsonify({'error': f'Unknown action {action}'}), 404
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    try:
        return jsonify({'state': SIMPLE_ACTIONS[action](session).to_dict()})
    except Exception as e:
        logging.error(f"Error in /api/{session_id}/{action}: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/<session_id>/state', methods=['GET'])
def get_state(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    return jsonify({'state': session.state.to_dict()})


@app.route('/api/<session_id>/hint', methods=['GET'])
def get_hint(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    try:
        hint = session.hint()
        move = hint['move']
        return jsonify({
            'move': {'row': move[0], 'col': move[1]} if move else None,
            'onOptimalPath': hint['on_optimal_path'],
            'source': hint['source'],
        })
    except Exception as e:
        logging.error(f"Error in /api/{session_id}/hint: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/<session_id>/solvability', methods=['GET'])
def get_solvability(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    try:
        check = session.check_solvability()
        if check is None:
            return jsonify({'error': 'No game in progress'}), 400
        check['strategies'] = [s.to_dict() for s in check.get('strategies', [])]
        return jsonify(check)
    except Exception as e:
        logging.error(f"Error in /api/{session_id}/solvability: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/level/<int:level>', methods=['GET'])
def get_level(level):
    config = get_level_config(level)
    constraints = ConstraintManager().get_constraints_for_level(config['level'], config['required_moves'])
    return jsonify({
        'config': config,
        'constraints': constraints,
        'milestone': get_level_milestone_description(config['level']),
    })
