# tests/test_app.py
import pytest

from colorsame.app import SESSIONS, app
from conftest import run_threads


@pytest.fixture
def client():
    app.config['TESTING'] = True
    SESSIONS.clear()
    with app.test_client() as client:
        yield client
    SESSIONS.clear()


def new_game(client, level=12, seed=7):
    response = client.post('/api/new_game', json={'level': level, 'seed': seed})
    assert response.status_code == 200
    return response.get_json()


def test_new_game_returns_session_and_state(client):
    data = new_game(client)
    assert data['sessionId'] in SESSIONS
    state = data['state']
    assert state['phase'] == 'active'
    assert state['level'] == 12
    assert len(state['grid']) == 3
    assert state['optimal_moves'] == 12


def test_new_game_validates_payload(client):
    assert client.post('/api/new_game', json={'level': 0}).status_code == 400
    assert client.post('/api/new_game', json={'level': 3, 'seed': 'abc'}).status_code == 400


def test_click_undo_and_state(client):
    sid = new_game(client)['sessionId']
    response = client.post(f'/api/{sid}/click', json={'row': 0, 'col': 0})
    assert response.status_code == 200
    assert response.get_json()['state']['moves'] == 1

    response = client.post(f'/api/{sid}/undo')
    assert response.get_json()['state']['moves'] == 0
    assert client.get(f'/api/{sid}/state').get_json()['state']['undo_count'] == 1


def test_click_validates_coordinates(client):
    sid = new_game(client)['sessionId']
    assert client.post(f'/api/{sid}/click', json={'row': 3, 'col': 0}).status_code == 400
    assert client.post(f'/api/{sid}/click', json={'row': 'a', 'col': 0}).status_code == 400


def test_unknown_session_and_action(client):
    assert client.get('/api/nope/state').status_code == 404
    assert client.post('/api/nope/undo').status_code == 404
    sid = new_game(client)['sessionId']
    assert client.post(f'/api/{sid}/explode').status_code == 404


def test_pause_and_tick(client):
    sid = new_game(client)['sessionId']
    state = client.post(f'/api/{sid}/tick').get_json()['state']
    assert state['time'] == 1
    state = client.post(f'/api/{sid}/pause').get_json()['state']
    assert state['phase'] == 'paused'
    assert client.post(f'/api/{sid}/tick').get_json()['state']['time'] == 1


def test_concurrent_ticks_on_one_session(client, fast_switching):
    sid = new_game(client)['sessionId']

    def tick(_):
        with app.test_client() as own_client:
            for _ in range(50):
                assert own_client.post(f'/api/{sid}/tick').status_code == 200

    run_threads(tick)
    assert client.get(f'/api/{sid}/state').get_json()['state']['time'] == 8 * 50


def test_hint_and_solvability(client):
    sid = new_game(client)['sessionId']
    hint = client.get(f'/api/{sid}/hint').get_json()
    assert hint['source'] == 'optimal_path'
    assert set(hint['move']) == {'row', 'col'}

    check = client.get(f'/api/{sid}/solvability').get_json()
    assert check['is_solvable'] is True
    assert check['strategies'] == []


def test_level_profile(client):
    data = client.get('/api/level/31').get_json()
    assert data['config']['grid_size'] == 4
    assert data['constraints']['move_limit'] is not None
    assert data['constraints']['tutorial_message']
    assert data['milestone'] is None
