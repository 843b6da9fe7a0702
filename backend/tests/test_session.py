import json
import threading

import pytest

from conftest import FixedRandom
from pong_server.services.game.session import PongGame


def move(y):
    return json.dumps({'type': 'player-move', 'payload': {'y': y}})


@pytest.fixture()
def game(settings, transport):
    return PongGame(settings, transport, rng=FixedRandom())


@pytest.fixture()
def running_game(game):
    game.on_connect('a')
    game.on_connect('b')
    return game


def test_connect_sends_assignment_with_settings(game, transport, settings):
    assert game.on_connect('a') == 'player1'

    frames = [json.loads(text) for text in transport.frames_for('a')]
    assert frames == [{
        'type': 'player-assignment',
        'player': 'player1',
        'settings': settings.to_dict(),
    }]
    assert game.state.running is False


def test_third_connection_gets_notice_and_is_closed(running_game, transport):
    assert running_game.on_connect('c') is None

    assert transport.closed == ['c']
    assert [json.loads(text)['type'] for text in transport.frames_for('c')] == ['game-full']
    assert running_game.state.running is True


def test_failed_assignment_send_frees_the_slot(game, transport):
    transport.failing.add('a')

    assert game.on_connect('a') is None
    assert game.registry.occupied() == []


@pytest.mark.parametrize('requested, stored', [
    (-50, 0.0),
    (10000, 500.0),
    (123.5, 123.5),
    (0, 0.0),
    (500, 500.0),
    (float('-inf'), 0.0),
])
def test_player_move_is_clamped(running_game, requested, stored):
    running_game.on_message('b', move(requested))
    assert running_game.state.player2.y == stored


@pytest.mark.parametrize('digits, stored', [('1' + '0' * 400, 500.0), ('-1' + '0' * 400, 0.0)])
def test_player_move_beyond_float_range_is_clamped(running_game, digits, stored):
    running_game.on_message('a', '{"type": "player-move", "payload": {"y": ' + digits + '}}')
    assert running_game.state.player1.y == stored


def test_move_from_unassigned_connection_is_dropped(running_game, caplog):
    before = running_game.state.snapshot()

    running_game.on_message('stranger', move(10))

    assert running_game.state.snapshot() == before
    assert 'unassigned' in caplog.text


@pytest.mark.parametrize('raw', ['{"type": "chat", "payload": {}}', 'garbage', '{"type": "player-move"}'])
def test_unknown_or_malformed_messages_are_dropped(running_game, raw):
    before = running_game.state.snapshot()
    running_game.on_message('a', raw)
    assert running_game.state.snapshot() == before


def test_tick_is_idle_until_two_players(game, transport):
    game.on_connect('a')
    sent_before = len(transport.sent)
    ball_before = game.state.ball.x

    assert game.tick() is False

    assert len(transport.sent) == sent_before
    assert game.state.ball.x == ball_before


def test_tick_steps_then_broadcasts_to_both(running_game, transport):
    ball_x = running_game.state.ball.x
    transport.sent.clear()

    assert running_game.tick() is True

    assert running_game.state.ball.x == pytest.approx(ball_x + 5.0)
    for connection in ('a', 'b'):
        frames = transport.frames_for(connection)
        assert len(frames) == 1
        frame = json.loads(frames[0])
        assert frame['type'] == 'game-state'
        assert frame['ball']['x'] == pytest.approx(ball_x + 5.0)
        assert set(frame) == {'type', 'ball', 'player1', 'player2', 'score'}


def test_assignment_precedes_any_game_state(running_game, transport):
    running_game.tick()
    types = [json.loads(text)['type'] for text in transport.frames_for('b')]
    assert types == ['player-assignment', 'game-state']


def test_send_failure_releases_that_player_only(running_game, transport):
    running_game.state.score.player1 = 2
    transport.failing.add('b')
    transport.sent.clear()

    assert running_game.broadcast() == 1

    assert len(transport.frames_for('a')) == 1
    assert running_game.registry.occupied() == ['player1']
    assert running_game.state.running is False
    assert running_game.state.score.player1 == 0


def test_disconnect_resets_score_for_remaining_player(running_game):
    running_game.state.score.player1 = 4
    running_game.state.score.player2 = 1

    assert running_game.on_disconnect('a') == 'player1'

    described = running_game.describe()
    assert described['running'] is False
    assert described['players'] == ['player2']
    assert described['state']['score'] == {'player1': 0, 'player2': 0}


def test_released_connection_gets_no_further_frames(running_game, transport):
    running_game.on_disconnect('a')
    running_game.on_connect('c')
    transport.sent.clear()

    running_game.tick()

    assert transport.frames_for('a') == []
    assert len(transport.frames_for('b')) == 1
    assert len(transport.frames_for('c')) == 1


def test_moves_and_disconnects_racing_the_tick(running_game, transport):
    settings = running_game.settings
    ready = threading.Event()
    released_at = []

    def ticker():
        for count in range(400):
            running_game.tick()
            if count == 50:
                ready.set()

    def mover():
        ready.wait()
        for y in [-1e9, 1e9, 250, -0.5, 500.5] * 60:
            running_game.on_message('b', move(y))
            running_game.on_message('a', move(y))

    def leaver():
        ready.wait()
        running_game.on_disconnect('a')
        # Anything sent from here on is known to come after the release
        released_at.append(len(transport.sent))
        running_game.on_connect('c')

    threads = [threading.Thread(target=target) for target in (ticker, mover, leaver)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert transport.frames_for('a')
    assert all(conn != 'a' for conn, _ in transport.sent[released_at[0]:])
    assert running_game.registry.sessions() == [('player1', 'c'), ('player2', 'b')]
    states = [json.loads(text) for _, text in transport.sent if json.loads(text)['type'] == 'game-state']
    assert states
    for frame in states:
        for slot in ('player1', 'player2'):
            assert 0 <= frame[slot]['y'] <= settings.max_paddle_y
    assert 0 <= running_game.state.player1.y <= settings.max_paddle_y
    assert 0 <= running_game.state.player2.y <= settings.max_paddle_y
