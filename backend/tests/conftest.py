import os
import random
import sys
import pytest

# Ensure the backend root (containing the `nanoquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from nanoquiz import create_app, get_registry, socketio
from nanoquiz.services.quiz import SessionRegistry, parse_quiz


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = []
    SOCKETIO_NAMESPACE = '/ws'
    MAX_GAMES = 100
    MAX_PLAYERS_PER_GAME = 100
    DEFAULT_TIME_LIMIT_SEC = 20
    MIN_TIME_LIMIT_SEC = 5
    MAX_TIME_LIMIT_SEC = 90
    RATE_LIMIT_WINDOW_SEC = 10
    RATE_LIMIT_MAX = 1000
    GAME_CODE_LENGTH = 4


def make_quiz_payload(num_questions=2, time_limit=20, title='Capitals'):
    return {
        'title': title,
        'questions': [
            {
                'id': f'q{i}',
                'text': f'Question {i}?',
                'timeLimitSeconds': time_limit,
                'options': [
                    {'id': 'a', 'label': 'Right'},
                    {'id': 'b', 'label': 'Wrong'},
                    {'id': 'c', 'label': 'Also wrong'},
                ],
                'correctOptionIds': ['a'],
            }
            for i in range(num_questions)
        ],
    }


class FakeBroadcaster:
    """Records every emit instead of sending it."""

    def __init__(self):
        self.sent = []

    def to_room(self, room, event, payload):
        self.sent.append(('room', room, event, payload))

    def to_participant(self, sid, event, payload):
        self.sent.append(('sid', sid, event, payload))

    def events(self, name):
        return [payload for _, _, event, payload in self.sent if event == name]

    def names(self):
        return [event for _, _, event, _ in self.sent]


class ManualTimer:
    def __init__(self, delay, callback, key):
        self.delay = delay
        self.callback = callback
        self.key = key
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Mirrors the background worker: a cancelled timer never runs
        if self.cancelled:
            return
        self.fired = True
        self.callback()


class ManualScheduler:
    """Scheduler whose timers only fire when a test says so."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback, key=''):
        timer = ManualTimer(delay, callback, key)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]


class FakeClock:
    def __init__(self, start_ms=1_000_000):
        self.now = start_ms

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def broadcaster():
    return FakeBroadcaster()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(broadcaster, scheduler, clock):
    reg = SessionRegistry(broadcaster, scheduler, clock=clock, rng=random.Random(7))
    yield reg
    reg.shutdown()


@pytest.fixture()
def quiz():
    return parse_quiz(make_quiz_payload()).quiz


@pytest.fixture()
def session(registry, quiz):
    return registry.get(registry.create_session('host-sid', quiz))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    get_registry(application).shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        test_client.get_received('/ws')  # drop the connect greeting
        clients.append(test_client)
        return test_client

    yield _make
    for c in clients:
        if c.is_connected('/ws'):
            c.disconnect(namespace='/ws')


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()
