import os
import random
import sys
import pytest

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arena import create_app, db, socketio
from arena.services.multiplayer.content import ContentProvider
from arena.services.multiplayer.gateway import SessionGateway
from arena.services.multiplayer.records import ScoreRecorder
from arena.services.multiplayer.room import PlayerRef
from arena.services.multiplayer.service import MultiplayerService


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    FRONTEND_URL = 'http://localhost:3000'
    SOCKETIO_NAMESPACE = '/'
    DEFAULT_QUESTION_COUNT = 5
    DEFAULT_TIME_PER_QUESTION = 15
    MAX_QUESTION_COUNT = 30
    MAX_TIME_PER_QUESTION = 120
    ROOM_DISPOSE_DELAY_SEC = 0
    STALE_ROOM_TTL_SEC = 0


class RecordingTransport:
    """In-memory stand-in for Socket.IO: records deliveries per connection."""

    def __init__(self):
        self.groups = {}
        self.delivered = []  # (sid, event name, payload)
        self.tasks = []

    def send(self, sid, event):
        self.delivered.append((sid, event.name, event.payload()))

    def broadcast(self, room_id, event):
        payload = event.payload()
        for sid in sorted(self.groups.get(room_id, ())):
            self.delivered.append((sid, event.name, payload))

    def enter(self, sid, room_id):
        self.groups.setdefault(room_id, set()).add(sid)

    def leave(self, sid, room_id):
        self.groups.get(room_id, set()).discard(sid)

    def start_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        pass

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)

    def received(self, sid, name=None):
        return [(n, p) for s, n, p in self.delivered if s == sid and (name is None or n == name)]

    def names(self, sid):
        return [n for s, n, _ in self.delivered if s == sid]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import arena.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def gateway(flask_app, transport):
    return SessionGateway(
        MultiplayerService(rng=random.Random(7)),
        transport,
        ScoreRecorder(flask_app, transport.start_task),
        content=ContentProvider(rng=random.Random(3)),
        config=flask_app.config,
        logger=flask_app.logger,
    )


@pytest.fixture()
def make_ref():
    def _make(n):
        return PlayerRef(user_id=f'user-{n}', username=f'Player{n}', sid=f'sid-{n}')
    return _make


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
