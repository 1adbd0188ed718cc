import os
import sys
import pytest

# Ensure the backend root (containing the `riddlescape` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from riddlescape import create_app, db, socketio
from riddlescape.services.ledger import ledger
from riddlescape.services.session import sessions
from riddlescape.services.timer import scheduler


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_DURATION_SEC = 900
    TICK_INTERVAL_SEC = 0
    TIMER_CRITICAL_SEC = 60
    LEADERBOARD_LIMIT = 20
    TIMER_HEARTBEAT_SEC = 0


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import riddlescape.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    ledger.clear()
    sessions.clear()
    scheduler._active.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()
