import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'requestdeck' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs

REKORDBOX_NAMESPACE = "/ws/rekordbox"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer .env settings from leaking into tests."""
    monkeypatch.delenv("REKORDBOX_STRICT_MATCHING", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    yield


@pytest.fixture
def app(tmp_path):
    import app as app_module

    db_path = tmp_path / "test.sqlite"
    application = app_module.create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path.as_posix()}",
            "REKORDBOX_NAMESPACE": REKORDBOX_NAMESPACE,
            "REKORDBOX_STRICT_MATCHING": False,
        }
    )
    yield application
    application.extensions["rekordbox_bridge"].shutdown()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from requestdeck.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        try:
            db.session.rollback()
        except Exception:
            pass
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def bridge(app):
    return app.extensions["rekordbox_bridge"]


@pytest.fixture
def repository(app):
    return app.extensions["song_request_repository"]


@pytest.fixture
def viewer_factory(app):
    """Open Socket.IO test clients on the rekordbox namespace; closed at teardown."""
    socketio = app.extensions["socketio"]
    opened = []

    def _connect():
        test_client = socketio.test_client(app, namespace=REKORDBOX_NAMESPACE)
        opened.append(test_client)
        return test_client

    yield _connect

    for test_client in opened:
        if test_client.is_connected(REKORDBOX_NAMESPACE):
            test_client.disconnect(namespace=REKORDBOX_NAMESPACE)


@pytest.fixture
def memory_repository():
    return test_stubs.InMemorySongRequestRepository()


@pytest.fixture
def seed_requests(app):
    """Create an event with song requests through the real repository (committed)."""

    def _seed(requests, *, event_name="Friday Night"):
        from datetime import datetime, timedelta

        repo = app.extensions["song_request_repository"]
        with app.app_context():
            start = datetime(2026, 10, 16, 21, 0)
            event = repo.create_event(
                name=event_name,
                venue="Club",
                start_time=start,
                end_time=start + timedelta(hours=5),
            )
            ids = []
            for song_name, artist_name in requests:
                row = repo.create_song_request(
                    event.id,
                    song_name=song_name,
                    artist_name=artist_name,
                    requester_name="Guest",
                    amount=event.request_price,
                )
                ids.append(row.id)
            return event.id, ids

    return _seed
