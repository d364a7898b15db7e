import os
import sys
import tempfile

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Point the app at a throwaway database BEFORE importing it (DATABASE_URL is read at import)
_DB_DIR = tempfile.mkdtemp(prefix="puzzle-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db").replace(os.sep, "/")
# Tests drive trap relocation by hand; no background ticker threads
os.environ["PUZZLE_TRAP_TICKER"] = "0"

from puzzle import create_app, db, socketio  # noqa: E402
from puzzle.models import GameConfig, Profile  # noqa: E402
from puzzle.services import session_registry  # noqa: E402
from puzzle.websockets import game as ws_game  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True, "PUZZLE_TRAP_TICKER": False})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        db.session.remove()
        ctx.pop()


@pytest.fixture(autouse=True)
def _clean_state(_push_app_context):
    """Start every test with no profile, no stored settings and no live sessions."""
    db.session.query(Profile).delete()
    db.session.query(GameConfig).delete()
    db.session.commit()
    session_registry.clear()
    ws_game.active_games.clear()
    yield
    session_registry.clear()
    ws_game.active_games.clear()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def socket_client(test_app, client):
    # Share the HTTP client's cookie jar so socket handlers see the same Flask session
    sc = socketio.test_client(test_app, flask_test_client=client)
    yield sc
    if sc.is_connected():
        sc.disconnect()
