"""
project: Puzzle Adventure
module: server.py
License: MIT

Server bootstrap.

Creates the profile tables, seeds the difficulty setting, configures logging
(console plus a rotating file under instance/) and runs the Socket.IO server.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from puzzle import app, create_app, db, socketio
from puzzle.logging_utils import log
from puzzle.models import GameConfig
from puzzle.services.settings import DIFFICULTY_KEY


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (integration / runtime only)
    """Start the Socket.IO server and ensure DB tables exist.

    When debug=True, Flask's debugger and reloader provide verbose tracebacks.
    """
    create_app()
    with app.app_context():
        _seed_game_config()
        _configure_logging()
    try:
        log.info(event="listen", host=host, port=port, async_mode=socketio.async_mode)
        socketio.run(app, host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _seed_game_config():
    """Store the configured difficulty if no runtime value exists yet."""
    if GameConfig.get(DIFFICULTY_KEY) is None:
        GameConfig.set(DIFFICULTY_KEY, (app.config.get("PUZZLE_DIFFICULTY") or "medium").lower())


def _configure_logging(log_dir=None):
    """Configure logging to both console and a rotating file.

    The file path will be <instance>/app.log unless ``log_dir`` is given.
    Returns the log file path.
    """
    log_dir = log_dir or app.instance_path
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path


def reset_profile():
    """Delete the stored player profile (CLI helper)."""
    from puzzle.services.profile_store import ProfileStore

    create_app()
    with app.app_context():
        ProfileStore().reset()
        db.session.remove()
