"""Socket.IO game room handlers.

Events:
    - join_game: Join the room for a live session; payload { game_id }
    - leave_game: Leave that room; payload { game_id }

Emits:
    - status: Room membership updates (join/leave)
    - board_update: Session snapshot after the trap ticker relocated traps
    - error: Payload validation or unknown session

Moving traps are driven from here: the first member to join a room for a
session whose difficulty has dynamic traps starts a background ticker; it
stops when the room empties or the session disappears.
"""

import time

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from puzzle import socketio
from puzzle.logging_utils import get_logger
from puzzle.services import session_registry
from puzzle.services.settings import current_profile
from puzzle.websockets.validation import JOIN_GAME, LEAVE_GAME, validate

log = get_logger("websockets.game")

# { game_id: { 'members': set([sid,...]), 'created': timestamp, 'ticker': token or None } }
active_games = {}
_next_token = 0


def _error(event, result):
    emit("error", {"message": f"Invalid {event}: {result['error']}", "field": result["field"], "code": result["code"]})


@socketio.on("join_game")
def handle_join_game(data):
    ok, result = validate(data or {}, JOIN_GAME)
    if not ok:
        _error("join_game", result)
        return
    game_id = result["game_id"]
    entry = session_registry.get(game_id)
    if entry is None:
        emit("error", {"message": "unknown game", "field": "game_id", "code": "not_found"})
        return
    join_room(game_id)
    info = active_games.setdefault(game_id, {"members": set(), "created": time.time(), "ticker": None})
    info["members"].add(request.sid)
    emit("status", {"msg": "joined", "game_id": game_id, "members": len(info["members"])}, to=game_id)
    log.info(event="join_game", game=game_id, members=len(info["members"]))
    if info["ticker"] is None and current_app.config.get("PUZZLE_TRAP_TICKER") and _wants_ticker(entry.session):
        _start_ticker(game_id, info)


@socketio.on("leave_game")
def handle_leave_game(data):
    ok, result = validate(data or {}, LEAVE_GAME)
    if not ok:
        _error("leave_game", result)
        return
    game_id = result["game_id"]
    leave_room(game_id)
    info = active_games.get(game_id)
    remaining = 0
    if info:
        info["members"].discard(request.sid)
        remaining = len(info["members"])
        if not remaining:
            # dropping the room entry invalidates the ticker token
            active_games.pop(game_id, None)
    emit("status", {"msg": "left", "game_id": game_id, "members": remaining}, to=game_id)
    log.info(event="leave_game", game=game_id, remaining=remaining)


@socketio.on("disconnect")
def handle_disconnect(*_args):
    sid = request.sid
    for game_id, info in list(active_games.items()):
        info["members"].discard(sid)
        if not info["members"]:
            active_games.pop(game_id, None)


def _wants_ticker(game):
    # restart and next level switch to the configured difficulty
    return game.profile.dynamic_traps or current_profile().dynamic_traps


def _start_ticker(game_id, info):
    global _next_token
    _next_token += 1
    info["ticker"] = _next_token
    socketio.start_background_task(_trap_ticker, game_id, _next_token)
    log.info(event="trap_ticker_started", game=game_id)


def _ticker_live(game_id, token):
    info = active_games.get(game_id)
    return info is not None and info.get("ticker") == token


def tick(game_id):
    """Relocate traps once and broadcast the new board.

    Returns the suggested delay before the next tick, or None when the
    session is gone.
    """
    entry = session_registry.get(game_id)
    if entry is None:
        return None
    with entry.lock:
        moved = entry.session.relocate_traps()
        snapshot = entry.session.snapshot() if moved else None
        delay = entry.session.next_trap_interval()
    if snapshot is not None:
        socketio.emit("board_update", snapshot, to=game_id)
    return delay


def _trap_ticker(game_id, token):  # pragma: no cover (background loop)
    delay = 2.0
    while True:
        socketio.sleep(delay)
        if not _ticker_live(game_id, token):
            break
        delay = tick(game_id)
        if delay is None:
            active_games.pop(game_id, None)
            break
    log.info(event="trap_ticker_stopped", game=game_id)
