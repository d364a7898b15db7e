"""
project: Puzzle Adventure
module: game_api.py
License: MIT

Game session API routes.

Translates client input (direction names, hint/restart/next requests) into
``GameSession`` calls and returns the renderer snapshot. The session id is
kept in the Flask session cookie; sessions themselves live in the in-process
registry.
"""

from functools import wraps

from flask import Blueprint, jsonify, request, session

from puzzle.logging_utils import get_logger
from puzzle.services import session_registry
from puzzle.services.game_session import GameSession
from puzzle.services.profile_store import ProfileStore
from puzzle.services.settings import current_profile
from puzzle.websockets.validation import DIRECTIONS, MOVE, validate

log = get_logger("routes.game_api")

bp_game = Blueprint("game", __name__)

SESSION_KEY = "game_id"


def with_game(fn):
    """Resolve the caller's session entry or answer 404."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        entry = session_registry.get(session.get(SESSION_KEY))
        if entry is None:
            return jsonify({"error": "no active game"}), 404
        with entry.lock:
            return fn(entry.session, *args, **kwargs)

    return wrapper


@bp_game.route("/api/game/new", methods=["POST"])
def new_game():
    """Start a session from the stored profile and configured difficulty.

    Optional body: {"seed": int} for reproducible levels.
    """
    data = request.get_json(silent=True) or {}
    seed = data.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        return jsonify({"error": "seed must be an integer"}), 400
    record = ProfileStore().load()
    game = GameSession(
        current_profile(),
        level=record.level,
        score=record.score,
        xp=record.xp,
        coins=record.coins,
        seed=seed,
    )
    session_registry.register(game)
    previous = session.get(SESSION_KEY)
    if previous:
        session_registry.discard(previous)
    session[SESSION_KEY] = game.id
    log.info(event="game_created", session=game.id, difficulty=game.profile.name, game_level=record.level)
    return jsonify(game.snapshot()), 201


@bp_game.route("/api/game/state")
@with_game
def game_state(game):
    return jsonify(game.snapshot())


@bp_game.route("/api/game/move", methods=["POST"])
@with_game
def game_move(game):
    ok, result = validate(request.get_json(silent=True) or {}, MOVE)
    if not ok:
        return jsonify({"error": result["error"], "field": result["field"], "code": result["code"]}), 400
    dx, dy = DIRECTIONS[result["dir"]]
    outcome = game.move(dx, dy)
    if outcome.completion is not None:
        ProfileStore().record_completion(game.state, outcome.achievements)
    return jsonify({"result": outcome.to_dict(), "state": game.snapshot()})


@bp_game.route("/api/game/hint", methods=["POST"])
@with_game
def game_hint(game):
    hint = game.hint()
    return jsonify({"hint": hint.to_dict(), "hints_used": game.state.hints_used})


@bp_game.route("/api/game/restart", methods=["POST"])
@with_game
def game_restart(game):
    game.restart(current_profile())
    return jsonify(game.snapshot())


@bp_game.route("/api/game/next", methods=["POST"])
@with_game
def game_next(game):
    if not game.next_level(current_profile()):
        return jsonify({"error": "level not completed"}), 409
    ProfileStore().save({"level": game.state.level})
    return jsonify(game.snapshot())
