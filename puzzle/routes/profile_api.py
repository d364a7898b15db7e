from flask import Blueprint, jsonify, request

from puzzle.services.profile_store import ProfileStore
from puzzle.services.settings import get_difficulty, set_difficulty
from puzzle.websockets.validation import CUSTOM_CONTENT, DIFFICULTY, PROFILE_SETTINGS, validate

bp_profile = Blueprint("profile", __name__)


def _invalid(result):
    return jsonify({"error": result["error"], "field": result["field"]}), 400


@bp_profile.route("/api/profile", methods=["GET"])
def get_profile():
    return jsonify(ProfileStore().load().to_dict())


@bp_profile.route("/api/profile", methods=["POST"])
def update_profile():
    # Progress fields are written by the game itself; clients may only change settings
    ok, result = validate(request.get_json(silent=True) or {}, PROFILE_SETTINGS)
    if not ok:
        return _invalid(result)
    record = ProfileStore().save({"settings": result["settings"]})
    if record is None:
        return jsonify({"error": "profile unavailable"}), 503
    return jsonify(record.to_dict())


@bp_profile.route("/api/profile/reset", methods=["POST"])
def reset_profile():
    store = ProfileStore()
    store.reset()
    return jsonify(store.load().to_dict())


@bp_profile.route("/api/profile/content", methods=["POST"])
def add_content():
    ok, result = validate(request.get_json(silent=True) or {}, CUSTOM_CONTENT)
    if not ok:
        return _invalid(result)
    entry = ProfileStore().add_custom_content(result["kind"], result["title"], result["content"])
    if entry is None:
        return jsonify({"error": "profile unavailable"}), 503
    return jsonify(entry), 201


@bp_profile.route("/api/profile/content/<content_id>", methods=["PUT"])
def update_content(content_id):
    ok, result = validate(request.get_json(silent=True) or {}, CUSTOM_CONTENT)
    if not ok:
        return _invalid(result)
    try:
        entry = ProfileStore().update_custom_content(content_id, result["kind"], result["title"], result["content"])
    except KeyError:
        return jsonify({"error": "content not found"}), 404
    if entry is None:
        return jsonify({"error": "profile unavailable"}), 503
    return jsonify(entry)


@bp_profile.route("/api/profile/content/<content_id>", methods=["DELETE"])
def delete_content(content_id):
    try:
        removed = ProfileStore().remove_custom_content(content_id)
    except KeyError:
        return jsonify({"error": "content not found"}), 404
    if not removed:
        return jsonify({"error": "profile unavailable"}), 503
    return jsonify({"ok": True, "id": content_id})


@bp_profile.route("/api/profile/rewards", methods=["GET"])
def list_rewards():
    return jsonify({"milestones": ProfileStore().milestones()})


@bp_profile.route("/api/profile/rewards/<milestone_id>/claim", methods=["POST"])
def claim_reward(milestone_id):
    try:
        record = ProfileStore().claim_milestone(milestone_id)
    except KeyError:
        return jsonify({"error": "unknown reward"}), 404
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 409
    if record is None:
        return jsonify({"error": "profile unavailable"}), 503
    return jsonify(record.to_dict())


@bp_profile.route("/api/settings/difficulty", methods=["GET"])
def get_difficulty_setting():
    return jsonify({"key": "difficulty", "value": get_difficulty()})


@bp_profile.route("/api/settings/difficulty", methods=["POST"])
def set_difficulty_setting():
    ok, result = validate(request.get_json(silent=True) or {}, DIFFICULTY)
    if not ok:
        return jsonify({"error": "invalid difficulty"}), 400
    value = set_difficulty(result["difficulty"])
    if value is None:
        return jsonify({"error": "settings unavailable"}), 503
    return jsonify({"ok": True, "key": "difficulty", "value": value})
