from puzzle.services import session_registry

from tests.maze_test_utils import LINE_MAP, grid_from


def _new_game(client, **body):
    resp = client.post("/api/game/new", json=body or {"seed": 7})
    assert resp.status_code == 201
    return resp.get_json()


def _rig_line_board(game_id):
    entry = session_registry.get(game_id)
    entry.session.load_grid(grid_from(LINE_MAP), total_keys=1)
    return entry.session


def test_state_requires_a_game(client):
    resp = client.get("/api/game/state")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "no active game"
    assert client.post("/api/game/move", json={"dir": "up"}).status_code == 404


def test_new_game_uses_configured_difficulty(client):
    client.post("/api/settings/difficulty", json={"difficulty": "easy"})
    snap = _new_game(client)
    assert snap["difficulty"] == "easy"
    assert snap["size"] == 8
    assert snap["player"]["level"] == 1
    assert snap["player"]["position"] == [1, 1]
    state = client.get("/api/game/state").get_json()
    assert state["id"] == snap["id"]


def test_new_game_rejects_non_integer_seed(client):
    resp = client.post("/api/game/new", json={"seed": "abc"})
    assert resp.status_code == 400


def test_new_game_replaces_previous_session(client):
    first = _new_game(client)
    second = _new_game(client)
    assert first["id"] != second["id"]
    assert session_registry.get(first["id"]) is None


def test_move_validates_direction(client):
    _new_game(client)
    resp = client.post("/api/game/move", json={"dir": "sideways"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["field"] == "dir"
    assert body["code"] == "choices"
    assert client.post("/api/game/move", json={}).status_code == 400


def test_move_accepts_names_and_wasd(client):
    snap = _new_game(client)
    _rig_line_board(snap["id"])
    resp = client.post("/api/game/move", json={"dir": "A"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["result"]["accepted"] is False
    assert body["result"]["notices"] == ["blocked"]

    body = client.post("/api/game/move", json={"dir": "right"}).get_json()
    assert body["result"]["notices"] == ["key_collected"]
    assert body["state"]["player"]["keys_collected"] == 1
    assert body["state"]["grid"][1][2] == "empty"


def test_completion_is_saved_to_profile(client):
    snap = _new_game(client)
    _rig_line_board(snap["id"])
    for _ in range(3):
        body = client.post("/api/game/move", json={"dir": "d"}).get_json()
    result = body["result"]
    assert "level_complete" in result["notices"]
    assert result["completion"]["moves"] == 3
    assert "Perfect Run" in result["achievements"]

    profile = client.get("/api/profile").get_json()
    assert profile["score"] == body["state"]["player"]["score"]
    assert "Perfect Run" in profile["achievements"]

    resp = client.post("/api/game/next")
    assert resp.status_code == 200
    assert resp.get_json()["player"]["level"] == 2
    assert client.get("/api/profile").get_json()["level"] == 2


def test_next_requires_completed_level(client):
    _new_game(client)
    resp = client.post("/api/game/next")
    assert resp.status_code == 409


def test_hint_and_restart(client):
    snap = _new_game(client)
    _rig_line_board(snap["id"])
    body = client.post("/api/game/hint").get_json()
    assert body["hint"]["kind"] == "step"
    assert body["hint"]["step"] == [2, 1]
    assert body["hints_used"] == 1

    restarted = client.post("/api/game/restart").get_json()
    assert restarted["player"]["retries"] == 1
    assert restarted["player"]["hints_used"] == 1
    assert restarted["player"]["moves"] == 0


def test_new_game_resumes_stored_progress(client):
    client.post("/api/settings/difficulty", json={"difficulty": "easy"})
    from puzzle.services.profile_store import ProfileStore

    ProfileStore().save({"level": 4, "score": 900})
    snap = _new_game(client)
    assert snap["player"]["level"] == 4
    assert snap["player"]["score"] == 900
    assert snap["player"]["theme"] == "forest"


def test_profile_post_only_changes_settings(client):
    resp = client.post("/api/profile", json={"level": 99, "score": 5000, "settings": {"theme": "dark"}})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["level"] == 1
    assert body["score"] == 0
    assert body["settings"]["theme"] == "dark"
    assert client.post("/api/profile", json={"settings": "loud"}).status_code == 400


def test_profile_reset(client):
    client.post("/api/profile", json={"settings": {"sound": False}})
    body = client.post("/api/profile/reset").get_json()
    assert body["settings"] == {"sound": True, "theme": "system"}


def test_difficulty_setting_endpoints(client):
    assert client.get("/api/settings/difficulty").get_json()["value"] == "medium"
    resp = client.post("/api/settings/difficulty", json={"difficulty": "Hard"})
    assert resp.status_code == 200
    assert resp.get_json()["value"] == "hard"
    assert client.get("/api/settings/difficulty").get_json()["value"] == "hard"
    assert client.post("/api/settings/difficulty", json={"difficulty": "extreme"}).status_code == 400


def test_restart_and_next_pick_up_a_changed_difficulty(client):
    client.post("/api/settings/difficulty", json={"difficulty": "easy"})
    snap = _new_game(client)
    assert snap["size"] == 8

    client.post("/api/settings/difficulty", json={"difficulty": "hard"})
    restarted = client.post("/api/game/restart").get_json()
    assert restarted["difficulty"] == "hard"
    assert restarted["size"] == 16
    assert restarted["board_rotation"] is True

    _rig_line_board(snap["id"])
    for _ in range(3):
        client.post("/api/game/move", json={"dir": "d"})
    client.post("/api/settings/difficulty", json={"difficulty": "medium"})
    advanced = client.post("/api/game/next").get_json()
    assert advanced["difficulty"] == "medium"
    assert advanced["size"] == 12
    assert advanced["player"]["level"] == 2


def test_difficulty_write_failure_answers_503(client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from puzzle.models import GameConfig

    def broken_set(key, value):
        raise OperationalError("UPDATE game_config", {}, Exception("database is locked"))

    monkeypatch.setattr(GameConfig, "set", staticmethod(broken_set))
    resp = client.post("/api/settings/difficulty", json={"difficulty": "hard"})
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "settings unavailable"
    assert client.get("/api/settings/difficulty").get_json()["value"] == "medium"


def test_profile_post_repairs_corrupt_column(client):
    from puzzle import db
    from puzzle.models import Profile
    from puzzle.services.profile_store import ProfileStore

    ProfileStore().save({"level": 3})
    row = db.session.get(Profile, 1)
    row.achievements = "{not json"
    db.session.commit()

    resp = client.post("/api/profile", json={"settings": {"theme": "dark"}})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["settings"]["theme"] == "dark"
    assert body["level"] == 3
    assert body["achievements"] == []
    db.session.expire_all()
    assert db.session.get(Profile, 1).achievements == "[]"


def test_custom_content_add_edit_delete(client):
    resp = client.post("/api/profile/content", json={"kind": "Text", "title": " Riddle ", "content": "What has keys?"})
    assert resp.status_code == 201
    entry = resp.get_json()
    assert entry["kind"] == "text"
    assert entry["title"] == "Riddle"
    assert entry["id"] and entry["created_at"]
    assert client.get("/api/profile").get_json()["custom_content"] == [entry]

    resp = client.put(
        f"/api/profile/content/{entry['id']}", json={"kind": "image", "title": "Map", "content": "data:image/png;base64,AA=="}
    )
    assert resp.status_code == 200
    edited = resp.get_json()
    assert edited["id"] == entry["id"]
    assert edited["kind"] == "image"
    assert [c["title"] for c in client.get("/api/profile").get_json()["custom_content"]] == ["Map"]

    assert client.delete(f"/api/profile/content/{entry['id']}").status_code == 200
    assert client.get("/api/profile").get_json()["custom_content"] == []
    assert client.delete(f"/api/profile/content/{entry['id']}").status_code == 404
    assert client.put("/api/profile/content/missing", json={"kind": "text", "title": "a", "content": "b"}).status_code == 404


def test_custom_content_validation(client):
    assert client.post("/api/profile/content", json={"kind": "video", "title": "a", "content": "b"}).status_code == 400
    assert client.post("/api/profile/content", json={"kind": "text", "title": "  ", "content": "b"}).status_code == 400
    assert client.post("/api/profile/content", json={"kind": "text", "title": "a"}).status_code == 400


def test_milestone_rewards_are_claimed_once(client):
    from puzzle.services.profile_store import ProfileStore

    listing = client.get("/api/profile/rewards").get_json()["milestones"]
    assert [m["id"] for m in listing][:2] == ["level_5_reward", "level_10_reward"]
    assert not any(m["available"] for m in listing)
    assert client.post("/api/profile/rewards/level_5_reward/claim").status_code == 409

    ProfileStore().save({"level": 5, "coins": 10, "xp": 20})
    listing = {m["id"]: m for m in client.get("/api/profile/rewards").get_json()["milestones"]}
    assert listing["level_5_reward"]["available"] is True
    assert listing["level_10_reward"]["available"] is False

    resp = client.post("/api/profile/rewards/level_5_reward/claim")
    assert resp.status_code == 200
    body = resp.get_json()
    assert (body["coins"], body["xp"]) == (210, 120)
    assert body["rewards"][0]["id"] == "level_5_reward"
    assert body["rewards"][0]["claimed"] is True
    assert client.post("/api/profile/rewards/level_5_reward/claim").status_code == 409
    assert client.post("/api/profile/rewards/nope/claim").status_code == 404
