import pytest

from puzzle import db
from puzzle.models import GameConfig, Profile
from puzzle.services.game_session import PlayerState
from puzzle.services.profile_store import ProfileRecord, ProfileStore
from puzzle.services.settings import current_profile, get_difficulty, set_difficulty


def test_load_without_row_returns_defaults():
    rec = ProfileStore().load()
    assert rec == ProfileRecord()
    assert rec.settings == {"sound": True, "theme": "system"}


def test_save_is_a_shallow_merge():
    store = ProfileStore()
    store.save({"level": 3, "coins": 40})
    rec = store.save({"score": 120, "settings": {"theme": "dark"}, "bogus": 1})
    assert (rec.level, rec.score, rec.coins) == (3, 120, 40)
    assert rec.settings == {"sound": True, "theme": "dark"}
    assert store.load() == rec


def test_settings_values_are_normalised():
    store = ProfileStore()
    rec = store.save({"settings": {"theme": "neon", "sound": 0}})
    assert rec.settings == {"sound": False, "theme": "system"}


def test_invalid_scalar_is_dropped_without_raising():
    store = ProfileStore()
    store.save({"level": 2})
    assert store.save({"level": "not-a-number"}) is None
    assert store.load().level == 2


def test_corrupt_json_column_falls_back_to_its_default():
    ProfileStore().save({"level": 4, "achievements": ["Speed Runner"]})
    row = db.session.get(Profile, 1)
    row.achievements = "{not json"
    row.settings = "[1, 2]"
    db.session.commit()
    rec = ProfileStore().load()
    assert rec.level == 4
    assert rec.achievements == []
    assert rec.settings == {"sound": True, "theme": "system"}


def test_save_over_corrupt_column_succeeds_and_repairs_it():
    store = ProfileStore()
    store.save({"level": 4})
    row = db.session.get(Profile, 1)
    row.custom_content = "not json at all"
    db.session.commit()
    rec = store.save({"score": 70})
    assert rec is not None
    assert (rec.level, rec.score, rec.custom_content) == (4, 70, [])
    db.session.expire_all()
    assert db.session.get(Profile, 1).custom_content == "[]"
    assert store.load() == rec


def test_reset_restores_defaults():
    store = ProfileStore()
    store.save({"level": 5, "achievements": ["Perfect Run"]})
    store.reset()
    assert store.load() == ProfileRecord()
    assert db.session.get(Profile, 1) is None


def test_record_completion_appends_achievements():
    store = ProfileStore()
    store.append_achievements(["Speed Runner"])
    state = PlayerState(level=2, score=300, xp=100, coins=50)
    rec = store.record_completion(state, ["Perfect Run"])
    assert (rec.level, rec.score, rec.xp, rec.coins) == (2, 300, 100, 50)
    assert rec.achievements == ["Speed Runner", "Perfect Run"]


def test_difficulty_setting_round_trip(test_app):
    assert get_difficulty() == "medium"
    assert set_difficulty(" HARD ") == "hard"
    assert GameConfig.get("difficulty") == "hard"
    assert current_profile().name == "hard"


def test_difficulty_falls_back_to_app_config(test_app, monkeypatch):
    monkeypatch.setitem(test_app.config, "PUZZLE_DIFFICULTY", "easy")
    assert get_difficulty() == "easy"
    GameConfig.set("difficulty", "garbage")
    assert get_difficulty() == "easy"


def test_unknown_difficulty_is_rejected():
    with pytest.raises(ValueError):
        set_difficulty("nightmare")


def test_difficulty_write_failure_is_logged_not_raised(monkeypatch, capsys):
    from sqlalchemy.exc import OperationalError

    def broken_set(key, value):
        raise OperationalError("UPDATE game_config", {}, Exception("disk I/O error"))

    monkeypatch.setattr(GameConfig, "set", staticmethod(broken_set))
    assert set_difficulty("easy") is None
    assert "event=difficulty_write_failed" in capsys.readouterr().out
    assert get_difficulty() == "medium"


def test_custom_content_entries():
    store = ProfileStore()
    first = store.add_custom_content("text", "Note", "Find the key first")
    second = store.add_custom_content("image", "Sketch", "data:image/png;base64,AA==")
    assert first["id"] != second["id"]
    assert [c["id"] for c in store.load().custom_content] == [first["id"], second["id"]]

    with pytest.raises(ValueError):
        store.add_custom_content("audio", "x", "y")
    with pytest.raises(KeyError):
        store.remove_custom_content("missing")

    assert store.remove_custom_content(first["id"]) is True
    assert [c["id"] for c in store.load().custom_content] == [second["id"]]


def test_claim_milestone_rules():
    store = ProfileStore()
    with pytest.raises(KeyError):
        store.claim_milestone("level_99_reward")
    with pytest.raises(ValueError):
        store.claim_milestone("score_1000_reward")
    store.save({"score": 1500})
    rec = store.claim_milestone("score_1000_reward")
    assert (rec.coins, rec.xp) == (150, 75)
    assert [r["id"] for r in rec.rewards] == ["score_1000_reward"]
    with pytest.raises(ValueError):
        store.claim_milestone("score_1000_reward")
