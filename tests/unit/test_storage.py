"""Storage tests"""
import json
import logging

import pytest

from core.state import GameSession
from core.snapshot import to_snapshot
from core.storage import SAVE_KEY, SaveStore, save_session, load_session


def fixed_clock():
    return 0


@pytest.fixture
def store(tmp_path):
    return SaveStore(tmp_path / "saves" / "save.json")


class TestSaveStore:
    """SaveStore tests"""

    def test_save_and_load(self, store):
        assert store.save("k", {"a": 1})
        assert store.load("k") == {"a": 1}

    def test_missing_key(self, store):
        assert store.load("missing") is None
        assert store.load("missing", default=5) == 5

    def test_multiple_keys(self, store):
        store.save("a", 1)
        store.save("b", 2)
        assert store.load("a") == 1
        assert store.load("b") == 2

    def test_delete(self, store):
        store.save("a", 1)
        assert store.delete("a")

    def test_delete_keeps_other_keys(self, store):
        store.save("a", 1)
        store.save("b", 2)
        assert store.delete("a")
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"b": 2}
        assert not store.path.with_suffix(".json.tmp").exists()

    def test_delete_failure_leaves_file(self, store, caplog):
        store.save("a", 1)
        # a directory in the way of the temporary file
        store.path.with_suffix(".json.tmp").mkdir()
        with caplog.at_level(logging.WARNING):
            assert store.delete("a") is False
        assert store.load("a") == 1
        assert "Could not delete" in caplog.text
        assert store.load("a") is None
        assert store.delete("a")

    def test_corrupt_file(self, store, caplog):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert store.load("k", default="fallback") == "fallback"
        assert "Could not load" in caplog.text

    def test_save_over_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2, 3]", encoding="utf-8")
        assert store.save("k", 1)
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"k": 1}

    def test_unavailable_path(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = SaveStore(blocker / "save.json")
        with caplog.at_level(logging.WARNING):
            assert store.save("k", 1) is False
        assert store.load("k") is None
        assert "Could not save" in caplog.text

    def test_unserializable(self, store):
        assert store.save("k", object()) is False


class TestSessionPersistence:
    """save_session / load_session tests"""

    def test_round_trip(self, store):
        session = GameSession.new(seed=11, clock=fixed_clock)
        session.start_turn()
        session.face_room([0, 1, 2])
        assert save_session(store, session)

        restored = load_session(store, clock=fixed_clock)
        assert restored is not None
        assert to_snapshot(restored) == to_snapshot(session)

    def test_default_key(self, store):
        save_session(store, GameSession.new(seed=1))
        assert store.load(SAVE_KEY)["version"] == 2

    def test_nothing_saved(self, store):
        assert load_session(store) is None

    def test_invalid_saved_data(self, store):
        store.save(SAVE_KEY, {"version": 99})
        assert load_session(store) is None

    @pytest.mark.parametrize("weapon", [5, {"value": "abc"}])
    def test_malformed_old_save(self, store, weapon, caplog):
        store.save(SAVE_KEY, {"weapon": weapon, "deck": []})
        with caplog.at_level(logging.WARNING):
            assert load_session(store) is None
        assert "Ignoring invalid saved session" in caplog.text

    def test_unknown_rank_saved(self, store):
        data = to_snapshot(GameSession.new(seed=3, clock=fixed_clock))
        data["deck"][0]["rank"] = "Z"
        store.save(SAVE_KEY, data)
        assert load_session(store) is None
