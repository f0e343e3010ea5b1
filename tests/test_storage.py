import json

import pytest

from lookout.storage import JsonFileStore


def test_values_survive_reopen(tmp_path) -> None:
    path = tmp_path / "state" / "state.json"
    store = JsonFileStore(path)
    store.set("gameName", "Half-Life")
    store.set("steamIds", json.dumps(["76561197972495328"]))

    reopened = JsonFileStore(path)

    assert reopened.get("gameName") == "Half-Life"
    assert json.loads(reopened.get("steamIds")) == ["76561197972495328"]
    assert not list(path.parent.glob("*.tmp"))


def test_missing_file_reads_empty(tmp_path) -> None:
    store = JsonFileStore(tmp_path / "nope.json")

    assert store.get("gameName") is None
    assert not (tmp_path / "nope.json").exists()


def test_remove_is_persisted_and_missing_key_is_noop(tmp_path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileStore(path)
    store.set("gameName", "Dota 2")

    store.remove("steamIds")
    store.remove("gameName")

    assert store.get("gameName") is None
    assert JsonFileStore(path).get("gameName") is None


def test_non_object_file_is_rejected(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ValueError):
        JsonFileStore(path)


def test_reload_picks_up_writes_from_another_process(tmp_path) -> None:
    path = tmp_path / "state.json"
    running = JsonFileStore(path)
    running.set("gameName", "Half-Life")
    assert running.reload() is False

    JsonFileStore(path).set("gameName", "Dota 2")

    assert running.get("gameName") == "Half-Life"
    assert running.reload() is True
    assert running.get("gameName") == "Dota 2"
    assert running.reload() is False


def test_reload_sees_file_created_after_open(tmp_path) -> None:
    path = tmp_path / "state.json"
    running = JsonFileStore(path)
    assert running.reload() is False

    path.write_text(json.dumps({"gameName": "Portal"}), encoding="utf-8")

    assert running.reload() is True
    assert running.get("gameName") == "Portal"
