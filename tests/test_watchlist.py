import json

import pytest

from lookout.errors import AlreadyWatched, InvalidFormat
from lookout.storage import JsonFileStore
from lookout.watchlist import GAME_NAME_KEY, STEAM_IDS_KEY, Watchlist, is_steam_id_valid
from tests._fakes import HALF_LIFE_ID, OTHER_ID, THIRD_ID, MemoryStore, playing


@pytest.mark.parametrize(
    "bad_id",
    [
        "",
        "123",
        "7656119797249532a",
        "765611979724953281",
        "7656119797249532",
        "abc",
        None,
        76561197972495328,
        " 76561197972495328 ",
        "76561197972495328\n",
        "\uff17\uff16\uff15\uff16\uff11\uff11\uff19\uff17\uff19\uff17\uff12\uff14\uff19\uff15\uff13\uff12\uff18",
        "\u0667\u0666\u0665\u0666\u0661\u0661\u0669\u0667\u0669\u0667\u0662\u0664\u0669\u0665\u0663\u0662\u0668",
    ],
)
def test_add_rejects_invalid_format(watchlist, store, bad_id) -> None:
    watchlist.add(OTHER_ID)
    writes_before = list(store.writes)

    with pytest.raises(InvalidFormat):
        watchlist.add(bad_id)

    assert watchlist.list() == [OTHER_ID]
    assert store.writes == writes_before


def test_invalid_format_is_a_value_error() -> None:
    assert issubclass(InvalidFormat, ValueError)
    assert is_steam_id_valid(HALF_LIFE_ID)
    assert not is_steam_id_valid(HALF_LIFE_ID + "\n")


def test_add_rejects_duplicates(watchlist) -> None:
    watchlist.add(HALF_LIFE_ID)

    with pytest.raises(AlreadyWatched):
        watchlist.add(HALF_LIFE_ID)

    assert len(watchlist) == 1


def test_add_persists_in_insertion_order(watchlist, store) -> None:
    watchlist.add(HALF_LIFE_ID)
    watchlist.add(OTHER_ID)

    assert watchlist.list() == [HALF_LIFE_ID, OTHER_ID]
    assert json.loads(store.get(STEAM_IDS_KEY)) == [HALF_LIFE_ID, OTHER_ID]
    assert Watchlist(store).list() == [HALF_LIFE_ID, OTHER_ID]


def test_failed_write_leaves_list_unchanged(watchlist, store) -> None:
    watchlist.add(HALF_LIFE_ID)
    store.fail_writes = True

    with pytest.raises(OSError):
        watchlist.add(OTHER_ID)

    assert watchlist.list() == [HALF_LIFE_ID]


def test_remove_drops_diff_history(watchlist, state_engine) -> None:
    watchlist.add(HALF_LIFE_ID)
    watchlist.add(OTHER_ID)
    state_engine.evaluate([playing(HALF_LIFE_ID), playing(OTHER_ID)], "Half-Life")

    watchlist.remove(HALF_LIFE_ID)

    assert watchlist.list() == [OTHER_ID]
    assert state_engine.previous(HALF_LIFE_ID) is None
    assert state_engine.previous(OTHER_ID) is not None


def test_remove_unknown_id_is_noop(watchlist, store) -> None:
    watchlist.add(HALF_LIFE_ID)
    writes_before = list(store.writes)

    watchlist.remove(OTHER_ID)

    assert watchlist.list() == [HALF_LIFE_ID]
    assert store.writes == writes_before


def test_clear_empties_list_storage_and_diff_history(watchlist, store, state_engine) -> None:
    for steam_id in (HALF_LIFE_ID, OTHER_ID, THIRD_ID):
        watchlist.add(steam_id)
    state_engine.evaluate([playing(HALF_LIFE_ID), playing(OTHER_ID), playing(THIRD_ID)], "Half-Life")

    watchlist.clear()

    assert watchlist.list() == []
    assert store.get(STEAM_IDS_KEY) is None
    assert len(state_engine) == 0


def test_target_application_is_persisted(watchlist, store) -> None:
    watchlist.set_target_application("Half-Life")
    assert store.get(GAME_NAME_KEY) == "Half-Life"
    assert Watchlist(store).target_application == "Half-Life"

    watchlist.set_target_application("")
    assert Watchlist(store).target_application == ""


def test_load_drops_malformed_and_duplicate_entries() -> None:
    store = MemoryStore({STEAM_IDS_KEY: json.dumps([HALF_LIFE_ID, "nope", HALF_LIFE_ID, int(OTHER_ID), {"x": 1}])})

    assert Watchlist(store).list() == [HALF_LIFE_ID, OTHER_ID]


def test_load_tolerates_corrupt_json() -> None:
    store = MemoryStore({STEAM_IDS_KEY: "[not json"})

    assert Watchlist(store).list() == []


def test_on_change_runs_after_each_mutation(store) -> None:
    changes = []
    watchlist = Watchlist(store, on_change=lambda: changes.append(list(watchlist.list())))

    watchlist.add(HALF_LIFE_ID)
    watchlist.set_target_application("Half-Life")
    watchlist.remove(HALF_LIFE_ID)
    watchlist.clear()

    assert changes == [[HALF_LIFE_ID], [HALF_LIFE_ID], [], []]


def _on_disk(tmp_path, state_engine, changes):
    path = tmp_path / "state.json"
    watchlist = Watchlist(JsonFileStore(path), state_engine=state_engine, on_change=lambda: changes.append(1))
    return path, watchlist


def test_refresh_picks_up_another_invocations_edits(tmp_path, state_engine) -> None:
    changes = []
    path, running = _on_disk(tmp_path, state_engine, changes)
    running.add(HALF_LIFE_ID)
    changes.clear()

    other = Watchlist(JsonFileStore(path))
    other.add(OTHER_ID)
    other.set_target_application("Half-Life")

    assert running.refresh() is True
    assert running.list() == [HALF_LIFE_ID, OTHER_ID]
    assert running.target_application == "Half-Life"
    assert changes == [1]
    assert running.refresh() is False


def test_refresh_forgets_profiles_removed_elsewhere(tmp_path, state_engine) -> None:
    changes = []
    path, running = _on_disk(tmp_path, state_engine, changes)
    running.add(HALF_LIFE_ID)
    running.add(OTHER_ID)
    state_engine.evaluate([playing(HALF_LIFE_ID), playing(OTHER_ID)], "Half-Life")

    Watchlist(JsonFileStore(path)).remove(HALF_LIFE_ID)

    assert running.refresh() is True
    assert running.list() == [OTHER_ID]
    assert state_engine.previous(HALF_LIFE_ID) is None
    assert state_engine.previous(OTHER_ID) is not None


def test_refresh_ignores_own_writes(tmp_path, state_engine) -> None:
    changes = []
    _, running = _on_disk(tmp_path, state_engine, changes)
    running.add(HALF_LIFE_ID)
    changes.clear()

    assert running.refresh() is False
    assert changes == []


def test_refresh_without_reloadable_store_is_noop(watchlist) -> None:
    watchlist.add(HALF_LIFE_ID)

    assert watchlist.refresh() is False
    assert watchlist.list() == [HALF_LIFE_ID]
