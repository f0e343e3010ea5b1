import pytest

from lookout.differ import StateDiffEngine
from lookout.watchlist import Watchlist
from tests._fakes import MemoryStore, RecordingSink


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def state_engine():
    return StateDiffEngine()


@pytest.fixture
def watchlist(store, state_engine):
    return Watchlist(store, state_engine=state_engine)


@pytest.fixture
def sink():
    return RecordingSink()
