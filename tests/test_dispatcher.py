import logging

import pytest

from lookout.differ import StateDiffEngine
from lookout.dispatcher import AlertDispatcher
from lookout.errors import AlertSinkFailed
from tests._fakes import HALF_LIFE_ID, OTHER_ID, RecordingSink, offline, playing


def _events(first, second, target="Half-Life"):
    engine = StateDiffEngine()
    engine.evaluate(first, target)
    return engine.evaluate(second, target)


def test_fires_once_for_several_matching_profiles(sink) -> None:
    events = _events(
        [playing(HALF_LIFE_ID), playing(OTHER_ID)],
        [playing(HALF_LIFE_ID), playing(OTHER_ID)],
    )

    assert AlertDispatcher(sink).dispatch(events) is True
    assert len(sink.fired) == 1
    assert [event.id for event in sink.fired[0]] == [HALF_LIFE_ID, OTHER_ID]


def test_does_not_fire_without_a_match(sink) -> None:
    events = _events([offline(HALF_LIFE_ID)], [playing(HALF_LIFE_ID, "Portal")])

    assert AlertDispatcher(sink).dispatch(events) is False
    assert AlertDispatcher(sink).dispatch([]) is False
    assert sink.fired == []


def test_sink_failure_is_logged_not_raised(caplog) -> None:
    sink = RecordingSink(error=AlertSinkFailed("playback rejected"))
    events = _events([playing(HALF_LIFE_ID)], [playing(HALF_LIFE_ID)])

    with caplog.at_level(logging.ERROR, logger="lookout.dispatcher"):
        assert AlertDispatcher(sink).dispatch(events) is True

    assert len(sink.fired) == 1
    assert "playback rejected" in caplog.text


def test_unexpected_sink_error_is_also_contained() -> None:
    sink = RecordingSink(error=RuntimeError("no audio device"))
    events = _events([playing(HALF_LIFE_ID)], [playing(HALF_LIFE_ID)])

    assert AlertDispatcher(sink).dispatch(events) is True


def test_level_mode_refires_while_condition_holds(sink) -> None:
    dispatcher = AlertDispatcher(sink, mode="level")
    engine = StateDiffEngine()
    engine.evaluate([playing(HALF_LIFE_ID)], "Half-Life")

    for _ in range(3):
        dispatcher.dispatch(engine.evaluate([playing(HALF_LIFE_ID)], "Half-Life"))

    assert len(sink.fired) == 3


def test_edge_mode_fires_on_rising_edge_only(sink) -> None:
    dispatcher = AlertDispatcher(sink, mode="edge")
    engine = StateDiffEngine()
    engine.evaluate([offline(HALF_LIFE_ID)], "Half-Life")

    observations = [playing(HALF_LIFE_ID), playing(HALF_LIFE_ID), offline(HALF_LIFE_ID), playing(HALF_LIFE_ID)]
    fired = [dispatcher.dispatch(engine.evaluate([item], "Half-Life")) for item in observations]

    assert fired == [True, False, False, True]
    assert len(sink.fired) == 2


def test_unknown_mode_is_rejected(sink) -> None:
    with pytest.raises(ValueError):
        AlertDispatcher(sink, mode="sometimes")
