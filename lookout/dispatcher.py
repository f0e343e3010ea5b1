"""Alert firing policy: at most one alert per poll cycle."""

from __future__ import annotations

import logging
from typing import Iterable

from lookout.config import ALERT_MODES
from lookout.errors import AlertSinkFailed
from lookout.models import AlertSink, TransitionEvent

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """
    Decides from one cycle's events whether to fire the alert sink.

    In "level" mode any event matching the target qualifies, every cycle it
    holds. In "edge" mode only events whose previous observation did not match
    qualify. Either way the sink is called once per cycle, however many
    profiles qualify, and the dispatcher keeps nothing between cycles.
    """

    def __init__(self, sink: AlertSink, mode: str = "level"):
        if mode not in ALERT_MODES:
            raise ValueError(f"Unknown alert mode {mode!r}. Valid modes are: {list(ALERT_MODES)}")
        self.sink = sink
        self.mode = mode

    def _qualifies(self, event: TransitionEvent) -> bool:
        if self.mode == "edge":
            return event.is_rising_edge
        return event.matches_target

    def dispatch(self, events: Iterable[TransitionEvent]) -> bool:
        matches = [event for event in events if self._qualifies(event)]
        if not matches:
            return False

        logger.info(
            "Target game detected for: %s",
            ", ".join(event.snapshot.display_name or event.id for event in matches),
        )
        try:
            self.sink.fire(matches)
        except Exception as exc:
            failure = exc if isinstance(exc, AlertSinkFailed) else AlertSinkFailed(str(exc))
            logger.error("Alert failed: %s", failure, exc_info=exc)
        return True
