"""Per-profile state retention and transition classification."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from lookout.models import ProfileSnapshot, TransitionEvent

logger = logging.getLogger(__name__)


class StateDiffEngine:
    """
    Holds the previous snapshot of every watched profile and turns each new
    snapshot set into transition events.

    The first snapshot seen for a profile is only a baseline and produces no
    event, so a game that was already running at start-up is not reported as
    if it had just started. After that, every observation produces an event
    carrying a fresh `matches_target` flag (level-sensitive), plus the flag
    the previous observation would have had against the same target.
    """

    def __init__(self):
        self._previous: dict[str, ProfileSnapshot] = {}

    def __len__(self):
        return len(self._previous)

    def known_ids(self) -> list[str]:
        return list(self._previous.keys())

    def previous(self, steam_id: str) -> Optional[ProfileSnapshot]:
        return self._previous.get(steam_id)

    def forget(self, steam_ids: Iterable[str]) -> None:
        for steam_id in steam_ids:
            self._previous.pop(steam_id, None)

    def clear(self) -> None:
        self._previous.clear()

    def evaluate(
        self,
        snapshots: Iterable[ProfileSnapshot],
        target: str,
        watched: Optional[Iterable[str]] = None,
    ) -> list[TransitionEvent]:
        watched_ids = set(watched) if watched is not None else None
        events = []
        current = {}
        for snapshot in snapshots:
            if watched_ids is not None and snapshot.id not in watched_ids:
                # Removed from the watch list while the cycle was in flight.
                continue
            current[snapshot.id] = snapshot
            prior = self._previous.get(snapshot.id)
            if prior is None:
                logger.debug("Baseline recorded for %s", snapshot.id)
                continue
            events.append(
                TransitionEvent(
                    id=snapshot.id,
                    from_presence=prior.presence,
                    to_presence=snapshot.presence,
                    matches_target=snapshot.is_playing(target),
                    was_matching=prior.is_playing(target),
                    snapshot=snapshot,
                )
            )

        self._previous.update(current)
        if watched_ids is not None:
            self.forget([steam_id for steam_id in self._previous if steam_id not in watched_ids])
        return events
