"""Value types shared by the polling engine: snapshots, presence and events."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Union


## ---------------------------- Presence variants ---------------------------- ##
@dataclass(frozen=True)
class Offline:
    label = "Offline"


@dataclass(frozen=True)
class OnlineIdle:
    label = "Online"


@dataclass(frozen=True)
class PlayingApp:
    app_id: str
    app_name: str
    label = "Playing"


Presence = Union[Offline, OnlineIdle, PlayingApp]


## ---------------------------- Snapshots and events ---------------------------- ##
@dataclass(frozen=True)
class ProfileSnapshot:
    id: str
    display_name: str
    avatar_url: str
    presence: Presence

    @property
    def is_online(self) -> bool:
        return not isinstance(self.presence, Offline)

    def is_playing(self, app_name: str) -> bool:
        '''
        True when this profile is playing `app_name`.
        The comparison ignores case and surrounding whitespace; an empty
        `app_name` never matches.
        '''
        wanted = normalize_app_name(app_name)
        if not wanted or not isinstance(self.presence, PlayingApp):
            return False
        return normalize_app_name(self.presence.app_name) == wanted

    def describe(self) -> str:
        if isinstance(self.presence, PlayingApp):
            return f"{self.display_name} ({self.id}) | Playing: {self.presence.app_name}"
        return f"{self.display_name} ({self.id}) | {self.presence.label}"


@dataclass(frozen=True)
class TransitionEvent:
    id: str
    from_presence: Presence
    to_presence: Presence
    matches_target: bool
    was_matching: bool
    snapshot: ProfileSnapshot

    @property
    def is_rising_edge(self) -> bool:
        return self.matches_target and not self.was_matching


@dataclass(frozen=True)
class CycleReport:
    """What the status view shows after one cycle."""
    snapshots: tuple = ()
    error: Optional[Exception] = None
    events: int = 0
    alerted: bool = False
    finished_at: float = field(default_factory=time.time)


## ---------------------------- Collaborator protocols ---------------------------- ##
class ProfileSource(Protocol):
    async def fetch(self, steam_id: str) -> ProfileSnapshot:
        ...


class AlertSink(Protocol):
    def fire(self, matches: Sequence[TransitionEvent]) -> None:
        ...


def normalize_app_name(name) -> str:
    return str(name or "").strip().lower()
