import asyncio
import json
import logging
import re

from lookout.errors import AlreadyWatched, InvalidFormat
from lookout.storage import KeyValueStore

STEAM_IDS_KEY = "steamIds"
GAME_NAME_KEY = "gameName"
STEAM_ID_PATTERN = re.compile(r"[0-9]{17}")

logger = logging.getLogger(__name__)


def is_steam_id_valid(steam_id) -> bool:
    return isinstance(steam_id, str) and STEAM_ID_PATTERN.fullmatch(steam_id) is not None


class Watchlist:
    """Manages the watched Steam IDs and the target game name, with persistence."""

    def __init__(self, storage: KeyValueStore, state_engine=None, on_change=None):
        self.storage = storage
        self.state_engine = state_engine
        self.on_change = on_change
        self._steam_ids = self._load_steam_ids()
        self._game_name = storage.get(GAME_NAME_KEY) or ""

    def _load_steam_ids(self):
        raw = self.storage.get(STEAM_IDS_KEY)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored watch list is not valid JSON; starting empty.")
            return []
        if not isinstance(entries, list):
            logger.warning("Stored watch list must be a JSON list; starting empty.")
            return []

        steam_ids = []
        for entry in entries:
            steam_id = str(entry) if isinstance(entry, (int, str)) else None
            if not is_steam_id_valid(steam_id):
                logger.warning("Dropping invalid stored Steam ID: %r", entry)
                continue
            if steam_id in steam_ids:
                logger.warning("Dropping duplicate stored Steam ID: %s", steam_id)
                continue
            steam_ids.append(steam_id)
        return steam_ids

    def _save_steam_ids(self, steam_ids) -> None:
        if steam_ids:
            self.storage.set(STEAM_IDS_KEY, json.dumps(steam_ids))
        else:
            self.storage.remove(STEAM_IDS_KEY)
        self._steam_ids = steam_ids

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()

    def list(self):
        return list(self._steam_ids)

    def __contains__(self, steam_id):
        return steam_id in self._steam_ids

    def __len__(self):
        return len(self._steam_ids)

    @property
    def target_application(self) -> str:
        return self._game_name

    def add(self, steam_id: str) -> None:
        if not is_steam_id_valid(steam_id):
            raise InvalidFormat(steam_id)
        if steam_id in self._steam_ids:
            raise AlreadyWatched(steam_id)
        self._save_steam_ids(self._steam_ids + [steam_id])
        logger.info("Watching %s", steam_id)
        self._changed()

    def remove(self, steam_id: str) -> None:
        if steam_id not in self._steam_ids:
            return
        self._save_steam_ids([sid for sid in self._steam_ids if sid != steam_id])
        if self.state_engine is not None:
            self.state_engine.forget([steam_id])
        logger.info("Stopped watching %s", steam_id)
        self._changed()

    def clear(self) -> None:
        removed = self._steam_ids
        self._save_steam_ids([])
        if self.state_engine is not None:
            self.state_engine.clear()
        logger.info("Cleared watch list (%d profiles)", len(removed))
        self._changed()

    def refresh(self) -> bool:
        """
        Pick up changes another process wrote to storage, such as a second
        CLI invocation running --add or --game. Dropped profiles lose their
        diff history. Returns True and runs `on_change` if anything changed.
        """
        reload = getattr(self.storage, "reload", None)
        if reload is None or not reload():
            return False

        steam_ids = self._load_steam_ids()
        game_name = self.storage.get(GAME_NAME_KEY) or ""
        if steam_ids == self._steam_ids and game_name == self._game_name:
            return False

        dropped = [steam_id for steam_id in self._steam_ids if steam_id not in steam_ids]
        self._steam_ids = steam_ids
        self._game_name = game_name
        if dropped and self.state_engine is not None:
            self.state_engine.forget(dropped)
        logger.info("Watch list changed on disk: %d profile(s), game %r", len(steam_ids), game_name)
        self._changed()
        return True

    def set_target_application(self, name: str) -> None:
        name = name or ""
        self.storage.set(GAME_NAME_KEY, name)
        self._game_name = name
        if name.strip():
            logger.info("Waiting for game: %s", name)
        else:
            logger.info("Target game cleared; alerts disabled.")
        self._changed()


async def follow_storage(watchlist: Watchlist, poll_interval: float = 1.0) -> None:
    """Keep calling `watchlist.refresh()` so edits from other processes apply while running."""
    while True:
        await asyncio.sleep(poll_interval)
        try:
            watchlist.refresh()
        except (OSError, ValueError) as exc:
            logger.warning("Could not reload watch list: %s", exc)
