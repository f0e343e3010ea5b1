"""Durable key/value storage backing the watch list."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class JsonFileStore:
    """Keeps string values in one JSON object on disk.

    Every write replaces the file before returning, so a value reported as
    stored survives a crash right after the call.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._stamp = self._file_stamp()
        self._values = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"State file {self.path} must contain a JSON object.")
        return {str(key): str(value) for key, value in raw.items()}

    def _flush(self, values: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            self._stamp = self._file_stamp()
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _file_stamp(self):
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        # os.replace gives every write a new inode, so this also catches
        # writes landing within the filesystem's mtime resolution.
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)

    def reload(self) -> bool:
        """Re-read the file if another process replaced it. Returns True if it did."""
        stamp = self._file_stamp()
        if stamp == self._stamp:
            return False
        self._values = self._load()
        self._stamp = stamp
        return True

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        updated = dict(self._values)
        updated[key] = str(value)
        self._flush(updated)
        self._values = updated

    def remove(self, key: str) -> None:
        if key not in self._values:
            return
        updated = dict(self._values)
        del updated[key]
        self._flush(updated)
        self._values = updated
