"""One fetch-all pass over the watch list."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from lookout.errors import FetchCycleFailed
from lookout.models import ProfileSnapshot, ProfileSource

logger = logging.getLogger(__name__)


class PollCycleRunner:
    """Fetch every watched profile concurrently; all of them or nothing."""

    def __init__(self, source: ProfileSource, cycle_timeout: Optional[float] = None):
        self.source = source
        self.cycle_timeout = cycle_timeout

    async def _gather(self, steam_ids: Sequence[str]):
        return await asyncio.gather(
            *(self.source.fetch(steam_id) for steam_id in steam_ids),
            return_exceptions=True,
        )

    async def run(self, steam_ids: Sequence[str]) -> list[ProfileSnapshot]:
        steam_ids = list(steam_ids)
        if not steam_ids:
            return []

        try:
            if self.cycle_timeout is None:
                results = await self._gather(steam_ids)
            else:
                results = await asyncio.wait_for(self._gather(steam_ids), timeout=self.cycle_timeout)
        except asyncio.TimeoutError as exc:
            raise FetchCycleFailed(exc, failed_ids=steam_ids) from exc

        # gather keeps argument order, so results line up with the watch list.
        failures = [
            (steam_id, result)
            for steam_id, result in zip(steam_ids, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            for steam_id, result in failures:
                logger.warning("Fetch failed for %s: %s", steam_id, result)
            _, cause = failures[0]
            raise FetchCycleFailed(cause, failed_ids=[steam_id for steam_id, _ in failures]) from cause
        return list(results)
