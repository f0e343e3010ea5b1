"""Fixed-cadence driver for poll cycles."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from contextlib import suppress
from enum import Enum
from typing import Callable, Optional

from lookout.config import defaults
from lookout.cycle import PollCycleRunner
from lookout.differ import StateDiffEngine
from lookout.dispatcher import AlertDispatcher
from lookout.errors import FetchCycleFailed
from lookout.models import CycleReport
from lookout.watchlist import Watchlist

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    STOPPED = "stopped"


class PollingScheduler:
    """
    Runs one poll cycle every `interval` seconds, never two at once.

    A timer fire that lands while a cycle is still running is skipped, not
    queued. A configuration change (`reconfigure`) re-arms the timer and asks
    for one extra cycle; if a cycle is running at that moment the extra cycle
    starts as soon as it settles. After `stop`, an in-flight cycle may finish
    but its results are thrown away.
    """

    def __init__(
        self,
        watchlist: Watchlist,
        runner: PollCycleRunner,
        state_engine: StateDiffEngine,
        dispatcher: AlertDispatcher,
        interval: float = defaults["poll_interval"],
        on_cycle: Optional[Callable[[CycleReport], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("Poll interval must be greater than 0 seconds.")
        self.watchlist = watchlist
        self.runner = runner
        self.state_engine = state_engine
        self.dispatcher = dispatcher
        self.interval = interval
        self.on_cycle = on_cycle

        self.state = SchedulerState.IDLE
        self.latest = CycleReport()
        self.cycles_completed = 0
        self.skipped_ticks = 0
        self._timer_task = None
        self._cycle_task = None
        self._refresh_pending = False

    @property
    def is_running(self) -> bool:
        return self._cycle_task is not None

    def start(self) -> None:
        """Arm the timer and run the first cycle right away."""
        if self.state is not SchedulerState.IDLE:
            logger.warning("Scheduler cannot start from state %s.", self.state.value)
            return
        self.state = SchedulerState.SCHEDULED
        logger.info("Polling %d profile(s) every %ss", len(self.watchlist), self.interval)
        self._arm_timer()
        self.tick()

    async def stop(self) -> None:
        """Disarm the timer. Results of a cycle still in flight are discarded."""
        self.state = SchedulerState.STOPPED
        self._refresh_pending = False
        timer_task, self._timer_task = self._timer_task, None
        if timer_task is None:
            return
        timer_task.cancel()
        with suppress(asyncio.CancelledError):
            await timer_task

    async def wait_idle(self) -> None:
        """Wait until no cycle is in flight, including queued follow-ups."""
        while self._cycle_task is not None:
            await self._cycle_task

    def tick(self) -> bool:
        """Start a cycle unless one is already running. Returns True if started."""
        if self.state in (SchedulerState.IDLE, SchedulerState.STOPPED):
            return False
        if self.is_running:
            self.skipped_ticks += 1
            logger.debug("Previous cycle still running; skipping this tick.")
            return False
        self.state = SchedulerState.RUNNING
        self._cycle_task = asyncio.create_task(self._run_cycle())
        return True

    def reconfigure(self) -> None:
        """Apply a watch list or target change from the next cycle on."""
        watched = set(self.watchlist.list())
        self.latest = dataclasses.replace(
            self.latest,
            snapshots=tuple(s for s in self.latest.snapshots if s.id in watched),
        )
        if self.state in (SchedulerState.IDLE, SchedulerState.STOPPED):
            return
        self._arm_timer()
        if self.is_running:
            self._refresh_pending = True
        else:
            self.tick()

    def _arm_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
        self._timer_task = asyncio.create_task(self._timer_loop())

    async def _timer_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def _publish(self, report: CycleReport) -> None:
        self.latest = report
        self.cycles_completed += 1
        if not self.on_cycle:
            return
        try:
            self.on_cycle(report)
        except Exception:
            logger.exception("Cycle report callback failed")

    async def _run_cycle(self) -> None:
        # The cycle works on the configuration as it was when it started.
        steam_ids = self.watchlist.list()
        target = self.watchlist.target_application
        try:
            snapshots = await self.runner.run(steam_ids)
            if self.state is SchedulerState.STOPPED:
                logger.info("Scheduler stopped; discarding results of the last cycle.")
                return
            self._complete_cycle(steam_ids, snapshots, target)
        except FetchCycleFailed as exc:
            if self.state is not SchedulerState.STOPPED:
                logger.error("%s", exc)
                self._publish(
                    dataclasses.replace(self.latest, error=exc, events=0, alerted=False, finished_at=time.time())
                )
        except Exception:
            logger.exception("Unexpected error in poll cycle")
        finally:
            self._settle()

    def _complete_cycle(self, steam_ids, snapshots, target: str) -> None:
        events = []
        alerted = False
        if steam_ids:
            events = self.state_engine.evaluate(snapshots, target, watched=self.watchlist.list())
            alerted = self.dispatcher.dispatch(events)
        watched = set(self.watchlist.list())
        self._publish(
            CycleReport(
                snapshots=tuple(s for s in snapshots if s.id in watched),
                events=len(events),
                alerted=alerted,
            )
        )

    def _settle(self) -> None:
        self._cycle_task = None
        if self.state is SchedulerState.STOPPED:
            return
        self.state = SchedulerState.SCHEDULED
        if self._refresh_pending:
            self._refresh_pending = False
            self.tick()
