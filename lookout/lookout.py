"""Main runtime for the Steam Lookout watcher.

Loads the persisted watch list, applies command line changes to it, then polls
every watched profile on a fixed cadence and raises a toast/audio alert when
one of them is playing the target game.
"""

import asyncio
import logging
from contextlib import suppress

import aiohttp

from lookout.alerts import DesktopAlert
from lookout.audio import resolve_alert_sound
from lookout.cli import build_cli_parser, handle_watchlist_cli
from lookout.config import defaults, resolve_api_key, resolve_state_file
from lookout.cycle import PollCycleRunner
from lookout.differ import StateDiffEngine
from lookout.dispatcher import AlertDispatcher
from lookout.logging_utils import (
    configure_rotating_logger,
    fallback_log_file,
    resolve_log_file,
    tail_logs,
)
from lookout.models import CycleReport
from lookout.profiles import SteamProfileSource
from lookout.scheduler import PollingScheduler
from lookout.storage import JsonFileStore
from lookout.watchlist import Watchlist, follow_storage

logger = logging.getLogger("lookout")


def log_cycle_report(report: CycleReport) -> None:
    """Render one cycle's result as log lines, one per profile."""
    if report.error is not None:
        logger.warning("Showing last known state; %s", report.error)
        return
    for snapshot in report.snapshots:
        logger.info("%s", snapshot.describe())
    if report.alerted:
        logger.info("Alert raised this cycle.")


async def main_async(watchlist: Watchlist, state_engine: StateDiffEngine, cli_args, api_key: str):
    """Build the polling engine around the watch list and run it indefinitely."""
    if not watchlist.list():
        logger.warning("Watch list is empty. Add profiles with --add STEAM_ID; polling anyway.")
    if not watchlist.target_application.strip():
        logger.warning("No target game set. Use --game NAME to enable alerts.")

    audio_path = resolve_alert_sound(cli_args.alert_sound)
    cycle_timeout = cli_args.cycle_timeout if cli_args.cycle_timeout and cli_args.cycle_timeout > 0 else None

    async with aiohttp.ClientSession() as session:
        scheduler = PollingScheduler(
            watchlist=watchlist,
            runner=PollCycleRunner(SteamProfileSource(session, api_key), cycle_timeout=cycle_timeout),
            state_engine=state_engine,
            dispatcher=AlertDispatcher(DesktopAlert(audio_path=audio_path), mode=cli_args.alert_mode),
            interval=cli_args.interval,
            on_cycle=log_cycle_report,
        )
        watchlist.on_change = scheduler.reconfigure
        scheduler.start()
        # Another invocation may edit the state file (--add, --game) while this one polls.
        follow_task = asyncio.create_task(follow_storage(watchlist, defaults["storage_poll_interval"]))

        # Keep the async process alive indefinitely.
        try:
            await asyncio.Event().wait()
        finally:
            follow_task.cancel()
            with suppress(asyncio.CancelledError):
                await follow_task
            watchlist.on_change = None
            await scheduler.stop()


def main(argv=None) -> int:
    """Program entry point."""
    cli_args = build_cli_parser().parse_args(argv)
    _, log_file = configure_rotating_logger(
        logger_name="lookout",
        preferred_log_file=resolve_log_file(),
        fallback_log_file=fallback_log_file(),
    )

    # Rather than run the monitor, tail (display) the log file.
    # Most useful when a separate process is already running in the background.
    if cli_args.tail_logs:
        return tail_logs(log_file=log_file, lines=cli_args.tail_lines, follow=not cli_args.no_follow)

    api_key = resolve_api_key(cli_args.api_key)
    state_engine = StateDiffEngine()
    watchlist = Watchlist(JsonFileStore(resolve_state_file()), state_engine=state_engine)
    exit_code = handle_watchlist_cli(cli_args, watchlist, api_key=api_key)
    if exit_code is not None:
        return exit_code

    if not api_key:
        logger.error("No Steam Web API key. Pass --api-key or set STEAM_API_KEY.")
        return 2

    logger.info("Starting Steam Lookout. Log file: %s", log_file)
    try:
        asyncio.run(main_async(watchlist, state_engine, cli_args, api_key))
    except KeyboardInterrupt:
        logger.info("Stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
