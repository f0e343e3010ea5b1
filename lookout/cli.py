import argparse

import requests

from lookout.config import ALERT_MODES, defaults
from lookout.errors import AlreadyWatched, InvalidFormat
from steamapi import steamapi


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Steam Lookout: alert when watched profiles play a game.")
    parser.add_argument(
        "--add",
        metavar="STEAM_ID",
        action="append",
        default=[],
        help="Add a 17 digit Steam ID to the watch list. May be repeated.",
    )
    parser.add_argument(
        "--remove",
        metavar="STEAM_ID",
        action="append",
        default=[],
        help="Remove a Steam ID from the watch list. May be repeated.",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove every profile from the watch list.",
    )
    parser.add_argument(
        "--game",
        default=None,
        help="Set the game to wait for. Pass an empty string to disable alerts.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the watch list (with persona names when an API key is available) and exit.",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help=f"Steam Web API key (default: ${defaults['api_key_env']}).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=defaults["poll_interval"],
        help=f"Seconds between poll cycles (default: {defaults['poll_interval']:g}).",
    )
    parser.add_argument(
        "--cycle-timeout",
        type=float,
        default=defaults["cycle_timeout"],
        help=f"Give up on a poll cycle after this many seconds; 0 disables (default: {defaults['cycle_timeout']:g}).",
    )
    parser.add_argument(
        "--alert-mode",
        choices=ALERT_MODES,
        default=defaults["alert_mode"],
        help="'level' alerts every cycle the game is being played, 'edge' only when it starts (default: level).",
    )
    parser.add_argument(
        "--alert-sound",
        default=None,
        help="Path to the audio file played on alert. No sound file ships with the package; without one the toast uses its default notification sound.",
    )
    parser.add_argument(
        "--tail-logs",
        action="store_true",
        help="Tail the log file instead of starting the monitor.",
    )
    parser.add_argument(
        "--tail-lines",
        type=int,
        default=100,
        help="How many recent lines to print before following logs (default: 100).",
    )
    parser.add_argument(
        "--no-follow",
        action="store_true",
        help="When used with --tail-logs, print lines and exit without follow mode.",
    )
    return parser


def print_watchlist(watchlist, api_key: str = "") -> None:
    steam_ids = watchlist.list()
    game_name = watchlist.target_application.strip()
    print(f"Waiting for game: {game_name or '(none, alerts disabled)'}")
    if not steam_ids:
        print("Watch list is empty. Add profiles with --add STEAM_ID.")
        return

    names = [""] * len(steam_ids)
    if api_key:
        try:
            names = steamapi.get_persona_names(steam_ids, api_key)
        except requests.RequestException as e:
            print(f"Could not look up persona names: {e}")
    for steam_id, name in zip(steam_ids, names):
        print(f"{steam_id}  {name}".rstrip())


def handle_watchlist_cli(cli_args, watchlist, api_key: str = ""):
    '''
    Applies the watch list commands given on the command line.
    Returns an exit code when the process should exit afterwards, None to keep running.
    '''
    try:
        if cli_args.clear:
            watchlist.clear()
        for steam_id in cli_args.remove:
            watchlist.remove(steam_id.strip())
        for steam_id in cli_args.add:
            watchlist.add(steam_id.strip())
    except (InvalidFormat, AlreadyWatched) as e:
        print(e)
        return 2
    if cli_args.game is not None:
        watchlist.set_target_application(cli_args.game)

    if cli_args.list:
        print_watchlist(watchlist, api_key=api_key)
        return 0
    return None
