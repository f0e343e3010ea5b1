import os
from pathlib import Path

'''
Default configuration values.
Command line flags and environment variables override these.
'''
defaults = {
    "poll_interval": 20.0,              #Seconds between scheduled poll cycles.
    "cycle_timeout": 60.0,              #Deadline for one whole poll cycle, in seconds. None disables it.
    "request_timeout": 10.0,            #Per-request timeout for Steam Web API calls.
    "alert_mode": "level",              #"level" alerts every cycle the game is played, "edge" only when it starts.
    "api_key_env": "STEAM_API_KEY",     #Environment variable holding the Steam Web API key.
    "state_file_name": "state.json",
    "storage_poll_interval": 1.0,       #Seconds between checks for watch list edits made by another process.
}

ALERT_MODES = ("level", "edge")
PACKAGE_DIR = Path(__file__).resolve().parent


def _app_data_dir() -> Path:
    programdata = os.getenv("ProgramData")
    if programdata:
        return Path(programdata) / "SteamLookout"
    return PACKAGE_DIR


def resolve_state_file() -> Path:
    override_dir = os.getenv("LOOKOUT_STATE_DIR")
    if override_dir:
        return Path(override_dir) / defaults["state_file_name"]
    return _app_data_dir() / defaults["state_file_name"]


def resolve_log_dir() -> Path:
    override_dir = os.getenv("LOOKOUT_LOG_DIR")
    if override_dir:
        return Path(override_dir)
    return _app_data_dir() / "logs"


def resolve_api_key(cli_value=None) -> str:
    if cli_value:
        return cli_value.strip()
    return os.getenv(defaults["api_key_env"], "").strip()
