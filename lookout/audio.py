from pathlib import Path
import ctypes
import logging

from lookout.config import PACKAGE_DIR
from lookout.errors import AlertSinkFailed

MCI_ALIAS = "SteamLookoutAlert"
# Not shipped with the package. Drop a file here, or pass --alert-sound.
DEFAULT_AUDIO_PATH = PACKAGE_DIR / "assets" / "alert.mp3"

logger = logging.getLogger(__name__)


def resolve_alert_sound(cli_value=None, default_path: Path = DEFAULT_AUDIO_PATH):
    """
    Pick the sound file played on alert. Returns None when there is none,
    in which case the toast keeps its own notification sound.
    """
    audio_path = Path(cli_value) if cli_value else default_path
    if audio_path.exists():
        return audio_path
    if cli_value:
        logger.warning("Alert sound %s not found; using the default toast sound.", audio_path)
    else:
        logger.info("No alert sound at %s; pass --alert-sound FILE for a custom one.", audio_path)
    return None


def _winmm():
    windll = getattr(ctypes, "windll", None)
    if windll is None:
        raise AlertSinkFailed("Alert audio playback needs the Windows MCI API.")
    return windll.winmm


def play_alert_audio(audio_path: Path) -> None:
    # MCI plays asynchronously, so this returns as soon as playback starts.
    # Closing the alias first stops a previous alert that is still playing.
    if not audio_path.exists():
        raise AlertSinkFailed(f"Audio file not found: {audio_path}")

    winmm = _winmm()
    path_str = str(audio_path.resolve()).replace('"', '""')
    winmm.mciSendStringW(f"close {MCI_ALIAS}", None, 0, None)
    open_result = winmm.mciSendStringW(
        f'open "{path_str}" type mpegvideo alias {MCI_ALIAS}',
        None,
        0,
        None,
    )
    if open_result != 0:
        raise AlertSinkFailed(f"Failed to open alert audio with MCI (code: {open_result})")

    play_result = winmm.mciSendStringW(f"play {MCI_ALIAS}", None, 0, None)
    if play_result != 0:
        raise AlertSinkFailed(f"Failed to play alert audio with MCI (code: {play_result})")
