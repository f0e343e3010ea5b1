"""Windows toast + sound alert sink."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

from windows_toasts import (
    Toast,
    ToastAudio,
    ToastDisplayImage,
    ToastDuration,
    ToastImagePosition,
    WindowsToaster,
)

from lookout.audio import play_alert_audio
from lookout.avatar import resolve_avatar_filepath
from lookout.errors import AlertSinkFailed
from lookout.models import TransitionEvent
from lookout.toast_handlers import (
    configure_toast_launch_action,
    log_toast_dismissal,
    log_toast_failure,
)

logger = logging.getLogger(__name__)


class DesktopAlert:
    """Shows one toast naming every matching profile, then plays the alert sound."""

    def __init__(self, audio_path: Optional[Path] = None, app_name: str = "Steam Lookout"):
        self.audio_path = Path(audio_path) if audio_path else None
        self.toaster = WindowsToaster(app_name)

    def build_text_fields(self, matches: Sequence[TransitionEvent]) -> list[str]:
        first = matches[0].snapshot
        game_name = getattr(first.presence, "app_name", "") or "the target game"
        names = [event.snapshot.display_name[:25] for event in matches]
        if len(names) == 1:
            headline = f"{names[0]} is playing {game_name}"
        else:
            headline = f"{len(names)} watched players are playing {game_name}"
        return [headline, ", ".join(names)]

    def fire(self, matches: Sequence[TransitionEvent]) -> None:
        if not matches:
            return
        alert_toast = Toast(text_fields=self.build_text_fields(matches))
        alert_toast.duration = ToastDuration.Long
        alert_toast.on_dismissed = partial(log_toast_dismissal, logger=logger)
        alert_toast.on_failed = partial(log_toast_failure, logger=logger)
        configure_toast_launch_action(alert_toast, matches[0].id, logger)

        avatar_filepath = resolve_avatar_filepath(matches[0].snapshot.avatar_url)
        if avatar_filepath:
            alert_toast.AddImage(ToastDisplayImage.fromPath(avatar_filepath, position=ToastImagePosition.AppLogo))

        # Custom audio on the toast itself is ignored in some desktop contexts,
        # so the toast stays silent and the sound is played through MCI.
        has_custom_audio = self.audio_path is not None and self.audio_path.exists()
        if has_custom_audio:
            alert_toast.audio = ToastAudio(silent=True)

        try:
            self.toaster.show_toast(alert_toast)
        except OSError as exc:
            raise AlertSinkFailed(f"Could not show toast: {exc}") from exc

        if has_custom_audio:
            play_alert_audio(self.audio_path)
