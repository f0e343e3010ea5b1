from __future__ import annotations

from windows_toasts import ToastDismissedEventArgs, ToastFailedEventArgs

STEAM_PROFILE_URL = "steam://url/SteamIDPage/{steam_id}"
DISMISSAL_REASONS = {
    0: "UserCanceled",
    1: "ApplicationHidden",
    2: "TimedOut",
}


def configure_toast_launch_action(alert_toast, steam_id: str, logger) -> None:
    """Open the matching profile in the Steam client when the toast is clicked."""
    if not steam_id:
        logger.warning("No Steam ID for toast activation.")
        return
    # Protocol launch avoids depending on WinRT activation callbacks.
    alert_toast.launch_action = STEAM_PROFILE_URL.format(steam_id=steam_id)
    logger.debug("Toast launch action configured: %s", alert_toast.launch_action)


def log_toast_dismissal(dismissed_event_args: ToastDismissedEventArgs, logger) -> None:
    reason_value = int(dismissed_event_args.reason)
    logger.info("Alert toast dismissed: %s", DISMISSAL_REASONS.get(reason_value, reason_value))


def log_toast_failure(failed_event_args: ToastFailedEventArgs, logger) -> None:
    logger.error("Alert toast failed: %s", failed_event_args.reason)
