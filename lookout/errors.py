"""Exception types raised by the watch list and the polling engine."""


class LookoutError(Exception):
    """Base class for every error raised by this package."""


class InvalidFormat(LookoutError, ValueError):
    def __init__(self, steam_id):
        super().__init__(f"Invalid Steam ID format: {steam_id!r} (expected 17 digits)")
        self.steam_id = steam_id


class AlreadyWatched(LookoutError):
    def __init__(self, steam_id):
        super().__init__(f"Profile already added: {steam_id}")
        self.steam_id = steam_id


class ProfileFetchError(LookoutError):
    """One profile could not be fetched or normalized."""

    def __init__(self, steam_id, message: str, status_code=None):
        super().__init__(f"{steam_id}: {message}")
        self.steam_id = steam_id
        self.status_code = status_code


class FetchCycleFailed(LookoutError):
    """A poll cycle was discarded because at least one fetch failed."""

    def __init__(self, cause: BaseException, failed_ids=()):
        super().__init__(f"Error fetching profiles: {cause}")
        self.cause = cause
        self.failed_ids = tuple(failed_ids)


class AlertSinkFailed(LookoutError):
    """The alert could not be shown or played. Never fatal to a cycle."""
