import logging
import urllib.parse
import urllib.request
from pathlib import Path

from lookout.config import PACKAGE_DIR

AVATARS_DIR = PACKAGE_DIR / "avatars"
DOWNLOAD_TIMEOUT = 3.0

logger = logging.getLogger(__name__)


def avatar_url_to_path(avatar_url: str, avatars_dir: Path = AVATARS_DIR) -> Path:
    parsed = urllib.parse.urlparse(avatar_url)
    filename = Path(parsed.path).name
    if not filename:
        filename = urllib.parse.quote(avatar_url, safe="")
    return avatars_dir / filename


def resolve_avatar_filepath(avatar_url: str, avatars_dir: Path = AVATARS_DIR, download=None):
    """Return a local copy of the avatar, downloading it once. None if unavailable."""
    if not avatar_url:
        return None

    avatar_path = avatar_url_to_path(avatar_url, avatars_dir=avatars_dir)
    if avatar_path.exists():
        return str(avatar_path)

    download = download or download_image
    try:
        return download(avatar_url, filepath=str(avatar_path))
    except (OSError, ValueError) as e:
        logger.warning("Could not download avatar %s: %s", avatar_url, e)
        return None


def download_image(url, filepath, timeout=DOWNLOAD_TIMEOUT):
    # Runs inside an alert on the event loop thread, so it must give up quickly.
    with urllib.request.urlopen(url, timeout=timeout) as response:
        data = response.read()
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return str(path.resolve())
