"""
Runtime settings for offstream.

Values come from the process environment after `.env` has been loaded with
python-dotenv. Command line flags override individual fields through
`Settings.with_overrides`.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

from offstream.exceptions import ConfigError


DEFAULT_DATABASE_URL = "sqlite:///films.db"
DEFAULT_VIDEO_URL_TEMPLATE = "https://player.vimeo.com/video/{vimeo_id}?app_id=122963"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Configuration for a sync/download run"""

    # Store
    database_url: str = DEFAULT_DATABASE_URL

    # Remote API
    api_base_url: str = "https://api.offstream.dk"
    api_origin: str = "https://offstream.dk"
    request_timeout: float = 30.0
    fetch_delay: float = 1.0  # courtesy delay between record fetches, in seconds

    # Acquisition tool
    download_dir: str = "films"
    downloader: str = "youtube-dl"
    download_referer: str = "https://offstream.dk/"
    video_url_template: str = DEFAULT_VIDEO_URL_TEMPLATE

    # Pipeline stages to run, in order
    stages: tuple = field(default=("sync", "download"))

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from `.env` and the process environment."""
        load_dotenv()
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL") or defaults.database_url,
            api_base_url=os.getenv("API_BASE_URL") or defaults.api_base_url,
            api_origin=os.getenv("API_ORIGIN") or defaults.api_origin,
            request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
            fetch_delay=_env_float("FETCH_DELAY", defaults.fetch_delay),
            download_dir=os.getenv("DOWNLOAD_DIR") or defaults.download_dir,
            downloader=os.getenv("DOWNLOADER") or defaults.downloader,
            download_referer=os.getenv("DOWNLOAD_REFERER") or defaults.download_referer,
            video_url_template=os.getenv("VIDEO_URL_TEMPLATE")
            or defaults.video_url_template,
        )

    def with_overrides(self, **overrides: Optional[object]) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
