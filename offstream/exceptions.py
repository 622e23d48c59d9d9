"""Offstream exception classes."""

from typing import Optional


class OffstreamError(Exception):
    """Base class for all offstream exceptions."""


# Configuration and storage errors
class ConfigError(OffstreamError, ValueError):
    """Invalid or incomplete configuration."""


class StoreError(OffstreamError):
    """The film store could not be opened or initialized."""


# Remote API errors
class ApiError(OffstreamError):
    """The remote API returned something we cannot work with."""


class TransportError(ApiError):
    """An HTTP request to the remote API failed."""


class XsrfTokenError(ApiError):
    """The XSRF handshake failed or no token is available yet."""


class MalformedRecordError(ApiError, ValueError):
    """A remote payload did not have the expected shape."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


# Download errors
class DownloaderError(OffstreamError):
    """Base class for external acquisition tool failures."""


class DownloaderSpawnError(DownloaderError):
    """The acquisition tool could not be started."""


class DownloaderExitError(DownloaderError):
    """The acquisition tool exited with a non-zero status."""

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"Downloader exited with status {returncode}")


class FilmNotAcquirableError(OffstreamError):
    """A film lacks the data needed to build its download."""
