"""
Exceptions
==========

Error types raised across the pipeline.

- SourceError: an upstream data provider could not be read
- NotificationError: a chat backend rejected or never received a message
- StoreError: a persisted JSON record could not be read
"""

from typing import Optional


class PoolwatchError(Exception):
    """Base class for all poolwatch errors."""


class SourceError(PoolwatchError):
    """Transport or application failure talking to a data provider."""


class SourceHTTPError(SourceError):
    """Data provider answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} from {url or 'upstream'}")

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class NotificationError(PoolwatchError):
    """A message could not be delivered to a chat backend."""


class NotifierHTTPError(NotificationError):
    """Chat backend answered with an error status or a failure payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StoreError(PoolwatchError):
    """A persisted record exists but cannot be decoded."""
