"""Strava API exceptions.

Sync failures end up as ``SyncLog.error_message``, so messages are written
to be readable there.
"""

from typing import Optional


class StravaException(Exception):
    """Base exception for Strava API errors.

    Attributes
    ----------
    status_code : int | None
        HTTP status of the failed response; None when no response was involved
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ObjectNotFound(StravaException):
    """Raised when a requested object is not found (404)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class AccessUnauthorized(StravaException):
    """Raised when Strava rejects the access token (401)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=401)


class RateLimitExceeded(StravaException):
    """Raised when a rate limit window is exhausted.

    ``retry_after`` is the number of seconds until the window resets, when known.
    """

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class TokenExpired(StravaException):
    """Raised when an athlete's token could not be refreshed."""
