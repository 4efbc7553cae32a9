
"""
errors.py
Exception types raised by the robotevents client.

- RobotEventsError: base for everything raised by this package
- RobotEventsAPIError: transport failures (network, HTTP status, decode)
- NotFoundError: a resolver search returned no results
- InvalidArgumentError: caller passed an identifier/division of the wrong type
- PollError: a background poll failed (delivered to "error" listeners)
"""

from __future__ import annotations

from typing import Any, Optional


class RobotEventsError(Exception):
    """Base exception for robotevents errors."""


class RobotEventsAPIError(RobotEventsError):
    """Raised when the RobotEvents API returns an error or the request fails."""
    def __init__(self, message: str, status: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status = status
        self.url = url


# The transport error is what callers see for any network/HTTP/decode failure.
TransportError = RobotEventsAPIError


class NotFoundError(RobotEventsError):
    """No resource matched the requested identifier."""
    def __init__(self, message: str, identifier: Any = None):
        super().__init__(message)
        self.identifier = identifier


class InvalidArgumentError(RobotEventsError, ValueError):
    """An argument had the wrong type or was missing."""


class PollError(RobotEventsError):
    """A background poll failed. The underlying error is kept in ``cause``."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


__all__ = [
    "RobotEventsError",
    "RobotEventsAPIError",
    "TransportError",
    "NotFoundError",
    "InvalidArgumentError",
    "PollError",
]
