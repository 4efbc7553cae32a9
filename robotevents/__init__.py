
"""
robotevents
Public package entry point for the robotevents client library.

Exposes:
- RobotEventsClient and the default-client helpers
- events / teams resource modules (handles, search, resolvers)
- WatchableCollection and Watchable
- error types
- __version__
"""


from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("robotevents-client")
except PackageNotFoundError:  # not installed (local usage)
    __version__ = "0.0.0"

from . import events, teams
from .client import RobotEventsClient, get_default_client, set_default_client
from .config import Settings, get_settings
from .errors import (
    InvalidArgumentError,
    NotFoundError,
    PollError,
    RobotEventsAPIError,
    RobotEventsError,
    TransportError,
)
from .events import Event
from .teams import Team
from .watchable import ListRequest, Watchable, WatchableCollection

__all__ = [
    "__version__",
    "events",
    "teams",
    "Event",
    "Team",
    "RobotEventsClient",
    "get_default_client",
    "set_default_client",
    "Settings",
    "get_settings",
    "Watchable",
    "WatchableCollection",
    "ListRequest",
    "RobotEventsError",
    "RobotEventsAPIError",
    "TransportError",
    "NotFoundError",
    "InvalidArgumentError",
    "PollError",
]
