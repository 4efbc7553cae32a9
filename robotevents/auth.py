
"""
auth.py
Header helpers for RobotEvents API requests.

The v2 API expects a bearer token on every request; the token is read from
settings (ROBOTEVENTS_TOKEN) unless one is passed to the client directly.
"""

import os
from typing import Dict, Optional


def get_default_headers(token: Optional[str] = None) -> Dict[str, str]:
    """
    Return default headers for RobotEvents API requests.
    """
    headers = {
        "Accept": "application/json",
        "User-Agent": os.getenv("ROBOTEVENTS_USER_AGENT", "robotevents-client/1.0"),
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def attach_headers(session, token: Optional[str] = None) -> None:
    """
    Attach default headers to a requests.Session.
    """
    session.headers.update(get_default_headers(token))
