"""
Default Transport
=================

The process-wide ``requests.Session`` used by clients built with
``from_default_session()``.
"""

from typing import Optional

import requests

_default_session: Optional[requests.Session] = None


def get_default_session() -> requests.Session:
    """Return the shared default session, creating it on first use."""
    global _default_session
    if _default_session is None:
        _default_session = requests.Session()
    return _default_session


def reset_default_session() -> None:
    """Close and forget the shared default session."""
    global _default_session
    if _default_session is not None:
        _default_session.close()
    _default_session = None


def is_default_session(session: requests.Session) -> bool:
    """Return True if ``session`` is the shared default session."""
    return session is not None and session is _default_session
