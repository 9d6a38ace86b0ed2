"""
Exception Classes
=================

Errors raised by the relax client. Every error reaches the caller of
``Client.do`` / ``Client.get``; the client never retries or swallows them.
"""

from typing import Optional

import requests


class RelaxError(Exception):
    """Base class for all errors raised by relax."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(RelaxError):
    """
    Raised when a call needs a subsystem the client was built without.

    Requesting the cache modifier on a client with no cache, the limiter
    modifier on a client with no limiter, or dispatching on a client with
    no transport all end here.
    """

    def __init__(self, message: str = "relax: client is not configured") -> None:
        super().__init__(message)


class TransportError(RelaxError):
    """
    Raised when the underlying HTTP call fails (network, DNS, TLS, timeout).

    The original ``requests`` exception is chained as ``__cause__``.

    Attributes:
        message (str): Explanation of the error
        request: The request that was being sent, when known
    """

    def __init__(
        self,
        message: str = "relax: transport failed",
        request: Optional[requests.PreparedRequest] = None,
    ) -> None:
        super().__init__(message)
        self.request = request


class LimiterWaitError(RelaxError):
    """
    Raised when waiting on the rate limiter fails.

    This happens when the wait is cancelled, when the wait would run past
    its deadline, or when more tokens are requested than the bucket can
    ever hold.
    """

    def __init__(self, message: str = "relax: limiter wait failed") -> None:
        super().__init__(message)
