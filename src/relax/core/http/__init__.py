"""
HTTP Primitives
===============

Building blocks wrapped by ``relax.core.client.Client``.

Features:
- Thread-safe token bucket rate limiting with cancellable waits
- In-memory response cache with TTL support
- OAuth2 client-credentials bearer authentication
- Shared process-default session
"""

from .auth import ClientCredentials, ClientCredentialsAuth
from .cache import NO_EXPIRATION, ExpiringCache
from .limiter import RateLimiter
from .transport import get_default_session, reset_default_session

__all__ = [
    "ClientCredentials",
    "ClientCredentialsAuth",
    "ExpiringCache",
    "NO_EXPIRATION",
    "RateLimiter",
    "get_default_session",
    "reset_default_session",
]
