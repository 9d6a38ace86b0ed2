"""
relax - HTTP client with optional caching and rate limiting
===========================================================

Version: 0.1.0
"""

__version__ = "0.1.0"

from relax.core.client import (
    Client,
    ClientConfig,
    from_config,
    from_credentials,
    from_default_session,
    from_session,
    new,
    with_cache,
    with_default_cache,
    with_default_limiter,
    with_default_timeout,
    with_limiter,
    with_timeout,
)
from relax.core.exceptions import (
    ConfigurationError,
    LimiterWaitError,
    RelaxError,
    TransportError,
)
from relax.core.http import ClientCredentials, ExpiringCache, RateLimiter
from relax.core.modifiers import Modifiers, modifiers, use_cache, use_limiter

__all__ = [
    "__version__",
    # Client
    "Client",
    "ClientConfig",
    "new",
    "from_session",
    "from_default_session",
    "from_config",
    "from_credentials",
    "with_timeout",
    "with_default_timeout",
    "with_cache",
    "with_default_cache",
    "with_limiter",
    "with_default_limiter",
    # Modifiers
    "Modifiers",
    "modifiers",
    "use_cache",
    "use_limiter",
    # Primitives
    "ClientCredentials",
    "ExpiringCache",
    "RateLimiter",
    # Errors
    "RelaxError",
    "ConfigurationError",
    "TransportError",
    "LimiterWaitError",
]
