"""
Client
======

HTTP client that optionally adds response caching, token bucket rate
limiting, request timeouts and OAuth2 client-credentials authentication
on top of a ``requests.Session``.

A client is assembled once from a transport selector and any number of
features, then used for many calls. Each call opts into caching or rate
limiting with request modifiers.

Example:
    >>> client = new(
    ...     from_default_session(),
    ...     with_default_cache(),
    ...     with_limiter(10, 10),
    ... )
    >>> response = client.get("https://api.example.com/items", use_cache(), use_limiter())
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import requests
from oauthlib.oauth2 import OAuth2Error

from relax.core.exceptions import ConfigurationError, TransportError
from relax.core.http.auth import ClientCredentials
from relax.core.http.cache import DEFAULT_CLEANUP_INTERVAL, DEFAULT_EXPIRATION, ExpiringCache
from relax.core.http.limiter import RateLimiter
from relax.core.http.transport import get_default_session, is_default_session
from relax.core.logger import get_logger
from relax.core.modifiers import Modifier, modifiers, use_limiter

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_LIMIT = 10.0
DEFAULT_BURST = 10


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class ClientConfig:
    """
    Settings a client is built from.

    Attributes:
        transport: Session used to send requests
        credentials: OAuth2 credentials the transport authenticates with
        cache: Response cache, keyed by URL
        limiter: Rate limiter for outgoing requests
        timeout: Timeout in seconds applied to every request
    """

    transport: Optional[requests.Session] = None
    credentials: Optional[ClientCredentials] = None
    cache: Optional[ExpiringCache] = None
    limiter: Optional[RateLimiter] = None
    timeout: Optional[float] = None


ClientOption = Callable[[ClientConfig], None]


# Transport selectors


def from_session(session: requests.Session) -> ClientOption:
    """Build the client on an existing session."""

    def apply(config: ClientConfig) -> None:
        config.transport = session

    return apply


def from_default_session() -> ClientOption:
    """Build the client on the process-default session."""
    return from_session(get_default_session())


def from_config(credentials: ClientCredentials) -> ClientOption:
    """Build the client on a session authenticated with OAuth2 client credentials."""

    def apply(config: ClientConfig) -> None:
        config.credentials = credentials
        config.transport = credentials.session()

    return apply


def from_credentials(api_key: str, api_key_secret: str, token_url: str) -> ClientOption:
    """Build the client from an API key, its secret and the token endpoint URL."""
    return from_config(
        ClientCredentials(client_id=api_key, client_secret=api_key_secret, token_url=token_url)
    )


# Features


def with_timeout(timeout: float) -> ClientOption:
    """Time out requests after ``timeout`` seconds."""

    def apply(config: ClientConfig) -> None:
        config.timeout = timeout

    return apply


def with_default_timeout() -> ClientOption:
    """Time out requests after 5 seconds."""
    return with_timeout(DEFAULT_TIMEOUT)


def with_cache(
    default_expiration: float, cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL
) -> ClientOption:
    """Keep responses in a cache with the given expiration and cleanup interval (seconds)."""

    def apply(config: ClientConfig) -> None:
        config.cache = ExpiringCache(
            default_expiration=default_expiration, cleanup_interval=cleanup_interval
        )

    return apply


def with_default_cache() -> ClientOption:
    """Keep responses for 5 minutes, sweeping expired ones every 10 minutes."""
    return with_cache(DEFAULT_EXPIRATION, DEFAULT_CLEANUP_INTERVAL)


def with_limiter(limit: float, burst: int) -> ClientOption:
    """Allow ``limit`` requests per second with bursts of up to ``burst``."""

    def apply(config: ClientConfig) -> None:
        config.limiter = RateLimiter(requests_per_second=limit, burst_size=burst)

    return apply


def with_default_limiter() -> ClientOption:
    """Allow 10 requests per second with bursts of up to 10."""
    return with_limiter(DEFAULT_LIMIT, DEFAULT_BURST)


def new(selector: ClientOption, *features: ClientOption) -> "Client":
    """
    Create a client from a transport selector and optional features.

    Features are applied in order; applying the same feature twice keeps
    the last value.

    Args:
        selector: One of ``from_session``, ``from_default_session``,
            ``from_config`` or ``from_credentials``
        *features: Any of the ``with_*`` options

    Returns:
        The configured client
    """
    config = ClientConfig()
    selector(config)
    for feature in features:
        feature(config)
    return Client.from_client_config(config)


# =============================================================================
# Client
# =============================================================================


class Client:
    """
    HTTP client with optional caching, rate limiting and timeouts.

    Caching and rate limiting are only applied to calls that request them
    with ``use_cache()`` / ``use_limiter()``. Requesting either on a client
    built without it raises ``ConfigurationError``.

    Args:
        transport: Session used to send requests.
        credentials: OAuth2 credentials behind ``transport``, if any.
        cache: Response cache for ``get()``.
        limiter: Rate limiter for ``do()`` and ``get()``.
        timeout: Timeout in seconds passed with every request.

    Example:
        >>> client = Client(requests.Session(), limiter=RateLimiter(5.0, 5))
        >>> client.do(requests.Request("POST", url, json=body), use_limiter())
    """

    def __init__(
        self,
        transport: Optional[requests.Session] = None,
        credentials: Optional[ClientCredentials] = None,
        cache: Optional[ExpiringCache] = None,
        limiter: Optional[RateLimiter] = None,
        timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.credentials = credentials
        self.cache = cache
        self.limiter = limiter
        self.timeout = timeout

    @classmethod
    def from_client_config(cls, config: ClientConfig) -> "Client":
        """Create a client from a ``ClientConfig``."""
        return cls(
            transport=config.transport,
            credentials=config.credentials,
            cache=config.cache,
            limiter=config.limiter,
            timeout=config.timeout,
        )

    def do(
        self,
        request: Union[requests.Request, requests.PreparedRequest],
        *mods: Modifier,
        cancel: Optional[threading.Event] = None,
        **send_kwargs: Any,
    ) -> requests.Response:
        """
        Send a request and return the response.

        The response is returned as received; status codes are not
        interpreted. Caching is never applied here.

        Args:
            request: Request to send. A ``requests.Request`` is prepared with
                the transport so its headers and auth apply; a prepared request
                gets only the transport auth, applied to a copy.
            *mods: Request modifiers; only ``use_limiter`` has an effect.
            cancel: Event that aborts a pending limiter wait when set.
            **send_kwargs: Passed to ``requests.Session.send`` (``stream``,
                ``verify``, ``timeout``...).

        Returns:
            The HTTP response.

        Raises:
            ConfigurationError: If there is no transport, or the limiter was
                requested but not configured.
            LimiterWaitError: If the limiter wait fails.
            TransportError: If the request could not be prepared, authenticated
                or sent.
        """
        mod = modifiers(*mods)
        if mod.use_limiter and self.limiter is None:
            raise ConfigurationError("relax: limiter not defined")
        if self.transport is None:
            raise ConfigurationError("relax: transport not defined")

        if mod.use_limiter:
            self.limiter.wait(cancel=cancel)

        prepared = None
        try:
            if isinstance(request, requests.Request):
                prepared = self.transport.prepare_request(request)
            elif self.transport.auth is not None:
                # Session auth is only applied by prepare_request
                prepared = self.transport.auth(request.copy())
            else:
                prepared = request

            settings = self.transport.merge_environment_settings(
                prepared.url,
                send_kwargs.pop("proxies", {}),
                send_kwargs.pop("stream", None),
                send_kwargs.pop("verify", None),
                send_kwargs.pop("cert", None),
            )
            settings.update(send_kwargs)
            settings.setdefault("timeout", self.timeout)

            return self.transport.send(prepared, **settings)
        except (requests.RequestException, OAuth2Error) as e:
            sent = prepared or request
            raise TransportError(
                f"relax: {sent.method} {sent.url} failed: {e}", request=prepared
            ) from e

    def get(
        self,
        url: str,
        *mods: Modifier,
        cancel: Optional[threading.Event] = None,
    ) -> requests.Response:
        """
        Issue a GET request, optionally through the cache.

        With ``use_cache()`` a cached response for ``url`` is returned
        without consulting the limiter; otherwise the response is fetched
        and stored under ``url``. The URL is used as the cache key verbatim.

        Args:
            url: URL to fetch.
            *mods: Request modifiers (``use_cache``, ``use_limiter``).
            cancel: Event that aborts a pending limiter wait when set.

        Returns:
            The HTTP response.

        Raises:
            ConfigurationError: If a requested cache or limiter is missing.
            LimiterWaitError: If the limiter wait fails.
            TransportError: If the request could not be prepared, authenticated
                or sent.
        """
        mod = modifiers(*mods)
        if mod.use_cache:
            if self.cache is None:
                raise ConfigurationError("relax: cache not defined")
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug(f"Cache hit for {url}")
                return cached

        response = self.do(requests.Request("GET", url), use_limiter(mod.use_limiter), cancel=cancel)

        if mod.use_cache:
            self.cache.set_default(url, response)
            logger.debug(f"Cached response for {url}")

        return response

    def close(self) -> None:
        """Close the transport, unless it is the shared default session."""
        if self.transport is not None and not is_default_session(self.transport):
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
