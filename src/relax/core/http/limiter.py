"""
Token Bucket Rate Limiter
=========================

Thread-safe token bucket used by ``Client.do`` when the limiter modifier
is requested.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from relax.core.exceptions import LimiterWaitError
from relax.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimiter:
    """
    Thread-safe rate limiter using token bucket algorithm.

    The bucket starts full, refills at ``requests_per_second`` tokens per
    second and never holds more than ``burst_size`` tokens.

    Thread Safety:
        All public methods use internal locking via ``threading.Lock``.
        Waiters reserve their tokens under the lock and sleep outside it,
        so concurrent callers are served in the order they reserved.

    Args:
        requests_per_second: Maximum sustained requests per second.
        burst_size: Maximum burst of requests allowed (default: 1).

    Example:
        >>> limiter = RateLimiter(requests_per_second=10.0, burst_size=10)
        >>> limiter.wait()  # Blocks if rate limit exceeded
        >>> # Make API request here
    """

    requests_per_second: float = 1.0
    burst_size: int = 1
    _tokens: float = field(default=0.0, init=False, repr=False)
    _last_update: float = field(default=0.0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        self._tokens = float(self.burst_size)
        self._last_update = time.monotonic()

    def _refill(self) -> None:
        # Caller holds the lock
        now = time.monotonic()
        elapsed = now - self._last_update
        self._tokens = min(self.burst_size, self._tokens + elapsed * self.requests_per_second)
        self._last_update = now

    def wait(
        self,
        tokens: int = 1,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> float:
        """
        Block until ``tokens`` tokens are available.

        Args:
            tokens: Number of tokens to acquire.
            timeout: Longest wait in seconds the caller accepts. None waits
                as long as needed.
            cancel: Event that aborts the wait when set.

        Returns:
            Time waited in seconds.

        Raises:
            LimiterWaitError: If tokens exceed the burst size, the wait would
                exceed ``timeout``, or ``cancel`` is set.
        """
        if tokens > self.burst_size:
            raise LimiterWaitError(
                f"relax: wait({tokens}) exceeds limiter's burst {self.burst_size}"
            )
        if cancel is not None and cancel.is_set():
            raise LimiterWaitError("relax: limiter wait cancelled")

        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return 0.0

            if self.requests_per_second <= 0:
                raise LimiterWaitError(
                    f"relax: wait({tokens}) can never be satisfied at a rate of 0"
                )
            wait_time = (tokens - self._tokens) / self.requests_per_second
            if timeout is not None and wait_time > timeout:
                raise LimiterWaitError(
                    f"relax: wait({tokens}) would take {wait_time:.3f}s, "
                    f"exceeding timeout of {timeout}s"
                )
            # Reserve now, pay with time below
            self._tokens -= tokens

        if cancel is None:
            time.sleep(wait_time)
        elif cancel.wait(wait_time):
            with self._lock:
                self._refill()
                self._tokens = min(self.burst_size, self._tokens + tokens)
            raise LimiterWaitError("relax: limiter wait cancelled")

        logger.debug(f"Rate limited, waited {wait_time:.3f}s")
        return wait_time

    def acquire(self, tokens: int = 1) -> float:
        """
        Acquire tokens, blocking if necessary.

        Args:
            tokens: Number of tokens to acquire.

        Returns:
            Time waited in seconds.
        """
        return self.wait(tokens)

    def try_acquire(self, tokens: int = 1) -> bool:
        """
        Try to acquire tokens without blocking.

        Args:
            tokens: Number of tokens to acquire.

        Returns:
            True if tokens were acquired, False otherwise.
        """
        with self._lock:
            self._refill()

            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def available(self) -> float:
        """Return the number of tokens currently in the bucket."""
        with self._lock:
            self._refill()
            return self._tokens
