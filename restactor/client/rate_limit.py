"""
================================================================================
Client-side Rate Limiting
================================================================================

Blocks the calling thread until the configured request rate allows another
network request. The sliding window and its thread-safe storage come from the
``limits`` library.

Usage:
    >>> limiter = RateLimiter(5)
    >>> limiter.acquire()  # returns immediately for the first 5 calls per second

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from fractions import Fraction
from typing import Tuple

import httpx
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from loguru import logger

from ..exceptions import ConfigurationError


RATE_LIMIT_KEY = "requests"

# Shortest sleep between permit checks
MIN_WAIT_SECONDS = 0.001


def _as_window(permits_per_second: float) -> Tuple[int, int]:
    """Express a (possibly fractional) rate as ``amount`` permits per ``seconds``."""
    ratio = Fraction(permits_per_second).limit_denominator(1000)
    return ratio.numerator, ratio.denominator


class RateLimiter:
    """
    Moving-window rate limiter shared by all requests of one client.

    Args:
        permits_per_second: Allowed request rate, must be positive
    """

    def __init__(self, permits_per_second: float) -> None:
        if permits_per_second is None or permits_per_second <= 0:
            raise ConfigurationError(
                f"Rate limit must be positive, got {permits_per_second!r}"
            )
        amount, seconds = _as_window(permits_per_second)
        if amount == 0:
            raise ConfigurationError(f"Rate limit is too small: {permits_per_second!r}")

        self.permits_per_second = permits_per_second
        self._item = RateLimitItemPerSecond(amount, seconds)
        self._limiter = MovingWindowRateLimiter(MemoryStorage())

    def try_acquire(self) -> bool:
        """Take a permit if one is available right now."""
        return self._limiter.hit(self._item, RATE_LIMIT_KEY)

    def acquire(self) -> float:
        """
        Block until a permit is available.

        Returns:
            Seconds spent waiting
        """
        started = time.monotonic()
        while not self.try_acquire():
            reset_time, _ = self._limiter.get_window_stats(self._item, RATE_LIMIT_KEY)
            wait_time = max(reset_time - time.time(), MIN_WAIT_SECONDS)
            logger.warning(
                f"Rate limit of {self.permits_per_second}/s reached. "
                f"Waiting {wait_time:.3f}s before sending"
            )
            time.sleep(wait_time)
        return time.monotonic() - started


class RateLimitedTransport(httpx.BaseTransport):
    """Transport wrapper acquiring a permit before every network request."""

    def __init__(self, transport: httpx.BaseTransport, limiter: RateLimiter) -> None:
        self._transport = transport
        self.limiter = limiter

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.limiter.acquire()
        return self._transport.handle_request(request)

    def close(self) -> None:
        self._transport.close()


__all__ = [
    "RateLimitedTransport",
    "RateLimiter",
]
