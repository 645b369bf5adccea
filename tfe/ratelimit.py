"""Token-bucket rate limiter shared by all requests of one client."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass

from tfe.cancel import CancelToken, guard
from tfe.errors import CanceledError

logger = logging.getLogger("tfe.ratelimit")

INF = math.inf


@dataclass
class Reservation:
    """A token handed out by :meth:`RateLimiter.reserve`.

    ``delay`` is how long the holder must wait before acting on it.
    """

    limiter: RateLimiter
    delay: float
    _returned: bool = False

    def cancel(self) -> None:
        """Give the token back, e.g. when the caller gave up waiting."""
        if not self._returned:
            self._returned = True
            self.limiter._restore()


class RateLimiter:
    """Token bucket with a fill ``rate`` (tokens/second) and a ``burst`` size.

    Tokens are reserved under a lock, so concurrent callers never spend the
    same token.  A reservation may drive the bucket negative; later callers
    then queue behind it, which keeps acquisition roughly first-come
    first-served.  ``rate=INF`` disables limiting.
    """

    def __init__(self, rate: float = INF, burst: int = 0) -> None:
        if rate != INF:
            if rate <= 0:
                raise ValueError(f"rate must be positive, got {rate}")
            if burst < 1:
                raise ValueError(f"burst must be at least 1 with a finite rate, got {burst}")
        self.rate = rate
        self.burst = burst
        self._tokens = float(burst)
        self._last = time.monotonic()
        self._lock = threading.Lock()

    @classmethod
    def from_limit(cls, raw_limit: str | float | None) -> RateLimiter:
        """Build a limiter from a server-advertised requests/second limit.

        Two thirds of the limit become the steady fill rate and one third
        the burst, so a client can burst a third of its allowance before
        the remaining calls are spread evenly.  An empty, zero or
        unparsable limit yields an unlimited limiter.
        """
        if raw_limit is None or raw_limit == "":
            return cls()
        try:
            limit = float(raw_limit)
        except ValueError:
            logger.warning("Ignoring unparsable rate limit %r", raw_limit)
            return cls()
        if limit <= 0 or math.isnan(limit) or math.isinf(limit):
            return cls()
        return cls(rate=limit * 0.66, burst=max(1, int(limit * 0.33)))

    @property
    def limited(self) -> bool:
        return self.rate != INF

    def _advance(self, now: float) -> float:
        elapsed = max(0.0, now - self._last)
        return min(float(self.burst), self._tokens + elapsed * self.rate)

    def reserve(self, max_wait: float | None = None) -> Reservation | None:
        """Take one token now.

        Returns ``None`` without taking anything when the token would not be
        available within ``max_wait`` seconds.
        """
        if not self.limited:
            return Reservation(self, 0.0, _returned=True)
        with self._lock:
            now = time.monotonic()
            tokens = self._advance(now) - 1
            delay = -tokens / self.rate if tokens < 0 else 0.0
            if max_wait is not None and delay > max_wait:
                return None
            self._tokens = tokens
            self._last = now
        return Reservation(self, delay)

    def _restore(self) -> None:
        with self._lock:
            now = time.monotonic()
            self._tokens = min(float(self.burst), self._advance(now) + 1)
            self._last = now

    async def wait(self, cancel: CancelToken | None = None) -> None:
        """Block until a token is available.

        Raises:
            CanceledError: If *cancel* fires first, or its deadline is too
                close for a token to become available.
        """
        if cancel is not None:
            cancel.raise_if_cancelled()
        max_wait = cancel.remaining() if cancel is not None else None
        reservation = self.reserve(max_wait)
        if reservation is None:
            raise CanceledError("rate limiter wait would exceed context deadline")
        if reservation.delay <= 0:
            return

        logger.debug("Rate limited, waiting %.3fs for a token", reservation.delay)
        try:
            await guard(asyncio.sleep(reservation.delay), cancel)
        except (CanceledError, asyncio.CancelledError):
            reservation.cancel()
            raise
