"""Retry eligibility and backoff for the request executor."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

import httpx

logger = logging.getLogger("tfe.retry")

HEADER_RATE_RESET = "X-RateLimit-Reset"

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})

# Called before each retry with the number of attempts made so far and the
# response that triggered the retry (None after a network error).
RetryLogHook = Callable[[int, "httpx.Response | None"], None]


@dataclass
class RetryPolicy:
    """When to retry a request and how long to wait in between.

    Rate-limited responses (429) are always retried.  Server errors (5xx)
    are retried only with ``retry_server_errors``.  Network errors are
    ambiguous, since the server may already have acted, so they are retried
    only with ``retry_server_errors`` and only for idempotent methods.
    """

    retry_max: int = 30
    wait_min: float = 0.1
    wait_max: float = 0.4
    retry_server_errors: bool = False
    log_hook: RetryLogHook | None = None

    @property
    def max_attempts(self) -> int:
        return self.retry_max + 1

    def should_retry_response(self, response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        return self.retry_server_errors and response.status_code >= 500

    def should_retry_error(self, method: str, exc: Exception) -> bool:
        return self.retry_server_errors and method.upper() in IDEMPOTENT_METHODS

    def backoff(self, attempt: int, response: httpx.Response | None) -> float:
        """Seconds to sleep before the next attempt.

        Args:
            attempt: Attempts made so far, starting at 1.
            response: The response that triggered the retry, if any.
        """
        if self.log_hook is not None:
            self.log_hook(attempt, response)

        if response is not None and response.status_code == 429:
            return rate_limit_backoff(self.wait_min, self.wait_max, response)

        delay = min(self.wait_max, self.wait_min * (2 ** (attempt - 1)))
        return delay * (0.5 + random.random() / 2)


def rate_limit_backoff(minimum: float, maximum: float, response: httpx.Response | None) -> float:
    """Wait until the server's rate-limit window resets, plus some jitter.

    The ``X-RateLimit-Reset`` header (seconds) raises the floor when it is
    longer than *minimum*.  Jitter in ``[0, maximum - minimum)`` keeps many
    clients from retrying at the same instant.
    """
    jitter = random.random() * max(0.0, maximum - minimum)

    if response is not None:
        raw = response.headers.get(HEADER_RATE_RESET, "")
        if raw:
            try:
                reset = float(raw)
            except ValueError:
                logger.warning("Ignoring unparsable %s header: %r", HEADER_RATE_RESET, raw)
            else:
                if reset > minimum:
                    minimum = reset

    return minimum + jitter
