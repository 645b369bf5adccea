"""Unit tests for the token-bucket rate limiter."""

from __future__ import annotations

import asyncio
import time

import pytest

from tfe.cancel import CancelToken
from tfe.errors import CanceledError
from tfe.ratelimit import INF, RateLimiter


class TestFromLimit:
    def test_split_two_thirds_one_third(self):
        limiter = RateLimiter.from_limit("30")
        assert limiter.rate == pytest.approx(19.8)
        assert limiter.burst == 9

    def test_small_limit_keeps_burst_of_one(self):
        limiter = RateLimiter.from_limit("2")
        assert limiter.burst == 1

    @pytest.mark.parametrize("raw", ["", None, "0", "-5", "abc"])
    def test_disabled(self, raw):
        limiter = RateLimiter.from_limit(raw)
        assert limiter.rate == INF
        assert not limiter.limited

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            RateLimiter(rate=0, burst=1)
        with pytest.raises(ValueError):
            RateLimiter(rate=10, burst=0)


class TestReserve:
    def test_burst_then_delay(self):
        limiter = RateLimiter(rate=10, burst=2)
        assert limiter.reserve().delay == 0
        assert limiter.reserve().delay == 0
        third = limiter.reserve()
        assert third.delay == pytest.approx(0.1, abs=0.02)

    def test_reservations_queue(self):
        limiter = RateLimiter(rate=10, burst=1)
        limiter.reserve()
        second = limiter.reserve()
        third = limiter.reserve()
        assert third.delay > second.delay

    def test_max_wait_does_not_take_token(self):
        limiter = RateLimiter(rate=1, burst=1)
        limiter.reserve()
        assert limiter.reserve(max_wait=0.01) is None
        # The refused call left the bucket as it was.
        assert limiter.reserve().delay == pytest.approx(1.0, abs=0.05)

    def test_cancel_returns_token(self):
        limiter = RateLimiter(rate=1, burst=1)
        limiter.reserve()
        waiting = limiter.reserve()
        waiting.cancel()
        waiting.cancel()
        assert limiter.reserve().delay == pytest.approx(1.0, abs=0.05)

    def test_unlimited(self):
        limiter = RateLimiter()
        for _ in range(1000):
            assert limiter.reserve().delay == 0


class TestWait:
    @pytest.mark.asyncio
    async def test_wait_sleeps_for_token(self):
        limiter = RateLimiter(rate=20, burst=1)
        await limiter.wait()
        start = time.monotonic()
        await limiter.wait()
        assert time.monotonic() - start >= 0.03

    @pytest.mark.asyncio
    async def test_already_cancelled(self):
        limiter = RateLimiter(rate=1, burst=1)
        token = CancelToken()
        token.cancel()
        with pytest.raises(CanceledError):
            await limiter.wait(token)
        # No token was spent.
        assert limiter.reserve().delay == 0

    @pytest.mark.asyncio
    async def test_cancel_while_waiting(self):
        limiter = RateLimiter(rate=0.5, burst=1)
        limiter.reserve()
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)

        start = time.monotonic()
        with pytest.raises(CanceledError):
            await limiter.wait(token)
        assert time.monotonic() - start < 1.0

    @pytest.mark.asyncio
    async def test_deadline_too_short(self):
        limiter = RateLimiter(rate=0.5, burst=1)
        limiter.reserve()
        with pytest.raises(CanceledError, match="deadline"):
            await limiter.wait(CancelToken(timeout=0.05))

    @pytest.mark.asyncio
    async def test_concurrent_waiters_do_not_share_tokens(self):
        limiter = RateLimiter(rate=50, burst=2)
        granted: list[float] = []

        async def take():
            await limiter.wait()
            granted.append(time.monotonic())

        start = time.monotonic()
        await asyncio.gather(*(take() for _ in range(6)))
        assert len(granted) == 6
        # Two come from the burst, the other four need 1/50s each.
        assert max(granted) - start >= 0.07
