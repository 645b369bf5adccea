"""Explicit cancellation for in-flight requests.

A :class:`CancelToken` is passed down through the limiter wait, the send
and the body read.  Each of those suspension points is raced against the
token with :func:`guard`, which aborts the pending operation and raises
:class:`~tfe.errors.CanceledError` once the token fires or its deadline
passes.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any, Awaitable, TypeVar

from tfe.errors import CanceledError

T = TypeVar("T")


class CancelToken:
    """Cancellation signal with an optional deadline.

    Usage::

        token = CancelToken(timeout=10)
        org = await client.organizations.read("acme", cancel=token)

        # from another task
        token.cancel()
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = asyncio.Event()
        self._reason = ""
        self.deadline: float | None = None
        if timeout is not None:
            self.deadline = time.monotonic() + timeout

    def cancel(self, reason: str = "context canceled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds until the deadline, or ``None`` without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def error(self) -> CanceledError:
        if self._event.is_set():
            return CanceledError(self._reason)
        return CanceledError("context deadline exceeded")

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise self.error()

    async def wait(self) -> None:
        """Block until the token is cancelled or its deadline passes."""
        remaining = self.remaining()
        if remaining is None:
            await self._event.wait()
            return
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._event.wait(), timeout=remaining)


async def guard(aw: Awaitable[T], cancel: CancelToken | None) -> T:
    """Await *aw*, aborting it if *cancel* fires first."""
    if cancel is None:
        return await aw
    if cancel.cancelled:
        # Close an unstarted coroutine so it does not warn about never being awaited.
        if asyncio.iscoroutine(aw):
            aw.close()
        raise cancel.error()

    work: asyncio.Future[Any] = asyncio.ensure_future(aw)
    watcher = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await work
        raise
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    if work.done():
        return work.result()

    work.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await work
    raise cancel.error()
