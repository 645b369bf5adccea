"""Unit tests for cancel tokens and guarded awaits."""

from __future__ import annotations

import asyncio

import pytest

from tfe.cancel import CancelToken, guard
from tfe.errors import CanceledError, ErrorKind


class TestCancelToken:
    @pytest.mark.asyncio
    async def test_cancel(self):
        token = CancelToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled
        assert token.error().kind is ErrorKind.CANCELED
        assert str(token.error()) == "context canceled"

    @pytest.mark.asyncio
    async def test_deadline(self):
        token = CancelToken(timeout=0.01)
        await asyncio.sleep(0.02)
        assert token.cancelled
        assert token.remaining() == 0
        assert "deadline" in str(token.error())

    @pytest.mark.asyncio
    async def test_no_deadline(self):
        assert CancelToken().remaining() is None


class TestGuard:
    @pytest.mark.asyncio
    async def test_passthrough_without_token(self):
        async def work():
            return 42

        assert await guard(work(), None) == 42

    @pytest.mark.asyncio
    async def test_result_before_cancel(self):
        async def work():
            return "done"

        assert await guard(work(), CancelToken()) == "done"

    @pytest.mark.asyncio
    async def test_exception_propagates(self):
        async def work():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await guard(work(), CancelToken())

    @pytest.mark.asyncio
    async def test_already_cancelled_never_starts(self):
        started = False

        async def work():
            nonlocal started
            started = True

        token = CancelToken()
        token.cancel()
        with pytest.raises(CanceledError):
            await guard(work(), token)
        assert not started

    @pytest.mark.asyncio
    async def test_cancel_aborts_pending_work(self):
        aborted = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                aborted.set()
                raise

        token = CancelToken()
        asyncio.get_running_loop().call_later(0.02, token.cancel)
        with pytest.raises(CanceledError):
            await guard(work(), token)
        assert aborted.is_set()

    @pytest.mark.asyncio
    async def test_task_cancellation_waits_for_work_cleanup(self):
        cleaned_up = False
        started = asyncio.Event()

        async def work():
            nonlocal cleaned_up
            started.set()
            try:
                await asyncio.sleep(10)
            finally:
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                cleaned_up = True

        task = asyncio.ensure_future(guard(work(), CancelToken()))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert cleaned_up

    @pytest.mark.asyncio
    async def test_deadline_aborts_pending_work(self):
        with pytest.raises(CanceledError, match="deadline"):
            await guard(asyncio.sleep(10), CancelToken(timeout=0.02))
