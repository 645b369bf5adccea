"""Unit tests for response header hooks."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tfe.errors import ResourceNotFoundError
from tfe.hooks import current_response_header_hook, response_header_hook


class TestResponseHeaderHook:
    def test_noop_outside_block(self):
        current_response_header_hook()(200, httpx.Headers())

    def test_nested_hooks_run_outer_first(self):
        calls: list[str] = []
        with response_header_hook(lambda s, h: calls.append("outer")):
            with response_header_hook(lambda s, h: calls.append("inner")):
                current_response_header_hook()(200, httpx.Headers())
            current_response_header_hook()(200, httpx.Headers())
        current_response_header_hook()(200, httpx.Headers())
        assert calls == ["outer", "inner", "outer"]

    @pytest.mark.asyncio
    async def test_hooks_are_per_task(self):
        seen: dict[str, list[int]] = {"a": [], "b": []}

        async def run(name: str, status: int) -> None:
            with response_header_hook(lambda s, h: seen[name].append(s)):
                await asyncio.sleep(0.01)
                current_response_header_hook()(status, httpx.Headers())

        await asyncio.gather(run("a", 200), run("b", 404))
        assert seen == {"a": [200], "b": [404]}

    @pytest.mark.asyncio
    async def test_sees_error_responses(self, client):
        statuses: list[int] = []
        with response_header_hook(lambda s, h: statuses.append(s)):
            with pytest.raises(ResourceNotFoundError):
                await client.organizations.read("missing")
        assert statuses == [404]
