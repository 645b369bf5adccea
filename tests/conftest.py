"""Shared fixtures: a fake TFE API and clients wired to it."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from tfe.client import Client

from tests.fakes import build_client, create_fake_api


@pytest.fixture
def fake_api() -> FastAPI:
    return create_fake_api()


@pytest_asyncio.fixture
async def client(fake_api: FastAPI):
    """A Client talking to the fake API through ASGITransport."""
    c = build_client(httpx.ASGITransport(app=fake_api))
    yield c
    await c._http.aclose()


@pytest.fixture
def mock_client() -> Callable[..., Client]:
    """Factory for a Client backed by ``httpx.MockTransport(handler)``."""

    def make(handler: Callable[[httpx.Request], Any], **config: Any) -> Client:
        return build_client(httpx.MockTransport(handler), **config)

    return make
