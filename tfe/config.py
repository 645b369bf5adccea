"""Client configuration -- explicit values > TFE_* env vars > defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

import httpx

from tfe.retry import RetryLogHook

DEFAULT_ADDRESS = "https://app.terraform.io"
DEFAULT_BASE_PATH = "/api/v2/"
DEFAULT_REGISTRY_PATH = "/api/registry/"


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key) or default


def _env_bool(key: str) -> bool:
    return _env(key).lower() in ("true", "1", "yes")


@dataclass
class TFEConfig:
    """Configuration for a :class:`~tfe.client.Client`."""

    # Connection
    address: str = field(default_factory=lambda: _env("TFE_ADDRESS", DEFAULT_ADDRESS))
    base_path: str = field(default_factory=lambda: _env("TFE_BASE_PATH", DEFAULT_BASE_PATH))
    registry_base_path: str = field(
        default_factory=lambda: _env("TFE_REGISTRY_BASE_PATH", DEFAULT_REGISTRY_PATH)
    )
    token: str = field(default_factory=lambda: _env("TFE_TOKEN"))
    timeout: float = field(default_factory=lambda: float(_env("TFE_TIMEOUT", "30.0")))

    # Headers added to every request.
    headers: dict[str, str] = field(default_factory=dict)

    # A custom transport client; the Client will not close it.
    http_client: httpx.AsyncClient | None = None

    # Retries
    retry_server_errors: bool = field(default_factory=lambda: _env_bool("TFE_RETRY_SERVER_ERRORS"))
    retry_max: int = field(default_factory=lambda: int(_env("TFE_RETRY_MAX", "30")))
    retry_wait_min: float = field(default_factory=lambda: float(_env("TFE_RETRY_WAIT_MIN", "0.1")))
    retry_wait_max: float = field(default_factory=lambda: float(_env("TFE_RETRY_WAIT_MAX", "0.4")))
    retry_log_hook: RetryLogHook | None = None

    # Requests per second; empty means unlimited until the server says otherwise.
    rate_limit: str = field(default_factory=lambda: _env("TFE_RATE_LIMIT"))

    def with_overrides(self, **changes) -> TFEConfig:
        """Return a copy with the non-empty *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v not in (None, "")})
