"""Terraform Enterprise / HCP Terraform API client.

Owns the connection pool, the rate limiter and the retry policy, and
builds :class:`~tfe.request.ClientRequest` objects for the resource
wrappers.

Usage::

    async with Client(TFEConfig(token="...")) as client:
        await client.ping()
        orgs = await client.organizations.list()
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from tfe import __version__
from tfe.config import TFEConfig
from tfe.errors import ConfigError, InvalidPathError
from tfe.hooks import response_header_hook
from tfe.jsonapi import CONTENT_TYPE_JSON, CONTENT_TYPE_JSONAPI, serialize_request_body
from tfe.query import encode_query_params, query_values
from tfe.ratelimit import RateLimiter
from tfe.request import ClientRequest
from tfe.resources import IPRanges, Organizations, Workspaces
from tfe.retry import RetryPolicy

logger = logging.getLogger("tfe.client")

USER_AGENT = f"tfe-python/{__version__}"

HEADER_RATE_LIMIT = "X-RateLimit-Limit"
HEADER_APP_NAME = "TFP-AppName"
HEADER_API_VERSION = "TFP-API-Version"
HEADER_TFE_VERSION = "X-TFE-Version"

# No-op endpoint used to read the API metadata headers.
PING_ENDPOINT = "ping"

APP_NAME_CLOUD = ("HCP Terraform", "Terraform Cloud")
APP_NAME_ENTERPRISE = "Terraform Enterprise"

METHODS = frozenset({"GET", "POST", "PATCH", "PUT", "DELETE"})
BODY_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})


def _base_url(address: str, path: str) -> httpx.URL:
    try:
        url = httpx.URL(address)
    except httpx.InvalidURL as e:
        raise ConfigError(f"invalid address {address!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"invalid address {address!r}: expected an http(s) URL")
    if not path.endswith("/"):
        path += "/"
    if not path.startswith("/"):
        path = "/" + path
    return httpx.URL(f"{url.scheme}://{url.netloc.decode('ascii')}{path}")


class Client:
    """The API client.

    One instance is meant to be shared by all tasks talking to the same
    server; the only state they share is the connection pool and the
    rate limiter.
    """

    def __init__(self, config: TFEConfig | None = None, **overrides: Any) -> None:
        config = (config or TFEConfig()).with_overrides(**overrides)
        if not config.token:
            raise ConfigError("missing API token")

        self._config = config
        self._token = config.token
        self._base_url = _base_url(config.address, config.base_path)
        self._registry_base_url = _base_url(config.address, config.registry_base_path)
        self._headers = {"User-Agent": USER_AGENT, **config.headers}

        self.retry = RetryPolicy(
            retry_max=config.retry_max,
            wait_min=config.retry_wait_min,
            wait_max=config.retry_wait_max,
            retry_server_errors=config.retry_server_errors,
            log_hook=config.retry_log_hook,
        )
        self.limiter = RateLimiter.from_limit(config.rate_limit)

        self._owns_http = config.http_client is None
        self._http = config.http_client or httpx.AsyncClient(
            timeout=config.timeout,
            follow_redirects=True,
        )

        # Filled in by ping().
        self.remote_api_version = ""
        self.remote_tfe_version = ""
        self.app_name = ""

        self.organizations = Organizations(self)
        self.workspaces = Workspaces(self)
        self.ip_ranges = IPRanges(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def registry_base_url(self) -> httpx.URL:
        return self._registry_base_url

    def retry_server_errors(self, retry: bool) -> None:
        """Also retry network errors and 5xx responses."""
        self.retry.retry_server_errors = retry

    def configure_limiter(self, raw_limit: str | None) -> None:
        """Replace the rate limiter using a server-advertised limit."""
        self.limiter = RateLimiter.from_limit(raw_limit)
        if self.limiter.limited:
            logger.debug(
                "Rate limiter configured: %.2f req/s, burst %d", self.limiter.rate, self.limiter.burst
            )

    async def ping(self, **kwargs: Any) -> None:
        """Read the API metadata headers and configure the rate limiter.

        Accepts the same keyword arguments as :meth:`ClientRequest.do`.
        """
        captured: dict[str, httpx.Headers] = {}

        def capture(status: int, headers: httpx.Headers) -> None:
            captured["headers"] = headers

        req = self.new_json_request("GET", PING_ENDPOINT)
        with response_header_hook(capture):
            await req.do(**kwargs)

        headers = captured.get("headers", httpx.Headers())
        self.remote_api_version = headers.get(HEADER_API_VERSION, "")
        self.remote_tfe_version = headers.get(HEADER_TFE_VERSION, "")
        self.app_name = headers.get(HEADER_APP_NAME, "")
        # Without a server limit the configured one stays in place.
        raw_limit = headers.get(HEADER_RATE_LIMIT, "")
        if raw_limit:
            self.configure_limiter(raw_limit)

    def is_cloud(self) -> bool:
        return self.app_name in APP_NAME_CLOUD

    def is_enterprise(self) -> bool:
        return self.app_name == APP_NAME_ENTERPRISE

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def _resolve(self, base: httpx.URL, path: str) -> httpx.URL:
        try:
            url = base.join(path)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidPathError(path, str(e)) from e
        if url.scheme != base.scheme or url.host != base.host or url.port != base.port:
            raise InvalidPathError(path, "resolves outside the configured address")
        return url

    def _build(
        self,
        base: httpx.URL,
        accept: str,
        method: str,
        path: str,
        v: Any,
        query: Any,
    ) -> ClientRequest:
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"unsupported HTTP method {method!r}")

        url = self._resolve(base, path)

        headers = dict(self._headers)
        headers["Authorization"] = f"Bearer {self._token}"
        headers["Accept"] = accept

        content: bytes | None = None
        # Keep any query string that came with the path.
        params: dict[str, list[str]] = {}
        for key, value in url.params.multi_items():
            params.setdefault(key, []).append(value)
        for key, values in query_values(query).items():
            params.setdefault(key, []).extend(values)
        if v is not None:
            if method == "GET":
                for key, values in query_values(v).items():
                    params.setdefault(key, []).extend(values)
            elif method in BODY_METHODS:
                content, headers["Content-Type"] = serialize_request_body(v)

        encoded = encode_query_params(params)
        if encoded:
            url = url.copy_with(query=encoded.encode("ascii"))

        request = self._http.build_request(method, url, headers=headers, content=content)
        return ClientRequest(request, self._http, self.limiter, self.retry)

    def new_request(self, method: str, path: str, v: Any = None, *, query: BaseModel | None = None) -> ClientRequest:
        """Build a JSON-API request against the API base path.

        Args:
            method: GET, POST, PATCH, PUT or DELETE.
            path: Path relative to the base path, e.g.
                ``"organizations/acme/workspaces"``.
            v: For GET, options encoded as query parameters; for the other
                methods, the body (a resource, a list of resources, or a
                plain pydantic model sent as JSON).
            query: Extra query options for non-GET requests.

        Raises:
            InvalidPathError: If *path* cannot be resolved against the base URL.
            InvalidRequestBodyError: If *v* cannot be serialized.
        """
        return self._build(self._base_url, CONTENT_TYPE_JSONAPI, method, path, v, query)

    def new_json_request(self, method: str, path: str, v: Any = None, *, query: BaseModel | None = None) -> ClientRequest:
        """Like :meth:`new_request` for endpoints that answer in plain JSON."""
        return self._build(self._base_url, CONTENT_TYPE_JSON, method, path, v, query)

    def new_registry_request(self, method: str, path: str, v: Any = None, *, query: BaseModel | None = None) -> ClientRequest:
        """Like :meth:`new_request`, relative to the registry base path."""
        return self._build(self._registry_base_url, CONTENT_TYPE_JSONAPI, method, path, v, query)

    async def upload_object(self, url: str, data: bytes, **kwargs: Any) -> None:
        """PUT raw bytes to a foreign URL, e.g. an archivist upload link.

        No Authorization header is sent and nothing is decoded.
        """
        try:
            target = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise InvalidPathError(url, str(e)) from e
        if not target.scheme or not target.host:
            raise InvalidPathError(url, "expected an absolute URL")

        headers = dict(self._headers)
        headers["Accept"] = "application/json, */*"
        headers["Content-Type"] = "application/octet-stream"
        request = self._http.build_request("PUT", target, headers=headers, content=data)
        await ClientRequest(request, self._http, self.limiter, self.retry).do(**kwargs)
