"""Execution of a built request: rate limit, retry, decode."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from tfe import jsonapi
from tfe.cancel import CancelToken, guard
from tfe.errors import (
    InvalidIncludeValueError,
    MalformedResponseError,
    ResourceNotFoundError,
    TransportFailureError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from tfe.hooks import current_response_header_hook
from tfe.ratelimit import RateLimiter
from tfe.retry import RetryPolicy

logger = logging.getLogger("tfe.request")


class DestinationKind(Enum):
    NONE = "none"
    RAW = "raw"
    RESOURCE = "resource"
    COLLECTION = "collection"
    JSON = "json"


def resolve_destination(dest: Any) -> DestinationKind:
    """Work out how a response body should be delivered to *dest*.

    Accepted destinations: ``None``; any object with a ``write`` method (the
    raw body is copied into it); a :class:`~tfe.jsonapi.Resource` class; a
    :class:`~tfe.jsonapi.ResourceList` class; or any other pydantic model
    class, decoded as plain JSON.
    """
    if dest is None:
        return DestinationKind.NONE
    if isinstance(dest, type):
        if issubclass(dest, jsonapi.ResourceList):
            return DestinationKind.COLLECTION
        if issubclass(dest, jsonapi.Resource):
            return DestinationKind.RESOURCE
        if issubclass(dest, BaseModel):
            return DestinationKind.JSON
    elif callable(getattr(dest, "write", None)):
        return DestinationKind.RAW
    raise TypeError(f"{dest!r} must be a model class or have a write() method")


class ClientRequest:
    """A single request, built by the client and executed with :meth:`do`.

    The request is built once; every retry resends the same method, URL,
    headers and body bytes.
    """

    def __init__(
        self,
        request: httpx.Request,
        http: httpx.AsyncClient,
        limiter: RateLimiter | None,
        retry: RetryPolicy,
    ) -> None:
        self._request = request
        self._http = http
        self._limiter = limiter
        self._retry = retry

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def url(self) -> httpx.URL:
        return self._request.url

    @property
    def headers(self) -> httpx.Headers:
        return self._request.headers

    @property
    def content(self) -> bytes:
        return self._request.content

    async def do(self, dest: Any = None, *, cancel: CancelToken | None = None) -> Any:
        """Send the request and decode the response into *dest*.

        Returns:
            ``None`` when nothing is decoded (no destination, raw sink, 304,
            empty body), otherwise the decoded model or resource list.

        Raises:
            CanceledError: *cancel* fired before or during the request.
            UnauthorizedError: On 401.
            ResourceNotFoundError: On 404.
            UnexpectedStatusError: On any other unsuccessful status.
            MalformedResponseError: On a successful status with an
                undecodable body.
            TransportFailureError: On a network error once retries are
                exhausted.
        """
        kind = resolve_destination(dest)

        # Block until the limiter hands out a token or the caller gives up.
        if self._limiter is not None:
            await self._limiter.wait(cancel)

        response = await self._send(cancel)
        try:
            return await self._handle(response, dest, kind, cancel)
        finally:
            await response.aclose()

    async def _send(self, cancel: CancelToken | None) -> httpx.Response:
        hook = current_response_header_hook()
        method = self._request.method
        attempt = 0
        while True:
            attempt += 1
            if cancel is not None:
                cancel.raise_if_cancelled()
            logger.debug("%s %s (attempt %d)", method, self._request.url, attempt)
            try:
                response = await guard(self._http.send(self._request, stream=True), cancel)
            except httpx.TransportError as exc:
                if cancel is not None and cancel.cancelled:
                    raise cancel.error() from exc
                if attempt < self._retry.max_attempts and self._retry.should_retry_error(method, exc):
                    delay = self._retry.backoff(attempt, None)
                    logger.warning(
                        "Transport error on %s %s (attempt %d), retrying in %.2fs: %s",
                        method, self._request.url, attempt, delay, exc,
                    )
                    await guard(asyncio.sleep(delay), cancel)
                    continue
                raise TransportFailureError(f"{method} {self._request.url}: {exc}") from exc

            # Observers see every response, including ones about to be retried.
            try:
                hook(response.status_code, response.headers)
                retry = attempt < self._retry.max_attempts and self._retry.should_retry_response(response)
            except BaseException:
                await response.aclose()
                raise

            if retry:
                await response.aclose()
                delay = self._retry.backoff(attempt, response)
                logger.warning(
                    "HTTP %d on %s %s (attempt %d), retrying in %.2fs",
                    response.status_code, method, self._request.url, attempt, delay,
                )
                await guard(asyncio.sleep(delay), cancel)
                continue
            return response

    async def _handle(
        self,
        response: httpx.Response,
        dest: Any,
        kind: DestinationKind,
        cancel: CancelToken | None,
    ) -> Any:
        status = response.status_code
        if status == 304:
            return None
        if not 200 <= status < 300:
            body = await guard(response.aread(), cancel)
            raise check_response_code(status, body)

        if kind is DestinationKind.NONE:
            return None

        if kind is DestinationKind.RAW:
            await guard(_copy(response, dest), cancel)
            return None

        body = await guard(response.aread(), cancel)
        if not body.strip():
            return None
        return decode_body(body, dest, kind)


async def _copy(response: httpx.Response, sink: Any) -> None:
    async for chunk in response.aiter_bytes():
        sink.write(chunk)


def decode_body(body: bytes, dest: Any, kind: DestinationKind) -> Any:
    """Decode a successful response body into *dest*."""
    if kind is DestinationKind.JSON:
        try:
            return dest.model_validate_json(body)
        except ValidationError as e:
            raise MalformedResponseError(f"cannot decode {dest.__name__}: {e}") from e

    doc = jsonapi.load_document(body)
    if kind is DestinationKind.COLLECTION:
        return jsonapi.unmarshal_list(doc, dest)
    return jsonapi.unmarshal_payload(doc, dest)


def decode_error_payload(body: bytes) -> list[str]:
    """Extract ``title``/``detail`` pairs from a JSON-API error document."""
    try:
        doc = jsonapi.load_document(body)
    except MalformedResponseError:
        return []
    errors = doc.get("errors") if isinstance(doc, dict) else None
    if not isinstance(errors, list):
        return []

    messages: list[str] = []
    for e in errors:
        if not isinstance(e, dict):
            continue
        title = str(e.get("title") or "")
        detail = str(e.get("detail") or "")
        if detail:
            messages.append(f"{title}\n\n{detail}" if title else detail)
        elif title:
            messages.append(title)
    return messages


def check_response_code(status: int, body: bytes) -> Exception:
    """Map an unsuccessful status to the matching error."""
    if status == 401:
        return UnauthorizedError()
    if status == 404:
        return ResourceNotFoundError()

    text = body.decode("utf-8", errors="replace")
    messages = decode_error_payload(body)
    if status == 400 and any("include parameter" in m for m in messages):
        return InvalidIncludeValueError(status, text, messages)
    return UnexpectedStatusError(status, text, messages)
