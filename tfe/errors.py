"""Error types raised by the TFE client.

Every error carries an :class:`ErrorKind` so callers can branch on
``err.kind`` instead of matching concrete classes.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_PATH = "invalid_path"
    CANCELED = "canceled"
    UNAUTHORIZED = "unauthorized"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UNEXPECTED_STATUS = "unexpected_status"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_FAILURE = "transport_failure"
    INVALID_REQUEST_BODY = "invalid_request_body"
    INVALID_VALUE = "invalid_value"
    REQUIRED_VALUE = "required_value"
    CONFIG = "config"


class TFEError(Exception):
    """Base class for all client errors."""

    kind: ErrorKind


class ConfigError(TFEError):
    kind = ErrorKind.CONFIG


class InvalidPathError(TFEError):
    """The request path could not be resolved against the base URL."""

    kind = ErrorKind.INVALID_PATH

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        msg = f"invalid request path {path!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CanceledError(TFEError):
    """The caller's cancel token fired before or during the request."""

    kind = ErrorKind.CANCELED

    def __init__(self, reason: str = "context canceled") -> None:
        self.reason = reason
        super().__init__(reason)


class UnauthorizedError(TFEError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message)


class ResourceNotFoundError(TFEError):
    kind = ErrorKind.RESOURCE_NOT_FOUND

    def __init__(self, message: str = "resource not found") -> None:
        super().__init__(message)


class UnexpectedStatusError(TFEError):
    """Any non-2xx response without a more specific mapping.

    Attributes:
        status_code: HTTP status of the response.
        body: Raw response text, kept for diagnostics.
        messages: Error titles/details parsed from a JSON-API error
            payload; empty when the body is not one.
    """

    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, status_code: int, body: str = "", messages: list[str] | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.messages = messages or []
        if self.messages:
            text = "\n".join(self.messages)
        else:
            text = f"HTTP {status_code}"
        super().__init__(text)


class InvalidIncludeValueError(UnexpectedStatusError):
    """The server rejected the ``include`` query parameter."""

    def __str__(self) -> str:
        return 'invalid value for "include" field'


class MalformedResponseError(TFEError):
    """A 2xx response whose body could not be decoded."""

    kind = ErrorKind.MALFORMED_RESPONSE


class TransportFailureError(TFEError):
    """Network-level failure after all retries were used up."""

    kind = ErrorKind.TRANSPORT_FAILURE


# Library bugs: these point at a wrongly declared model, not at the server.


class InvalidRequestBodyError(TFEError):
    kind = ErrorKind.INVALID_REQUEST_BODY

    def __init__(self, message: str = "DELETE/PATCH/POST/PUT body must be None, a model, or a list of resources") -> None:
        super().__init__(message)


class ItemsMustBeListError(TFEError):
    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self) -> None:
        super().__init__('model field "items" must be a list')


# Input validation raised by resource wrappers before any request is built.


class InvalidValueError(TFEError):
    kind = ErrorKind.INVALID_VALUE

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"invalid value for {field}")


class RequiredValueError(TFEError):
    kind = ErrorKind.REQUIRED_VALUE

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required")
