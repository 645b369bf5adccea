"""Response observers attached to the calling context.

A hook registered with :func:`response_header_hook` is called with the
status code and headers of every HTTP response received while the
``with`` block is active, including responses that are later retried or
turned into errors.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Callable, Iterator

import httpx

ResponseHeaderHook = Callable[[int, httpx.Headers], None]

_response_header_hook: contextvars.ContextVar[ResponseHeaderHook | None] = contextvars.ContextVar(
    "tfe_response_header_hook", default=None
)


def _noop(status: int, headers: httpx.Headers) -> None:
    pass


@contextmanager
def response_header_hook(hook: ResponseHeaderHook) -> Iterator[None]:
    """Install *hook* for requests made inside the block.

    Hooks nest: an inner hook runs after the outer one.
    """
    outer = _response_header_hook.get()
    installed = hook
    if outer is not None:

        def installed(status: int, headers: httpx.Headers) -> None:
            outer(status, headers)
            hook(status, headers)

    token = _response_header_hook.set(installed)
    try:
        yield
    finally:
        _response_header_hook.reset(token)


def current_response_header_hook() -> ResponseHeaderHook:
    """Return the hook for the current context, or a no-op."""
    return _response_header_hook.get() or _noop
