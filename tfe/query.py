"""Query-string encoding for list and read options."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Mapping
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field

INCLUDE_QUERY_PARAM = "include"


class QueryOptions(BaseModel):
    """Base for models whose fields are sent as query parameters.

    Field aliases are the wire names (``page[number]``, ``search[name]``).
    Zero values are left out, so unset options fall back to server defaults.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ListOptions(QueryOptions):
    """Pagination options embedded in every list call."""

    page_number: int = Field(0, alias="page[number]")
    page_size: int = Field(0, alias="page[size]")


def _is_zero(v: Any) -> bool:
    return v is None or v is False or v == 0 or v == "" or v == [] or v == {}


def _scalar(v: Any) -> str:
    if isinstance(v, Enum):
        v = v.value
    if v is True:
        return "true"
    if isinstance(v, date):
        return v.isoformat()
    return str(v)


def _flatten(prefix: str, v: Any, out: dict[str, list[str]]) -> None:
    if _is_zero(v):
        return
    if isinstance(v, Mapping):
        for k, sub in v.items():
            _flatten(f"{prefix}[{k}]" if prefix else str(k), sub, out)
    elif isinstance(v, (list, tuple)):
        values = [_scalar(item) for item in v if not _is_zero(item)]
        if values:
            out.setdefault(prefix, []).extend(values)
    else:
        out.setdefault(prefix, []).append(_scalar(v))


def query_values(options: BaseModel | Mapping[str, Any] | None) -> dict[str, list[str]]:
    """Collect the non-zero fields of *options* keyed by wire name.

    Nested models and mappings are flattened to ``parent[child]`` keys.
    """
    if options is None:
        return {}
    if isinstance(options, BaseModel):
        raw = options.model_dump(by_alias=True, exclude_none=True)
    else:
        raw = dict(options)
    out: dict[str, list[str]] = {}
    for key, value in raw.items():
        _flatten(key, value, out)
    return out


def valid_slice_key(key: str) -> bool:
    return key == INCLUDE_QUERY_PARAM or "filter[" in key


def encode_query_params(values: Mapping[str, list[str]]) -> str:
    """Encode *values* as ``k=v&k2=v2`` sorted by key.

    ``include`` and ``filter[...]`` keys with several values are sent once,
    comma-joined; other keys repeat.
    """
    parts: list[str] = []
    for key in sorted(values):
        vs = values[key]
        if len(vs) > 1 and valid_slice_key(key):
            vs = [",".join(vs)]
        escaped = quote_plus(key)
        for v in vs:
            parts.append(f"{escaped}={quote_plus(v)}")
    return "&".join(parts)
