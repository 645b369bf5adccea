"""Input checks shared by the resource wrappers."""

from __future__ import annotations

import re

# Typical string identifiers: names, external IDs, slugs.
_STRING_ID = re.compile(r"[a-zA-Z0-9\-._]+")


def valid_string(v: str | None) -> bool:
    return v is not None and v != ""


def valid_string_id(v: str | None) -> bool:
    return v is not None and _STRING_ID.fullmatch(v) is not None
