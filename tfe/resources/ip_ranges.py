"""IP ranges API."""
from __future__ import annotations

from typing import TYPE_CHECKING

from tfe.cancel import CancelToken
from tfe.models import IPRange

if TYPE_CHECKING:
    from tfe.client import Client

# Served from the host root, outside the versioned API base path.
IP_RANGES_PATH = "/api/meta/ip-ranges"


class IPRanges:
    def __init__(self, client: Client) -> None:
        self.client = client

    async def read(self, modified_since: str = "", *, cancel: CancelToken | None = None) -> IPRange | None:
        """Fetch the service's IP ranges.

        Args:
            modified_since: An HTTP date.  When set, the server answers 304
                if nothing changed since then and ``None`` is returned.
        """
        req = self.client.new_json_request("GET", IP_RANGES_PATH)
        req.headers["Accept"] = "application/json, */*"
        if modified_since:
            req.headers["If-Modified-Since"] = modified_since
        return await req.do(IPRange, cancel=cancel)
