"""Organizations API."""
from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from tfe.cancel import CancelToken
from tfe.errors import InvalidValueError, RequiredValueError
from tfe.models import (
    Organization,
    OrganizationCreateOptions,
    OrganizationList,
    OrganizationListOptions,
    OrganizationUpdateOptions,
)
from tfe.validations import valid_string, valid_string_id

if TYPE_CHECKING:
    from tfe.client import Client


def _org_path(organization: str) -> str:
    if not valid_string_id(organization):
        raise InvalidValueError("organization")
    return f"organizations/{quote(organization, safe='')}"


class Organizations:
    def __init__(self, client: Client) -> None:
        self.client = client

    async def list(
        self, options: OrganizationListOptions | None = None, *, cancel: CancelToken | None = None
    ) -> OrganizationList:
        req = self.client.new_request("GET", "organizations", options)
        return await req.do(OrganizationList, cancel=cancel)

    async def read(self, organization: str, *, cancel: CancelToken | None = None) -> Organization:
        req = self.client.new_request("GET", _org_path(organization))
        return await req.do(Organization, cancel=cancel)

    async def create(
        self, options: OrganizationCreateOptions, *, cancel: CancelToken | None = None
    ) -> Organization:
        if not valid_string(options.name):
            raise RequiredValueError("name")
        if not valid_string_id(options.name):
            raise InvalidValueError("name")
        if not valid_string(options.email):
            raise RequiredValueError("email")

        req = self.client.new_request("POST", "organizations", options)
        return await req.do(Organization, cancel=cancel)

    async def update(
        self,
        organization: str,
        options: OrganizationUpdateOptions,
        *,
        cancel: CancelToken | None = None,
    ) -> Organization:
        req = self.client.new_request("PATCH", _org_path(organization), options)
        return await req.do(Organization, cancel=cancel)

    async def delete(self, organization: str, *, cancel: CancelToken | None = None) -> None:
        req = self.client.new_request("DELETE", _org_path(organization))
        await req.do(cancel=cancel)
