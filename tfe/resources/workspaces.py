"""Workspaces API."""
from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from tfe.cancel import CancelToken
from tfe.errors import InvalidValueError, RequiredValueError
from tfe.models import (
    Workspace,
    WorkspaceCreateOptions,
    WorkspaceList,
    WorkspaceListOptions,
    WorkspaceReadOptions,
    WorkspaceUpdateOptions,
)
from tfe.validations import valid_string, valid_string_id

if TYPE_CHECKING:
    from tfe.client import Client


def _check_org(organization: str) -> str:
    if not valid_string_id(organization):
        raise InvalidValueError("organization")
    return quote(organization, safe="")


def _check_id(workspace_id: str) -> str:
    if not valid_string_id(workspace_id):
        raise InvalidValueError("workspace ID")
    return quote(workspace_id, safe="")


def _named_path(organization: str, workspace: str) -> str:
    org = _check_org(organization)
    if not valid_string(workspace):
        raise RequiredValueError("workspace")
    if not valid_string_id(workspace):
        raise InvalidValueError("workspace")
    return f"organizations/{org}/workspaces/{quote(workspace, safe='')}"


class Workspaces:
    """Workspaces are addressed either by organization and name or by ID."""

    def __init__(self, client: Client) -> None:
        self.client = client

    async def list(
        self,
        organization: str,
        options: WorkspaceListOptions | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> WorkspaceList:
        path = f"organizations/{_check_org(organization)}/workspaces"
        req = self.client.new_request("GET", path, options)
        return await req.do(WorkspaceList, cancel=cancel)

    async def read(
        self,
        organization: str,
        workspace: str,
        options: WorkspaceReadOptions | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Workspace:
        req = self.client.new_request("GET", _named_path(organization, workspace), options)
        return await req.do(Workspace, cancel=cancel)

    async def read_by_id(
        self,
        workspace_id: str,
        options: WorkspaceReadOptions | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Workspace:
        req = self.client.new_request("GET", f"workspaces/{_check_id(workspace_id)}", options)
        return await req.do(Workspace, cancel=cancel)

    async def create(
        self,
        organization: str,
        options: WorkspaceCreateOptions,
        *,
        cancel: CancelToken | None = None,
    ) -> Workspace:
        path = f"organizations/{_check_org(organization)}/workspaces"
        if not valid_string(options.name):
            raise RequiredValueError("name")
        if not valid_string_id(options.name):
            raise InvalidValueError("name")

        req = self.client.new_request("POST", path, options)
        return await req.do(Workspace, cancel=cancel)

    async def update(
        self,
        organization: str,
        workspace: str,
        options: WorkspaceUpdateOptions,
        *,
        cancel: CancelToken | None = None,
    ) -> Workspace:
        req = self.client.new_request("PATCH", _named_path(organization, workspace), options)
        return await req.do(Workspace, cancel=cancel)

    async def update_by_id(
        self,
        workspace_id: str,
        options: WorkspaceUpdateOptions,
        *,
        cancel: CancelToken | None = None,
    ) -> Workspace:
        req = self.client.new_request("PATCH", f"workspaces/{_check_id(workspace_id)}", options)
        return await req.do(Workspace, cancel=cancel)

    async def delete(self, organization: str, workspace: str, *, cancel: CancelToken | None = None) -> None:
        req = self.client.new_request("DELETE", _named_path(organization, workspace))
        await req.do(cancel=cancel)

    async def delete_by_id(self, workspace_id: str, *, cancel: CancelToken | None = None) -> None:
        req = self.client.new_request("DELETE", f"workspaces/{_check_id(workspace_id)}")
        await req.do(cancel=cancel)
