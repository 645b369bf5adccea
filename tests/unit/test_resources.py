"""Unit tests for the organization, workspace and IP range wrappers."""

from __future__ import annotations

import json

import httpx
import pytest

from tfe.errors import InvalidValueError, RequiredValueError, ResourceNotFoundError
from tfe.models import (
    OrganizationCreateOptions,
    OrganizationListOptions,
    Project,
    WorkspaceCreateOptions,
    WorkspaceIncludeOpt,
    WorkspaceListOptions,
    WorkspaceReadOptions,
)


class TestOrganizations:
    @pytest.mark.asyncio
    async def test_create_read_delete(self, client, fake_api):
        created = await client.organizations.create(
            OrganizationCreateOptions(name="acme", email="ops@acme.test", session_timeout=20160)
        )
        assert created.id == "acme"
        assert created.external_id == "org-abc123"
        assert created.session_timeout == 20160
        assert json.loads(fake_api.state.last_body)["data"]["type"] == "organizations"

        read = await client.organizations.read("acme")
        assert read.email == "ops@acme.test"

        await client.organizations.delete("acme")
        with pytest.raises(ResourceNotFoundError):
            await client.organizations.read("acme")

    @pytest.mark.asyncio
    async def test_create_requires_name_and_email(self, client, fake_api):
        with pytest.raises(RequiredValueError, match="name is required"):
            await client.organizations.create(OrganizationCreateOptions(email="ops@acme.test"))
        with pytest.raises(InvalidValueError, match="invalid value for name"):
            await client.organizations.create(OrganizationCreateOptions(name="ac me", email="ops@acme.test"))
        with pytest.raises(RequiredValueError, match="email is required"):
            await client.organizations.create(OrganizationCreateOptions(name="acme"))
        assert fake_api.state.requests == []

    @pytest.mark.asyncio
    async def test_invalid_organization_name(self, client, fake_api):
        with pytest.raises(InvalidValueError):
            await client.organizations.read("acme/../admin")
        assert fake_api.state.requests == []

    @pytest.mark.asyncio
    async def test_list_query(self, mock_client):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [], "meta": {"pagination": {"current-page": 1}}})

        client = mock_client(handler)
        page = await client.organizations.list(OrganizationListOptions(query_name="ac", page_size=10))
        assert page.items == []
        assert seen[0].url.params["q[name]"] == "ac"
        assert seen[0].url.params["page[size]"] == "10"
        assert "q" not in seen[0].url.params


class TestWorkspaces:
    @pytest.mark.asyncio
    async def test_list(self, client, fake_api):
        page = await client.workspaces.list("acme", WorkspaceListOptions(page_number=2, page_size=50))
        assert [w.id for w in page.items] == ["ws-1", "ws-2"]
        assert page.items[0].auto_apply is True
        assert page.pagination.current_page == 2
        assert page.pagination.total_pages == 2
        method, path, query = fake_api.state.requests[0]
        assert (method, path) == ("GET", "/api/v2/organizations/acme/workspaces")
        assert query == "page%5Bnumber%5D=2&page%5Bsize%5D=50"

    @pytest.mark.asyncio
    async def test_list_unknown_organization(self, client):
        with pytest.raises(ResourceNotFoundError):
            await client.workspaces.list("globex")

    @pytest.mark.asyncio
    async def test_read_with_included_organization(self, client, fake_api):
        ws = await client.workspaces.read(
            "acme", "compute", WorkspaceReadOptions(include=[WorkspaceIncludeOpt.ORGANIZATION])
        )
        assert ws.id == "ws-2"
        assert ws.organization.email == "ops@acme.test"
        assert fake_api.state.requests[0][2] == "include=organization"

    @pytest.mark.asyncio
    async def test_read_missing(self, client):
        with pytest.raises(ResourceNotFoundError):
            await client.workspaces.read("acme", "storage")

    @pytest.mark.asyncio
    async def test_validation(self, client, fake_api):
        with pytest.raises(InvalidValueError, match="organization"):
            await client.workspaces.list("")
        with pytest.raises(RequiredValueError, match="workspace is required"):
            await client.workspaces.read("acme", "")
        with pytest.raises(InvalidValueError, match="workspace ID"):
            await client.workspaces.read_by_id("ws 1")
        with pytest.raises(RequiredValueError, match="name is required"):
            await client.workspaces.create("acme", WorkspaceCreateOptions())
        assert fake_api.state.requests == []

    @pytest.mark.asyncio
    async def test_create_sends_project_relationship(self, mock_client):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            node = {**bodies[-1]["data"], "id": "ws-new"}
            return httpx.Response(201, json={"data": node})

        client = mock_client(handler)
        ws = await client.workspaces.create(
            "acme", WorkspaceCreateOptions(name="storage", auto_apply=True, project=Project(id="prj-1"))
        )
        assert ws.id == "ws-new"
        assert ws.project.id == "prj-1"
        data = bodies[0]["data"]
        assert data["attributes"] == {"name": "storage", "auto-apply": True}
        assert data["relationships"]["project"]["data"] == {"type": "projects", "id": "prj-1"}


class TestIPRanges:
    @pytest.mark.asyncio
    async def test_read(self, client, fake_api):
        ranges = await client.ip_ranges.read()
        assert ranges.api == ["75.2.98.97/32"]
        assert len(ranges.vcs) == 2
        assert fake_api.state.requests[0][1] == "/api/meta/ip-ranges"

    @pytest.mark.asyncio
    async def test_not_modified(self, client):
        assert await client.ip_ranges.read("Mon, 02 Jan 2006 15:04:05 GMT") is None
