"""Pydantic models for the resources covered by this client."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from tfe.jsonapi import Resource, ResourceList, dasherize, relation
from tfe.query import ListOptions, QueryOptions


# ── Organizations ─────────────────────────────────────────────────────

class AuthPolicy(str, Enum):
    OPTIONAL = "optional"
    TWO_FACTOR_MANDATORY = "two_factor_mandatory"


class Organization(Resource):
    jsonapi_type = "organizations"

    name: str = ""
    email: str = ""
    collaborator_auth_policy: AuthPolicy | None = None
    cost_estimation_enabled: bool = False
    created_at: datetime | None = None
    external_id: str = ""
    owners_team_saml_role_id: str = ""
    saml_enabled: bool = False
    session_remember: int = 0
    session_timeout: int = 0
    trial_expires_at: datetime | None = None
    two_factor_conformant: bool = False


class OrganizationList(ResourceList[Organization]):
    pass


class OrganizationListOptions(ListOptions):
    query: str = Field("", alias="q")
    query_email: str = Field("", alias="q[email]")
    query_name: str = Field("", alias="q[name]")


class OrganizationCreateOptions(Resource):
    jsonapi_type = "organizations"

    name: str | None = None
    email: str | None = None
    collaborator_auth_policy: AuthPolicy | None = None
    cost_estimation_enabled: bool | None = None
    owners_team_saml_role_id: str | None = None
    session_remember: int | None = None
    session_timeout: int | None = None


class OrganizationUpdateOptions(Resource):
    jsonapi_type = "organizations"

    name: str | None = None
    email: str | None = None
    collaborator_auth_policy: AuthPolicy | None = None
    cost_estimation_enabled: bool | None = None
    owners_team_saml_role_id: str | None = None
    session_remember: int | None = None
    session_timeout: int | None = None


# ── Workspaces ────────────────────────────────────────────────────────

class VCSRepo(BaseModel):
    """VCS settings of a workspace, sent as a nested attribute."""

    model_config = ConfigDict(alias_generator=dasherize, populate_by_name=True, extra="ignore")

    branch: str | None = None
    identifier: str | None = None
    ingress_submodules: bool | None = None
    oauth_token_id: str | None = None
    tags_regex: str | None = None


class Project(Resource):
    jsonapi_type = "projects"

    name: str = ""


class Run(Resource):
    jsonapi_type = "runs"

    status: str = ""
    message: str = ""


class Workspace(Resource):
    jsonapi_type = "workspaces"

    name: str = ""
    description: str = ""
    allow_destroy_plan: bool = False
    auto_apply: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    execution_mode: str = ""
    locked: bool = False
    resource_count: int = 0
    tag_names: list[str] = []
    terraform_version: str = ""
    working_directory: str = ""
    vcs_repo: VCSRepo | None = None

    organization: Organization | None = relation()
    project: Project | None = relation()
    current_run: Run | None = relation()


class WorkspaceList(ResourceList[Workspace]):
    pass


class WorkspaceIncludeOpt(str, Enum):
    ORGANIZATION = "organization"
    CURRENT_RUN = "current_run"
    PROJECT = "project"


class WorkspaceListOptions(ListOptions):
    search: str = Field("", alias="search[name]")
    tags: str = Field("", alias="search[tags]")
    exclude_tags: str = Field("", alias="search[exclude-tags]")
    wildcard_name: str = Field("", alias="search[wildcard-name]")
    project_id: str = Field("", alias="filter[project][id]")
    include: list[WorkspaceIncludeOpt] = Field(default_factory=list, alias="include")


class WorkspaceReadOptions(QueryOptions):
    include: list[WorkspaceIncludeOpt] = Field(default_factory=list, alias="include")


class WorkspaceCreateOptions(Resource):
    jsonapi_type = "workspaces"

    name: str | None = None
    description: str | None = None
    allow_destroy_plan: bool | None = None
    auto_apply: bool | None = None
    execution_mode: str | None = None
    tag_names: list[str] | None = None
    terraform_version: str | None = None
    working_directory: str | None = None
    vcs_repo: VCSRepo | None = None

    project: Project | None = relation()


class WorkspaceUpdateOptions(Resource):
    jsonapi_type = "workspaces"

    name: str | None = None
    description: str | None = None
    allow_destroy_plan: bool | None = None
    auto_apply: bool | None = None
    execution_mode: str | None = None
    terraform_version: str | None = None
    working_directory: str | None = None
    vcs_repo: VCSRepo | None = None

    project: Project | None = relation()


# ── Meta ──────────────────────────────────────────────────────────────

class IPRange(BaseModel):
    """CIDR ranges used by the service; served as plain JSON."""

    api: list[str] = []
    notifications: list[str] = []
    sentinel: list[str] = []
    vcs: list[str] = []
