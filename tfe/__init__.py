"""Async client for the Terraform Enterprise / HCP Terraform API."""

__version__ = "0.1.0"

from tfe.cancel import CancelToken
from tfe.client import Client
from tfe.config import TFEConfig
from tfe.errors import (
    CanceledError,
    ConfigError,
    ErrorKind,
    InvalidIncludeValueError,
    InvalidPathError,
    InvalidRequestBodyError,
    InvalidValueError,
    MalformedResponseError,
    RequiredValueError,
    ResourceNotFoundError,
    TFEError,
    TransportFailureError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from tfe.hooks import response_header_hook
from tfe.jsonapi import Pagination, PaginationNextPrev, Resource, ResourceList, relation
from tfe.query import ListOptions

__all__ = [
    "__version__",
    "CancelToken",
    "Client",
    "TFEConfig",
    "CanceledError",
    "ConfigError",
    "ErrorKind",
    "InvalidIncludeValueError",
    "InvalidPathError",
    "InvalidRequestBodyError",
    "InvalidValueError",
    "MalformedResponseError",
    "RequiredValueError",
    "ResourceNotFoundError",
    "TFEError",
    "TransportFailureError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "response_header_hook",
    "Pagination",
    "PaginationNextPrev",
    "Resource",
    "ResourceList",
    "relation",
    "ListOptions",
]
