"""JSON-API document encoding and decoding for pydantic models.

Resources are declared as :class:`Resource` subclasses.  Plain fields
become ``attributes`` (snake_case names map to kebab-case keys), fields
declared with :func:`relation` become ``relationships`` holding resource
identifiers.  Collections are declared as :class:`ResourceList`
parametrizations and also pick up ``meta.pagination``.
"""

from __future__ import annotations

import json
import typing
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo

from tfe.errors import InvalidRequestBodyError, ItemsMustBeListError, MalformedResponseError

CONTENT_TYPE_JSONAPI = "application/vnd.api+json"
CONTENT_TYPE_JSON = "application/json"


def dasherize(name: str) -> str:
    return name.replace("_", "-")


def relation(default: Any = None, **kwargs: Any) -> Any:
    """Declare a field as a JSON-API relationship."""
    return Field(default, json_schema_extra={"jsonapi": "relation"}, **kwargs)


class Resource(BaseModel):
    """A JSON-API resource object.

    Subclasses set ``jsonapi_type`` to the resource type name.  Every field
    should have a default: related resources that are not sideloaded are
    built from their identifier alone.
    """

    model_config = ConfigDict(alias_generator=dasherize, populate_by_name=True, extra="ignore")

    jsonapi_type: ClassVar[str] = ""

    id: str | None = None


R = TypeVar("R", bound=Resource)


class _PaginationBase(BaseModel):
    model_config = ConfigDict(alias_generator=dasherize, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class PaginationNextPrev(_PaginationBase):
    current_page: int = 0
    prev_page: int = 0
    next_page: int = 0


class Pagination(PaginationNextPrev):
    total_count: int = 0
    total_pages: int = 0


class ResourceList(BaseModel, Generic[R]):
    """A page of resources together with its pagination details."""

    items: list[R] = []
    pagination: Pagination | None = None


class ResourceListNextPrev(ResourceList[R], Generic[R]):
    """A page from an endpoint that does not report totals."""

    pagination: PaginationNextPrev | None = None


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _is_relation(info: FieldInfo) -> bool:
    extra = info.json_schema_extra
    return isinstance(extra, dict) and extra.get("jsonapi") == "relation"


def _relations(cls: type[Resource]) -> dict[str, FieldInfo]:
    return {name: info for name, info in cls.model_fields.items() if _is_relation(info)}


def _key(name: str, info: FieldInfo) -> str:
    return info.alias or name


def _identifier(res: Resource) -> dict[str, Any]:
    return {"type": res.jsonapi_type, "id": res.id}


def resource_node(res: Resource) -> dict[str, Any]:
    """Build the ``data`` node for a single resource."""
    rels = _relations(type(res))
    node: dict[str, Any] = {"type": res.jsonapi_type}
    if res.id:
        node["id"] = res.id

    attrs = res.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"id", *rels})
    if attrs:
        node["attributes"] = attrs

    relationships: dict[str, Any] = {}
    for name, info in rels.items():
        value = getattr(res, name)
        if value is None:
            continue
        if isinstance(value, list):
            relationships[_key(name, info)] = {"data": [_identifier(v) for v in value]}
        else:
            relationships[_key(name, info)] = {"data": _identifier(value)}
    if relationships:
        node["relationships"] = relationships
    return node


def marshal_payload(v: Resource | list[Resource]) -> dict[str, Any]:
    """Encode a resource, or a list of resources, as a document without ``included``."""
    if isinstance(v, Resource):
        return {"data": resource_node(v)}
    if isinstance(v, list) and all(isinstance(item, Resource) for item in v):
        return {"data": [resource_node(item) for item in v]}
    raise InvalidRequestBodyError()


def serialize_request_body(v: Any) -> tuple[bytes, str]:
    """Encode a request body, choosing JSON-API or plain JSON by model type.

    Returns:
        The encoded bytes and the content type to send with them.
    """
    if isinstance(v, (Resource, list)):
        return json.dumps(marshal_payload(v)).encode(), CONTENT_TYPE_JSONAPI
    if isinstance(v, BaseModel):
        return v.model_dump_json(by_alias=True, exclude_none=True).encode(), CONTENT_TYPE_JSON
    raise InvalidRequestBodyError()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def load_document(raw: bytes | str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError(f"response body is not valid JSON: {e}") from e


def _object_member(parent: dict[str, Any], key: str) -> dict[str, Any]:
    """Return the JSON object at *parent*[*key*], or an empty one when absent or null."""
    value = parent.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedResponseError(f'expected "{key}" to be an object, got {type(value).__name__}')
    return value


def _index_included(doc: dict[str, Any]) -> dict[tuple[str, str], dict[str, Any]]:
    index: dict[tuple[str, str], dict[str, Any]] = {}
    for node in doc.get("included") or []:
        if isinstance(node, dict) and "type" in node and "id" in node:
            index[(node["type"], str(node["id"]))] = node
    return index


def _relation_target(annotation: Any) -> type[Resource] | None:
    if isinstance(annotation, type) and issubclass(annotation, Resource):
        return annotation
    for arg in typing.get_args(annotation):
        target = _relation_target(arg)
        if target is not None:
            return target
    return None


def _related(
    cls: type[Resource],
    ident: Any,
    included: dict[tuple[str, str], dict[str, Any]],
    seen: frozenset[tuple[str, str]],
) -> Resource:
    if not isinstance(ident, dict) or "id" not in ident:
        raise MalformedResponseError(f"invalid resource identifier: {ident!r}")
    ref = (ident.get("type", ""), str(ident["id"]))
    node = included.get(ref)
    if node is not None and ref not in seen:
        return _build(cls, node, included, seen | {ref}, check_type=False)
    return cls.model_validate({"id": ref[1]})


def _build(
    cls: type[R],
    node: Any,
    included: dict[tuple[str, str], dict[str, Any]],
    seen: frozenset[tuple[str, str]] = frozenset(),
    check_type: bool = True,
) -> R:
    if not isinstance(node, dict):
        raise MalformedResponseError(f"expected a resource object, got {type(node).__name__}")
    if check_type and cls.jsonapi_type and node.get("type") != cls.jsonapi_type:
        raise MalformedResponseError(
            f"expected resource of type {cls.jsonapi_type!r}, got {node.get('type')!r}"
        )

    values: dict[str, Any] = dict(_object_member(node, "attributes"))
    if node.get("id") is not None:
        values["id"] = str(node["id"])

    relationships = _object_member(node, "relationships")
    for name, info in _relations(cls).items():
        rel = relationships.get(_key(name, info))
        if not isinstance(rel, dict) or "data" not in rel:
            continue
        target = _relation_target(info.annotation)
        if target is None:
            continue
        data = rel["data"]
        if data is None:
            values[_key(name, info)] = None
        elif isinstance(data, list):
            values[_key(name, info)] = [_related(target, item, included, seen) for item in data]
        else:
            values[_key(name, info)] = _related(target, data, included, seen)

    try:
        return cls.model_validate(values)
    except ValidationError as e:
        raise MalformedResponseError(f"cannot decode {cls.__name__}: {e}") from e


def _data(doc: Any) -> Any:
    if not isinstance(doc, dict) or "data" not in doc:
        raise MalformedResponseError('document has no top-level "data" member')
    return doc["data"]


def unmarshal_payload(doc: Any, cls: type[R]) -> R:
    """Decode a single-resource document."""
    data = _data(doc)
    return _build(cls, data, _index_included(doc))


def unmarshal_many_payload(doc: Any, cls: type[R]) -> list[R]:
    """Decode a collection document, keeping the server's order."""
    data = _data(doc)
    if not isinstance(data, list):
        raise MalformedResponseError('expected "data" to be a list')
    included = _index_included(doc)
    return [_build(cls, node, included) for node in data]


def _list_types(list_cls: type[ResourceList[Any]]) -> tuple[type[Resource], type[_PaginationBase] | None]:
    items = list_cls.model_fields["items"].annotation
    if typing.get_origin(items) is not list:
        raise ItemsMustBeListError()
    item_type = _relation_target(items)
    if item_type is None:
        raise ItemsMustBeListError()

    pagination_type: type[_PaginationBase] | None = None
    for arg in (list_cls.model_fields["pagination"].annotation, *typing.get_args(list_cls.model_fields["pagination"].annotation)):
        if isinstance(arg, type) and issubclass(arg, _PaginationBase):
            pagination_type = arg
            break
    return item_type, pagination_type


def unmarshal_list(doc: Any, list_cls: type[ResourceList[Any]]) -> ResourceList[Any]:
    """Decode a collection document into a :class:`ResourceList` subclass."""
    item_type, pagination_type = _list_types(list_cls)
    items = unmarshal_many_payload(doc, item_type)

    pagination = None
    if pagination_type is not None:
        raw = _object_member(_object_member(doc, "meta"), "pagination")
        try:
            pagination = pagination_type.model_validate(raw)
        except ValidationError as e:
            raise MalformedResponseError(f"cannot decode pagination: {e}") from e
    return list_cls(items=items, pagination=pagination)
