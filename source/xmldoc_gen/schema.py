# source/xmldoc_gen/schema.py
"""Schema objects: a typed, order-preserving view of a deserialized tag list.

No cross-validation happens here (unknown references, duplicate names and
roots are the model builder's business); this module only checks that the
YAML document has the expected shape and scalar types.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .errors import SchemaError


@dataclass(frozen=True)
class Params:
    version: str
    namespace: str


@dataclass(frozen=True)
class AttributeDecl:
    id: str
    brief: str
    description: Optional[str] = None
    expected: Optional[str] = None
    default: Optional[str] = None
    optional: Optional[bool] = None


@dataclass(frozen=True)
class ChildDecl:
    ref: str
    optional: Optional[bool] = None
    multiple: Optional[bool] = None


@dataclass(frozen=True)
class TagDecl:
    id: str
    description: str
    attributes: tuple[AttributeDecl, ...] = ()
    children: tuple[ChildDecl, ...] = ()
    value: Optional[str] = None
    example: Optional[str] = None


@dataclass(frozen=True)
class FileRoot:
    """Root structure encompassing an entire tag list file."""

    schema: Params
    tags: tuple[TagDecl, ...]


def _require_mapping(val: object, *, path: str) -> dict[str, Any]:
    if not isinstance(val, dict):
        raise SchemaError(f"expected a mapping, got {type(val).__name__}", path)
    return val


def _require_list(val: object, *, path: str) -> list[Any]:
    if not isinstance(val, list):
        raise SchemaError(f"expected a list, got {type(val).__name__}", path)
    return val


def _require_str(item: dict[str, Any], key: str, *, path: str) -> str:
    val = item.get(key)
    if val is None:
        raise SchemaError(f"missing required key {key!r}", path)
    if not isinstance(val, str):
        raise SchemaError(
            f"{key!r} must be a string, got {type(val).__name__}", f"{path}/{key}"
        )
    return val


def _optional_str(item: dict[str, Any], key: str, *, path: str) -> Optional[str]:
    val = item.get(key)
    if val is None:
        return None
    # Expected/default values are often written as bare YAML numbers or booleans.
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, (int, float)):
        return str(val)
    if not isinstance(val, str):
        raise SchemaError(
            f"{key!r} must be a string, got {type(val).__name__}", f"{path}/{key}"
        )
    return val


def _optional_bool(item: dict[str, Any], key: str, *, path: str) -> Optional[bool]:
    val = item.get(key)
    if val is None:
        return None
    if not isinstance(val, bool):
        raise SchemaError(
            f"{key!r} must be a boolean, got {type(val).__name__}", f"{path}/{key}"
        )
    return val


def _parse_attribute(raw: object, *, path: str) -> AttributeDecl:
    item = _require_mapping(raw, path=path)
    return AttributeDecl(
        id=_require_str(item, "id", path=path),
        brief=_require_str(item, "brief", path=path),
        description=_optional_str(item, "description", path=path),
        expected=_optional_str(item, "expected", path=path),
        default=_optional_str(item, "default", path=path),
        optional=_optional_bool(item, "optional", path=path),
    )


def _parse_child(raw: object, *, path: str) -> ChildDecl:
    item = _require_mapping(raw, path=path)
    return ChildDecl(
        ref=_require_str(item, "ref", path=path),
        optional=_optional_bool(item, "optional", path=path),
        multiple=_optional_bool(item, "multiple", path=path),
    )


def _parse_tag(raw: object, *, path: str) -> TagDecl:
    item = _require_mapping(raw, path=path)

    attributes = _require_list(item.get("attributes") or [], path=f"{path}/attributes")
    children = _require_list(item.get("children") or [], path=f"{path}/children")

    return TagDecl(
        id=_require_str(item, "id", path=path),
        description=_require_str(item, "description", path=path),
        attributes=tuple(
            _parse_attribute(attr, path=f"{path}/attributes/{i}")
            for i, attr in enumerate(attributes)
        ),
        children=tuple(
            _parse_child(child, path=f"{path}/children/{i}")
            for i, child in enumerate(children)
        ),
        value=_optional_str(item, "value", path=path),
        example=_optional_str(item, "example", path=path),
    )


def parse_file_root(data: object) -> FileRoot:
    """Turn a deserialized YAML document into schema objects."""
    root = _require_mapping(data, path="/")

    if "schema" not in root:
        raise SchemaError("missing required key 'schema'", "/")
    params = _require_mapping(root["schema"], path="/schema")

    # A missing or null `tags` key is an empty list.
    tags = _require_list(root.get("tags") or [], path="/tags")

    return FileRoot(
        schema=Params(
            version=_require_str(params, "version", path="/schema"),
            namespace=_require_str(params, "namespace", path="/schema"),
        ),
        tags=tuple(_parse_tag(tag, path=f"/tags/{i}") for i, tag in enumerate(tags)),
    )
