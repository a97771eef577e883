# source/xmldoc_gen/loader.py
"""Build a resolved `TagList` from schema objects.

Loading runs in three phases:

1. materialize every declaration in input order under a fresh arena id,
2. index tag names (a duplicate name is fatal),
3. resolve child references by name and record the reverse parent edges.

Unresolved references and root anomalies are reported as non-fatal issues;
the only fatal conditions are an unsupported schema version and duplicate
tag names.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from .constants import SCHEMA_VERSION
from .errors import XmlDocError
from .log import TRACE, LoggerLike, get_logger
from .model import (
    Attribute,
    Child,
    ChildRef,
    Resolved,
    Tag,
    TagId,
    TagList,
    Unresolved,
)
from .schema import ChildDecl, FileRoot


def is_supported(version: str) -> bool:
    """Check if a schema version is supported by this release."""
    return version.lower().strip() == SCHEMA_VERSION


class LoadError(XmlDocError):
    """Fatal error produced by `load()`; no model is built."""


class VersionUnsupported(LoadError):
    def __init__(self, found: str, expected: str = SCHEMA_VERSION) -> None:
        super().__init__(
            f"unsupported schema version {found!r} (expected {expected!r})"
        )
        self.found = found
        self.expected = expected


class DuplicateTagName(LoadError):
    def __init__(self, name: str, first_index: int, duplicate_index: int) -> None:
        super().__init__(
            f"duplicate tag name {name!r} (declarations #{first_index} and "
            f"#{duplicate_index})"
        )
        self.name = name
        self.first_index = first_index
        self.duplicate_index = duplicate_index


@dataclass(frozen=True)
class LoadIssue:
    """Structured non-fatal issue for callers that want more than strings."""

    code: str
    message: str
    path: str = ""
    hint: Optional[str] = None


@dataclass(frozen=True)
class LoadDigest:
    """Loaded `TagList` model with its non-fatal issues."""

    model: TagList
    issues: tuple[LoadIssue, ...] = field(default_factory=tuple)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues]


def _tag_path(index: int) -> str:
    return f"/tags/{index - 1}"


def load(schema: FileRoot, *, logger: Optional[LoggerLike] = None) -> LoadDigest:
    """Load a `TagList` model from a deserialized `schema` instance."""
    log = get_logger(__name__, logger)
    issues: list[LoadIssue] = []

    def emit(code: str, message: str, path: str = "", hint: Optional[str] = None) -> None:
        log.warning("%s", message)
        issues.append(LoadIssue(code=code, message=message, path=path, hint=hint))

    version = schema.schema.version
    if not is_supported(version):
        raise VersionUnsupported(found=version)

    namespace = schema.schema.namespace
    if not namespace or not namespace.isascii():
        emit(
            "W_NAMESPACE_INVALID",
            "schema namespace must be a non-empty ascii sequence",
            path="/schema/namespace",
        )

    # Phase 1: materialization.
    tags: dict[TagId, Tag] = {}
    pending: dict[TagId, tuple[ChildDecl, ...]] = {}
    for position, decl in enumerate(schema.tags):
        tag_id = TagId(position)
        tags[tag_id] = Tag(
            id=tag_id,
            name=decl.id,
            description=decl.description.strip(),
            attributes=tuple(
                Attribute(
                    name=attr.id,
                    brief=attr.brief.strip(),
                    description=attr.description.strip() if attr.description else None,
                    optional=bool(attr.optional),
                    expected=attr.expected,
                    default=attr.default,
                )
                for attr in decl.attributes
            ),
            value=decl.value.strip() if decl.value is not None else None,
            example=decl.example,
            index=position + 1,
        )
        pending[tag_id] = decl.children
        log.log(TRACE, "materialized tag %r as #%d", decl.id, position + 1)

    # Phase 2: name indexing.
    names: dict[str, TagId] = {}
    for tag_id, tag in tags.items():
        first = names.get(tag.name)
        if first is not None:
            raise DuplicateTagName(tag.name, tags[first].index, tag.index)
        names[tag.name] = tag_id

    # Phase 3: reference resolution.
    parents: dict[TagId, set[TagId]] = {}
    for tag_id, raw_children in pending.items():
        source = tags[tag_id]
        children: list[Child] = []
        for i, decl in enumerate(raw_children):
            target = names.get(decl.ref)
            if target is None:
                ref: ChildRef = Unresolved(decl.ref)
                emit(
                    "W_UNRESOLVED_CHILD",
                    f"unresolved child reference: `{source.name}`->`{decl.ref}`",
                    path=f"{_tag_path(source.index)}/children/{i}/ref",
                )
            else:
                ref = Resolved(target)
                parents.setdefault(target, set()).add(tag_id)
            children.append(
                Child(
                    ref=ref,
                    optional=bool(decl.optional),
                    repeatable=bool(decl.multiple),
                )
            )
        if children:
            tags[tag_id] = replace(source, children=tuple(children))

    model = TagList(namespace=namespace, tags=tags, names=names, parents=parents)

    roots = model.roots()
    if not roots:
        emit(
            "W_NO_ROOT",
            "no root tags, likely self-referential",
            hint="Declare a top-level tag that no other tag lists as a child",
        )
    elif len(roots) > 1:
        emit(
            "W_MULTIPLE_ROOTS",
            "multiple root tags: " + ", ".join(tag.name for tag in roots),
            hint="A tag list is expected to describe a single document root",
        )

    log.debug(
        "loaded %d tag(s) in namespace %r with %d issue(s)",
        len(model),
        namespace,
        len(issues),
    )
    return LoadDigest(model=model, issues=tuple(issues))
