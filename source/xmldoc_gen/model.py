# source/xmldoc_gen/model.py
"""Resolved tag graph consumed by the Markdown generator.

A `TagList` is built once by `loader.load()` and only read afterwards.
Tag ids are dense arena indices local to the current process; they are never
written to any output.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, NewType, Optional, Union

TagId = NewType("TagId", int)


@dataclass(frozen=True)
class Attribute:
    """Description of an allowed (or expected) tag attribute."""

    name: str
    brief: str
    description: Optional[str] = None
    optional: bool = False
    expected: Optional[str] = None
    default: Optional[str] = None


@dataclass(frozen=True)
class Resolved:
    target: TagId


@dataclass(frozen=True)
class Unresolved:
    name: str


ChildRef = Union[Resolved, Unresolved]


@dataclass(frozen=True)
class Child:
    """A tag (subject) which may be used within another tag (parent)."""

    ref: ChildRef
    # Can the parent have no instances of the subject?
    optional: bool = False
    # Can the parent have multiple instances of the subject?
    repeatable: bool = False

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.ref, Resolved)


@dataclass(frozen=True)
class Tag:
    id: TagId
    name: str
    description: str
    attributes: tuple[Attribute, ...] = ()
    children: tuple[Child, ...] = ()
    value: Optional[str] = None
    example: Optional[str] = None
    # 1-based position of the declaration in the source file.
    index: int = 0


@dataclass(frozen=True)
class TagList:
    """Root structure of a resolved tag list."""

    namespace: str
    tags: Mapping[TagId, Tag] = field(default_factory=dict)
    names: Mapping[str, TagId] = field(default_factory=dict)
    # target id -> ids of the tags declaring it as a child
    parents: Mapping[TagId, frozenset[TagId]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the lookup tables; the graph is read-only once built.
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))
        object.__setattr__(
            self,
            "parents",
            MappingProxyType({k: frozenset(v) for k, v in self.parents.items()}),
        )

    def __len__(self) -> int:
        return len(self.tags)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self.tags

    def get(self, tag_id: TagId) -> Tag:
        """Fetch a tag by id; unknown ids raise KeyError."""
        return self.tags[tag_id]

    def find(self, name: str) -> Optional[Tag]:
        """Fetch a tag by its public name."""
        tag_id = self.names.get(name)
        if tag_id is None:
            return None
        return self.tags[tag_id]

    def ordered(self) -> Iterator[Tag]:
        """Iterate tags by ascending declaration index, not storage order."""
        yield from sorted(self.tags.values(), key=lambda t: t.index)

    def parents_of(self, tag_id: TagId) -> frozenset[TagId]:
        return self.parents.get(tag_id, frozenset())

    def roots(self) -> list[Tag]:
        """Tags with no resolved parent, by declaration index."""
        return [tag for tag in self.ordered() if tag.id not in self.parents]
