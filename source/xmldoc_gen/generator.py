# source/xmldoc_gen/generator.py
"""Markdown generation for a resolved `TagList`.

Tags are emitted by ascending declaration index. Every section is written
straight to the caller's sink; a failing write aborts generation and leaves
whatever was already written behind, so callers must discard the destination
on error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TextIO

from .constants import HEADER_LEVEL_DEFAULT, HEADER_LEVEL_MAX, HEADER_LEVEL_MIN
from .errors import XmlDocError
from .log import TRACE, LoggerLike, get_logger
from .markdown_fmt import (
    NO_PARENTS_TEXT,
    child_qualifier,
    heading,
    inline_code,
    qualified_name,
    subheading,
    tag_link,
    xml_fence,
)
from .model import Attribute, Child, Resolved, Tag, TagList


class GeneratorError(XmlDocError):
    """Fatal error produced by generator code."""


class BadHeaderLevel(GeneratorError, ValueError):
    def __init__(self, level: int) -> None:
        super().__init__(f"invalid header level '{level}'")
        self.level = level


class RenderWriteError(GeneratorError):
    """Writing to the output sink failed mid-generation."""

    def __init__(self, inner: BaseException, description: Optional[str] = None) -> None:
        message = f"internal input/output error: {inner}"
        if description:
            message += f", description: {description}"
        super().__init__(message)
        self.inner = inner
        self.description = description


@dataclass(frozen=True)
class HeaderLevel:
    """Checked Markdown heading level (1..6)."""

    level: int

    def __post_init__(self) -> None:
        if (
            isinstance(self.level, bool)
            or not isinstance(self.level, int)
            or not HEADER_LEVEL_MIN <= self.level <= HEADER_LEVEL_MAX
        ):
            raise BadHeaderLevel(self.level)


@dataclass(frozen=True)
class GeneratorOptions:
    """Configuration passed to `generate()`."""

    # Heading level of each tag header.
    level: HeaderLevel = field(default_factory=lambda: HeaderLevel(HEADER_LEVEL_DEFAULT))
    # Use CRLF for new lines instead of LF.
    crlf: bool = False

    @property
    def newline(self) -> str:
        return "\r\n" if self.crlf else "\n"


class _Context:
    def __init__(self, out: TextIO, options: GeneratorOptions, log: LoggerLike) -> None:
        self.out = out
        self.options = options
        self.log = log
        self.newline = options.newline
        self.newblock = options.newline * 2

    def write(self, *parts: str, description: Optional[str] = None) -> None:
        try:
            for part in parts:
                self.out.write(part)
        except (OSError, ValueError) as exc:
            raise RenderWriteError(exc, description) from exc

    def write_tag_header(self, namespace: str, name: str) -> None:
        text = heading(self.options.level.level, inline_code(qualified_name(namespace, name)))
        self.write(text, self.newblock, description=f"header of {name!r}")

    def write_subheader(self, text: str) -> None:
        self.write(subheading(text), self.newblock)

    def write_paragraph(self, text: str) -> None:
        self.write(text, self.newblock)

    def write_attribute(self, attr: Attribute) -> None:
        nl = self.newline
        line = f"* {inline_code(attr.name)} - {attr.brief}"
        if attr.optional:
            line += " _(optional)_"
        parts = [line, nl]
        if attr.description:
            parts += ["  * ", attr.description, nl]
        if attr.expected is not None:
            parts += ["  * _Expected value:_ ", attr.expected, nl]
        if attr.default is not None:
            parts += ["  * _Default value:_ ", attr.default, nl]
        parts.append(nl)
        self.write(*parts, description=f"attribute {attr.name!r}")

    def write_child(self, tag_list: TagList, child: Child) -> None:
        namespace = tag_list.namespace
        if isinstance(child.ref, Resolved):
            item = tag_link(namespace, tag_list.get(child.ref.target).name)
        else:
            item = inline_code(qualified_name(namespace, child.ref.name))
        suffix = child_qualifier(child.optional, child.repeatable)
        self.write("* ", item, suffix, self.newline)

    def write_parents(self, tag_list: TagList, tag: Tag) -> None:
        parent_ids = tag_list.parents_of(tag.id)
        if not parent_ids:
            self.write_paragraph(NO_PARENTS_TEXT)
            return

        parents: list[Tag] = []
        for parent_id in sorted(parent_ids):
            try:
                parents.append(tag_list.get(parent_id))
            except KeyError:
                self.log.warning(
                    "failed to resolve parent name for %s -> %s", tag.id, parent_id
                )

        for parent in sorted(parents, key=lambda t: t.index):
            self.write("* ", tag_link(tag_list.namespace, parent.name), self.newline)
        self.write(self.newline)

    def write_xml(self, code: str) -> None:
        self.write(xml_fence(code, self.newline), self.newblock)


def generate(
    tag_list: TagList,
    options: GeneratorOptions,
    out: TextIO,
    *,
    logger: Optional[LoggerLike] = None,
) -> None:
    """Generate Markdown for every tag of `tag_list` into `out`."""
    log = get_logger(__name__, logger)
    ctx = _Context(out, options, log)

    for tag in tag_list.ordered():
        log.log(TRACE, "rendering tag #%d %r", tag.index, tag.name)

        ctx.write_tag_header(tag_list.namespace, tag.name)
        ctx.write_paragraph(tag.description)

        if tag.attributes:
            ctx.write_subheader("Attributes")
            for attr in tag.attributes:
                ctx.write_attribute(attr)

        if tag.value is not None:
            ctx.write_subheader("Value")
            ctx.write_paragraph(tag.value)

        if tag.children:
            ctx.write_subheader("Children")
            for child in tag.children:
                ctx.write_child(tag_list, child)
            ctx.write(ctx.newline)

        # Parent block is always present.
        ctx.write_subheader("Parents")
        ctx.write_parents(tag_list, tag)

        if tag.example is not None:
            ctx.write_subheader("Example")
            ctx.write_xml(tag.example)

    log.debug("generated documentation for %d tag(s)", len(tag_list))
