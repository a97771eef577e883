# source/xmldoc_gen/preprocessor.py
"""mdBook preprocessor protocol.

mdBook first asks `xmldoc-gen supports <renderer>` and, on success, runs the
tool without arguments, writing `[context, book]` as JSON to its stdin and
reading the (possibly modified) book back from stdout.

Chapters embed tag list documentation with a directive line::

    {{#xmldoc schemas/project.yml}}

The path is relative to the chapter's own directory under the book source
directory.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional, TextIO

from .constants import (
    HEADER_LEVEL_DEFAULT,
    PREPROCESSOR_NAME,
    SUPPORTED_RENDERERS,
)
from .errors import XmlDocError
from .generator import GeneratorOptions, HeaderLevel
from .io import read_schema
from .loader import load
from .log import LoggerLike, get_logger
from .writer import render_md

DIRECTIVE_RE = re.compile(r"\{\{\s*#" + PREPROCESSOR_NAME + r"\s+([^}\s]+)\s*\}\}")


class PreprocessorError(XmlDocError):
    """The mdBook input could not be processed."""


def supports(renderer: str) -> bool:
    """Whether the preprocessor can feed the given mdBook renderer."""
    return renderer.lower() in SUPPORTED_RENDERERS


@dataclass(frozen=True)
class PreprocessorConfig:
    src_dir: Path
    options: GeneratorOptions


def _require_mapping(val: object, *, path: str) -> dict[str, Any]:
    if not isinstance(val, dict):
        raise PreprocessorError(
            f"expected a mapping at {path}, got {type(val).__name__}"
        )
    return val


def config_from_context(context: dict[str, Any]) -> PreprocessorConfig:
    """Read book root, source dir and `[preprocessor.xmldoc]` options."""
    root = context.get("root")
    if not isinstance(root, str) or not root:
        raise PreprocessorError("mdBook context is missing string `root`")

    config = _require_mapping(context.get("config") or {}, path="context.config")
    book_cfg = _require_mapping(config.get("book") or {}, path="context.config.book")
    src = book_cfg.get("src") or "src"

    preprocessors = _require_mapping(
        config.get("preprocessor") or {}, path="context.config.preprocessor"
    )
    ours = _require_mapping(
        preprocessors.get(PREPROCESSOR_NAME) or {},
        path=f"context.config.preprocessor.{PREPROCESSOR_NAME}",
    )

    level = ours.get("level", HEADER_LEVEL_DEFAULT)
    crlf = ours.get("crlf", False)
    if not isinstance(crlf, bool):
        raise PreprocessorError(
            f"preprocessor.{PREPROCESSOR_NAME}.crlf must be a boolean, got {crlf!r}"
        )

    return PreprocessorConfig(
        src_dir=Path(root) / str(src),
        options=GeneratorOptions(level=HeaderLevel(level), crlf=crlf),
    )


def _iter_chapters(items: list[Any]) -> Iterator[dict[str, Any]]:
    """Yield every chapter mapping, depth first, in book order."""
    for item in items:
        # Separators are plain strings; part titles are {"PartTitle": "..."}.
        if not isinstance(item, dict):
            continue
        chapter = item.get("Chapter")
        if not isinstance(chapter, dict):
            continue
        yield chapter
        yield from _iter_chapters(chapter.get("sub_items") or [])


def _book_items(book: dict[str, Any]) -> list[Any]:
    for key in ("items", "sections"):
        items = book.get(key)
        if isinstance(items, list):
            return items
    raise PreprocessorError("mdBook book has neither `items` nor `sections`")


class _ChapterLogAdapter(logging.LoggerAdapter):
    """Prefix every record with the chapter being expanded."""

    def __init__(self, logger: LoggerLike, chapter_name: str) -> None:
        super().__init__(logger, {"chapter": chapter_name})

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        prefix = f"chapter {self.extra['chapter']!r}: ".replace("%", "%%")
        return prefix + str(msg), kwargs


def expand_directives(
    content: str,
    chapter_dir: Path,
    cfg: PreprocessorConfig,
    *,
    chapter_name: str = "",
    logger: Optional[logging.Logger] = None,
) -> str:
    """Replace each xmldoc directive in `content` with rendered documentation."""
    log = _ChapterLogAdapter(get_logger(__name__, logger), chapter_name)

    def _render(match: re.Match[str]) -> str:
        source = chapter_dir / match.group(1)
        log.debug("rendering %s", source)
        try:
            digest = load(read_schema(source, logger=log), logger=log)
            rendered = render_md(digest.model, cfg.options, logger=log)
        except XmlDocError as e:
            raise PreprocessorError(f"chapter {chapter_name!r}: {source}: {e}") from e
        if digest.issues:
            log.info("%s loaded with %d warning(s)", source, len(digest.issues))
        return rendered.rstrip()

    return DIRECTIVE_RE.sub(_render, content)


def process_book(
    context: dict[str, Any],
    book: dict[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
) -> dict[str, Any]:
    """Expand directives in every chapter of `book` (modified in place)."""
    log = get_logger(__name__, logger)
    cfg = config_from_context(context)

    renderer = context.get("renderer")
    if isinstance(renderer, str) and not supports(renderer):
        log.warning("renderer %r is not supported, output may be unusable", renderer)

    for chapter in _iter_chapters(_book_items(book)):
        content = chapter.get("content")
        if not isinstance(content, str) or not DIRECTIVE_RE.search(content):
            continue

        rel_path = chapter.get("path") or chapter.get("source_path") or ""
        chapter_dir = (cfg.src_dir / rel_path).parent if rel_path else cfg.src_dir
        chapter["content"] = expand_directives(
            content,
            chapter_dir,
            cfg,
            chapter_name=str(chapter.get("name", "")),
            logger=log,
        )

    return book


def run(
    stdin: TextIO, stdout: TextIO, *, logger: Optional[logging.Logger] = None
) -> None:
    """Run one mdBook preprocessing round over stdin/stdout."""
    try:
        payload = json.load(stdin)
    except json.JSONDecodeError as e:
        raise PreprocessorError(f"invalid JSON from mdBook: {e}") from e

    if not isinstance(payload, list) or len(payload) != 2:
        raise PreprocessorError("mdBook input must be a JSON array [context, book]")

    context = _require_mapping(payload[0], path="input[0]")
    book = _require_mapping(payload[1], path="input[1]")

    json.dump(process_book(context, book, logger=logger), stdout)
    stdout.flush()
