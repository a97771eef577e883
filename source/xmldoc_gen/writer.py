from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

from .generator import GeneratorOptions, generate
from .io import open_output
from .log import LoggerLike
from .model import TagList


def render_md(
    tag_list: TagList,
    options: GeneratorOptions,
    *,
    logger: Optional[LoggerLike] = None,
) -> str:
    """Render a tag list into a Markdown string."""
    buf = io.StringIO(newline="")
    generate(tag_list, options, buf, logger=logger)
    return buf.getvalue()


def write_md(
    target: str | Path,
    tag_list: TagList,
    options: GeneratorOptions,
    *,
    logger: Optional[LoggerLike] = None,
) -> None:
    """Write the Markdown documentation of a tag list to a path or stdout (`-`).

    On failure the destination may hold partial output and must be discarded.
    """
    with open_output(target) as out:
        generate(tag_list, options, out, logger=logger)
