# source/xmldoc_gen/io.py
from __future__ import annotations

import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, TextIO

import yaml

from .constants import PROSE_KEYS, STDOUT_SENTINEL
from .errors import OutputOpenError, SourceReadError
from .log import LoggerLike, get_logger
from .schema import FileRoot, parse_file_root

_PROSE_LINE_RE = re.compile(
    r"^(\s*(?:-\s*)?(?:" + "|".join(PROSE_KEYS) + r"):\s*)(.+)$"
)
# Any `key: |` or `key: >` line; group 1 ends where the key starts.
_BLOCK_OPENER_RE = re.compile(
    r"^(\s*(?:-\s+)?)[^\s#-][^:]*:\s+[|>][-+0-9]*\s*(?:#.*)?$"
)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _sanitize_yaml_for_pyyaml(raw: str) -> tuple[str, list[tuple[int, str, str]]]:
    """Return (sanitized_yaml, changes).

    Each change is (line_number_1_based, original_line, new_line). Lines
    inside `|` and `>` block scalars are literal text and never touched.
    """
    changes: list[tuple[int, str, str]] = []
    out_lines: list[str] = []
    # Key column of the block scalar being skipped, if any.
    block_column: Optional[int] = None

    for i, line in enumerate(raw.splitlines(), start=1):
        if block_column is not None:
            if not line.strip() or _indent(line) > block_column:
                out_lines.append(line)
                continue
            block_column = None

        opener = _BLOCK_OPENER_RE.match(line)
        if opener:
            block_column = len(opener.group(1))
            out_lines.append(line)
            continue

        match = _PROSE_LINE_RE.match(line)
        if not match:
            out_lines.append(line)
            continue

        prefix, value = match.group(1), match.group(2)

        # Already quoted or a flow collection.
        if value.startswith(("'", '"', "[", "{")):
            out_lines.append(line)
            continue

        # PyYAML rejects plain scalars containing ":" followed by whitespace
        # (e.g. "brief: Format: one of a, b"). Keep trailing comments.
        body, comment = value, ""
        m = re.match(r"^(.*?)(\s+#.*)$", value)
        if m:
            body, comment = m.group(1), m.group(2)

        if re.search(r":(?=\s|$)", body):
            escaped = body.replace("\\", "\\\\").replace('"', '\\"')
            new_line = f'{prefix}"{escaped}"{comment}'
            out_lines.append(new_line)
            changes.append((i, line, new_line))
        else:
            out_lines.append(line)

    sanitized = "\n".join(out_lines) + ("\n" if raw.endswith("\n") else "")
    return sanitized, changes


def parse_yaml_text(
    raw: str, *, origin: str = "<string>", logger: Optional[LoggerLike] = None
) -> Any:
    """Parse YAML, retrying once with prose values quoted if strict parsing fails."""
    log = get_logger(__name__, logger)
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        sanitized, changes = _sanitize_yaml_for_pyyaml(raw)
        if not changes:
            raise

    data = yaml.safe_load(sanitized)

    # Warn with specifics (cap to avoid spam)
    log.warning(
        "parsed %s after sanitizing %d line(s); consider quoting values "
        "containing ':' followed by whitespace",
        origin,
        len(changes),
    )
    for ln, old, new in changes[:10]:
        log.warning("%s:%d: %s", origin, ln, old.strip())
        log.warning("%s:%d: %s", origin, ln, new.strip())
    if len(changes) > 10:
        log.warning("(and %d more)", len(changes) - 10)
    return data


def read_schema(path: Path, *, logger: Optional[LoggerLike] = None) -> FileRoot:
    """Read and deserialize a tag list file.

    I/O and YAML syntax problems raise SourceReadError; a document with the
    wrong shape raises SchemaError.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(path, str(e)) from e

    try:
        data = parse_yaml_text(raw, origin=str(path), logger=logger)
    except yaml.YAMLError as e:
        raise SourceReadError(path, f"invalid YAML: {e}") from e

    return parse_file_root(data)


@contextmanager
def open_output(target: str | Path) -> Iterator[TextIO]:
    """Open the generation destination.

    The `-` sentinel yields standard output, which is flushed but not closed.
    Any other target is created (with missing parent directories) or
    truncated.
    """
    if str(target) == STDOUT_SENTINEL:
        yield sys.stdout
        sys.stdout.flush()
        return

    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("w", encoding="utf-8", newline="")
    except OSError as e:
        raise OutputOpenError(path, str(e)) from e

    with handle:
        yield handle
