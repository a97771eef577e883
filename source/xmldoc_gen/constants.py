# source/xmldoc_gen/constants.py
from __future__ import annotations

# The latest tag list schema revision understood by this version of xmldoc-gen.
SCHEMA_VERSION = "r1"

# Markdown heading level used for tag headers unless configured otherwise.
HEADER_LEVEL_DEFAULT = 3
HEADER_LEVEL_MIN = 1
HEADER_LEVEL_MAX = 6

# Output path sentinel meaning "write to standard output".
STDOUT_SENTINEL = "-"

# Renderers the mdBook preprocessor mode can feed.
SUPPORTED_RENDERERS: tuple[str, ...] = ("html",)

# Key under [preprocessor.<name>] in book.toml and the chapter directive name.
PREPROCESSOR_NAME = "xmldoc"

# Process exit codes.
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_LOG_SETUP = 3

# Schema keys whose plain scalar values are commonly prose and may contain
# ": " (re-quoted when lenient YAML parsing kicks in).
PROSE_KEYS: tuple[str, ...] = (
    "brief",
    "description",
    "expected",
    "default",
    "value",
)
