from __future__ import annotations

from pathlib import Path


class XmlDocError(Exception):
    """Base class for every fatal error raised by xmldoc_gen."""


class SchemaError(XmlDocError, ValueError):
    """The deserialized document does not have the shape of a tag list."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{message} (at {path})" if path else message)
        self.message = message
        self.path = path


class SourceReadError(XmlDocError):
    """A tag list source file could not be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to read tag list from {str(path)!r}: {reason}")
        self.path = path
        self.reason = reason


class OutputOpenError(XmlDocError):
    """The output destination could not be created."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to open output {str(path)!r}: {reason}")
        self.path = path
        self.reason = reason
