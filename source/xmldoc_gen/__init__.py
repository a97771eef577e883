"""Markdown reference documentation for XML vocabularies described in YAML."""

__version__ = "0.1.0"
