from __future__ import annotations

NO_PARENTS_TEXT = "This tag has no possible parents!"


def tag_anchor(namespace: str, name: str) -> str:
    """Heading id mdBook derives for a "`ns:name`" header.

    The namespace and name are lowercased and concatenated without a separator
    or any escaping, so distinct tags can share an anchor (e.g. `a:bc` and
    `ab:c`). Output compatibility depends on this exact rule.
    """
    return namespace.lower() + name.lower()


def qualified_name(namespace: str, name: str) -> str:
    return f"{namespace}:{name}"


def inline_code(text: str) -> str:
    return f"`{text}`"


def heading(level: int, text: str) -> str:
    return "#" * level + " " + text


def subheading(text: str) -> str:
    return f"_**{text}:**_"


def tag_link(namespace: str, name: str) -> str:
    code = inline_code(qualified_name(namespace, name))
    return f"[{code}](#{tag_anchor(namespace, name)})"


def child_qualifier(optional: bool, repeatable: bool) -> str:
    """Suffix for a child bullet; empty when neither flag is set."""
    flags = [
        label for label, on in (("optional", optional), ("repeated", repeatable)) if on
    ]
    if not flags:
        return ""
    return " _(" + ", ".join(flags) + ")_"


def xml_fence(code: str, newline: str = "\n") -> str:
    """Wrap example XML in a Markdown code fence (trailing whitespace trimmed)."""
    return "```xml" + newline + code.rstrip() + newline + "```"
