import io
import logging
import re

import pytest

from xmldoc_gen.generator import (
    BadHeaderLevel,
    GeneratorOptions,
    HeaderLevel,
    RenderWriteError,
    generate,
)
from xmldoc_gen.loader import load
from xmldoc_gen.model import Tag, TagId, TagList
from xmldoc_gen.schema import parse_file_root
from xmldoc_gen.writer import render_md


def load_model(tags: list, namespace: str = "ex") -> TagList:
    schema = parse_file_root(
        {"schema": {"version": "r1", "namespace": namespace}, "tags": tags}
    )
    return load(schema, logger=logging.getLogger("tests.generator")).model


def render(model: TagList, **kwargs) -> str:
    return render_md(model, GeneratorOptions(**kwargs), logger=logging.getLogger("tests.generator"))


class FailingSink:
    """Text sink that fails after a number of successful writes."""

    def __init__(self, fail_after: int) -> None:
        self.fail_after = fail_after
        self.writes: list[str] = []

    def write(self, text: str) -> int:
        if len(self.writes) >= self.fail_after:
            raise OSError(28, "No space left on device")
        self.writes.append(text)
        return len(text)


@pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
def test_header_levels_in_range(level):
    assert HeaderLevel(level).level == level


@pytest.mark.parametrize("level", [0, 7, -1, True, "3"])
def test_header_levels_out_of_range(level):
    with pytest.raises(BadHeaderLevel) as excinfo:
        HeaderLevel(level)

    assert excinfo.value.level == level


def test_single_root_without_attributes_or_children():
    model = load_model([{"id": "Root", "description": "The document root."}])

    assert render(model) == (
        "### `ex:Root`\n\n"
        "The document root.\n\n"
        "_**Parents:**_\n\n"
        "This tag has no possible parents!\n\n"
    )


def test_empty_tag_list_renders_nothing():
    assert render(load_model([])) == ""


def test_heading_level_is_configurable():
    model = load_model([{"id": "Root", "description": "Root."}])

    out = render(model, level=HeaderLevel(1))

    assert out.startswith("# `ex:Root`\n\n")


def test_attribute_block():
    model = load_model(
        [
            {
                "id": "Root",
                "description": "Root.",
                "attributes": [
                    {"id": "plain", "brief": "Plain."},
                    {
                        "id": "full",
                        "brief": "Full.",
                        "description": "Longer text.",
                        "expected": "an integer",
                        "default": "0",
                        "optional": True,
                    },
                    {"id": "dflt", "brief": "Default only.", "default": "x"},
                ],
            }
        ]
    )

    out = render(model)

    assert (
        "_**Attributes:**_\n\n"
        "* `plain` - Plain.\n\n"
        "* `full` - Full. _(optional)_\n"
        "  * Longer text.\n"
        "  * _Expected value:_ an integer\n"
        "  * _Default value:_ 0\n\n"
        "* `dflt` - Default only.\n"
        "  * _Default value:_ x\n\n"
        "_**Parents:**_\n\n"
    ) in out


def test_children_link_resolved_and_inline_unresolved():
    model = load_model(
        [
            {
                "id": "Root",
                "description": "Root.",
                "children": [
                    {"ref": "Leaf"},
                    {"ref": "Ghost", "optional": True},
                    {"ref": "Leaf", "multiple": True},
                    {"ref": "Leaf", "optional": True, "multiple": True},
                ],
            },
            {"id": "Leaf", "description": "Leaf."},
        ]
    )

    out = render(model)

    assert (
        "_**Children:**_\n\n"
        "* [`ex:Leaf`](#exleaf)\n"
        "* `ex:Ghost` _(optional)_\n"
        "* [`ex:Leaf`](#exleaf) _(repeated)_\n"
        "* [`ex:Leaf`](#exleaf) _(optional, repeated)_\n\n"
    ) in out
    assert "[`ex:Ghost`]" not in out


def test_parents_sorted_by_declaration_index():
    model = load_model(
        [
            {"id": "Zed", "description": "Z.", "children": [{"ref": "Shared"}]},
            {"id": "Alpha", "description": "A.", "children": [{"ref": "Shared"}]},
            {"id": "Mid", "description": "M.", "children": [{"ref": "Shared"}]},
            {"id": "Shared", "description": "S."},
        ]
    )

    out = render(model)

    assert (
        "### `ex:Shared`\n\n"
        "S.\n\n"
        "_**Parents:**_\n\n"
        "* [`ex:Zed`](#exzed)\n"
        "* [`ex:Alpha`](#exalpha)\n"
        "* [`ex:Mid`](#exmid)\n\n"
    ) in out


def test_value_and_example_blocks():
    model = load_model(
        [
            {
                "id": "Count",
                "description": "Counter.",
                "value": "A positive integer.",
                "example": "<ex:Count>3</ex:Count>\n\n  ",
            }
        ]
    )

    out = render(model)

    assert "_**Value:**_\n\nA positive integer.\n\n_**Parents:**_" in out
    assert out.endswith(
        "_**Example:**_\n\n```xml\n<ex:Count>3</ex:Count>\n```\n\n"
    )


def test_anchor_is_lowercase_concatenation():
    model = load_model(
        [
            {"id": "Outer-Tag", "description": "O.", "children": [{"ref": "Inner.Tag"}]},
            {"id": "Inner.Tag", "description": "I."},
        ],
        namespace="NS",
    )

    out = render(model)

    assert "* [`NS:Inner.Tag`](#nsinner.tag)\n" in out
    assert "* [`NS:Outer-Tag`](#nsouter-tag)\n" in out


def test_tags_render_in_declaration_order_regardless_of_storage():
    tags = {
        TagId(1): Tag(id=TagId(1), name="Second", description="2", index=2),
        TagId(0): Tag(id=TagId(0), name="First", description="1", index=1),
    }
    model = TagList(namespace="ex", tags=tags, names={"First": TagId(0), "Second": TagId(1)})

    out = render(model)

    assert out.index("`ex:First`") < out.index("`ex:Second`")


def test_rendering_is_deterministic():
    model = load_model(
        [
            {"id": "Root", "description": "R.", "children": [{"ref": "A"}, {"ref": "B"}]},
            {"id": "A", "description": "A.", "children": [{"ref": "B"}]},
            {"id": "B", "description": "B.", "children": [{"ref": "Nope"}]},
        ]
    )

    assert render(model) == render(model)
    assert render(model, crlf=True) == render(model, crlf=True)


def test_crlf_newlines():
    model = load_model(
        [
            {
                "id": "Root",
                "description": "R.",
                "attributes": [{"id": "a", "brief": "A.", "default": "1"}],
                "children": [{"ref": "Leaf"}],
            },
            {"id": "Leaf", "description": "L."},
        ]
    )

    out = render(model, crlf=True)

    assert re.search(r"(?<!\r)\n", out) is None
    assert out.replace("\r\n", "\n") == render(model)


def test_unknown_parent_id_is_logged_and_skipped(caplog):
    tags = {
        TagId(0): Tag(id=TagId(0), name="Root", description="R.", index=1),
        TagId(1): Tag(id=TagId(1), name="Leaf", description="L.", index=2),
    }
    model = TagList(
        namespace="ex",
        tags=tags,
        names={"Root": TagId(0), "Leaf": TagId(1)},
        parents={TagId(1): {TagId(0), TagId(99)}},
    )

    with caplog.at_level(logging.WARNING, logger="tests.generator"):
        out = render(model)

    assert "* [`ex:Root`](#exroot)\n\n" in out
    assert "failed to resolve parent name for 1 -> 99" in caplog.text


def test_write_fault_aborts_with_cause():
    model = load_model(
        [{"id": "Root", "description": "R.", "attributes": [{"id": "a", "brief": "A."}]}]
    )
    sink = FailingSink(fail_after=3)

    with pytest.raises(RenderWriteError) as excinfo:
        generate(model, GeneratorOptions(), sink)

    assert isinstance(excinfo.value.inner, OSError)
    assert excinfo.value.__cause__ is excinfo.value.inner
    assert len(sink.writes) == 3


def test_closed_sink_is_a_write_fault():
    model = load_model([{"id": "Root", "description": "R."}])
    buf = io.StringIO()
    buf.close()

    with pytest.raises(RenderWriteError) as excinfo:
        generate(model, GeneratorOptions(), buf)

    assert excinfo.value.description == "header of 'Root'"
    assert "description: header of 'Root'" in str(excinfo.value)
