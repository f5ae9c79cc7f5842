from __future__ import annotations

import pytest
from bs4 import NavigableString

from bundle2docx.errors import TreeMutationError
from bundle2docx.transform.sanitize import parse_html, serialize_html
from bundle2docx.transform.tree import detach, replace_in_parent


def test_replace_in_parent_keeps_position() -> None:
    tree = parse_html("<p>a<b>x</b>c</p>")
    replace_in_parent(tree.find("b"), NavigableString("X"), stage="test")
    assert serialize_html(tree) == "<p>aXc</p>"


def test_detach_removes_subtree() -> None:
    tree = parse_html("<div><p>a<b>x</b></p><p>b</p></div>")
    removed = detach(tree.find("p"), stage="test")
    assert serialize_html(tree) == "<div><p>b</p></div>"
    assert removed.find("b") is not None


def test_replace_orphan_raises() -> None:
    node = parse_html("<b>x</b>").find("b").extract()
    with pytest.raises(TreeMutationError) as excinfo:
        replace_in_parent(node, NavigableString("y"), stage="embed", reference="a.png")
    err = excinfo.value
    assert err.operation == "replace"
    assert err.stage == "embed"
    assert err.reference == "a.png"
    assert str(err) == "Cannot replace a node that has no parent (stage: embed, reference: 'a.png')"


def test_detach_orphan_raises() -> None:
    node = parse_html("<b>x</b>").find("b").extract()
    with pytest.raises(TreeMutationError, match="Cannot detach a node that has no parent"):
        detach(node, stage="sanitize")
