"""The only two mutations the pipeline performs on a parsed HTML tree.

Both refuse to operate on a node that is not attached to a parent, which
would otherwise silently do nothing (``extract``) or fail deep inside
BeautifulSoup (``replace_with``).
"""

from __future__ import annotations

from bs4.element import PageElement

from bundle2docx.errors import TreeMutationError


def replace_in_parent(
    node: PageElement,
    replacement: PageElement,
    *,
    stage: str,
    reference: str | None = None,
) -> PageElement:
    """Put ``replacement`` at ``node``'s position among its siblings."""

    if node.parent is None:
        raise TreeMutationError("replace", stage, reference)
    node.replace_with(replacement)
    return replacement


def detach(node: PageElement, *, stage: str, reference: str | None = None) -> PageElement:
    """Remove ``node`` (and its whole subtree) from the tree."""

    if node.parent is None:
        raise TreeMutationError("detach", stage, reference)
    return node.extract()


__all__ = ["replace_in_parent", "detach"]
