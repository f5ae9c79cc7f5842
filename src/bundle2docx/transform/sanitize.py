"""Parse untrusted HTML and strip elements the document builder cannot render.

The tree used for the rest of the pipeline comes from BeautifulSoup's
``html.parser`` builder, which tolerates tag soup and keeps attribute order
and text as written. lxml's recovering HTML parser runs over the same input
only to surface parse anomalies as warnings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter
from lxml import etree

from bundle2docx.error_handling import ErrorManager
from bundle2docx.errors import MalformedInputError
from bundle2docx.transform.tree import detach

logger = logging.getLogger(__name__)

DISALLOWED_TAGS: tuple[str, ...] = ("script", "style")

# Number of individual parse errors copied into the warning details
_MAX_REPORTED_PARSE_ERRORS = 5


def _report_parse_anomalies(raw: str, errors: ErrorManager) -> None:
    parser = etree.HTMLParser(recover=True, encoding="utf-8")
    try:
        etree.fromstring(raw.encode("utf-8"), parser)
    except (etree.LxmlError, UnicodeError) as exc:
        errors.warn("HTML-PARSE-002", "HTML validation pass failed", exception=exc)
        return

    entries = list(parser.error_log)
    if not entries:
        return
    for entry in entries:
        logger.debug("HTML parse error at %d:%d: %s", entry.line, entry.column, entry.message)
    errors.warn(
        "HTML-PARSE-001",
        f"HTML content contains {len(entries)} parse error(s)",
        extra={
            "parse_errors": [
                f"{e.line}:{e.column} {e.message}" for e in entries[:_MAX_REPORTED_PARSE_ERRORS]
            ],
            "parse_error_count": len(entries),
        },
    )


def parse_html(raw: str, errors: ErrorManager | None = None) -> BeautifulSoup:
    """Parse ``raw`` into a mutable tree.

    Ordinary malformed markup never fails; only markup the parser rejects
    outright raises :class:`MalformedInputError`.
    """

    errors = errors or ErrorManager()
    try:
        tree = BeautifulSoup(raw, "html.parser", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        errors.error("HTML-PARSE-FATAL", "HTML content could not be parsed", exception=exc)
        raise MalformedInputError(exc) from exc

    _report_parse_anomalies(raw, errors)
    return tree


def strip_disallowed_elements(
    tree: BeautifulSoup,
    tags: Iterable[str] = DISALLOWED_TAGS,
    errors: ErrorManager | None = None,
) -> BeautifulSoup:
    """Remove every element whose tag is in ``tags``, wherever it occurs.

    Removing an element removes its subtree; nested matches inside an already
    removed element are detached from that (now orphaned) subtree, which is
    harmless.
    """

    names = list(tags)
    nodes = tree.find_all(names)
    for node in nodes:
        detach(node, stage="sanitize", reference=node.name)
    if errors is not None:
        errors.decision(
            "SAN-001", "sanitize.strip", len(nodes), extra={"tags": ",".join(names)}
        )
    return tree


class _SourceOrderFormatter(HTMLFormatter):
    """Minimal escaping, attributes in parse order, void elements as ``<br>``."""

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


_FORMATTER = _SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


def serialize_html(tree: BeautifulSoup) -> str:
    return tree.decode(formatter=_FORMATTER)


def sanitize_html(
    raw: str,
    errors: ErrorManager | None = None,
    tags: Iterable[str] = DISALLOWED_TAGS,
) -> BeautifulSoup:
    """Parse ``raw`` and remove non-renderable elements."""

    tree = parse_html(raw, errors)
    return strip_disallowed_elements(tree, tags, errors)


__all__ = [
    "DISALLOWED_TAGS",
    "parse_html",
    "sanitize_html",
    "serialize_html",
    "strip_disallowed_elements",
]
