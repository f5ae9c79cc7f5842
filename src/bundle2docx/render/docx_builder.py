"""Default document builder backed by python-docx.

The converter only needs the :class:`~bundle2docx.types.DocumentBuilder`
protocol; this implementation writes the sanitized HTML as formatted runs
of one paragraph and each extracted image as its own paragraph.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.section import WD_SECTION
from docx.image.exceptions import UnrecognizedImageError
from docx.text.paragraph import Paragraph
from PIL import Image, UnidentifiedImageError

from bundle2docx.errors import UnsupportedImageError

logger = logging.getLogger(__name__)

# Formats python-docx can embed as-is; anything else Pillow can read goes through PNG
_NATIVE_IMAGE_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "TIFF"}

_SKIPPED_TAGS = {"head", "script", "style", "template", "noscript"}
_BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "div", "dl", "dt", "dd", "figure",
    "figcaption", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li",
    "main", "nav", "ol", "p", "pre", "section", "table", "tr", "ul",
}  # fmt: skip
_BOLD_TAGS = {"b", "strong", "h1", "h2", "h3", "h4", "h5", "h6", "th"}
_ITALIC_TAGS = {"i", "em", "cite", "var"}
_UNDERLINE_TAGS = {"u", "ins"}
_WS_RE = re.compile(r"\s+")


class AppendFailed(RuntimeError):
    """The builder could not add content to the document."""


@dataclass
class DocxSection:
    document: DocxDocument
    index: int


@dataclass(frozen=True)
class _RunFormat:
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def derive(self, tag: str) -> _RunFormat:
        return _RunFormat(
            bold=self.bold or tag in _BOLD_TAGS,
            italic=self.italic or tag in _ITALIC_TAGS,
            underline=self.underline or tag in _UNDERLINE_TAGS,
        )


class _HtmlRunWriter:
    """Write an HTML fragment into a single paragraph as formatted runs."""

    def __init__(self, paragraph: Paragraph) -> None:
        self.paragraph = paragraph
        self._has_text = False
        self._pending_break = False

    def _break(self) -> None:
        self.paragraph.add_run().add_break()
        self._pending_break = False

    def _text(self, text: str, fmt: _RunFormat) -> None:
        text = _WS_RE.sub(" ", text)
        if not text.strip():
            # Keep one separating space between inline elements
            if text and self._has_text and not self._pending_break:
                self.paragraph.add_run(" ")
            return
        if self._pending_break and self._has_text:
            self._break()
            text = text.lstrip()
        run = self.paragraph.add_run(text)
        run.bold = fmt.bold or None
        run.italic = fmt.italic or None
        run.underline = fmt.underline or None
        self._has_text = True

    def write(self, node: Tag, fmt: _RunFormat = _RunFormat()) -> None:
        for child in node.children:
            if isinstance(child, (Comment, Declaration, Doctype, ProcessingInstruction)):
                continue
            if isinstance(child, NavigableString):
                self._text(str(child), fmt)
                continue
            if not isinstance(child, Tag) or child.name in _SKIPPED_TAGS:
                continue
            if child.name == "br":
                self._break()
                continue
            block = child.name in _BLOCK_TAGS
            if block:
                self._pending_break = True
            self.write(child, fmt.derive(child.name))
            if block:
                self._pending_break = True


class DocxDocumentBuilder:
    """python-docx implementation of the document builder protocol."""

    def new_document(self) -> DocxDocument:
        return Document()

    def add_section(self, doc: DocxDocument) -> DocxSection:
        # A new document already has one (empty) section
        if len(doc.paragraphs) == 0 and len(doc.sections) == 1:
            return DocxSection(document=doc, index=0)
        doc.add_section(WD_SECTION.NEW_PAGE)
        return DocxSection(document=doc, index=len(doc.sections) - 1)

    def add_paragraph(self, section: DocxSection) -> Paragraph:
        return section.document.add_paragraph()

    def append_html(self, paragraph: Paragraph, html: str) -> None:
        try:
            fragment = BeautifulSoup(html, "html.parser")
            _HtmlRunWriter(paragraph).write(fragment)
        except (ValueError, TypeError) as exc:
            raise AppendFailed(f"Failed to append HTML content to the document: {exc}") from exc

    def append_picture(self, section: DocxSection, data: bytes) -> Any:
        doc = section.document
        stream = io.BytesIO(_ensure_embeddable(data))
        try:
            shape = doc.add_paragraph().add_run().add_picture(stream)
        except UnrecognizedImageError as exc:
            raise UnsupportedImageError(f"Unsupported image data: {exc}") from exc

        docx_section = doc.sections[section.index]
        usable = docx_section.page_width - docx_section.left_margin - docx_section.right_margin
        if shape.width > usable:
            shape.height = int(shape.height * usable / shape.width)
            shape.width = usable
        return shape

    def serialize(self, doc: DocxDocument, fmt: str) -> bytes:
        if fmt != "docx":
            raise ValueError(f"Unsupported output format '{fmt}'. Valid values: ['docx']")
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()


def _ensure_embeddable(data: bytes) -> bytes:
    """Return ``data`` unchanged if python-docx can embed it, else a PNG re-encoding."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format in _NATIVE_IMAGE_FORMATS:
                return data
            logger.debug("Transcoding %s image to PNG", img.format)
            out = io.BytesIO()
            img.save(out, format="PNG")
            return out.getvalue()
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedImageError(f"Unreadable image data: {exc}") from exc


__all__ = ["AppendFailed", "DocxDocumentBuilder", "DocxSection"]
