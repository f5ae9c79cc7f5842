"""HTML-to-DOCX conversion pipeline: validate, sanitize, embed, render."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bundle2docx.error_handling import ErrorContext, ErrorManager, WarningRecord
from bundle2docx.errors import (
    ConversionCancelled,
    InvalidInputError,
    RenderingFailedError,
    UnsupportedImageError,
)
from bundle2docx.feature_logger import log_pipeline_configuration
from bundle2docx.model.options import ConversionOptions
from bundle2docx.transform.embed import EmbedOutcome, embed_resources
from bundle2docx.transform.sanitize import sanitize_html, serialize_html
from bundle2docx.types import CancelToken, ConversionRequest, DocumentBuilder

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    document: bytes
    warnings: list[WarningRecord] = field(default_factory=list)
    images: int = 0
    stylesheets: int = 0


def _checkpoint(cancel: CancelToken | None, stage: str) -> None:
    if cancel is not None and cancel.is_set():
        logger.info("Conversion cancelled before %s", stage)
        raise ConversionCancelled(stage)


class HtmlToDocxConverter:
    """Turn a :class:`ConversionRequest` into document bytes.

    The converter holds configuration and a document builder only; every call
    to :meth:`convert` works on its own tree, document and warning list, so
    one instance can serve many requests.
    """

    def __init__(
        self,
        builder: DocumentBuilder | None = None,
        options: ConversionOptions | None = None,
    ) -> None:
        if builder is None:
            from bundle2docx.render.docx_builder import DocxDocumentBuilder

            builder = DocxDocumentBuilder()
        self.builder = builder
        self.options = options or ConversionOptions()

    def convert(
        self, request: ConversionRequest, cancel: CancelToken | None = None
    ) -> ConversionResult:
        errors = ErrorManager(ErrorContext(source_name=request.source_name))

        _checkpoint(cancel, "validate")
        if not request.html_content:
            raise InvalidInputError()
        logger.info("Resource files count: %d", len(request.resources))
        log_pipeline_configuration(self.options)

        _checkpoint(cancel, "sanitize")
        logger.info("Sanitizing HTML content.")
        tree = sanitize_html(
            request.html_content, errors.for_stage("sanitize"), self.options.disallowed_tags
        )

        _checkpoint(cancel, "embed")
        logger.info("Processing HTML content for embedded resources.")
        outcome = embed_resources(
            tree,
            request.resources,
            self.options.match_policy,
            errors.for_stage("embed"),
            placeholder_template=self.options.placeholder_template,
        )

        _checkpoint(cancel, "render")
        document, embedded = self._render(outcome, errors.for_stage("render"))

        return ConversionResult(
            document=document,
            warnings=errors.warnings,
            images=embedded,
            stylesheets=outcome.stylesheets,
        )

    def _render(self, outcome: EmbedOutcome, errors: ErrorManager) -> tuple[bytes, int]:
        """Build and serialize the document; returns the bytes and the picture count."""

        builder = self.builder
        html = serialize_html(outcome.tree)

        doc = builder.new_document()
        section = builder.add_section(doc)
        paragraph = builder.add_paragraph(section)

        logger.info("Adding HTML content to the document.")
        # HTML that fails once fails identically on retry: no retry here
        try:
            builder.append_html(paragraph, html)
        except Exception as exc:
            errors.error("RENDER-HTML", "Error in append_html", exception=exc)
            raise RenderingFailedError("append_html", exc) from exc

        embedded = 0
        for image in outcome.images:
            try:
                builder.append_picture(section, image.data)
            except UnsupportedImageError as exc:
                errors.warn(
                    "RES-UNSUPPORTED",
                    f"Image could not be embedded and was skipped: {image.path}",
                    extra={"image_path": str(image.path)},
                    exception=exc,
                    reference=image.reference,
                )
                continue
            except Exception as exc:
                errors.error(
                    "RENDER-PICTURE",
                    f"Error appending picture {image.path}",
                    extra={"image_path": str(image.path)},
                    exception=exc,
                )
                raise RenderingFailedError("append_picture", exc) from exc
            embedded += 1

        try:
            data = builder.serialize(doc, self.options.output_format)
        except Exception as exc:
            errors.error("RENDER-SAVE", "Error serializing document", exception=exc)
            raise RenderingFailedError("serialize", exc) from exc
        logger.info("Document serialized (%d bytes).", len(data))
        return data, embedded


def convert_html(
    request: ConversionRequest,
    options: ConversionOptions | None = None,
    cancel: CancelToken | None = None,
) -> ConversionResult:
    """Convert with the default python-docx builder."""

    return HtmlToDocxConverter(options=options).convert(request, cancel)


__all__ = ["ConversionResult", "HtmlToDocxConverter", "convert_html"]
