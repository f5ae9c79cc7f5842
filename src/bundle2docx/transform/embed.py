"""Resolve ``<img>`` and stylesheet ``<link>`` references and inline them.

Images are pulled out of the tree (their bytes go to the document builder
separately) and replaced by a placeholder text node. Stylesheets are
replaced by a ``<style>`` element carrying the file's text. References that
do not resolve are removed and recorded as warnings.

Embedding destroys the reference nodes it handles, so running it again on
its own output finds nothing left to do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString
from bs4.element import Tag

from bundle2docx.error_handling import ErrorManager
from bundle2docx.errors import ResourceNotFoundWarning
from bundle2docx.model.options import ConversionOptions, MatchPolicy
from bundle2docx.resolve.matcher import resolve_reference
from bundle2docx.resolve.paths import common_base_directory
from bundle2docx.transform.tree import detach, replace_in_parent
from bundle2docx.types import EmbeddedImage, ReferenceBinding, ResourceSet

logger = logging.getLogger(__name__)

STAGE = "embed"


@dataclass
class EmbedOutcome:
    tree: BeautifulSoup
    images: list[EmbeddedImage] = field(default_factory=list)
    stylesheets: int = 0
    removed: int = 0
    base_directory: str = ""


def _is_stylesheet_link(node: Tag) -> bool:
    return node.get("rel") == "stylesheet" and node.has_attr("href")


def _warn_not_found(errors: ErrorManager, kind: str, binding: ReferenceBinding) -> None:
    payload = ResourceNotFoundWarning(binding.reference, binding.expected_path)
    errors.warn(
        "RES-NOT-FOUND",
        f"Resource file for <{kind}> tag not found: {binding.reference}. "
        f"Expected path: {binding.expected_path}",
        extra={"expected_path": binding.expected_path, "tag": kind},
        exception=payload,
        reference=binding.reference,
    )


def _remove(
    node: Tag, outcome: EmbedOutcome, reference: str, errors: ErrorManager, error_type: str
) -> None:
    errors.error_policy(STAGE, error_type, f"remove <{node.name}>", details=reference)
    detach(node, stage=STAGE, reference=reference)
    outcome.removed += 1


def _embed_images(
    outcome: EmbedOutcome,
    resources: ResourceSet,
    policy: MatchPolicy,
    placeholder_template: str,
    errors: ErrorManager,
) -> None:
    for img in outcome.tree.find_all("img"):
        if not img.has_attr("src"):
            continue
        src = img["src"]
        if not src or not src.strip():
            errors.warn("IMG-SRC-EMPTY", "Skipping <img> tag with missing 'src' attribute.")
            continue

        binding = resolve_reference(src, resources, outcome.base_directory, policy)
        if binding.resource is None:
            _warn_not_found(errors, "img", binding)
            _remove(img, outcome, src, errors, "resource_not_found")
            continue

        try:
            data = binding.resource.read_bytes()
        except OSError as exc:
            errors.warn(
                "RES-READ-FAILED",
                f"Resource file for <img> tag could not be read: {binding.resource.path}",
                exception=exc,
                reference=src,
            )
            _remove(img, outcome, src, errors, "resource_unreadable")
            continue

        logger.info("Embedding image: %s", binding.resource.path)
        outcome.images.append(EmbeddedImage(reference=src, path=binding.resource.path, data=data))
        placeholder = NavigableString(placeholder_template.format(src=src))
        replace_in_parent(img, placeholder, stage=STAGE, reference=src)


def _embed_stylesheets(
    outcome: EmbedOutcome,
    resources: ResourceSet,
    policy: MatchPolicy,
    errors: ErrorManager,
) -> None:
    for link in outcome.tree.find_all("link"):
        if not _is_stylesheet_link(link):
            continue
        href = link["href"]
        if not href or not href.strip():
            errors.warn(
                "LINK-HREF-EMPTY", "Skipping stylesheet <link> tag with missing 'href' attribute."
            )
            continue

        binding = resolve_reference(href, resources, outcome.base_directory, policy)
        if binding.resource is None:
            _warn_not_found(errors, "link", binding)
            _remove(link, outcome, href, errors, "resource_not_found")
            continue

        try:
            css = binding.resource.read_text()
        except OSError as exc:
            errors.warn(
                "RES-READ-FAILED",
                f"Stylesheet could not be read: {binding.resource.path}",
                exception=exc,
                reference=href,
            )
            _remove(link, outcome, href, errors, "resource_unreadable")
            continue

        logger.info("Inlining stylesheet: %s", binding.resource.path)
        style = outcome.tree.new_tag("style")
        style.string = css
        replace_in_parent(link, style, stage=STAGE, reference=href)
        outcome.stylesheets += 1


def embed_resources(
    tree: BeautifulSoup,
    resources: ResourceSet,
    policy: MatchPolicy = MatchPolicy.EXACT,
    errors: ErrorManager | None = None,
    *,
    placeholder_template: str = ConversionOptions.placeholder_template,
) -> EmbedOutcome:
    """Inline or drop every image and stylesheet reference in ``tree``.

    Returns the (mutated) tree with the extracted images in document order.
    """

    errors = errors or ErrorManager()
    base_directory = common_base_directory(resources.paths())
    logger.info("Base directory for resources: %s", base_directory or "<none>")
    for resource in resources:
        logger.debug("Resource file path: %s", resource.path)

    outcome = EmbedOutcome(tree=tree, base_directory=base_directory)
    _embed_images(outcome, resources, policy, placeholder_template, errors)
    _embed_stylesheets(outcome, resources, policy, errors)

    errors.decision(
        "EMB-001",
        "embed.result",
        f"{len(outcome.images)} image(s), {outcome.stylesheets} stylesheet(s), "
        f"{outcome.removed} removed",
    )
    logger.info("Processed linked resources in HTML content.")
    return outcome


__all__ = ["EmbedOutcome", "embed_resources"]
