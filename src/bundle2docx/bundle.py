"""Turn an uploaded ZIP bundle into a :class:`ConversionRequest`.

A bundle holds one HTML file plus the images and stylesheets it refers to,
in any directory layout. The first HTML file (sorted, recursive) is the
document; every other file is a resource, kept in archive order.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from bundle2docx.errors import BundleError
from bundle2docx.types import ConversionRequest, ResourceFile, ResourceSet

logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm")


@dataclass
class Bundle:
    root: Path
    html_path: Path
    resources: ResourceSet

    def read_html(self) -> str:
        # utf-8-sig drops a leading BOM some editors write
        return self.html_path.read_text(encoding="utf-8-sig", errors="replace")

    def to_request(self) -> ConversionRequest:
        return ConversionRequest(
            html_content=self.read_html(),
            resources=self.resources,
            source_name=self.html_path.name,
        )


def _safe_extract(archive: zipfile.ZipFile, dest_dir: Path, zip_path: Path) -> list[Path]:
    """Extract every member and return the extracted files in archive order."""

    root = dest_dir.resolve()
    files: list[Path] = []
    for member in archive.infolist():
        target = (root / member.filename).resolve()
        if target != root and root not in target.parents:
            raise BundleError(zip_path, f"member escapes extraction directory: {member.filename}")
        if not member.is_dir() and target not in files:
            files.append(target)
    archive.extractall(root)
    return files


def extract_bundle(zip_path: Path, dest_dir: Path) -> Bundle:
    """Extract ``zip_path`` into ``dest_dir`` and locate the HTML document."""

    zip_path = Path(zip_path)
    if zip_path.suffix.lower() != ".zip":
        raise BundleError(zip_path, "only ZIP files are supported")

    try:
        with zipfile.ZipFile(zip_path) as archive:
            files = _safe_extract(archive, dest_dir, zip_path)
    except zipfile.BadZipFile as exc:
        raise BundleError(zip_path, f"not a valid ZIP archive ({exc})") from exc

    root = dest_dir.resolve()
    html_path = next((p for p in sorted(files) if p.suffix.lower() in HTML_SUFFIXES), None)
    if html_path is None:
        logger.error("No HTML file found in the ZIP archive: %s", zip_path)
        raise BundleError(zip_path, "the ZIP file must contain an HTML file")

    resources = ResourceSet(ResourceFile(p) for p in files if p != html_path)
    logger.info("Received HTML file: %s", html_path.name)
    if not resources:
        logger.warning("No additional resources (e.g., images) found in the ZIP archive.")
    return Bundle(root=root, html_path=html_path, resources=resources)


@contextmanager
def open_bundle(zip_path: Path) -> Iterator[Bundle]:
    """Extract ``zip_path`` to a temporary directory that is removed on exit."""

    temp_dir = Path(tempfile.mkdtemp(prefix="bundle2docx-"))
    try:
        yield extract_bundle(zip_path, temp_dir)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def output_name_for(zip_path: Path) -> str:
    return f"{Path(zip_path).stem}.docx"


__all__ = ["Bundle", "HTML_SUFFIXES", "extract_bundle", "open_bundle", "output_name_for"]
