import io
import logging
import sys
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from bundle2docx.errors import UnsupportedImageError  # noqa: E402


@pytest.fixture
def isolate_logging():
    """Isolate logging configuration between tests.

    The CLI reconfigures the root logger with a RichHandler; this fixture puts
    the original handlers back afterwards so later tests (and caplog) are not
    affected.
    """
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level

    logging.root.handlers.clear()
    logging.root.addHandler(logging.NullHandler())

    yield

    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)


def make_png(width: int = 4, height: int = 3, color: str = "red", fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def make_bundle(tmp_path: Path) -> Callable[..., Path]:
    """Build a ZIP bundle from a mapping of archive names to str/bytes contents."""

    def _make(files: dict[str, Any], name: str = "bundle.zip") -> Path:
        zip_path = tmp_path / name
        with zipfile.ZipFile(zip_path, "w") as archive:
            for arcname, content in files.items():
                data = content.encode("utf-8") if isinstance(content, str) else content
                archive.writestr(arcname, data)
        return zip_path

    return _make


class FakeBuilder:
    """Records every document builder call instead of rendering."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.html: str | None = None
        self.pictures: list[bytes] = []
        self.fail_on = fail_on
        self.unsupported: set[bytes] = set()

    def _maybe_fail(self, name: str) -> None:
        if self.fail_on == name:
            raise ValueError(f"{name} exploded")

    def new_document(self) -> dict[str, Any]:
        self.calls.append(("new_document", None))
        return {"sections": []}

    def add_section(self, doc: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("add_section", None))
        section: dict[str, Any] = {"paragraphs": []}
        doc["sections"].append(section)
        return section

    def add_paragraph(self, section: dict[str, Any]) -> list[Any]:
        self.calls.append(("add_paragraph", None))
        paragraph: list[Any] = []
        section["paragraphs"].append(paragraph)
        return paragraph

    def append_html(self, paragraph: list[Any], html: str) -> None:
        self.calls.append(("append_html", html))
        self._maybe_fail("append_html")
        self.html = html
        paragraph.append(html)

    def append_picture(self, section: dict[str, Any], data: bytes) -> None:
        self.calls.append(("append_picture", data))
        self._maybe_fail("append_picture")
        if data in self.unsupported:
            raise UnsupportedImageError(f"cannot embed {data!r}")
        self.pictures.append(data)
        section["paragraphs"].append([data])

    def serialize(self, doc: dict[str, Any], fmt: str) -> bytes:
        self.calls.append(("serialize", fmt))
        self._maybe_fail("serialize")
        return f"{fmt}:{len(doc['sections'])}".encode()


@pytest.fixture
def fake_builder() -> FakeBuilder:
    return FakeBuilder()
