from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


class DocumentBuilder(Protocol):
    """Minimal protocol for the rendering engine the converter drives."""

    def new_document(self) -> Any:  # pragma: no cover - typing
        ...

    def add_section(self, doc: Any) -> Any:  # pragma: no cover - typing
        ...

    def add_paragraph(self, section: Any) -> Any:  # pragma: no cover - typing
        ...

    def append_html(self, paragraph: Any, html: str) -> None:  # pragma: no cover - typing
        ...

    def append_picture(self, section: Any, data: bytes) -> Any:  # pragma: no cover - typing
        ...

    def serialize(self, doc: Any, fmt: str) -> bytes:  # pragma: no cover - typing
        ...


class CancelToken(Protocol):
    def is_set(self) -> bool:  # pragma: no cover - typing
        ...


@dataclass(frozen=True)
class ResourceFile:
    """A file shipped alongside the HTML document.

    - path: location of the file (absolute once it comes out of a bundle)
    - data: optional in-memory bytes; when absent the file is read on demand
    """

    path: Path
    data: bytes | None = field(default=None, repr=False, compare=False)

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        return self.path.read_bytes()

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding, errors="replace")


class ResourceSet(Sequence[ResourceFile]):
    """Ordered resource files, in archive enumeration order."""

    def __init__(self, files: Iterable[ResourceFile] = ()) -> None:
        self._files: tuple[ResourceFile, ...] = tuple(files)

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path]) -> ResourceSet:
        return cls(ResourceFile(Path(p)) for p in paths)

    def paths(self) -> list[str]:
        return [str(f.path) for f in self._files]

    def __getitem__(self, index):  # type: ignore[no-untyped-def]
        return self._files[index]

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[ResourceFile]:
        return iter(self._files)

    def __repr__(self) -> str:
        return f"ResourceSet({len(self._files)} files)"


@dataclass(frozen=True)
class ReferenceBinding:
    """Result of resolving one ``src``/``href`` value against a resource set."""

    reference: str
    expected_path: str
    resource: ResourceFile | None

    @property
    def resolved(self) -> bool:
        return self.resource is not None


@dataclass(frozen=True)
class EmbeddedImage:
    reference: str
    path: Path
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class ConversionRequest:
    html_content: str
    resources: ResourceSet = field(default_factory=ResourceSet)
    source_name: str | None = None
