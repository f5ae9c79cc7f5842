"""Exception types raised by the conversion pipeline.

Every exception keeps its context as attributes and builds a readable
message from them, so callers can either show ``str(exc)`` or inspect the
fields.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(RuntimeError):
    """Base class for failures that terminate a conversion."""


class InvalidInputError(ConversionError):
    def __init__(self, reason: str = "HTML content cannot be null or empty") -> None:
        self.reason = reason
        super().__init__(reason)


class MalformedInputError(ConversionError):
    def __init__(self, cause: Exception | None = None) -> None:
        self.cause = cause
        message = "HTML content could not be parsed"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class RenderingFailedError(ConversionError):
    """The document builder rejected the sanitized content."""

    def __init__(self, stage: str, cause: Exception | None = None) -> None:
        self.stage = stage
        self.cause = cause
        message = f"Document builder failed during {stage}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class TreeMutationError(ConversionError):
    """An HTML node could not be replaced or removed; indicates a pipeline bug."""

    def __init__(self, operation: str, stage: str, reference: str | None = None) -> None:
        self.operation = operation
        self.stage = stage
        self.reference = reference
        message = f"Cannot {operation} a node that has no parent (stage: {stage}"
        if reference is not None:
            message += f", reference: {reference!r}"
        message += ")"
        super().__init__(message)


class ConversionCancelled(ConversionError):
    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Conversion cancelled before {stage}")


class ResourceNotFoundWarning(Exception):
    """Payload for an unresolved ``src``/``href`` reference.

    Never raised by the pipeline: the reference is dropped and the warning
    is recorded instead.
    """

    def __init__(self, reference: str, expected_path: str) -> None:
        self.reference = reference
        self.expected_path = expected_path
        super().__init__(
            f"Resource file not found: {reference}. Expected path: {expected_path}"
        )


class UnsupportedImageError(Exception):
    """Image data a document builder cannot embed.

    Raised from ``append_picture``. The converter records a warning, skips
    the picture and keeps going.
    """


class BundleError(Exception):
    """The uploaded archive cannot be turned into a conversion request."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid bundle {path}: {reason}")


__all__ = [
    "BundleError",
    "ConversionCancelled",
    "ConversionError",
    "InvalidInputError",
    "MalformedInputError",
    "RenderingFailedError",
    "ResourceNotFoundWarning",
    "TreeMutationError",
    "UnsupportedImageError",
]
