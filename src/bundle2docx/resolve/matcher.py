"""Match ``src``/``href`` references against the files of a bundle."""

from __future__ import annotations

import os
import re
from urllib.parse import unquote

from bundle2docx.model.options import MatchPolicy
from bundle2docx.resolve.paths import normalize_path
from bundle2docx.types import ReferenceBinding, ResourceFile, ResourceSet

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def is_external_reference(reference: str) -> bool:
    """True for URLs (http:, data:, ...) and protocol-relative references."""

    ref = reference.strip()
    if ref.startswith("//"):
        return True
    # A single letter followed by ":" is a Windows drive, not a scheme
    return bool(_SCHEME_RE.match(ref)) and not re.match(r"^[A-Za-z]:[\\/]", ref)


def clean_reference(reference: str) -> str:
    """Drop ``?query``/``#fragment`` and percent-decode a local reference."""

    ref = reference.strip()
    for marker in ("#", "?"):
        idx = ref.find(marker)
        if idx != -1:
            ref = ref[:idx]
    return unquote(ref)


def expected_path(reference: str, base_directory: str) -> str:
    """The path a reference denotes when taken relative to ``base_directory``."""

    return normalize_path(os.path.join(base_directory, clean_reference(reference)))


def _match_exact(target: str, resources: ResourceSet) -> ResourceFile | None:
    folded = target.casefold()
    for resource in resources:
        if normalize_path(resource.path).casefold() == folded:
            return resource
    return None


def _match_suffix(reference: str, resources: ResourceSet) -> ResourceFile | None:
    suffix = clean_reference(reference).replace("/", os.sep)
    if os.altsep:
        suffix = suffix.replace(os.altsep, os.sep)
    folded = suffix.casefold()
    if not folded:
        return None
    for resource in resources:
        if normalize_path(resource.path).casefold().endswith(folded):
            return resource
    return None


def resolve_reference(
    reference: str,
    resources: ResourceSet,
    base_directory: str,
    policy: MatchPolicy = MatchPolicy.EXACT,
) -> ReferenceBinding:
    """Find the resource file ``reference`` denotes.

    An unresolved reference is a normal outcome: the returned binding has
    ``resource=None`` and the caller decides what to do with the node.
    """

    target = expected_path(reference, base_directory)
    if is_external_reference(reference):
        return ReferenceBinding(reference=reference, expected_path=target, resource=None)

    if policy is MatchPolicy.SUFFIX:
        found = _match_suffix(reference, resources)
    else:
        found = _match_exact(target, resources)
    return ReferenceBinding(reference=reference, expected_path=target, resource=found)


__all__ = [
    "clean_reference",
    "expected_path",
    "is_external_reference",
    "resolve_reference",
]
