"""Path normalization and common base directory computation."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import PurePath


def normalize_path(path: str | PurePath) -> str:
    """Return an absolute, platform-canonical form of ``path``.

    Purely lexical: ``.``/``..`` segments and repeated separators are
    collapsed, relative paths are anchored at the current directory, and
    symlinks are not followed.
    """

    return os.path.abspath(os.fspath(path))


def _split_root(path: str) -> tuple[str, list[str]]:
    drive, rest = os.path.splitdrive(path)
    root = drive + os.sep if rest.startswith(os.sep) else drive
    return root, [part for part in rest.split(os.sep) if part]


def common_base_directory(paths: Iterable[str | PurePath]) -> str:
    """Longest directory prefix shared by every path, compared case-insensitively.

    - Empty input returns "".
    - The last segment of each path is its file name and never part of the
      result, so a single path yields its containing directory.
    - A rooted result stays rooted even if every segment was trimmed.
    - Returns "" when the paths do not share a root (e.g. different drives).

    Segment casing follows the first path.
    """

    normalized = [normalize_path(p) for p in paths]
    if not normalized:
        return ""

    root, segments = _split_root(normalized[0])
    common = segments[:-1]
    folded = [s.casefold() for s in common]

    for path in normalized[1:]:
        other_root, other = _split_root(path)
        if other_root.casefold() != root.casefold():
            return ""
        other_dirs = other[:-1]
        keep = 0
        for i, segment in enumerate(folded):
            if i >= len(other_dirs) or other_dirs[i].casefold() != segment:
                break
            keep = i + 1
        if keep < len(folded):
            common = common[:keep]
            folded = folded[:keep]

    return root + os.sep.join(common)


__all__ = ["normalize_path", "common_base_directory"]
