"""Repository-relative path helpers.

Every location the engine compares is reduced to a tuple of POSIX segments
relative to the repository root, so ``/src/``, ``src`` and ``src\\`` are the
same place and the root is the empty tuple. ``..`` is resolved lexically
against the preceding segment. No filesystem access happens here.
"""

from __future__ import annotations

from pathlib import PurePosixPath


def normalize_path(path: str) -> str:
    """Return the repository-relative POSIX form of a path.

    Raises ValueError if ``..`` segments climb above the repository root.
    """
    raw = path.replace("\\", "/").strip()
    parts: list[str] = []
    for part in PurePosixPath(raw).parts:
        if part in ("/", "."):
            continue
        if part == "..":
            if not parts:
                msg = f"Path escapes the repository root: {path!r}"
                raise ValueError(msg)
            parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)


def path_segments(path: str) -> tuple[str, ...]:
    """Split a path into normalized segments."""
    normalized = normalize_path(path)
    return tuple(normalized.split("/")) if normalized else ()


def parent_segments(target_path: str) -> tuple[str, ...]:
    """Return the segments of the directory containing a file path."""
    return path_segments(target_path)[:-1]


def is_ancestor(ancestor: tuple[str, ...], directory: tuple[str, ...]) -> bool:
    """Return True if ``ancestor`` equals ``directory`` or contains it."""
    return directory[: len(ancestor)] == ancestor
