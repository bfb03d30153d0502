"""Domain datatypes for the virtual project file table and its tree view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EntryKind = Literal["file", "directory"]

FILE: EntryKind = "file"
DIRECTORY: EntryKind = "directory"


@dataclass(frozen=True)
class FileRecord:
    """One stored path-table row.

    ``content`` is ``None`` for directories and for files whose text has not
    been loaded yet. ``language`` is advisory and only used by editors.
    """

    path: str
    name: str
    kind: EntryKind = FILE
    content: str | None = None
    language: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY


@dataclass(frozen=True)
class TreeNode:
    """Hierarchical node derived from the path table or fed into ``load_batch``.

    As ingestion input, ``path`` may be absolute (``/src``) or relative to the
    parent being loaded (``App.jsx``). As build output it is always normalized.
    """

    path: str
    name: str
    kind: EntryKind = FILE
    content: str | None = None
    language: str | None = None
    children: tuple["TreeNode", ...] = ()

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY


def normalize_path(path: str) -> str:
    """Return the storage key for ``path``: no leading or trailing slash."""
    return path.strip("/")


def path_name(path: str) -> str:
    """Return the final segment of a slash-separated path."""
    return normalize_path(path).rsplit("/", 1)[-1]


def parent_path(path: str) -> str:
    """Return the parent of a normalized path, or ``""`` for top-level paths."""
    head, sep, _tail = path.rpartition("/")
    return head if sep else ""


def path_depth(path: str) -> int:
    """Return the number of segments in a normalized path."""
    return len(path.split("/")) if path else 0


__all__ = [
    "EntryKind",
    "FILE",
    "DIRECTORY",
    "FileRecord",
    "TreeNode",
    "normalize_path",
    "path_name",
    "parent_path",
    "path_depth",
]
