"""Virtual project model: flat path table plus derived tree view.

This package contains non-UI project primitives:
- file record and tree node datatypes
- the path table that owns every project file
- pure tree construction from a table snapshot
- the default seed project
"""

from __future__ import annotations

from .types import (
    DIRECTORY,
    FILE,
    EntryKind,
    FileRecord,
    TreeNode,
    normalize_path,
    parent_path,
    path_depth,
    path_name,
)
from .path_table import PathTable
from .build import build_tree, format_tree, iter_tree
from .template import DEFAULT_PROJECT_FILES, DEFAULT_PROJECT_PATHS

__all__ = [
    "DIRECTORY",
    "FILE",
    "EntryKind",
    "FileRecord",
    "TreeNode",
    "normalize_path",
    "parent_path",
    "path_depth",
    "path_name",
    "PathTable",
    "build_tree",
    "format_tree",
    "iter_tree",
    "DEFAULT_PROJECT_FILES",
    "DEFAULT_PROJECT_PATHS",
]
