"""Tree construction from a flat path-table snapshot."""

from __future__ import annotations

from collections.abc import Iterable

from .types import DIRECTORY, FileRecord, TreeNode, parent_path, path_name


def build_tree(records: Iterable[FileRecord]) -> tuple[TreeNode, ...]:
    """Build root nodes for a snapshot of path-table records.

    A node gets children when it is a directory or when other paths live
    under it; its children are exactly the paths one segment deeper. Parent
    segments that have no record of their own are synthesized as directory
    nodes. Sibling order follows snapshot iteration order.
    """
    snapshot = list(records)
    by_path: dict[str, FileRecord] = {}
    ordered_paths: list[str] = []

    def register(path: str) -> None:
        if path in by_path:
            return
        parent = parent_path(path)
        if parent:
            register(parent)
        if path not in by_path:
            by_path[path] = FileRecord(path=path, name=path_name(path), kind=DIRECTORY)
            ordered_paths.append(path)

    for record in snapshot:
        if not record.path or record.path in by_path:
            continue
        parent = parent_path(record.path)
        if parent:
            register(parent)
        by_path[record.path] = record
        ordered_paths.append(record.path)

    # An explicit record seen after a synthesized placeholder replaces it.
    for record in snapshot:
        if record.path in by_path:
            by_path[record.path] = record

    children_by_parent: dict[str, list[str]] = {}
    for path in ordered_paths:
        children_by_parent.setdefault(parent_path(path), []).append(path)

    def build_node(path: str) -> TreeNode:
        record = by_path[path]
        child_paths = children_by_parent.get(path, [])
        if record.is_dir or child_paths:
            children = tuple(build_node(child) for child in child_paths)
        else:
            children = ()
        return TreeNode(
            path=record.path,
            name=record.name,
            kind=record.kind,
            content=record.content,
            language=record.language,
            children=children,
        )

    return tuple(build_node(path) for path in children_by_parent.get("", []))


def iter_tree(nodes: Iterable[TreeNode]) -> Iterable[TreeNode]:
    """Yield every node depth-first, parents before their children."""
    for node in nodes:
        yield node
        yield from iter_tree(node.children)


def format_tree(nodes: Iterable[TreeNode], indent: str = "  ") -> str:
    """Render nodes as an indented outline, directories suffixed with ``/``."""
    lines: list[str] = []

    def walk(level: Iterable[TreeNode], depth: int) -> None:
        for node in level:
            suffix = "/" if node.is_dir else ""
            lines.append(f"{indent * depth}{node.name}{suffix}")
            walk(node.children, depth + 1)

    walk(nodes, 0)
    return "\n".join(lines)


__all__ = ["build_tree", "iter_tree", "format_tree"]
