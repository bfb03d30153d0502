"""Flat path-keyed table holding the virtual project.

The table is the single source of truth for project files. Trees are derived
from it on demand and every mutation goes through the methods below.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace

from ..language import language_for_path
from .types import DIRECTORY, FILE, FileRecord, TreeNode, normalize_path, path_name


class PathTable:
    """Mapping of normalized path to ``FileRecord`` with batch ingestion."""

    def __init__(self, initial: Iterable[TreeNode] = ()) -> None:
        self._records: dict[str, FileRecord] = {}
        self.load_batch(initial)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._records

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records.values()))

    def upsert(self, path: str, record: FileRecord) -> FileRecord:
        """Store ``record`` under the normalized ``path``, replacing any previous row.

        The stored copy carries the normalized path and name; directory
        records are stored without content.
        """
        key = normalize_path(path)
        stored = replace(record, path=key, name=path_name(key) or record.name)
        if stored.kind == DIRECTORY and stored.content is not None:
            stored = replace(stored, content=None)
        self._records[key] = stored
        return stored

    def get(self, path: str) -> FileRecord | None:
        return self._records.get(normalize_path(path))

    def delete(self, path: str) -> bool:
        """Remove one row. Descendant rows are left untouched."""
        return self._records.pop(normalize_path(path), None) is not None

    def set_content(self, path: str, content: str) -> bool:
        """Replace a file's content; a missing or directory path is a no-op."""
        key = normalize_path(path)
        record = self._records.get(key)
        if record is None or record.is_dir:
            return False
        self._records[key] = replace(record, content=content)
        return True

    def create_file(
        self,
        parent: str,
        name: str,
        content: str = "",
        language: str | None = None,
    ) -> FileRecord:
        """Add a new file named ``name`` inside ``parent`` (``""`` for the root)."""
        parent_key = normalize_path(parent)
        key = f"{parent_key}/{name}" if parent_key else name
        return self.upsert(
            key,
            FileRecord(
                path=key,
                name=name,
                kind=FILE,
                content=content,
                language=language or language_for_path(key),
            ),
        )

    def all_files(self) -> list[FileRecord]:
        return [record for record in self._records.values() if not record.is_dir]

    def snapshot(self) -> list[FileRecord]:
        """Return every row in insertion order."""
        return list(self._records.values())

    def paths(self) -> set[str]:
        return set(self._records)

    def clear(self) -> None:
        self._records.clear()

    def load_batch(self, records: Iterable[TreeNode], base_path: str = "") -> None:
        """Ingest tree-shaped records, recursing into their children.

        A path with a leading ``/`` is stored without it, ignoring
        ``base_path``. Any other path is appended to ``base_path``. Children
        are loaded with ``<stored path>/`` as their base path, so absolute
        top-level entries and relative nested entries can be mixed freely.
        """
        for record in records:
            if record.path.startswith("/"):
                full_path = record.path[1:]
            else:
                full_path = base_path + record.path
            key = normalize_path(full_path)
            language = record.language
            if language is None and record.kind == FILE:
                language = language_for_path(key)
            self.upsert(
                key,
                FileRecord(
                    path=key,
                    name=record.name,
                    kind=record.kind,
                    content=record.content,
                    language=language,
                ),
            )
            if record.children:
                self.load_batch(record.children, key + "/")

    def load_from(self, records: Iterable[TreeNode]) -> None:
        """Replace the whole table with ``records``."""
        self.clear()
        self.load_batch(records)

    def reset(self, template: Iterable[TreeNode]) -> None:
        self.load_from(template)

    def to_mount_files(self) -> dict[str, str]:
        """Flatten loaded files into ``path -> contents`` for a sandbox mount."""
        return {
            record.path: record.content
            for record in self._records.values()
            if not record.is_dir and record.content is not None
        }


__all__ = ["PathTable"]
