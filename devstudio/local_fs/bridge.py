"""Bridge between the virtual project and a user-granted local directory.

The bridge imports a directory into tree nodes and writes single files back.
It keeps its own shadow records (path -> handle/content) purely to perform
local I/O; the engine's path table stays authoritative. Every local failure
is logged and reported as ``False``/``None`` instead of raised.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..file_tree_model import DIRECTORY, FILE, TreeNode
from ..gitignore import DEFAULT_IGNORE_FILENAME, IgnoreMatcher, IgnoreRuleSet, parse_ignore_rules
from ..language import language_for_path
from .capability import DirectoryPicker, LocalDirectory, LocalFileHandle, PromptDismissedError

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Shadow record for one imported or created local file."""

    handle: LocalFileHandle
    name: str
    path: str
    content: str | None = None
    modified: bool = False


def _split_relative(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


class LocalBridge:
    """Reads and writes project files inside one granted local directory."""

    def __init__(self, picker: DirectoryPicker, *, ignore_filename: str = DEFAULT_IGNORE_FILENAME) -> None:
        self.picker = picker
        self.ignore_filename = ignore_filename
        self.directory: LocalDirectory | None = None
        self.matcher = IgnoreMatcher()
        self._handles: dict[str, LocalFileHandle] = {}
        self._files: dict[str, LocalFile] = {}

    @property
    def rules(self) -> IgnoreRuleSet:
        return self.matcher.rules

    def is_connected(self) -> bool:
        return self.directory is not None

    def get_file(self, path: str) -> LocalFile | None:
        return self._files.get("/".join(_split_relative(path)))

    def all_files(self) -> list[LocalFile]:
        return list(self._files.values())

    def mark_modified(self, path: str) -> None:
        local_file = self.get_file(path)
        if local_file is not None:
            local_file.modified = True

    def disconnect(self) -> None:
        """Forget the directory grant and every shadow record."""
        self.directory = None
        self._handles.clear()
        self._files.clear()
        self.matcher = IgnoreMatcher()

    async def open_folder(self) -> tuple[TreeNode, ...] | None:
        """Ask for a directory and import it.

        Returns root-anchored tree nodes (``/src/App.jsx``), or ``None`` when
        the prompt was dismissed or the import failed.
        """
        try:
            directory = await self.picker.request_directory()
        except PromptDismissedError:
            return None
        except Exception as exc:
            logger.error("Failed to open folder: %s", exc)
            return None

        self.disconnect()
        self.directory = directory
        try:
            self.matcher = IgnoreMatcher(await self._load_ignore_rules(directory))
            return tuple(await self._load_directory(directory, ""))
        except Exception as exc:
            logger.error("Failed to import folder %s: %s", directory.root, exc)
            self.disconnect()
            return None

    async def _load_ignore_rules(self, directory: LocalDirectory) -> IgnoreRuleSet:
        try:
            text = await asyncio.to_thread(directory.read_text, self.ignore_filename)
        except OSError:
            return IgnoreRuleSet()
        return parse_ignore_rules(text)

    async def _load_directory(self, directory: LocalDirectory, path: str) -> list[TreeNode]:
        nodes: list[TreeNode] = []
        try:
            entries = await asyncio.to_thread(directory.list_entries, path)
        except OSError as exc:
            if not path:
                raise
            logger.warning("Skipping unreadable directory %s: %s", path, exc)
            return nodes

        for entry in entries:
            if self.matcher.is_ignored(entry.name, entry.path):
                continue
            if entry.is_dir:
                children = await self._load_directory(directory, entry.path)
                nodes.append(
                    TreeNode(
                        path="/" + entry.path,
                        name=entry.name,
                        kind=DIRECTORY,
                        children=tuple(children),
                    )
                )
                continue

            handle = LocalFileHandle(directory, entry.path)
            try:
                content = await asyncio.to_thread(handle.read_text)
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", entry.path, exc)
                continue
            self._handles[entry.path] = handle
            self._files[entry.path] = LocalFile(handle=handle, name=entry.name, path=entry.path, content=content)
            nodes.append(
                TreeNode(
                    path="/" + entry.path,
                    name=entry.name,
                    kind=FILE,
                    content=content,
                    language=language_for_path(entry.name),
                )
            )
        return nodes

    async def write_file(self, path: str, content: str) -> bool:
        """Write full ``content`` to ``path``, creating it when it has no handle."""
        key = "/".join(_split_relative(path))
        if self.directory is None or not key:
            logger.error("Failed to write file %s: no local folder connected", path)
            return False
        handle = self._handles.get(key)
        try:
            if handle is None:
                handle = await asyncio.to_thread(self._create_file_in_path, self.directory, key, content)
                self._handles[key] = handle
                self._files[key] = LocalFile(handle=handle, name=handle.name, path=key, content=content)
                return True
            await asyncio.to_thread(self._write_handle, handle, content)
        except Exception as exc:
            logger.error("Failed to write file %s: %s", key, exc)
            return False

        local_file = self._files.get(key)
        if local_file is not None:
            local_file.content = content
            local_file.modified = False
        return True

    @staticmethod
    def _write_handle(handle: LocalFileHandle, content: str) -> None:
        with handle.open_writer() as writer:
            writer.write(content)

    @staticmethod
    def _create_file_in_path(directory: LocalDirectory, path: str, content: str) -> LocalFileHandle:
        parts = _split_relative(path)
        current = ""
        for part in parts[:-1]:
            current = f"{current}/{part}" if current else part
            directory.make_directory(current)
        with directory.open_writer(path, create=True) as writer:
            writer.write(content)
        return LocalFileHandle(directory, path)

    async def create_file(self, parent: str, name: str, content: str = "") -> bool:
        parent_key = "/".join(_split_relative(parent))
        return await self.write_file(f"{parent_key}/{name}" if parent_key else name, content)

    async def delete_file(self, path: str) -> bool:
        """Remove ``path`` from the local directory and forget its shadow records."""
        parts = _split_relative(path)
        if self.directory is None or not parts:
            logger.error("Failed to delete file %s: no local folder connected", path)
            return False
        key = "/".join(parts)
        try:
            await asyncio.to_thread(self._remove_entry, self.directory, parts)
        except Exception as exc:
            logger.error("Failed to delete file %s: %s", key, exc)
            return False
        self._handles.pop(key, None)
        self._files.pop(key, None)
        return True

    @staticmethod
    def _remove_entry(directory: LocalDirectory, parts: list[str]) -> None:
        parent = ""
        for part in parts[:-1]:
            parent = f"{parent}/{part}" if parent else part
            if not directory.resolve(parent).is_dir():
                raise FileNotFoundError(f"{parent} is not a directory")
        name = parts[-1]
        directory.remove_entry(f"{parent}/{name}" if parent else name)


__all__ = ["LocalBridge", "LocalFile"]
