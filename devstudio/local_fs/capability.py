"""Scoped access to one user-granted local directory.

A ``LocalDirectory`` is the only way the bridge touches the local disk. Every
operation takes a slash-separated path relative to the granted root, refuses
paths that escape it, and fails with ``CapabilityRevokedError`` once the grant
has been revoked.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Protocol


class PromptDismissedError(Exception):
    """The user declined or dismissed the directory permission prompt."""


class CapabilityRevokedError(PermissionError):
    """The directory grant was revoked after it was handed out."""


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root`` after resolution."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


@dataclass(frozen=True)
class DirectoryItem:
    """One child of a local directory listing."""

    name: str
    path: str
    is_dir: bool


class LocalDirectory:
    """Capability object for one granted directory root."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        self._revoked = False

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def revoked(self) -> bool:
        return self._revoked

    def revoke(self) -> None:
        self._revoked = True

    def resolve(self, relative_path: str) -> Path:
        """Map a relative path onto the local disk, enforcing the grant."""
        if self._revoked:
            raise CapabilityRevokedError(f"access to {self.root} was revoked")
        parts = [part for part in relative_path.split("/") if part]
        target = self.root.joinpath(*parts).resolve() if parts else self.root
        if not _is_within(target, self.root):
            raise PermissionError(f"{relative_path!r} is outside {self.root}")
        return target

    def list_entries(self, relative_path: str = "") -> list[DirectoryItem]:
        """List a directory's children, directories first then by name."""
        directory = self.resolve(relative_path)
        items: list[DirectoryItem] = []
        with os.scandir(directory) as entries:
            for child in entries:
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                child_path = f"{relative_path}/{child.name}" if relative_path else child.name
                items.append(DirectoryItem(name=child.name, path=child_path, is_dir=is_dir))
        items.sort(key=lambda item: (not item.is_dir, item.name.lower()))
        return items

    def read_text(self, relative_path: str) -> str:
        return read_text(self.resolve(relative_path))

    @contextmanager
    def open_writer(self, relative_path: str, *, create: bool = False) -> Iterator[IO[str]]:
        """Open a file for a full-content rewrite; closed on every exit path."""
        target = self.resolve(relative_path)
        if not create and not target.is_file():
            raise FileNotFoundError(f"{relative_path} does not exist")
        handle = target.open("w", encoding="utf-8", newline="")
        try:
            yield handle
        finally:
            handle.close()

    def make_directory(self, relative_path: str) -> None:
        """Create one directory; an existing directory is not an error."""
        self.resolve(relative_path).mkdir(exist_ok=True)

    def remove_entry(self, relative_path: str) -> None:
        """Remove a file or an empty directory."""
        target = self.resolve(relative_path)
        if target == self.root:
            raise PermissionError("refusing to remove the granted root")
        if target.is_dir() and not target.is_symlink():
            target.rmdir()
        else:
            target.unlink()


@dataclass(frozen=True)
class LocalFileHandle:
    """Reference to one file inside a granted directory."""

    directory: LocalDirectory
    path: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def read_text(self) -> str:
        return self.directory.read_text(self.path)

    def open_writer(self) -> AbstractContextManager[IO[str]]:
        return self.directory.open_writer(self.path)


class DirectoryPicker(Protocol):
    """Permission prompt that hands out a directory capability."""

    async def request_directory(self) -> LocalDirectory:
        """Return the granted directory or raise ``PromptDismissedError``."""
        ...


class StaticDirectoryPicker:
    """Picker that grants a preselected path, or declines when there is none."""

    def __init__(self, path: Path | None) -> None:
        self.path = path

    async def request_directory(self) -> LocalDirectory:
        if self.path is None:
            raise PromptDismissedError("no directory selected")
        if not self.path.is_dir():
            raise NotADirectoryError(f"{self.path} is not a directory")
        return LocalDirectory(self.path)


__all__ = [
    "CapabilityRevokedError",
    "DirectoryItem",
    "DirectoryPicker",
    "LocalDirectory",
    "LocalFileHandle",
    "PromptDismissedError",
    "StaticDirectoryPicker",
    "read_text",
]
