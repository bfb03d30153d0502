"""Workspace engine that owns the project table and orchestrates its backends.

The engine is the only writer of the path table. It feeds editor buffers from
it, pushes saves to the local folder and the running session, and loads the
project into the session on run. One engine is constructed per opened
workspace and torn down on close.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from .file_tree_model import DEFAULT_PROJECT_FILES, PathTable, TreeNode, build_tree, normalize_path
from .language import language_for_path
from .local_fs import LocalBridge
from .session import LineType, SessionRuntime, SessionState

logger = logging.getLogger(__name__)


@dataclass
class OpenDocument:
    """Editor buffer for one open file; may diverge from the table until saved."""

    id: str
    path: str
    name: str
    content: str
    language: str
    modified: bool = False


class WorkspaceEngine:
    """Owns the ``PathTable`` plus open documents, and drives bridge and session."""

    def __init__(
        self,
        bridge: LocalBridge,
        session: SessionRuntime,
        template: Iterable[TreeNode] = DEFAULT_PROJECT_FILES,
    ) -> None:
        self.bridge = bridge
        self.session = session
        self.template = tuple(template)
        self.paths = PathTable()
        self.documents: dict[str, OpenDocument] = {}
        self.active_document_id: str | None = None
        self.use_local_fs = False

    def init(self) -> None:
        """Load the seed project."""
        self.paths.reset(self.template)

    def tree(self) -> tuple[TreeNode, ...]:
        return build_tree(self.paths.snapshot())

    @property
    def active_document(self) -> OpenDocument | None:
        if self.active_document_id is None:
            return None
        return self.documents.get(self.active_document_id)

    @property
    def preview_url(self) -> str | None:
        return self.session.preview_url

    def document_for_path(self, path: str) -> OpenDocument | None:
        key = normalize_path(path)
        return next((doc for doc in self.documents.values() if doc.path == key), None)

    def open_document(self, path: str) -> OpenDocument | None:
        """Open (or re-select) the file at ``path``; directories and unknown paths give ``None``."""
        record = self.paths.get(path)
        if record is None or record.is_dir:
            return None
        existing = self.document_for_path(record.path)
        if existing is not None:
            self.active_document_id = existing.id
            return existing
        document = OpenDocument(
            id=uuid.uuid4().hex,
            path=record.path,
            name=record.name,
            content=record.content or "",
            language=record.language or language_for_path(record.path),
        )
        self.documents[document.id] = document
        self.active_document_id = document.id
        return document

    def select_document(self, document_id: str) -> OpenDocument | None:
        document = self.documents.get(document_id)
        if document is not None:
            self.active_document_id = document.id
        return document

    def edit(self, document_id: str, content: str) -> bool:
        """Apply an editor change to the buffer and the table.

        Returns ``False`` when the document is not open. A file removed from
        the table in the meantime only keeps the buffer change.
        """
        document = self.documents.get(document_id)
        if document is None:
            return False
        document.content = content
        document.modified = True
        if self.paths.set_content(document.path, content) and self.use_local_fs:
            self.bridge.mark_modified(document.path)
        return True

    def close_document(self, document_id: str) -> bool:
        """Close a document; the last remaining one becomes active if it was active."""
        document = self.documents.pop(document_id, None)
        if document is None:
            return False
        if self.active_document_id == document_id:
            remaining = list(self.documents)
            self.active_document_id = remaining[-1] if remaining else None
        return True

    async def save(self, document_id: str | None = None) -> bool:
        """Push a document to the local folder and the live session.

        The modified flag stays set when the local write fails.
        """
        document = self.documents.get(document_id) if document_id else self.active_document
        if document is None or document.path not in self.paths:
            return False

        saved = True
        if self.use_local_fs:
            saved = await self.bridge.write_file(document.path, document.content)
        if self.session.state == SessionState.RUNNING:
            await self.session.write_file(document.path, document.content)

        if not saved:
            self.session.emit(f"Failed to save: {document.path}", LineType.STDERR)
            return False
        document.modified = False
        self.session.emit(f"Saved: {document.path}")
        return True

    async def run(self) -> bool:
        """Boot if needed, mount the project, install, and start the dev server."""
        if not self.session.is_ready():
            await self.session.boot()
        await self.session.mount(self.paths.to_mount_files())
        if not await self.session.install():
            logger.info("Install failed, starting dev server anyway")
        return await self.session.start()

    async def stop(self) -> None:
        await self.session.stop()

    async def open_folder(self) -> bool:
        """Import a local folder; ``False`` when declined or failed."""
        nodes = await self.bridge.open_folder()
        if nodes is None:
            return False
        self.paths.load_from(nodes)
        self.documents.clear()
        self.active_document_id = None
        self.use_local_fs = True
        self.session.emit("Local folder connected!")
        return True

    async def reset(self) -> None:
        """Restore the seed project and drop documents, output, and preview URL."""
        await self.session.stop()
        self.paths.reset(self.template)
        self.documents.clear()
        self.active_document_id = None
        self.bridge.disconnect()
        self.use_local_fs = False
        self.session.clear_output()

    async def teardown(self) -> None:
        await self.session.teardown()
        self.bridge.disconnect()
        self.use_local_fs = False
        self.documents.clear()
        self.active_document_id = None
        self.paths.clear()


__all__ = ["OpenDocument", "WorkspaceEngine"]
