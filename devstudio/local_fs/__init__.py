"""Local-directory backend: scoped capability plus the import/write-back bridge."""

from __future__ import annotations

from .capability import (
    CapabilityRevokedError,
    DirectoryItem,
    DirectoryPicker,
    LocalDirectory,
    LocalFileHandle,
    PromptDismissedError,
    StaticDirectoryPicker,
)
from .bridge import LocalBridge, LocalFile

__all__ = [
    "CapabilityRevokedError",
    "DirectoryItem",
    "DirectoryPicker",
    "LocalDirectory",
    "LocalFileHandle",
    "PromptDismissedError",
    "StaticDirectoryPicker",
    "LocalBridge",
    "LocalFile",
]
