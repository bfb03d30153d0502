"""Execution-session lifecycle against a sandboxed runtime.

This package contains:
- session state, terminal line, and event datatypes
- the sandbox capability protocols a backend must provide
- FIFO channels carrying output lines and state/URL events
- the session state machine itself
- a local-process sandbox backend
"""

from __future__ import annotations

from .types import (
    LineType,
    MountResult,
    PreviewUrlChanged,
    SessionEvent,
    SessionState,
    StateChanged,
    TerminalLine,
)
from .capability import (
    SandboxFactory,
    SandboxFileSystem,
    SandboxProcess,
    SandboxRuntime,
    SandboxUnavailableError,
    ServerReadyListener,
)
from .channel import SessionChannel, consume
from .runtime import (
    DEFAULT_INSTALL_COMMAND,
    DEFAULT_START_COMMAND,
    SessionBootError,
    SessionRuntime,
    mount_directories,
)
from .local_sandbox import LocalProcessSandbox

__all__ = [
    "LineType",
    "MountResult",
    "PreviewUrlChanged",
    "SessionEvent",
    "SessionState",
    "StateChanged",
    "TerminalLine",
    "SandboxFactory",
    "SandboxFileSystem",
    "SandboxProcess",
    "SandboxRuntime",
    "SandboxUnavailableError",
    "ServerReadyListener",
    "SessionChannel",
    "consume",
    "DEFAULT_INSTALL_COMMAND",
    "DEFAULT_START_COMMAND",
    "SessionBootError",
    "SessionRuntime",
    "mount_directories",
    "LocalProcessSandbox",
]
