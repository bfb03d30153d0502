"""Narrow interface to the isolated execution runtime.

SessionRuntime only ever talks to a sandbox through these protocols, so any
backend (a local process sandbox, a remote container, a test double) can be
swapped in.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Protocol

ServerReadyListener = Callable[[int, str], None]


class SandboxUnavailableError(RuntimeError):
    """The sandbox can no longer run anything; the session must re-boot."""


class SandboxFileSystem(Protocol):
    async def mkdir(self, path: str, *, recursive: bool = False) -> None:
        """Create a directory; raises ``FileExistsError`` when it already exists."""
        ...

    async def write_file(self, path: str, contents: str) -> None:
        ...


class SandboxProcess(Protocol):
    """Handle for one spawned process."""

    @property
    def output(self) -> AsyncIterator[str]:
        """Text chunks in the order the process produced them."""
        ...

    async def wait(self) -> int:
        """Wait for exit and return the exit code."""
        ...

    async def kill(self) -> None:
        ...


class SandboxRuntime(Protocol):
    @property
    def fs(self) -> SandboxFileSystem:
        ...

    async def spawn(self, command: str, args: Sequence[str] = ()) -> SandboxProcess:
        ...

    def on_server_ready(self, listener: ServerReadyListener) -> Callable[[], None]:
        """Subscribe to ``(port, url)`` readiness signals; returns an unsubscribe callable."""
        ...

    async def close(self) -> None:
        ...


SandboxFactory = Callable[[], Awaitable[SandboxRuntime]]

__all__ = [
    "SandboxFactory",
    "SandboxFileSystem",
    "SandboxProcess",
    "SandboxRuntime",
    "SandboxUnavailableError",
    "ServerReadyListener",
]
