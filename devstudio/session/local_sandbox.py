"""Sandbox backend that runs the project as local processes in a private directory.

Files are mounted into a fresh temporary directory, commands run there as
``asyncio`` subprocesses, and readiness is detected by scanning output for a
local ``http://host:port`` URL. ``kill`` terminates the whole process tree
because package-manager scripts fork the real server as a child.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import tempfile
from collections.abc import AsyncIterator, Callable, Sequence
from pathlib import Path

import psutil

from ..ansi import sanitize_output
from .capability import SandboxUnavailableError, ServerReadyListener

logger = logging.getLogger(__name__)

KILL_GRACE_SECONDS = 3.0
READY_URL_RE = re.compile(r"\bhttps?://(?:localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1\]):(\d{2,5})[^\s]*")


class LocalSandboxFileSystem:
    """Filesystem view rooted at the sandbox directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _target(self, path: str) -> Path:
        parts = [part for part in path.split("/") if part]
        target = self.root.joinpath(*parts).resolve()
        if target != self.root and self.root not in target.parents:
            raise PermissionError(f"{path!r} is outside the sandbox")
        return target

    async def mkdir(self, path: str, *, recursive: bool = False) -> None:
        target = self._target(path)
        if target.is_dir():
            raise FileExistsError(path)
        await asyncio.to_thread(target.mkdir, parents=recursive)

    async def write_file(self, path: str, contents: str) -> None:
        target = self._target(path)
        await asyncio.to_thread(target.write_text, contents, encoding="utf-8")


def _kill_tree(pid: int, grace: float) -> None:
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return
    procs = parent.children(recursive=True) + [parent]
    for proc in procs:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            continue
    _gone, alive = psutil.wait_procs(procs, timeout=grace)
    for proc in alive:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            continue


class LocalSandboxProcess:
    """One subprocess with merged stdout/stderr and readiness scanning."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        on_ready_url: Callable[[int, str], None],
    ) -> None:
        self._process = process
        self._on_ready_url = on_ready_url
        self._announced_ports: set[int] = set()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def output(self) -> AsyncIterator[str]:
        return self._read_output()

    async def _read_output(self) -> AsyncIterator[str]:
        stream = self._process.stdout
        if stream is None:
            return
        while True:
            raw = await stream.readline()
            if not raw:
                return
            chunk = raw.decode("utf-8", errors="replace")
            self._scan_for_url(chunk)
            yield chunk

    def _scan_for_url(self, chunk: str) -> None:
        match = READY_URL_RE.search(sanitize_output(chunk))
        if match is None:
            return
        port = int(match.group(1))
        if port in self._announced_ports:
            return
        self._announced_ports.add(port)
        self._on_ready_url(port, match.group(0).rstrip(".,;)"))

    async def wait(self) -> int:
        return await self._process.wait()

    async def kill(self) -> None:
        if self._process.returncode is not None:
            return
        await asyncio.to_thread(_kill_tree, self._process.pid, KILL_GRACE_SECONDS)
        await self._process.wait()


class LocalProcessSandbox:
    """Sandbox runtime backed by a temporary directory and local subprocesses."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        self._fs = LocalSandboxFileSystem(self.root)
        self._listeners: list[ServerReadyListener] = []
        self._processes: list[LocalSandboxProcess] = []
        self._closed = False

    @classmethod
    async def boot(cls, prefix: str = "devstudio-") -> LocalProcessSandbox:
        root = await asyncio.to_thread(tempfile.mkdtemp, prefix=prefix)
        logger.debug("Local sandbox booted at %s", root)
        return cls(Path(root))

    @property
    def fs(self) -> LocalSandboxFileSystem:
        return self._fs

    def on_server_ready(self, listener: ServerReadyListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify_ready(self, port: int, url: str) -> None:
        for listener in list(self._listeners):
            listener(port, url)

    async def spawn(self, command: str, args: Sequence[str] = ()) -> LocalSandboxProcess:
        if self._closed:
            raise SandboxUnavailableError("sandbox has been closed")
        executable = shutil.which(command)
        if executable is None:
            raise FileNotFoundError(f"command not found: {command}")
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(self.root),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        handle = LocalSandboxProcess(process, self._notify_ready)
        self._processes = [live for live in self._processes if live.returncode is None]
        self._processes.append(handle)
        return handle

    async def close(self) -> None:
        """Kill remaining processes and delete the sandbox directory."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        for handle in self._processes:
            try:
                await handle.kill()
            except (ProcessLookupError, psutil.Error) as exc:
                logger.debug("Process %s already gone: %s", handle.pid, exc)
        self._processes.clear()
        await asyncio.to_thread(shutil.rmtree, self.root, ignore_errors=True)


__all__ = [
    "LocalProcessSandbox",
    "LocalSandboxFileSystem",
    "LocalSandboxProcess",
    "READY_URL_RE",
]
