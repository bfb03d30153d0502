"""Lifecycle of one execution session against a sandboxed runtime.

The session boots a sandbox, mounts the project into it, installs
dependencies, and starts a long-lived process whose output is streamed as
typed terminal lines. A readiness signal from the sandbox sets the preview
URL. Lifecycle operations are serialized with one lock; output and state/URL
changes are published on two FIFO channels.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from ..ansi import sanitize_output
from .capability import SandboxFactory, SandboxProcess, SandboxRuntime, SandboxUnavailableError
from .channel import SessionChannel
from .types import (
    LineType,
    MountResult,
    PreviewUrlChanged,
    SessionEvent,
    SessionState,
    StateChanged,
    TerminalLine,
)

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_COMMAND: tuple[str, ...] = ("pnpm", "install")
DEFAULT_START_COMMAND: tuple[str, ...] = ("pnpm", "run", "dev")

_IDLE_STATES = frozenset({SessionState.READY, SessionState.STOPPED})


class SessionBootError(RuntimeError):
    """Booting the sandbox failed; the session is ``faulted``."""


def mount_directories(paths: Sequence[str]) -> list[str]:
    """Return every ancestor directory of ``paths``, sorted lexicographically."""
    directories: set[str] = set()
    for path in paths:
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directories.add("/".join(parts[:depth]))
    directories.discard("")
    return sorted(directories)


class SessionRuntime:
    """Owns ``SessionState`` for one sandbox session."""

    def __init__(
        self,
        boot_sandbox: SandboxFactory,
        *,
        install_command: Sequence[str] = DEFAULT_INSTALL_COMMAND,
        start_command: Sequence[str] = DEFAULT_START_COMMAND,
    ) -> None:
        if not install_command or not start_command:
            raise ValueError("install and start commands must not be empty")
        self._boot_sandbox = boot_sandbox
        self.install_command = tuple(install_command)
        self.start_command = tuple(start_command)
        self.state = SessionState.UNINITIALIZED
        self.preview_url: str | None = None
        self.output_log: list[TerminalLine] = []
        self.output: SessionChannel[TerminalLine] = SessionChannel()
        self.events: SessionChannel[SessionEvent] = SessionChannel()
        self._sandbox: SandboxRuntime | None = None
        self._process: SandboxProcess | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._unsubscribe_ready = None
        self._lock = asyncio.Lock()

    # -- output ---------------------------------------------------------

    def emit(self, content: str, line_type: LineType = LineType.INFO) -> TerminalLine | None:
        """Sanitize and record one output line; empty results are dropped."""
        cleaned = sanitize_output(content)
        if not cleaned:
            return None
        line = TerminalLine(content=cleaned, type=line_type)
        self.output_log.append(line)
        self.output.publish(line)
        return line

    def clear_output(self) -> None:
        self.output_log.clear()

    def _set_state(self, state: SessionState) -> None:
        if state == self.state:
            return
        self.state = state
        self.events.publish(StateChanged(state))

    def _set_preview_url(self, url: str | None) -> None:
        self.preview_url = url or None
        self.events.publish(PreviewUrlChanged(url or ""))

    def is_ready(self) -> bool:
        return self._sandbox is not None and self.state != SessionState.FAULTED

    # -- lifecycle ------------------------------------------------------

    async def boot(self) -> None:
        """Boot the sandbox; a no-op when one is already usable.

        Raises ``SessionBootError`` after moving to ``faulted`` on failure.
        """
        async with self._lock:
            await self._boot_locked()

    async def _boot_locked(self) -> None:
        if self.is_ready():
            return
        if self._sandbox is not None:
            await self._release_sandbox()
        self._set_state(SessionState.BOOTING)
        self.emit("Initializing sandbox...")
        try:
            sandbox = await self._boot_sandbox()
        except Exception as exc:
            logger.exception("Sandbox boot failed")
            self._set_state(SessionState.FAULTED)
            self.emit(f"Failed to boot sandbox: {exc}", LineType.STDERR)
            raise SessionBootError(str(exc)) from exc
        self._sandbox = sandbox
        self._unsubscribe_ready = sandbox.on_server_ready(self._on_server_ready)
        self._set_state(SessionState.READY)
        self.emit("Sandbox ready!")

    def _on_server_ready(self, port: int, url: str) -> None:
        self.emit(f"Server ready on port {port}: {url}")
        self._set_preview_url(url)

    def _require_idle(self, operation: str) -> SandboxRuntime | None:
        if self._sandbox is None or self.state not in _IDLE_STATES:
            self.emit(f"Cannot {operation}: session is {self.state.value}", LineType.STDERR)
            return None
        return self._sandbox

    def _fault(self, exc: BaseException) -> None:
        logger.error("Sandbox became unavailable: %s", exc)
        self._set_state(SessionState.FAULTED)
        self.emit(f"Sandbox unavailable: {exc}", LineType.STDERR)

    async def mount(self, files: Mapping[str, str]) -> MountResult:
        """Write ``files`` into the sandbox, booting first if needed.

        Ancestor directories are created before any file is written. A
        failure on one file is reported and the rest of the batch continues.
        """
        async with self._lock:
            if self.state == SessionState.UNINITIALIZED:
                await self._boot_locked()
            sandbox = self._require_idle("mount files")
            if sandbox is None:
                return MountResult(failed=tuple(sorted(files)))
            resume_state = self.state
            self._set_state(SessionState.MOUNTING)
            self.emit("Mounting files...")

            for directory in mount_directories(list(files)):
                try:
                    await sandbox.fs.mkdir(directory, recursive=True)
                except FileExistsError:
                    continue
                except Exception as exc:
                    logger.warning("Failed to create %s: %s", directory, exc)
                    self.emit(f"Failed to create {directory}: {exc}", LineType.STDERR)

            written: list[str] = []
            failed: list[str] = []
            for path in sorted(files):
                try:
                    await sandbox.fs.write_file(path, files[path])
                except Exception as exc:
                    logger.warning("Failed to write %s: %s", path, exc)
                    self.emit(f"Failed to write {path}: {exc}", LineType.STDERR)
                    failed.append(path)
                    continue
                written.append(path)

            self._set_state(resume_state)
            self.emit("Files mounted successfully" if not failed else f"Mounted {len(written)} of {len(files)} files")
            return MountResult(written=tuple(written), failed=tuple(failed))

    async def _pump_output(self, process: SandboxProcess, line_type: LineType = LineType.STDOUT) -> None:
        async for chunk in process.output:
            self.emit(chunk, line_type)

    async def install(self) -> bool:
        """Run the install command to completion; ``True`` on exit code 0."""
        async with self._lock:
            sandbox = self._require_idle("install dependencies")
            if sandbox is None:
                return False
            resume_state = self.state
            self._set_state(SessionState.INSTALLING)
            self.emit("Installing dependencies...")
            self.emit(" ".join(self.install_command), LineType.COMMAND)
            command, *args = self.install_command
            pump: asyncio.Task[None] | None = None
            try:
                process = await sandbox.spawn(command, args)
                pump = asyncio.create_task(self._pump_output(process))
                exit_code = await process.wait()
                await pump
            except SandboxUnavailableError as exc:
                await self._cancel_pump(pump)
                self._fault(exc)
                return False
            except Exception as exc:
                await self._cancel_pump(pump)
                logger.error("Install failed: %s", exc)
                self._set_state(resume_state)
                self.emit(f"Failed to install dependencies: {exc}", LineType.STDERR)
                return False

            self._set_state(resume_state)
            if exit_code == 0:
                self.emit("Dependencies installed successfully!")
                return True
            self.emit(f"Failed to install dependencies (exit code {exit_code})", LineType.STDERR)
            return False

    async def start(self) -> bool:
        """Spawn the long-lived process and stream its output in the background."""
        async with self._lock:
            sandbox = self._require_idle("start dev server")
            if sandbox is None:
                return False
            self.emit("Starting dev server...")
            self.emit(" ".join(self.start_command), LineType.COMMAND)
            command, *args = self.start_command
            try:
                process = await sandbox.spawn(command, args)
            except SandboxUnavailableError as exc:
                self._fault(exc)
                return False
            except Exception as exc:
                logger.error("Start failed: %s", exc)
                self.emit(f"Failed to start dev server: {exc}", LineType.STDERR)
                return False
            self._process = process
            self._pump_task = asyncio.create_task(self._watch_process(process))
            self._set_state(SessionState.RUNNING)
            return True

    async def _watch_process(self, process: SandboxProcess) -> None:
        await self._pump_output(process)
        exit_code = await process.wait()
        if self._process is not process:
            return
        # Exited on its own, not through stop().
        self._process = None
        self._pump_task = None
        line_type = LineType.INFO if exit_code == 0 else LineType.STDERR
        self.emit(f"Dev server exited with code {exit_code}", line_type)
        if self.state == SessionState.RUNNING:
            self._set_state(SessionState.STOPPED)
        self._set_preview_url(None)

    @staticmethod
    async def _cancel_pump(pump: asyncio.Task[None] | None) -> None:
        if pump is None:
            return
        pump.cancel()
        try:
            await pump
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.debug("Output pump ended with error: %s", exc)

    async def stop(self) -> None:
        """Kill the running process and clear the preview URL.

        Safe to call at any time: with nothing running it only clears the
        URL and publishes an empty preview URL.
        """
        async with self._lock:
            await self._stop_locked()

    async def _stop_locked(self) -> None:
        process, self._process = self._process, None
        pump, self._pump_task = self._pump_task, None
        if process is not None:
            try:
                await process.kill()
                self.emit("Dev server stopped")
            except Exception as exc:
                logger.debug("Kill failed, process likely exited: %s", exc)
        await self._cancel_pump(pump)
        if self.state == SessionState.RUNNING:
            self._set_state(SessionState.STOPPED)
        self._set_preview_url(None)

    async def write_file(self, path: str, content: str) -> bool:
        """Update one file in the live mount."""
        if self._sandbox is None or self.state == SessionState.FAULTED:
            return False
        try:
            await self._sandbox.fs.write_file(path, content)
        except Exception as exc:
            self.emit(f"Failed to update {path}: {exc}", LineType.STDERR)
            return False
        self.emit(f"Updated in sandbox: {path}")
        return True

    async def teardown(self) -> None:
        """Stop the process and release the sandbox entirely."""
        async with self._lock:
            await self._stop_locked()
            await self._release_sandbox()
            self._set_state(SessionState.UNINITIALIZED)

    async def _release_sandbox(self) -> None:
        if self._unsubscribe_ready is not None:
            self._unsubscribe_ready()
            self._unsubscribe_ready = None
        sandbox, self._sandbox = self._sandbox, None
        if sandbox is None:
            return
        try:
            await sandbox.close()
        except Exception as exc:
            logger.warning("Failed to close sandbox: %s", exc)


__all__ = [
    "DEFAULT_INSTALL_COMMAND",
    "DEFAULT_START_COMMAND",
    "SessionBootError",
    "SessionRuntime",
    "mount_directories",
]
