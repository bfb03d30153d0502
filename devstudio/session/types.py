"""Session state, terminal lines, and the events a session publishes."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    BOOTING = "booting"
    READY = "ready"
    MOUNTING = "mounting"
    INSTALLING = "installing"
    RUNNING = "running"
    STOPPED = "stopped"
    FAULTED = "faulted"


class LineType(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    COMMAND = "command"
    INFO = "info"


def _line_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TerminalLine:
    """One timestamped, typed line of session output."""

    content: str
    type: LineType = LineType.INFO
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=_line_id)


@dataclass(frozen=True)
class StateChanged:
    state: SessionState


@dataclass(frozen=True)
class PreviewUrlChanged:
    """Preview URL update; an empty ``url`` signals teardown."""

    url: str


SessionEvent = StateChanged | PreviewUrlChanged


@dataclass(frozen=True)
class MountResult:
    """Outcome of one mount batch."""

    written: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed


__all__ = [
    "SessionState",
    "LineType",
    "TerminalLine",
    "StateChanged",
    "PreviewUrlChanged",
    "SessionEvent",
    "MountResult",
]
