"""Terminal control-sequence stripping for process output.

Package managers and dev servers write colors, spinners, and cursor movement
meant for a real terminal. Output lines pass through ``sanitize_output`` before
they reach the session log so only printable text remains.
"""

from __future__ import annotations

import re

# Applied in order; later patterns catch what earlier, narrower ones leave.
_SGR_AND_CURSOR_RE = re.compile(r"\x1b\[[0-9;]*[mGKH]")
_CURSOR_POSITION_RE = re.compile(r"\x1b\[[0-9]*;[0-9]*H")
_ERASE_DISPLAY_RE = re.compile(r"\x1b\[[0-9]*J")
_ERASE_LINE_RE = re.compile(r"\x1b\[[0-9]*K")
_MODE_TOGGLE_RE = re.compile(r"\x1b\[\?[0-9]*[hl]")
_OTHER_CONTROL_RE = re.compile(r"\x1b\[[0-9]*[@A-Z]")
_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_BACKSPACE_RE = re.compile(r"\x08")
_BARE_CR_RE = re.compile(r"\r(?!\n)")

_PATTERNS = (
    _SGR_AND_CURSOR_RE,
    _CURSOR_POSITION_RE,
    _ERASE_DISPLAY_RE,
    _ERASE_LINE_RE,
    _MODE_TOGGLE_RE,
    _OTHER_CONTROL_RE,
    _OSC_RE,
    ANSI_ESCAPE_RE,
    _BACKSPACE_RE,
    _BARE_CR_RE,
)


def sanitize_output(raw: str) -> str:
    """Remove terminal control sequences from ``raw``.

    Strips SGR colors, cursor positioning, erase-display/line, mode toggles,
    remaining CSI and OSC sequences, backspaces, and carriage returns that are
    not part of a ``\\r\\n`` pair. Ordinary printable text is returned as-is.
    """
    if "\x1b" not in raw and "\x08" not in raw and "\r" not in raw:
        return raw
    cleaned = raw
    for pattern in _PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned


__all__ = ["ANSI_ESCAPE_RE", "sanitize_output"]
