"""Editor language tags derived from file names.

Known web-project extensions map to the tags editors expect. Anything else
falls back to the first alias of the Pygments lexer for the filename.
"""

from __future__ import annotations

from functools import lru_cache

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

PLAINTEXT = "plaintext"

LANGUAGE_MAP: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "json": "json",
    "md": "markdown",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
    "sh": "shell",
    "txt": PLAINTEXT,
}


def _extension(name: str) -> str:
    """Return the lowercased text after the last dot, or ``""``."""
    _head, sep, tail = name.rpartition(".")
    return tail.lower() if sep else ""


@lru_cache(maxsize=512)
def _pygments_alias(name: str) -> str | None:
    try:
        lexer = get_lexer_for_filename(name)
    except ClassNotFound:
        return None
    aliases = getattr(lexer, "aliases", None) or []
    return aliases[0] if aliases else None


def language_for_path(path: str) -> str:
    """Return the advisory language tag for ``path``."""
    name = path.rsplit("/", 1)[-1]
    mapped = LANGUAGE_MAP.get(_extension(name))
    if mapped is not None:
        return mapped
    if not name:
        return PLAINTEXT
    return _pygments_alias(name) or PLAINTEXT


__all__ = ["LANGUAGE_MAP", "PLAINTEXT", "language_for_path"]
