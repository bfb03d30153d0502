"""Ignore-file path filtering used during local folder imports.

Parses a project ignore file into a rule set and evaluates candidates with a
deliberately coarse subset of ignore semantics: extension wildcards, exact
names, and top-level directory exclusion for patterns that contain ``/``.
Negation lines are kept but never applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ALWAYS_IGNORED_DIR = ".git"
DEFAULT_IGNORE_FILENAME = ".gitignore"


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered patterns from one ignore file plus its inert negation lines."""

    patterns: tuple[str, ...] = ()
    negations: tuple[str, ...] = ()


def parse_ignore_rules(text: str) -> IgnoreRuleSet:
    """Parse ignore-file text, dropping blanks and ``#`` comments."""
    patterns: list[str] = []
    negations: list[str] = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        if trimmed.startswith("!"):
            negations.append(trimmed)
            continue
        patterns.append(trimmed)
    return IgnoreRuleSet(patterns=tuple(patterns), negations=tuple(negations))


def _pattern_matches(pattern: str, name: str, path_parts: list[str]) -> bool:
    if pattern.startswith("*."):
        if name.endswith(pattern[1:]):
            return True
    if pattern == name:
        return True
    if "/" in pattern:
        pattern_parts = [part for part in pattern.split("/") if part and part != "*"]
        if pattern_parts and path_parts and path_parts[0] == pattern_parts[0]:
            return True
    return False


@dataclass(frozen=True)
class IgnoreMatcher:
    """Evaluates ``(name, relative_path)`` candidates against a rule set.

    ``.git`` is ignored regardless of rules. A pattern containing ``/`` only
    compares its first concrete segment with the candidate's first segment,
    so ``.vscode/settings.json`` excludes all of ``.vscode``.
    """

    rules: IgnoreRuleSet = field(default_factory=IgnoreRuleSet)

    @classmethod
    def from_text(cls, text: str) -> IgnoreMatcher:
        return cls(parse_ignore_rules(text))

    def is_ignored(self, name: str, relative_path: str) -> bool:
        if name == ALWAYS_IGNORED_DIR or relative_path.startswith(ALWAYS_IGNORED_DIR + "/"):
            return True
        path_parts = [part for part in relative_path.split("/") if part]
        return any(_pattern_matches(pattern, name, path_parts) for pattern in self.rules.patterns)


__all__ = [
    "ALWAYS_IGNORED_DIR",
    "DEFAULT_IGNORE_FILENAME",
    "IgnoreRuleSet",
    "IgnoreMatcher",
    "parse_ignore_rules",
]
