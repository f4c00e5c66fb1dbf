"""Glob-style pattern matching for names, types and namespaces.

``*`` matches any run of characters, ``?`` matches a single character.
Every other character is literal.  Matching is always case-insensitive
and anchored at both ends.
"""

from __future__ import annotations

import functools
import re

WILDCARD_CHARS = ("*", "?")


def has_wildcard(pattern: str) -> bool:
    """Return True if *pattern* contains a glob wildcard."""
    return any(ch in pattern for ch in WILDCARD_CHARS)


@functools.lru_cache(maxsize=1024)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob *pattern* to an anchored, case-insensitive regex.

    Example: ``glob_to_regex("Pset_*")`` matches ``"pset_wallcommon"``.
    """
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + r"\Z", re.IGNORECASE | re.DOTALL)


def matches_pattern(value: str | None, pattern: str) -> bool:
    """Check *value* against *pattern*.

    Patterns with wildcards go through :func:`glob_to_regex`; plain
    patterns compare by case-insensitive equality.  A missing value
    never matches.
    """
    if value is None:
        return False
    if has_wildcard(pattern):
        return glob_to_regex(pattern).match(value) is not None
    return value.lower() == pattern.lower()
