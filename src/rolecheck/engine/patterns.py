"""Trailing-wildcard action matching and wildcard scope containment."""

from __future__ import annotations

WILDCARD = "*"


def is_wildcard(action: str) -> bool:
    """Return True if *action* ends with a trailing ``*``."""
    return action.endswith(WILDCARD)


def is_malformed_wildcard(action: str) -> bool:
    """Return True if *action* has a ``*`` anywhere but the last position."""
    return WILDCARD in action[:-1]


def matches(candidate: str, pattern: str) -> bool:
    """Return True if *candidate* is matched by *pattern*.

    A pattern without a trailing ``*`` matches by exact equality.  A pattern
    ending in ``*`` matches any candidate starting with the text before the
    ``*``.  A ``*`` anywhere else in the pattern is compared literally.
    """
    if is_wildcard(pattern):
        return candidate.startswith(pattern[:-1])
    return candidate == pattern


def covers(outer: str, inner: str) -> bool:
    """Return True if wildcard *outer* matches everything wildcard *inner* can.

    Both arguments are expected to end in ``*``.  ``s3:*`` covers
    ``s3:Get*``; ``s3:GetObject*`` does not cover ``s3:Get*``.
    """
    return matches(inner[:-1], outer)
