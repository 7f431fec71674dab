"""Session name rules.

A session name doubles as the directory name of its credential area,
so it must be safe to use as a single path component.
"""

from __future__ import annotations

import re

SESSION_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")


def normalize_session_name(name: str) -> str:
    """Trim surrounding whitespace from a user-supplied session name."""
    return name.strip()


def validate_session_name(name: str) -> bool:
    """Check whether *name* is a filesystem-safe session name.

    Rejects empty names, path separators, and names starting with a dot.
    """
    if name in (".", ".."):
        return False
    return SESSION_NAME_PATTERN.match(name) is not None
