"""
Conservative heuristic for clipboard text that might be a secret.

Used by the ignore_password_like setting. False positives are expected
(long identifiers, hashes, URLs without spaces); the setting can be turned off.
"""

from __future__ import annotations

import re


MIN_LENGTH = 12
LONG_TOKEN_LENGTH = 16

_CLASSES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"[0-9]"),
    re.compile(r"[^a-zA-Z0-9]"),
)


def is_password_like(text: object) -> bool:
    """
    True for a long token without spaces:
    - 16+ characters, or
    - 12+ characters mixing at least two of lower/upper/digit/other.
    """
    if not isinstance(text, str) or len(text) < MIN_LENGTH:
        return False
    trimmed = text.strip()
    if " " in trimmed:
        return False
    if len(trimmed) >= LONG_TOKEN_LENGTH:
        return True
    variety = sum(1 for pattern in _CLASSES if pattern.search(trimmed))
    return variety >= 2 and len(trimmed) >= MIN_LENGTH
