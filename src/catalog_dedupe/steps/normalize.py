from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_text(value: object) -> str:
    """Lower-case, drop punctuation, collapse whitespace and trim."""
    if value is None:
        return ""
    text = _NON_WORD.sub("", str(value).lower())
    return _WHITESPACE.sub(" ", text).strip()


def compact_text(value: object) -> str:
    """Reduce to bare ``[a-z0-9]`` characters, as used by the name lookup."""
    if value is None:
        return ""
    return _NON_ALNUM.sub("", str(value).lower())
