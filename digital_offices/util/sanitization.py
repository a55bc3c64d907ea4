"""Sanitisation helpers.

This module provides simple utilities to strip potentially unsafe
HTML tags from user-supplied text fields and to trim whitespace.
Use these functions before storing free-form profile text or
rejection reasons, since both are rendered by the web front-ends.
"""
import re
from typing import Iterable

TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(text: str | None) -> str | None:
    """Remove HTML tags from the given string.

    ``None`` passes through unchanged so that optional fields can be
    cleared explicitly.
    """
    if text is None:
        return None
    no_tags = TAG_RE.sub("", text)
    return no_tags.strip()


def clean_fields(data: dict, names: Iterable[str]) -> dict:
    """Return a copy of ``data`` with the named string fields stripped of tags."""
    cleaned = dict(data)
    for name in names:
        if isinstance(cleaned.get(name), str):
            cleaned[name] = strip_tags(cleaned[name])
    return cleaned
