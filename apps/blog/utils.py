"""
Slug and tag helpers for blog posts.
"""

import json
import re
import unicodedata
from collections.abc import Iterable

TagsInput = str | Iterable[str] | None


def slugify(text: str) -> str:
    """Generate an ASCII slug: runs of non-alphanumerics become a single '-'."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return text.strip("-")


def _split_tags(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("["):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return [str(tag) for tag in decoded]
    return value.split(",")


def normalize_tags(value: TagsInput) -> list[str]:
    """
    Normalize tags into an ordered list of trimmed, non-empty strings.

    Accepts a list of tags, a JSON-encoded list ('["a", "b"]') or a
    comma-separated string ("a, b"). List items are themselves normalized,
    so a multipart form sending a single "a,b" field yields ["a", "b"].
    """
    if value is None:
        return []
    items = [value] if isinstance(value, str) else list(value)

    tags: list[str] = []
    for item in items:
        for tag in _split_tags(str(item)):
            tag = tag.strip()
            if tag:
                tags.append(tag)
    return tags
