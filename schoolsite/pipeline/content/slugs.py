"""Slug generation with deterministic fallbacks."""

from __future__ import annotations

import re
from typing import Any

from schoolsite.config import MISSING_SLUG_VALUES

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str | None) -> str:
    """Lower-case, collapse non-alphanumeric runs into '-', trim hyphens.

    >>> slugify("Open House 2024!")
    'open-house-2024'
    """
    if not text:
        return ""
    return _NON_ALNUM.sub("-", str(text).lower()).strip("-")


def is_missing_slug(value: Any) -> bool:
    """True for None, non-strings, blanks and the literals 'null'/'undefined'."""
    if not isinstance(value, str):
        return True
    value = value.strip()
    return not value or value in MISSING_SLUG_VALUES


def fallback_slug(prefix: str, record_id: int | None) -> str:
    """Return the identifier-derived placeholder slug, e.g. ``announcement-42``."""
    return f"{prefix}-{record_id}" if record_id is not None else prefix


def normalize_slug(
    slug: Any, title: str | None, record_id: int | None, prefix: str
) -> str:
    """Return a usable slug.

    A valid slug is returned unchanged; otherwise the slugified title is
    used, and when that is empty the ``<prefix>-<id>`` placeholder. Applying
    it to its own output returns the same value.

    >>> normalize_slug(None, None, 42, "announcement")
    'announcement-42'
    >>> normalize_slug("null", "Sports Day", 7, "announcement")
    'sports-day'
    """
    if not is_missing_slug(slug):
        return slug
    generated = slugify(title)
    if generated:
        return generated
    return fallback_slug(prefix, record_id)
