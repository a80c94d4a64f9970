"""Media field resolution.

Strapi media fields arrive in several shapes depending on the backend
version and on whether the field allows multiple files::

    {"data": {"attributes": {"url": "/uploads/a.jpg"}}}   # nested
    {"data": {"url": "/uploads/a.jpg"}}                   # wrapped flat
    {"url": "/uploads/a.jpg"}                             # flat
    [{"url": "/uploads/a.jpg"}, ...]                      # array of either
    {"data": [{"attributes": {"url": ...}}, ...]}         # wrapped array

All of them resolve to the same absolute URL; anything else resolves to
``None``. Nothing in this module raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _url_of(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def extract_media_path(value: Any) -> str | None:
    """Return the raw (possibly relative) URL stored in a media field.

    Checks, in order: ``data.attributes.url``, ``data.url``, ``url``,
    ``attributes.url``; arrays (top level or under ``data``) contribute their
    first element.

    Examples
    --------
    >>> extract_media_path({"data": {"attributes": {"url": "/u/a.jpg"}}})
    '/u/a.jpg'
    >>> extract_media_path([{"url": "/u/a.jpg"}])
    '/u/a.jpg'
    >>> extract_media_path(None) is None
    True
    """
    value = _first(value)
    if not isinstance(value, Mapping):
        return None
    data = _first(value.get("data"))
    if isinstance(data, Mapping):
        attributes = data.get("attributes")
        if isinstance(attributes, Mapping) and _url_of(attributes.get("url")):
            return _url_of(attributes.get("url"))
        if _url_of(data.get("url")):
            return _url_of(data.get("url"))
    if _url_of(value.get("url")):
        return _url_of(value.get("url"))
    attributes = value.get("attributes")
    if isinstance(attributes, Mapping):
        return _url_of(attributes.get("url"))
    return None


def resolve_media_url(path: str | None, base_url: str) -> str | None:
    """Make a CMS media path absolute.

    Examples
    --------
    >>> resolve_media_url("/uploads/a.jpg", "http://cms:1337/")
    'http://cms:1337/uploads/a.jpg'
    >>> resolve_media_url("https://cdn.example.org/a.jpg", "http://cms:1337")
    'https://cdn.example.org/a.jpg'
    >>> resolve_media_url("", "http://cms:1337") is None
    True
    """
    if not path:
        return None
    if path.startswith("http"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url.rstrip('/')}{path}"


def media_url(value: Any, base_url: str) -> str | None:
    """Resolve any media field shape to an absolute URL or None."""
    return resolve_media_url(extract_media_path(value), base_url)

