"""Strapi query-string encoding.

Strapi's REST API expresses ``populate``, ``filters``, ``sort`` and
``pagination`` with bracket notation (``populate[hod][populate]=*``,
``filters[Published][$eq]=true``). This module turns plain Python values
into that notation so call sites never hand-write query strings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_params(value: Any, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested mappings/sequences into ``(key, value)`` pairs.

    Examples
    --------
    >>> flatten_params({"populate": {"hod": {"populate": "*"}}})
    [('populate[hod][populate]', '*')]
    >>> flatten_params({"filters": {"Published": {"$eq": True}}})
    [('filters[Published][$eq]', 'true')]
    """
    pairs: list[tuple[str, str]] = []
    if isinstance(value, Mapping):
        for key, inner in value.items():
            name = f"{prefix}[{key}]" if prefix else str(key)
            pairs.extend(flatten_params(inner, name))
    elif isinstance(value, Sequence) and not isinstance(value, str):
        for index, inner in enumerate(value):
            pairs.extend(flatten_params(inner, f"{prefix}[{index}]"))
    elif value is not None:
        pairs.append((prefix, _scalar(value)))
    return pairs


def build_query(
    *,
    populate: Any = None,
    sort: str | Sequence[str] | None = None,
    filters: Mapping[str, Any] | None = None,
    pagination: Mapping[str, int] | None = None,
) -> str:
    """Build a Strapi query string (without the leading ``?``).

    Parameters
    ----------
    populate : Any, optional
        ``"*"`` or a nested mapping such as ``{"hod": {"populate": "*"}}``.
    sort : str | Sequence[str] | None, optional
        ``"order:asc"`` or ``["order:asc", "event_date:desc"]``; sequences
        are joined with commas.
    filters : Mapping[str, Any] | None, optional
        Nested filter mapping, e.g. ``{"Published": {"$eq": True}}``.
    pagination : Mapping[str, int] | None, optional
        e.g. ``{"pageSize": 100}``.

    Returns
    -------
    str
        Encoded query string. Brackets, ``$``, ``*``, ``:`` and ``,`` are left
        unescaped so the result stays readable in logs.

    Examples
    --------
    >>> build_query(populate="*", sort=["Date:desc"], filters={"Published": {"$eq": True}})
    'populate=*&sort=Date:desc&filters[Published][$eq]=true'
    """
    params: dict[str, Any] = {}
    if populate is not None:
        params["populate"] = populate
    if sort:
        params["sort"] = sort if isinstance(sort, str) else ",".join(sort)
    if filters:
        params["filters"] = filters
    if pagination:
        params["pagination"] = pagination
    safe = "[]$*:,"
    return "&".join(
        f"{quote(key, safe=safe)}={quote(val, safe=safe)}"
        for key, val in flatten_params(params)
    )


def with_query(path: str, query: str | Mapping[str, Any] | None) -> str:
    """Append a query (string or ``build_query`` keyword mapping) to a path."""
    if not query:
        return path
    if isinstance(query, Mapping):
        query = build_query(**query)
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"
