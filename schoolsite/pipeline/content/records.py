"""Record shapes returned by the CMS and the single function that tells them apart.

Strapi returns a record either flat (``{"id": 1, "title": ...}``) or wrapped
in the older convention (``{"id": 1, "attributes": {"title": ...}}``),
depending on the backend version. :func:`classify_record` turns any raw
value into a tagged union of :class:`FlatRecord` and :class:`NestedRecord`
(or ``None``); everything downstream reads fields through
:meth:`Record.get` and never probes shapes itself.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


def _coerce_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass(frozen=True)
class _BaseRecord:
    id: int | None
    fields: Mapping[str, Any] = field(default_factory=dict)

    kind: ClassVar[str] = ""

    def get(self, *names: str, default: Any = None) -> Any:
        """Return the first non-None field among alias spellings."""
        for name in names:
            value = self.fields.get(name)
            if value is not None:
                return value
        return default

    def text(self, *names: str) -> str | None:
        """Return a stripped string field or None when missing/blank."""
        value = self.get(*names)
        if value is None or isinstance(value, (Mapping, list)):
            return None
        value = str(value).strip()
        return value or None

    def number(self, *names: str) -> int | None:
        value = self.get(*names)
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if isinstance(value, (int, float)):
            return int(value)
        return None


@dataclass(frozen=True)
class FlatRecord(_BaseRecord):
    """A record whose fields sit directly on the object."""

    kind: ClassVar[str] = "flat"


@dataclass(frozen=True)
class NestedRecord(_BaseRecord):
    """A record wrapped as ``{id, attributes: {...}}``."""

    kind: ClassVar[str] = "nested"


Record = Union[FlatRecord, NestedRecord]


def classify_record(raw: Any) -> Record | None:
    """Classify a raw CMS value as a flat or nested record.

    Examples
    --------
    >>> classify_record({"id": 3, "attributes": {"title": "A"}}).kind
    'nested'
    >>> classify_record({"id": 3, "title": "A"}).get("title")
    'A'
    >>> classify_record("nope") is None
    True
    """
    if not isinstance(raw, Mapping):
        return None
    attributes = raw.get("attributes")
    if isinstance(attributes, Mapping):
        record_id = _coerce_id(raw.get("id"))
        if record_id is None:
            record_id = _coerce_id(attributes.get("id"))
        return NestedRecord(record_id, attributes)
    return FlatRecord(_coerce_id(raw.get("id")), raw)


def _items(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def unwrap_collection(payload: Any) -> list[Record]:
    """Return the records of a ``{data: [...]}`` payload (or bare list).

    A single-record ``data`` is returned as a one-element list; non-record
    entries are skipped.
    """
    if isinstance(payload, Mapping):
        payload = payload.get("data")
    records = (classify_record(item) for item in _items(payload))
    return [record for record in records if record is not None]


def unwrap_single(payload: Any) -> Record | None:
    """Return the record of a single-type payload such as ``/about-the-school``."""
    if isinstance(payload, Mapping) and "data" in payload:
        payload = payload.get("data")
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    return classify_record(payload)


def unwrap_relation(value: Any) -> Record | None:
    """Resolve a to-one relation in ``{data: {...}}`` or bare form."""
    if isinstance(value, Mapping) and "data" in value and "id" not in value:
        value = value.get("data")
    if isinstance(value, list):
        value = value[0] if value else None
    return classify_record(value)


def unwrap_relation_list(value: Any) -> list[Record]:
    """Resolve a to-many relation in ``{data: [...]}`` or bare list form."""
    if isinstance(value, Mapping) and "data" in value and "id" not in value:
        value = value.get("data")
    records = (classify_record(item) for item in _items(value))
    return [record for record in records if record is not None]
