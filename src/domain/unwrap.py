"""Strip the backend's inconsistent response envelopes.

Endpoints answer with a bare list, ``{"matches": [...]}`` or
``{"match": {...}}`` depending on the route. All shape-guessing lives here so
the normalizers only ever see flat records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

Record = dict[str, Any]


def records(rows: Iterable[Any]) -> list[Record]:
    """Keep only the mapping elements of ``rows``; nulls and scalars are dropped."""
    return [row for row in rows if isinstance(row, Mapping)]


def unwrap_array(data: Any, *keys: str) -> list[Record]:
    """Return the list of records carried by ``data``, or ``[]``."""
    if isinstance(data, list):
        return records(data)
    if not isinstance(data, Mapping):
        return []
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return records(value)
    return []


def unwrap_object(data: Any, *keys: str) -> Record | None:
    """Return the single record carried by ``data``, or ``None``.

    When no candidate key holds an object, the mapping itself is assumed to be
    the unwrapped payload.
    """
    if isinstance(data, list):
        if data and isinstance(data[0], Mapping):
            return dict(data[0])
        return None
    if not isinstance(data, Mapping):
        return None
    for key in keys:
        value = data.get(key)
        if isinstance(value, Mapping):
            return dict(value)
    return dict(data)


__all__ = ["Record", "records", "unwrap_array", "unwrap_object"]
