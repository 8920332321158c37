"""Property lookup by path expression.

Filters name the property they test with a dotted path such as ``Title``,
``trust``, ``fields.COMPANY`` or ``Value[0].Item``. Lookups never raise on
missing segments; they return ``MISSING`` instead.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, List


class _Missing:
    """Sentinel for an absent property."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_INDEX_RE = re.compile(r'\[(\d+)\]')


def split_path(path: str) -> List[str]:
    """Split 'a.b[0].c' into ['a', 'b', '0', 'c']."""
    normalized = _INDEX_RE.sub(r'.\1', path)
    return [part for part in normalized.split('.') if part]


def _lookup(obj: Any, key: str) -> Any:
    if obj is None or obj is MISSING:
        return MISSING

    # Scalars have no addressable properties
    if isinstance(obj, (str, bytes, int, float)):
        return MISSING

    if isinstance(obj, Mapping):
        return obj.get(key, MISSING)

    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        if key.isdigit() and int(key) < len(obj):
            return obj[int(key)]
        return MISSING

    value = getattr(obj, key, MISSING)
    if value is MISSING:
        # Records keep the server payload for names they don't model
        raw = getattr(obj, 'raw', None)
        if isinstance(raw, Mapping):
            return raw.get(key, MISSING)
    return value


def resolve_property(path: str, record: Any) -> Any:
    """Return the value at ``path`` in ``record``, or MISSING.

    Args:
        path: Dotted path; list indexes as '.0' or '[0]'
        record: Mapping, sequence or object (records with a ``raw`` mapping
            fall back to it for unknown attribute names)
    """
    value = record
    for key in split_path(path):
        value = _lookup(value, key)
        if value is MISSING:
            return MISSING
    return value
