"""Helpers for reading untyped TOML tables.

The release configuration arrives as nested dicts and lists from ``tomllib``.
These helpers validate shapes at that boundary and narrow types for the
checker; they return None instead of raising on a shape mismatch.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], *keys: str) -> str | None:
    """Get a stripped string value, trying each key spelling in order.

    Returns None if every key is missing, not a str, or blank.
    """
    for key in keys:
        value = table.get(key)
        if not isinstance(value, str):
            continue
        s = value.strip()
        if s:
            return s
    return None


def get_number(table: Mapping[str, object], key: str) -> float | None:
    """Get an int or float value (booleans are rejected)."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table from a mapping."""
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))
