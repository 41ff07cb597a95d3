"""Normalization helpers.

Centralizes defensive parsing of loosely-typed wire values.  Nothing in
here raises: unparseable input becomes ``None`` (or the given default).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def int_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    return 0 if parsed is None else parsed


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value)
    return text if text else None


def as_mapping(value: Any) -> dict[str, Any]:
    """Return *value* as a plain dict, or ``{}`` when it is not a mapping."""
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return {}


def ordered_unique(items: Any) -> tuple[str, ...]:
    """De-duplicate string items keeping first-seen order.

    Accepts a list/tuple of values or a comma-separated string.
    """
    if isinstance(items, str):
        candidates: list[Any] = items.split(",")
    elif isinstance(items, (list, tuple)):
        candidates = list(items)
    else:
        return ()

    seen: dict[str, None] = {}
    for item in candidates:
        text = safe_str(item)
        if text is None:
            continue
        text = text.strip()
        if text:
            seen.setdefault(text, None)
    return tuple(seen)
