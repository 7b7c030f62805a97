# src/alchemist/validator/codec.py
"""
Decoders for structured values embedded in text fields.

Both decoders report failure through their return value and never raise,
so each validation pass decides on its own whether a failure is reportable.
"""

from __future__ import annotations

import json
from typing import Any, NamedTuple


class DecodedArray(NamedTuple):
    """Outcome of decode_int_array(): values are empty whenever ok is False."""

    values: tuple[int, ...]
    ok: bool


_FAILED = DecodedArray(values=(), ok=False)


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"non-standard JSON constant: {name}")


def _loads(text: Any) -> tuple[Any, bool]:
    if not isinstance(text, str):
        return None, False
    try:
        return json.loads(text, parse_constant=_reject_constant), True
    except (ValueError, RecursionError):
        return None, False


def _as_positive_int(item: Any) -> int | None:
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item if item > 0 else None
    if isinstance(item, float) and item.is_integer() and item > 0:
        return int(item)
    return None


def decode_int_array(text: Any) -> DecodedArray:
    """
    @brief
    Decode the JSON text of an array of positive integers.

    @details
    Used for worker AvailableSlots and task PreferredPhases. Fails when the
    text is not a string, is not valid JSON, is not an array, or contains an
    element that is not a positive integer. Integral floats (e.g. 2.0) are
    accepted as integers.

    @returns
        DecodedArray(values, ok).
    """
    data, parsed = _loads(text)
    if not parsed or not isinstance(data, list):
        return _FAILED

    values: list[int] = []
    for item in data:
        value = _as_positive_int(item)
        if value is None:
            return _FAILED
        values.append(value)
    return DecodedArray(values=tuple(values), ok=True)


def decode_structured(text: Any) -> bool:
    """
    @brief
    Well-formedness check for structured attribute text.

    @returns
        True if the text parses as a JSON object or array.
    """
    data, parsed = _loads(text)
    return parsed and isinstance(data, (dict, list))


__all__ = ["DecodedArray", "decode_int_array", "decode_structured"]
