"""
Canonical JSON serialization for event hashing.

CRITICAL: The event log authority hashes events with this exact encoding.
Any drift in key order, number formatting or escaping breaks verification
of otherwise valid events.

Rules:
- Object keys sorted lexicographically by Unicode code point
- No whitespace between tokens
- Numbers: integers plain, floats shortest round-trip, integral floats as integers
- Strings: standard JSON escaping, non-ASCII emitted as-is
- null, true, false as literals
"""

import json
import math
from typing import Any


def canonical_json(value: Any) -> str:
    """
    Serialize a value to canonical JSON.

    Args:
        value: None, bool, int, float, str, list/tuple or dict with str keys

    Returns:
        Canonical JSON string with sorted keys and no whitespace

    Raises:
        TypeError: If the value (or anything nested in it) is outside the
            supported set, or is a non-finite float
    """
    return _serialize_value(value)


def canonicalize(value: Any) -> bytes:
    """Canonical JSON of ``value`` as UTF-8 bytes, ready for hashing."""
    return canonical_json(value).encode("utf-8")


def _serialize_value(value: Any) -> str:
    if value is None:
        return "null"

    if isinstance(value, bool):
        # Must check bool before int (bool is subclass of int in Python)
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _serialize_number(value)

    if isinstance(value, str):
        return _serialize_string(value)

    if isinstance(value, (list, tuple)):
        return _serialize_array(value)

    if isinstance(value, dict):
        return _serialize_object(value)

    raise TypeError(f"Cannot canonicalize value of type {type(value).__name__}")


def _serialize_number(num: float | int) -> str:
    """
    Serialize number using the shortest form that round-trips.

    Matches ECMAScript NumberToString (what JSON.stringify emits).
    """
    if isinstance(num, float) and (math.isnan(num) or math.isinf(num)):
        raise TypeError("Cannot canonicalize non-finite number")

    # Integer handling: avoid scientific notation for reasonable integers
    if isinstance(num, int) or num.is_integer():
        int_val = int(num)
        if abs(int_val) < 10**21:
            return str(int_val)

    if isinstance(num, int):
        try:
            num = float(num)
        except OverflowError as exc:
            raise TypeError("Cannot canonicalize integer beyond double range") from exc

    return _format_double(num)


def _format_double(num: float) -> str:
    """
    ECMAScript NumberToString for a finite, non-zero double.

    repr() yields the shortest round-trip digits; only the layout differs
    from ECMAScript (plain decimals for 1e-6 <= |x| < 1e21, unpadded
    signed exponent otherwise).
    """
    sign = "-" if num < 0 else ""
    text = repr(abs(num))

    mantissa, _, exponent = text.partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    # Decimal point position relative to the start of digits
    point = len(int_part) + (int(exponent) if exponent else 0)

    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0") or "0"
    k = len(digits)

    if k <= point <= 21:
        body = digits + "0" * (point - k)
    elif 0 < point <= 21:
        body = digits[:point] + "." + digits[point:]
    elif -6 < point <= 0:
        body = "0." + "0" * (-point) + digits
    else:
        exp = point - 1
        exp_text = f"e{'+' if exp >= 0 else '-'}{abs(exp)}"
        body = (digits if k == 1 else digits[0] + "." + digits[1:]) + exp_text

    return sign + body


def _serialize_string(text: str) -> str:
    """
    Serialize string with proper JSON escaping.

    json.dumps handles control characters, backslash and double-quote
    escaping the same way JSON.stringify does.
    """
    return json.dumps(text, ensure_ascii=False)


def _serialize_array(arr: list | tuple) -> str:
    items = [_serialize_value(item) for item in arr]
    return "[" + ",".join(items) + "]"


def _serialize_object(obj: dict) -> str:
    """
    Serialize object with sorted keys.

    Keys are sorted lexicographically by Unicode code point. None values
    are kept and written as null.
    """
    for key in obj:
        if not isinstance(key, str):
            raise TypeError(f"Object keys must be str, got {type(key).__name__}")

    pairs = [
        _serialize_string(key) + ":" + _serialize_value(obj[key])
        for key in sorted(obj)
    ]
    return "{" + ",".join(pairs) + "}"
