"""JSON text in and out with JavaScript number semantics.

Upstream payloads are relayed verbatim, so parsing and serialization follow
``JSON.parse``/``JSON.stringify``: integers past 2**53 become doubles, and
floats are written with ECMAScript's Number-to-string rules (``150.0`` ->
``150``, ``3.931e-05`` -> ``0.00003931``, ``1e21`` -> ``1e+21``).
"""

from __future__ import annotations

import json
import math
from decimal import Decimal
from typing import Any, Mapping

# Largest integer a double holds exactly
_MAX_SAFE_INTEGER = 2**53


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name} in JSON")


def _parse_int(text: str) -> int | float:
    value = int(text)
    return value if abs(value) <= _MAX_SAFE_INTEGER else float(text)


def load_json(text: str | bytes) -> Any:
    """Parse JSON text, rejecting the NaN/Infinity extensions json accepts by default.

    Raises:
        ValueError: the text is not valid JSON (``json.JSONDecodeError`` included).
    """
    return json.loads(text, parse_constant=_reject_constant, parse_int=_parse_int)


def number_to_string(value: float) -> str:
    """Render a finite float exactly as ``String(value)`` does in JavaScript."""
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    # repr() yields the shortest round-trip digits, as ECMAScript requires
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"
    return sign + text


def _encode_key(key: Any) -> str:
    if isinstance(key, float):
        key = number_to_string(key)
    elif not isinstance(key, str):
        key = json.dumps(key)
    return json.dumps(key, ensure_ascii=False)


def _encode(value: Any) -> str:
    if isinstance(value, float):
        return number_to_string(value) if math.isfinite(value) else "null"
    if isinstance(value, Mapping):
        members = (f"{_encode_key(k)}:{_encode(v)}" for k, v in value.items())
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    return json.dumps(value, ensure_ascii=False)


def dump_json(value: Any) -> str:
    """Serialize compactly with raw unicode, byte-for-byte like JSON.stringify."""
    return _encode(value)


__all__ = ["load_json", "dump_json", "number_to_string"]
