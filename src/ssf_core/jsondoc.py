"""JSON document helpers for embedded block payloads.

Floats are parsed as ``Decimal`` so that re-serialized documents keep the
exact digits the game wrote (``712.76129150390625`` stays as written).
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any

import simplejson as json

COMPACT_JSON_KW = {"separators": (",", ":"), "ensure_ascii": False, "use_decimal": True}
PRETTY_JSON_KW = {"indent": 2, "ensure_ascii": False, "use_decimal": True}


def _unique_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"Duplicate object key {key!r}")
        obj[key] = value
    return obj


def loads(data: bytes | str, unique_keys: bool = False) -> Any:
    """Parse a JSON document.

    With ``unique_keys``, an object that repeats a member name is rejected
    instead of keeping only the last value.
    """
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    hook = _unique_object if unique_keys else None
    return json.loads(data, parse_float=Decimal, object_pairs_hook=hook, allow_nan=False)


def _has_surrogates(text: str) -> bool:
    return any("\ud800" <= ch <= "\udfff" for ch in text)


def _dumps(obj: Any, kw: dict[str, Any]) -> str:
    text = json.dumps(obj, **kw)
    # Lone surrogates from \uXXXX escapes cannot be written as UTF-8; keep them escaped.
    if _has_surrogates(text):
        text = json.dumps(obj, **{**kw, "ensure_ascii": True})
    return text


def dumps_compact(obj: Any) -> bytes:
    return _dumps(obj, COMPACT_JSON_KW).encode("utf-8")


def dumps_pretty(obj: Any) -> str:
    return _dumps(obj, PRETTY_JSON_KW)
