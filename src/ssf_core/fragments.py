"""Locate JSON text embedded in arbitrary bytes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ssf_core import jsondoc
from ssf_core.errors import ValidationError
from ssf_core.protocol import (
    FRAGMENT_WINDOW_BACK,
    FRAGMENT_WINDOW_LEN,
    DEFAULT_MAX_FRAGMENTS,
    DEFAULT_MIN_STRING_LEN,
    DEFAULT_MAX_STRINGS,
    MAX_STRING_RUN,
)

_WS = b" \t\r\n"
_OPEN = b"{["
_CLOSE = b"}]"
_QUOTE = ord('"')
_BACKSLASH = ord("\\")


@dataclass(frozen=True)
class JsonFragment:
    offset: int
    length: int
    value: Any


def looks_like_json(data: bytes) -> bool:
    i = 0
    while i < len(data) and data[i] in _WS:
        i += 1
    return i < len(data) and data[i] in _OPEN


def extract_balanced_at(data: bytes, offset: int) -> tuple[int, Any] | None:
    """Parse the balanced JSON object or array starting exactly at ``offset``.

    Brackets inside string literals do not count. Returns
    ``(consumed, value)``, or None if the buffer ends before the nesting
    closes or the slice is not valid JSON.
    """
    if offset < 0 or offset >= len(data) or data[offset] not in _OPEN:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(offset, len(data)):
        b = data[i]
        if in_string:
            if escaped:
                escaped = False
            elif b == _BACKSLASH:
                escaped = True
            elif b == _QUOTE:
                in_string = False
            continue

        if b == _QUOTE:
            in_string = True
        elif b in _OPEN:
            depth += 1
        elif b in _CLOSE:
            depth -= 1
            if depth == 0:
                end = i + 1
                try:
                    value = jsondoc.loads(data[offset:end])
                except ValueError:
                    return None
                return end - offset, value
    return None


def _next_candidate(data: bytes, i: int) -> int:
    hits = [p for p in (data.find(b"{", i), data.find(b"[", i)) if p != -1]
    return min(hits) if hits else -1


def extract_fragments(
    data: bytes,
    contains: str | None = None,
    max_fragments: int = DEFAULT_MAX_FRAGMENTS,
) -> list[JsonFragment]:
    """Collect up to ``max_fragments`` JSON fragments in offset order.

    With ``contains``, a candidate is only tried when that ASCII text occurs
    in a fixed window around it.
    """
    needle = None
    if contains:
        try:
            needle = contains.encode("ascii")
        except UnicodeEncodeError as e:
            raise ValidationError("Fragment filter text must be ASCII", actual=contains) from e
    results: list[JsonFragment] = []

    i = 0
    while len(results) < max_fragments:
        i = _next_candidate(data, i)
        if i == -1:
            break

        if needle is not None:
            w_start = max(0, i - FRAGMENT_WINDOW_BACK)
            if data.find(needle, w_start, w_start + FRAGMENT_WINDOW_LEN) == -1:
                i += 1
                continue

        hit = extract_balanced_at(data, i)
        if hit is None:
            i += 1
            continue
        consumed, value = hit
        results.append(JsonFragment(i, consumed, value))
        i += consumed

    return results


def extract_largest(data: bytes) -> JsonFragment | None:
    best: JsonFragment | None = None
    i = 0
    while True:
        i = _next_candidate(data, i)
        if i == -1:
            return best
        hit = extract_balanced_at(data, i)
        if hit is None:
            i += 1
            continue
        consumed, value = hit
        if best is None or consumed > best.length:
            best = JsonFragment(i, consumed, value)
        i += consumed


def printable_strings(
    data: bytes,
    min_len: int = DEFAULT_MIN_STRING_LEN,
    max_items: int = DEFAULT_MAX_STRINGS,
) -> list[str]:
    """Distinct runs of printable ASCII, in first-seen order."""
    results: list[str] = []
    seen: set[str] = set()
    run = bytearray()

    def flush() -> None:
        if len(run) >= min_len:
            s = run.decode("ascii")
            if s not in seen:
                seen.add(s)
                results.append(s)
        run.clear()

    for b in data:
        if 32 <= b <= 126:
            run.append(b)
            if len(run) > MAX_STRING_RUN:
                flush()
        else:
            flush()
            if len(results) >= max_items:
                break
    flush()
    return results[:max_items]
