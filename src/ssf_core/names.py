"""Block name normalization and plausibility checks."""
from __future__ import annotations


def normalize_name(text: str) -> str:
    """Normalize a block name or selector: trim, lowercase, hyphens to underscores."""
    if not text:
        return ""
    return text.strip().lower().replace("-", "_")


def selector_matches(block_name: str, selector_norm: str) -> bool:
    """True when the normalized block name contains an already normalized selector."""
    if not selector_norm:
        return False
    return selector_norm in normalize_name(block_name)


def is_printable_ascii(raw: bytes) -> bool:
    return all(32 <= b <= 126 for b in raw)
