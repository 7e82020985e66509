from __future__ import annotations

from typing import Any, Iterable, List


def clean_text(value: Any) -> str:
    """Coerce a form value to a stripped string ('' for None)."""
    if value is None:
        return ""
    return str(value).strip()


def non_blank(values: Iterable[Any]) -> List[str]:
    """Strip every entry and drop the blank/whitespace-only ones."""
    out: List[str] = []
    for v in values or []:
        text = clean_text(v)
        if text:
            out.append(text)
    return out


_TRUE_STRINGS = frozenset({"true", "1", "on", "yes"})


def parse_flag(value: Any) -> bool:
    """Read a checkbox-like value; strings such as 'false' or '0' are False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return clean_text(value).lower() in _TRUE_STRINGS
