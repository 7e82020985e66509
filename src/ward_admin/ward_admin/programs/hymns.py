from __future__ import annotations

import re
from typing import Optional, Protocol

from ..reference.model import Hymn

_LEADING_NUMBER = re.compile(r"^(\d+)")


class HymnLookup(Protocol):
    def hymn(self, number: int) -> Optional[Hymn]:
        ...


def leading_hymn_number(raw: str) -> Optional[int]:
    match = _LEADING_NUMBER.match((raw or "").strip())
    if not match:
        return None
    return int(match.group(1))


def normalize_hymn(raw: str, hymns: HymnLookup) -> str:
    """Rewrite '<number>...' as '<number> - <title>' when the number is known.

    Text that does not start with a known hymn number is returned unchanged,
    so hymns missing from the table can still be typed by hand.
    """

    number = leading_hymn_number(raw)
    if number is None:
        return raw
    hymn = hymns.hymn(number)
    if hymn is None:
        return raw
    return hymn.label
