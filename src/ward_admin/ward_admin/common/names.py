from __future__ import annotations

import unicodedata


def comparable_name(value: str) -> str:
    """Key used to compare person names: no accents, casefolded, single spaces."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())
