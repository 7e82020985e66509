"""Composite person fields ("Name | Calling").

The stored encoding changed over time: old rows use "Name, Calling" or just a
name. Parsing accepts all three; composing always writes the pipe format.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from ..common.names import comparable_name
from ..core.constants import PERSON_SEPARATOR, VISITING_AUTHORITY_SEPARATOR


@dataclass(frozen=True)
class PersonValue:
    name: str
    calling: str = ""


def compose_person_value(name: Optional[str], calling: Optional[str] = None) -> str:
    name = (name or "").strip()
    if not name:
        return ""
    calling = (calling or "").strip()
    if not calling:
        return name
    return f"{name}{PERSON_SEPARATOR}{calling}"


def parse_person_value(value: Optional[str]) -> PersonValue:
    text = (value or "").strip()
    if not text:
        return PersonValue(name="")

    if "|" in text:
        name, calling = text.split("|", 1)
        name, calling = name.strip(), calling.strip()
    elif "," in text:
        parts = [p.strip() for p in text.split(",")]
        name = parts[0]
        calling = VISITING_AUTHORITY_SEPARATOR.join(p for p in parts[1:] if p)
    else:
        return PersonValue(name=text)

    if not name:
        return PersonValue(name=text)
    return PersonValue(name=name, calling=calling)


def person_name(value: Optional[str]) -> str:
    return parse_person_value(value).name


def split_visiting_authority(value: Optional[str]) -> List[str]:
    return [p.strip() for p in (value or "").split(",") if p.strip()]


def strip_names(value: Optional[str], is_listed: Callable[[str], bool]) -> str:
    """Drop visiting-authority entries whose name ``is_listed``; keep the rest in order."""

    kept = []
    for entry in split_visiting_authority(value):
        name = entry.split("|", 1)[0].strip()
        if is_listed(comparable_name(name)):
            continue
        kept.append(entry)
    return VISITING_AUTHORITY_SEPARATOR.join(kept)
