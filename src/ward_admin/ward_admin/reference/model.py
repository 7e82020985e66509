from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import OrganizationType, Role


@dataclass(frozen=True)
class Hymn:
    number: int
    title: str

    @property
    def label(self) -> str:
        return f"{self.number} - {self.title}"


@dataclass(frozen=True)
class Organization:
    organization_id: int
    name: str
    type: OrganizationType


@dataclass(frozen=True)
class WardUser:
    """A user of the application (leaders only, not the whole membership)."""

    user_id: int
    name: str
    role: Role
    email: Optional[str] = None
    organization_id: Optional[int] = None


@dataclass(frozen=True)
class Member:
    member_id: int
    name: str
    email: Optional[str] = None
    organization_id: Optional[int] = None
