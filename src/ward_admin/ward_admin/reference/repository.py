from __future__ import annotations

from typing import Protocol, Sequence

from .model import Hymn, Member, Organization, WardUser


class ReferenceRepository(Protocol):
    """Read-only lookup tables consumed by the program composer."""

    def list_users(self) -> Sequence[WardUser]:
        raise NotImplementedError

    def list_organizations(self) -> Sequence[Organization]:
        raise NotImplementedError

    def list_hymns(self) -> Sequence[Hymn]:
        raise NotImplementedError

    def list_members(self) -> Sequence[Member]:
        raise NotImplementedError
