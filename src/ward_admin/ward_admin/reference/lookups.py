"""Reference data bundle injected into the program composer.

The composer never fetches anything on its own: the surrounding request loads
users, organizations, hymns and members once and hands them over as a frozen
``ReferenceData`` value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..common.names import comparable_name
from ..core.constants import DEFAULT_SUGGESTION_LIMIT
from ..core.enums import BISHOPRIC_CALLING_LABELS, BISHOPRIC_ROLES, OrganizationType
from .model import Hymn, Member, Organization, WardUser


@dataclass(frozen=True)
class BishopricMember:
    name: str
    calling: str


@dataclass(frozen=True)
class ReferenceData:
    users: Tuple[WardUser, ...] = ()
    organizations: Tuple[Organization, ...] = ()
    hymns: Tuple[Hymn, ...] = ()
    members: Tuple[Member, ...] = ()

    _hymns_by_number: Dict[int, Hymn] = field(init=False, repr=False, compare=False)
    _orgs_by_id: Dict[int, Organization] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "users", tuple(self.users))
        object.__setattr__(self, "organizations", tuple(self.organizations))
        object.__setattr__(self, "hymns", tuple(self.hymns))
        object.__setattr__(self, "members", tuple(self.members))
        object.__setattr__(self, "_hymns_by_number", {h.number: h for h in self.hymns})
        object.__setattr__(self, "_orgs_by_id", {o.organization_id: o for o in self.organizations})

    @classmethod
    def build(
        cls,
        *,
        users: Sequence[WardUser] = (),
        organizations: Sequence[Organization] = (),
        hymns: Sequence[Hymn] = (),
        members: Sequence[Member] = (),
    ) -> "ReferenceData":
        return cls(
            users=tuple(users),
            organizations=tuple(organizations),
            hymns=tuple(hymns),
            members=tuple(members),
        )

    # Hymns
    def hymn(self, number: int) -> Optional[Hymn]:
        return self._hymns_by_number.get(number)

    def suggest_hymns(self, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[Hymn]:
        q = (query or "").strip()
        if not q:
            return list(self.hymns[:limit])
        if q.isdigit():
            matches = [h for h in self.hymns if str(h.number).startswith(q)]
        else:
            key = comparable_name(q)
            matches = [h for h in self.hymns if key in comparable_name(h.title)]
        return matches[:limit]

    # Organizations
    def organization(self, organization_id: Optional[int]) -> Optional[Organization]:
        if organization_id is None:
            return None
        try:
            return self._orgs_by_id.get(int(organization_id))
        except (TypeError, ValueError):
            return None

    def organizations_for_releases(self) -> List[Organization]:
        """Organizations offered in the release/sustainment pickers."""
        return [o for o in self.organizations if o.type != OrganizationType.CUORUM_ELDERES]

    # People
    def bishopric(self) -> List[BishopricMember]:
        return [
            BishopricMember(name=u.name, calling=BISHOPRIC_CALLING_LABELS[u.role])
            for u in self.users
            if u.role in BISHOPRIC_ROLES
        ]

    def find_bishopric_member(self, name: str) -> Optional[BishopricMember]:
        key = comparable_name(name)
        if not key:
            return None
        for m in self.bishopric():
            if comparable_name(m.name) == key:
                return m
        return None

    def suggest_members(self, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[Member]:
        key = comparable_name(query)
        if not key:
            return []
        return [m for m in self.members if key in comparable_name(m.name)][:limit]
