from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.ward_admin.ward_admin.core.enums import OrganizationType, Role
from src.ward_admin.ward_admin.programs.model import MeetingProgram
from src.ward_admin.ward_admin.reference.lookups import ReferenceData
from src.ward_admin.ward_admin.reference.model import Hymn, Member, Organization, WardUser

USERS = (
    WardUser(1, "Juan Pérez", Role.OBISPO, "obispo@example.org", 1),
    WardUser(2, "Carlos Ruiz", Role.CONSEJERO_OBISPO, None, 1),
    WardUser(3, "Luis Méndez", Role.CONSEJERO_OBISPO, None, 1),
    WardUser(4, "Pedro Soto", Role.SECRETARIO, None, 1),
)

ORGANIZATIONS = (
    Organization(1, "Obispado", OrganizationType.OBISPADO),
    Organization(2, "Sociedad de Socorro", OrganizationType.SOCIEDAD_SOCORRO),
    Organization(4, "Hombres Jóvenes", OrganizationType.HOMBRES_JOVENES),
    Organization(7, "Jóvenes Adultos Solteros", OrganizationType.JAS),
    Organization(8, "Cuórum de Élderes", OrganizationType.CUORUM_ELDERES),
    Organization(9, "Barrio", OrganizationType.BARRIO),
)

HYMNS = (
    Hymn(2, "Oh, está todo bien"),
    Hymn(19, "Te damos, Señor, nuestras gracias"),
    Hymn(169, "Mansos, reverentes hoy"),
    Hymn(193, "Soy un hijo de Dios"),
)

MEMBERS = (
    Member(1, "María López", "maria@example.org", 2),
    Member(2, "José Ramírez", None, 8),
    Member(3, "Ana Torres", None, 2),
)


class InMemoryReference:
    def __init__(self, users=USERS, organizations=ORGANIZATIONS, hymns=HYMNS, members=MEMBERS):
        self.users = list(users)
        self.organizations = list(organizations)
        self.hymns = list(hymns)
        self.members = list(members)

    def list_users(self):
        return list(self.users)

    def list_organizations(self):
        return list(self.organizations)

    def list_hymns(self):
        return list(self.hymns)

    def list_members(self):
        return list(self.members)


class InMemoryPrograms:
    def __init__(self):
        self._next_id = 1
        self._items: dict[int, MeetingProgram] = {}

    def list_all(self, *, limit: int = 200):
        items = sorted(self._items.values(), key=lambda p: p.date, reverse=True)
        return items[:limit]

    def get_by_id(self, program_id: int) -> Optional[MeetingProgram]:
        return self._items.get(int(program_id))

    def create(self, program: MeetingProgram) -> int:
        pid = self._next_id
        self._next_id += 1
        self._items[pid] = replace(program, program_id=pid, created_at=datetime(2026, 10, 1, 9, 0, 0))
        return pid

    def update(self, program_id: int, program: MeetingProgram) -> bool:
        old = self._items.get(int(program_id))
        if not old:
            return False
        self._items[int(program_id)] = replace(
            program,
            program_id=int(program_id),
            created_by=old.created_by,
            created_at=old.created_at,
            updated_at=datetime(2026, 10, 2, 9, 0, 0),
        )
        return True

    def delete(self, program_id: int) -> bool:
        return self._items.pop(int(program_id), None) is not None


@pytest.fixture
def reference() -> ReferenceData:
    return ReferenceData.build(users=USERS, organizations=ORGANIZATIONS, hymns=HYMNS, members=MEMBERS)


@pytest.fixture
def reference_repo() -> InMemoryReference:
    return InMemoryReference()


@pytest.fixture
def programs_repo() -> InMemoryPrograms:
    return InMemoryPrograms()
