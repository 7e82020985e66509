from __future__ import annotations

from typing import Sequence

from ..core.enums import OrganizationType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Hymn, Member, Organization, WardUser
from .repository import ReferenceRepository


class MySQLReferenceRepository(ReferenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_users(self) -> Sequence[WardUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, name, role, email, organization_id
                FROM users
                ORDER BY name
                """
            )
            return [
                WardUser(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    role=Role(r["role"]),
                    email=r.get("email"),
                    organization_id=r.get("organization_id"),
                )
                for r in fetchall(cur)
            ]

    def list_organizations(self) -> Sequence[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT organization_id, name, type FROM organizations ORDER BY name")
            return [
                Organization(
                    organization_id=int(r["organization_id"]),
                    name=r["name"],
                    type=OrganizationType(r["type"]),
                )
                for r in fetchall(cur)
            ]

    def list_hymns(self) -> Sequence[Hymn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT number, title FROM hymns ORDER BY number")
            return [Hymn(number=int(r["number"]), title=r["title"]) for r in fetchall(cur)]

    def list_members(self) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, name, email, organization_id
                FROM members
                ORDER BY name
                """
            )
            return [
                Member(
                    member_id=int(r["member_id"]),
                    name=r["name"],
                    email=r.get("email"),
                    organization_id=r.get("organization_id"),
                )
                for r in fetchall(cur)
            ]
