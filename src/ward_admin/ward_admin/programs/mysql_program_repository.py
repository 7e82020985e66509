from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_list, fetchall, fetchone, load_json_list
from .model import MeetingProgram
from .repository import MeetingProgramRepository

_COLUMNS = """
    program_id, meeting_date, presider, director, music_director, pianist,
    visiting_authority, announcements, opening_hymn, opening_prayer,
    intermediate_hymn, intermediate_hymn_type, sacrament_hymn, closing_hymn,
    closing_prayer, is_testimony_meeting, discourses, releases, sustainments,
    new_members, aaronic_orderings, child_blessings, confirmations,
    stake_business, created_by, created_at, updated_at
"""


def _row_to_program(row: Dict[str, Any]) -> MeetingProgram:
    program = MeetingProgram.from_payload(
        {
            "date": row["meeting_date"],
            "presider": row.get("presider"),
            "director": row.get("director"),
            "musicDirector": row.get("music_director"),
            "pianist": row.get("pianist"),
            "visitingAuthority": row.get("visiting_authority"),
            "announcements": row.get("announcements"),
            "openingHymn": row.get("opening_hymn"),
            "openingPrayer": row.get("opening_prayer"),
            "intermediateHymn": row.get("intermediate_hymn"),
            "intermediateHymnType": row.get("intermediate_hymn_type"),
            "sacramentHymn": row.get("sacrament_hymn"),
            "closingHymn": row.get("closing_hymn"),
            "closingPrayer": row.get("closing_prayer"),
            "isTestimonyMeeting": bool(row.get("is_testimony_meeting")),
            "discourses": load_json_list(row.get("discourses")),
            "releases": load_json_list(row.get("releases")),
            "sustainments": load_json_list(row.get("sustainments")),
            "newMembers": load_json_list(row.get("new_members")),
            "aaronicOrderings": load_json_list(row.get("aaronic_orderings")),
            "childBlessings": load_json_list(row.get("child_blessings")),
            "confirmations": load_json_list(row.get("confirmations")),
            "stakeBusiness": row.get("stake_business"),
        },
        program_id=int(row["program_id"]),
        created_by=row.get("created_by"),
    )
    return replace(program, created_at=row.get("created_at"), updated_at=row.get("updated_at"))


def _params(program: MeetingProgram) -> tuple:
    payload = program.to_payload()
    return (
        program.date,
        program.presider,
        program.director,
        program.music_director,
        program.pianist,
        program.visiting_authority,
        program.announcements,
        program.opening_hymn,
        program.opening_prayer,
        program.intermediate_hymn,
        payload["intermediateHymnType"],
        program.sacrament_hymn,
        program.closing_hymn,
        program.closing_prayer,
        1 if program.is_testimony_meeting else 0,
        dump_json_list(payload["discourses"]),
        dump_json_list(payload["releases"]),
        dump_json_list(payload["sustainments"]),
        dump_json_list(payload["newMembers"]),
        dump_json_list(payload["aaronicOrderings"]),
        dump_json_list(payload["childBlessings"]),
        dump_json_list(payload["confirmations"]),
        program.stake_business,
    )


class MySQLMeetingProgramRepository(MeetingProgramRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self, *, limit: int = 200) -> Sequence[MeetingProgram]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sacramental_meetings ORDER BY meeting_date DESC LIMIT %s",
                (int(limit),),
            )
            return [_row_to_program(r) for r in fetchall(cur)]

    def get_by_id(self, program_id: int) -> Optional[MeetingProgram]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sacramental_meetings WHERE program_id=%s", (program_id,))
            row = fetchone(cur)
            if not row:
                return None
            return _row_to_program(row)

    def create(self, program: MeetingProgram) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sacramental_meetings(
                    meeting_date, presider, director, music_director, pianist,
                    visiting_authority, announcements, opening_hymn, opening_prayer,
                    intermediate_hymn, intermediate_hymn_type, sacrament_hymn, closing_hymn,
                    closing_prayer, is_testimony_meeting, discourses, releases, sustainments,
                    new_members, aaronic_orderings, child_blessings, confirmations,
                    stake_business, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(program) + (program.created_by,),
            )
            return int(cur.lastrowid)

    def update(self, program_id: int, program: MeetingProgram) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sacramental_meetings
                SET meeting_date=%s, presider=%s, director=%s, music_director=%s, pianist=%s,
                    visiting_authority=%s, announcements=%s, opening_hymn=%s, opening_prayer=%s,
                    intermediate_hymn=%s, intermediate_hymn_type=%s, sacrament_hymn=%s,
                    closing_hymn=%s, closing_prayer=%s, is_testimony_meeting=%s, discourses=%s,
                    releases=%s, sustainments=%s, new_members=%s, aaronic_orderings=%s,
                    child_blessings=%s, confirmations=%s, stake_business=%s,
                    updated_at=CURRENT_TIMESTAMP
                WHERE program_id=%s
                """,
                _params(program) + (program_id,),
            )
            return cur.rowcount > 0

    def delete(self, program_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sacramental_meetings WHERE program_id=%s", (program_id,))
            return cur.rowcount > 0
