from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .programs.mysql_program_repository import MySQLMeetingProgramRepository
from .programs.repository import MeetingProgramRepository
from .programs.service import MeetingProgramService
from .reference.mysql_reference_repository import MySQLReferenceRepository
from .reference.repository import ReferenceRepository
from .reference.service import ReferenceService


@dataclass(frozen=True)
class Container:
    reference_repo: ReferenceRepository
    programs_repo: MeetingProgramRepository

    reference_service: ReferenceService
    program_service: MeetingProgramService


def build_services(*, reference_repo: ReferenceRepository, programs_repo: MeetingProgramRepository) -> Container:
    reference_service = ReferenceService(reference_repo)
    program_service = MeetingProgramService(programs_repo, reference_service)

    return Container(
        reference_repo=reference_repo,
        programs_repo=programs_repo,
        reference_service=reference_service,
        program_service=program_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        reference_repo=MySQLReferenceRepository(conn),
        programs_repo=MySQLMeetingProgramRepository(conn),
    )
