from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MeetingProgram


class MeetingProgramRepository(Protocol):
    """Persistence seam for meeting programs.

    Note (DIP): the service depends on this interface, not on a concrete DB.
    """

    def list_all(self, *, limit: int = 200) -> Sequence[MeetingProgram]:
        raise NotImplementedError

    def get_by_id(self, program_id: int) -> Optional[MeetingProgram]:
        raise NotImplementedError

    def create(self, program: MeetingProgram) -> int:
        raise NotImplementedError

    def update(self, program_id: int, program: MeetingProgram) -> bool:
        raise NotImplementedError

    def delete(self, program_id: int) -> bool:
        raise NotImplementedError
