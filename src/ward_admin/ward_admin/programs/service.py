from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import BISHOPRIC_ROLES, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..reference.lookups import ReferenceData
from ..reference.service import ReferenceService
from .composer import MeetingProgramComposer, ProgramForm
from .model import MeetingProgram
from .participants import ParticipantAssignment, build_role_lines, participants_to_notify
from .repository import MeetingProgramRepository

logger = logging.getLogger(__name__)


# Selection keys re-derived from a composite person value sent without them.
_PERSON_SELECTIONS = {
    "presider": ("presiderOption", "presiderName", "presiderAuthorityType", "presiderCalling"),
    "director": ("directorOption", "directorName", "directorCalling"),
}


def _merge_form_state(current: ProgramForm, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a partial update over the stored program's form state.

    Keys missing from ``changes`` keep their stored value. Without explicit
    toggles, the toggles are derived again from the merged lists.
    """

    state = current.to_dict()
    for composite, selections in _PERSON_SELECTIONS.items():
        if composite in changes and not any(k in changes for k in selections):
            for key in selections:
                state.pop(key, None)
    state.update({k: v for k, v in changes.items() if k != "toggles"})

    toggles = changes.get("toggles")
    if isinstance(toggles, dict):
        state["toggles"].update(toggles)
    else:
        state.pop("toggles")
    return state


@dataclass(frozen=True)
class ProgramChange:
    """Result of a create/update: the stored program and who to notify."""

    program: MeetingProgram
    notify: Tuple[ParticipantAssignment, ...] = ()


class MeetingProgramService:
    def __init__(self, programs: MeetingProgramRepository, reference: ReferenceService):
        self._programs = programs
        self._reference = reference

    @staticmethod
    def _require_bishopric(current_role: Optional[Role]) -> None:
        if current_role not in BISHOPRIC_ROLES:
            raise AuthorizationError("Solo el obispado puede modificar la reunión sacramental")

    def reference_data(self) -> ReferenceData:
        return self._reference.load()

    def list_programs(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[MeetingProgram]:
        return self._programs.list_all(limit=limit)

    def get(self, program_id: int) -> MeetingProgram:
        program = self._programs.get_by_id(int(program_id))
        if not program:
            raise NotFoundError("Reunión no encontrada")
        return program

    def new_form(self) -> MeetingProgramComposer:
        composer = MeetingProgramComposer(self.reference_data())
        composer.open_for_create()
        return composer

    def edit_form(self, program_id: int) -> MeetingProgramComposer:
        program = self.get(program_id)
        composer = MeetingProgramComposer(self.reference_data())
        composer.open_for_edit(program)
        return composer

    def create(self, *, current_role: Optional[Role], user_id: Optional[int], form_state: Dict[str, Any]) -> ProgramChange:
        self._require_bishopric(current_role)

        composer = self.new_form()
        composer.restore(ProgramForm.from_dict(form_state or {}))
        program = composer.build_program(created_by=user_id)

        program_id = self._programs.create(program)
        if program_id <= 0:
            raise ValidationError("No se pudo guardar la reunión")
        stored = self.get(program_id)
        logger.info("Created sacramental meeting %s for %s", program_id, stored.date.isoformat())
        return ProgramChange(program=stored, notify=tuple(participants_to_notify(stored)))

    def update(self, *, current_role: Optional[Role], program_id: int, form_state: Dict[str, Any]) -> ProgramChange:
        self._require_bishopric(current_role)

        previous = self.get(program_id)
        composer = MeetingProgramComposer(self.reference_data())
        composer.open_for_edit(previous)
        composer.restore(ProgramForm.from_dict(_merge_form_state(composer.form, form_state or {})))
        program = composer.build_program(created_by=previous.created_by)

        # rowcount is 0 when MySQL sees no changed values; only a vanished row is an error.
        if not self._programs.update(int(program_id), program) and not self._programs.get_by_id(int(program_id)):
            raise NotFoundError("Reunión no encontrada")
        stored = self.get(program_id)
        logger.info("Updated sacramental meeting %s", program_id)
        return ProgramChange(program=stored, notify=tuple(participants_to_notify(stored, previous)))

    def delete(self, *, current_role: Optional[Role], program_id: int) -> None:
        self._require_bishopric(current_role)

        if not self._programs.delete(int(program_id)):
            raise NotFoundError("Reunión no encontrada")
        logger.info("Deleted sacramental meeting %s", program_id)

    def assignments(self, program_id: int) -> List[ParticipantAssignment]:
        return list(build_role_lines(self.get(program_id)).values())
