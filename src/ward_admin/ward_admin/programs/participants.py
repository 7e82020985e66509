from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..common.names import comparable_name
from .model import MeetingProgram
from .people import person_name

OPENING_PRAYER_LINE = "Oración de apertura"
CLOSING_PRAYER_LINE = "Oración de clausura"
DISCOURSE_LINE = "Discurso"


@dataclass(frozen=True)
class ParticipantAssignment:
    name: str
    lines: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {"name": self.name, "lines": list(self.lines)}


def build_role_lines(program: MeetingProgram) -> Dict[str, ParticipantAssignment]:
    """Group the program's assignments per person (keyed by comparable name)."""

    names: Dict[str, str] = {}
    lines: Dict[str, List[str]] = {}

    def push(raw_name: str, line: str) -> None:
        name = person_name(raw_name)
        key = comparable_name(name)
        if not key:
            return
        names.setdefault(key, name)
        lines.setdefault(key, []).append(line)

    push(program.opening_prayer, OPENING_PRAYER_LINE)
    push(program.closing_prayer, CLOSING_PRAYER_LINE)
    for d in program.discourses:
        push(d.speaker, f"{DISCOURSE_LINE}: {d.topic}" if d.topic else DISCOURSE_LINE)

    return {k: ParticipantAssignment(name=names[k], lines=tuple(v)) for k, v in lines.items()}


def participants_to_notify(
    program: MeetingProgram,
    previous: Optional[MeetingProgram] = None,
) -> List[ParticipantAssignment]:
    """People whose assignments are new or changed.

    On update a person is skipped when neither their lines nor the meeting
    date changed.
    """

    current = build_role_lines(program)
    if previous is None:
        return list(current.values())

    before = build_role_lines(previous)
    date_changed = previous.date != program.date
    out: List[ParticipantAssignment] = []
    for key, assignment in current.items():
        old = before.get(key)
        old_lines = sorted(old.lines) if old else []
        if date_changed or sorted(assignment.lines) != old_lines:
            out.append(assignment)
    return out
