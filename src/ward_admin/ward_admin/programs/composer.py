"""Sacramental meeting program composer.

Holds the state of one open program form and keeps the derived fields
(presider, director, visiting authorities) in sync with the selections made
in the form. ``assemble`` turns the state into the payload that is persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.names import comparable_name
from ..common.validators import clean_text, non_blank, parse_flag
from ..core.constants import (
    ASSIGNED_LEADER_OPTION,
    VISITING_AUTHORITY_OPTION,
    VISITING_AUTHORITY_TYPES,
)
from ..core.enums import IntermediateHymnType, Toggle
from ..core.exceptions import FormValidationError
from ..reference.lookups import ReferenceData
from .callings import CallingVocabulary, calling_descriptor
from .hymns import normalize_hymn
from .model import MeetingProgram
from .people import compose_person_value, parse_person_value, strip_names

HYMN_FIELDS = ("opening_hymn", "intermediate_hymn", "sacrament_hymn", "closing_hymn")

# Fields each toggle gates in the submitted payload.
TOGGLE_FIELDS: Dict[Toggle, Tuple[str, ...]] = {
    Toggle.RELEASES_SUSTAINMENTS: ("releases", "sustainments"),
    Toggle.NEW_MEMBERS: ("new_members",),
    Toggle.ORDERINGS: ("aaronic_orderings",),
    Toggle.CHILD_BLESSINGS: ("child_blessings",),
    Toggle.CONFIRMATIONS: ("confirmations",),
    Toggle.STAKE_BUSINESS: ("stake_business",),
}

# Enabling a trigger also enables its targets. Disabling never propagates.
TOGGLE_COUPLINGS: Dict[Toggle, Tuple[Toggle, ...]] = {
    Toggle.CONFIRMATIONS: (Toggle.NEW_MEMBERS,),
}

DATE_REQUIRED = "La fecha es requerida"
DATE_INVALID = "La fecha no es válida (AAAA-MM-DD)"


@dataclass
class DiscourseRow:
    speaker: str = ""
    topic: str = ""


@dataclass
class CallingRow:
    name: str = ""
    calling: str = ""
    organization_id: Optional[int] = None


def _blank_toggles() -> Dict[Toggle, bool]:
    return {t: False for t in Toggle}


@dataclass
class ProgramForm:
    """Editable state of the program dialog."""

    date: str = ""

    presider: str = ""
    presider_option: str = ""
    presider_name: str = ""
    presider_authority_type: str = ""
    presider_calling: str = ""

    director: str = ""
    director_option: str = ""
    director_name: str = ""
    director_calling: str = ""

    visiting_authority: str = ""
    music_director: str = ""
    pianist: str = ""
    announcements: str = ""

    opening_hymn: str = ""
    intermediate_hymn: str = ""
    intermediate_hymn_type: str = ""
    sacrament_hymn: str = ""
    closing_hymn: str = ""

    opening_prayer: str = ""
    closing_prayer: str = ""

    is_testimony_meeting: bool = False
    discourses: List[DiscourseRow] = field(default_factory=list)
    releases: List[CallingRow] = field(default_factory=list)
    sustainments: List[CallingRow] = field(default_factory=list)
    new_members: List[str] = field(default_factory=list)
    aaronic_orderings: List[str] = field(default_factory=list)
    child_blessings: List[str] = field(default_factory=list)
    confirmations: List[str] = field(default_factory=list)
    stake_business: str = ""

    toggles: Dict[Toggle, bool] = field(default_factory=_blank_toggles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "presider": self.presider,
            "presiderOption": self.presider_option,
            "presiderName": self.presider_name,
            "presiderAuthorityType": self.presider_authority_type,
            "presiderCalling": self.presider_calling,
            "director": self.director,
            "directorOption": self.director_option,
            "directorName": self.director_name,
            "directorCalling": self.director_calling,
            "visitingAuthority": self.visiting_authority,
            "musicDirector": self.music_director,
            "pianist": self.pianist,
            "announcements": self.announcements,
            "openingHymn": self.opening_hymn,
            "intermediateHymn": self.intermediate_hymn,
            "intermediateHymnType": self.intermediate_hymn_type,
            "sacramentHymn": self.sacrament_hymn,
            "closingHymn": self.closing_hymn,
            "openingPrayer": self.opening_prayer,
            "closingPrayer": self.closing_prayer,
            "isTestimonyMeeting": self.is_testimony_meeting,
            "discourses": [{"speaker": d.speaker, "topic": d.topic} for d in self.discourses],
            "releases": [_calling_row_dict(r) for r in self.releases],
            "sustainments": [_calling_row_dict(s) for s in self.sustainments],
            "newMembers": list(self.new_members),
            "aaronicOrderings": list(self.aaronic_orderings),
            "childBlessings": list(self.child_blessings),
            "confirmations": list(self.confirmations),
            "stakeBusiness": self.stake_business,
            "toggles": {t.value: bool(on) for t, on in self.toggles.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgramForm":
        """Read client state. Without a "toggles" key, toggles follow list presence."""

        explicit = data.get("toggles")
        toggles = _blank_toggles()
        for key, on in (explicit if isinstance(explicit, dict) else {}).items():
            try:
                toggles[Toggle(key)] = parse_flag(on)
            except ValueError:
                continue

        def rows(key: str) -> List[Dict[str, Any]]:
            return [r for r in data.get(key) or [] if isinstance(r, dict)]

        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        form = cls(
            date=text("date").strip(),
            presider=text("presider"),
            presider_option=text("presiderOption"),
            presider_name=text("presiderName"),
            presider_authority_type=text("presiderAuthorityType"),
            presider_calling=text("presiderCalling"),
            director=text("director"),
            director_option=text("directorOption"),
            director_name=text("directorName"),
            director_calling=text("directorCalling"),
            visiting_authority=text("visitingAuthority"),
            music_director=text("musicDirector"),
            pianist=text("pianist"),
            announcements=text("announcements"),
            opening_hymn=text("openingHymn"),
            intermediate_hymn=text("intermediateHymn"),
            intermediate_hymn_type=text("intermediateHymnType"),
            sacrament_hymn=text("sacramentHymn"),
            closing_hymn=text("closingHymn"),
            opening_prayer=text("openingPrayer"),
            closing_prayer=text("closingPrayer"),
            is_testimony_meeting=parse_flag(data.get("isTestimonyMeeting")),
            discourses=[
                DiscourseRow(speaker=clean_text(d.get("speaker")), topic=clean_text(d.get("topic")))
                for d in rows("discourses")
            ],
            releases=[_calling_row(r) for r in rows("releases")],
            sustainments=[_calling_row(s) for s in rows("sustainments")],
            new_members=[str(v or "") for v in data.get("newMembers") or []],
            aaronic_orderings=[str(v or "") for v in data.get("aaronicOrderings") or []],
            child_blessings=[str(v or "") for v in data.get("childBlessings") or []],
            confirmations=[str(v or "") for v in data.get("confirmations") or []],
            stake_business=text("stakeBusiness"),
            toggles=toggles,
        )
        if explicit is None:
            form.toggles = _toggles_from_lists(form)
        return form


def _toggles_from_lists(form: "ProgramForm") -> Dict[Toggle, bool]:
    return {t: any(bool(getattr(form, f)) for f in fields) for t, fields in TOGGLE_FIELDS.items()}


def _calling_row(data: Dict[str, Any]) -> CallingRow:
    calling = data.get("calling")
    if calling is None:
        calling = data.get("oldCalling")
    org_id = data.get("organizationId")
    try:
        org_id = int(org_id) if org_id not in (None, "") else None
    except (TypeError, ValueError):
        org_id = None
    return CallingRow(name=clean_text(data.get("name")), calling=clean_text(calling), organization_id=org_id)


def _calling_row_dict(row: CallingRow) -> Dict[str, Any]:
    out: Dict[str, Any] = {"name": row.name, "calling": row.calling}
    if row.organization_id is not None:
        out["organizationId"] = row.organization_id
    return out


def _match_authority_type(calling: str) -> str:
    key = comparable_name(calling)
    if not key:
        return ""
    for option in VISITING_AUTHORITY_TYPES:
        if comparable_name(option) == key:
            return option
    return ""


class MeetingProgramComposer:
    """Form-state machine for creating or editing one meeting program."""

    def __init__(self, reference: ReferenceData):
        self._reference = reference
        self.form = ProgramForm()
        self.editing_id: Optional[int] = None
        self.is_open = False

    @property
    def reference(self) -> ReferenceData:
        return self._reference

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open_for_create(self) -> None:
        self.editing_id = None
        self.form = ProgramForm()
        self.is_open = True

    def open_for_edit(self, program: MeetingProgram) -> None:
        self.editing_id = program.program_id
        form = ProgramForm(
            date=format_iso_date(program.date),
            presider=program.presider,
            director=program.director,
            visiting_authority=program.visiting_authority,
            music_director=program.music_director,
            pianist=program.pianist,
            announcements=program.announcements,
            opening_hymn=program.opening_hymn,
            intermediate_hymn=program.intermediate_hymn,
            intermediate_hymn_type=program.intermediate_hymn_type.value if program.intermediate_hymn_type else "",
            sacrament_hymn=program.sacrament_hymn,
            closing_hymn=program.closing_hymn,
            opening_prayer=program.opening_prayer,
            closing_prayer=program.closing_prayer,
            is_testimony_meeting=program.is_testimony_meeting,
            discourses=[DiscourseRow(d.speaker, d.topic) for d in program.discourses],
            releases=[CallingRow(r.name, r.calling, r.organization_id) for r in program.releases],
            sustainments=[CallingRow(s.name, s.calling, s.organization_id) for s in program.sustainments],
            new_members=list(program.new_members),
            aaronic_orderings=list(program.aaronic_orderings),
            child_blessings=list(program.child_blessings),
            confirmations=list(program.confirmations),
            stake_business=program.stake_business,
        )
        form.toggles = _toggles_from_lists(form)

        self.form = form
        self.is_open = True
        self._classify_presider()
        self._classify_director()
        self._recompute()

    def restore(self, form: ProgramForm) -> None:
        """Load client-held state (e.g. a submitted form) into an open composer.

        Person fields that arrive without a selection are re-derived from
        their composite value.
        """

        self.form = form
        self.is_open = True
        if not self._is_known_option(form.presider_option, VISITING_AUTHORITY_OPTION):
            self._classify_presider()
        if not self._is_known_option(form.director_option, ASSIGNED_LEADER_OPTION):
            self._classify_director()
        self._recompute()

    def _is_known_option(self, option: str, escape_hatch: str) -> bool:
        if option == escape_hatch:
            return True
        return self._reference.find_bishopric_member(option) is not None

    def close(self) -> None:
        self.is_open = False
        self.editing_id = None
        self.form = ProgramForm()

    def set_reference(self, reference: ReferenceData) -> None:
        """Swap in freshly loaded reference data and reclassify person fields."""

        self._reference = reference
        self._classify_presider()
        self._classify_director()
        self._recompute()

    # ------------------------------------------------------------------
    # Presider / director
    # ------------------------------------------------------------------
    def presider_options(self) -> List[str]:
        return [m.name for m in self._reference.bishopric()] + [VISITING_AUTHORITY_OPTION]

    def director_options(self) -> List[str]:
        return [m.name for m in self._reference.bishopric()] + [ASSIGNED_LEADER_OPTION]

    def set_presider_value(self, value: str) -> None:
        self.form.presider = value or ""
        self._classify_presider()
        self._recompute()

    def set_director_value(self, value: str) -> None:
        self.form.director = value or ""
        self._classify_director()
        self._recompute()

    def select_presider(self, option: str) -> None:
        f = self.form
        option = (option or "").strip()
        if option == VISITING_AUTHORITY_OPTION:
            f.presider_option = option
        elif not option:
            f.presider_option = ""
            f.presider_name = f.presider_authority_type = f.presider_calling = ""
        else:
            member = self._reference.find_bishopric_member(option)
            if member:
                f.presider_option = member.name
                f.presider_name = f.presider_authority_type = f.presider_calling = ""
            else:
                f.presider_option = VISITING_AUTHORITY_OPTION
                f.presider_name = option
        self._recompute()

    def set_presider_details(
        self,
        *,
        name: Optional[str] = None,
        authority_type: Optional[str] = None,
        calling: Optional[str] = None,
    ) -> None:
        f = self.form
        if name is not None:
            f.presider_name = name
        if authority_type is not None:
            f.presider_authority_type = _match_authority_type(authority_type)
        if calling is not None:
            f.presider_calling = calling
        self._recompute()

    def select_director(self, option: str) -> None:
        f = self.form
        option = (option or "").strip()
        if option == ASSIGNED_LEADER_OPTION:
            f.director_option = option
        elif not option:
            f.director_option = ""
            f.director_name = f.director_calling = ""
        else:
            member = self._reference.find_bishopric_member(option)
            if member:
                f.director_option = member.name
                f.director_name = f.director_calling = ""
            else:
                f.director_option = ASSIGNED_LEADER_OPTION
                f.director_name = option
        self._recompute()

    def set_director_details(self, *, name: Optional[str] = None, calling: Optional[str] = None) -> None:
        if name is not None:
            self.form.director_name = name
        if calling is not None:
            self.form.director_calling = calling
        self._recompute()

    def set_visiting_authority(self, value: str) -> None:
        self.form.visiting_authority = value or ""
        self._recompute()

    def _classify_presider(self) -> None:
        f = self.form
        parsed = parse_person_value(f.presider)
        if not parsed.name:
            f.presider_option = ""
            f.presider_name = f.presider_authority_type = f.presider_calling = ""
            return
        member = self._reference.find_bishopric_member(parsed.name)
        if member:
            f.presider_option = member.name
            f.presider_name = f.presider_authority_type = f.presider_calling = ""
            return
        f.presider_option = VISITING_AUTHORITY_OPTION
        f.presider_name = parsed.name
        f.presider_authority_type = _match_authority_type(parsed.calling)
        f.presider_calling = parsed.calling

    def _classify_director(self) -> None:
        f = self.form
        parsed = parse_person_value(f.director)
        if not parsed.name:
            f.director_option = ""
            f.director_name = f.director_calling = ""
            return
        member = self._reference.find_bishopric_member(parsed.name)
        if member:
            f.director_option = member.name
            f.director_name = f.director_calling = ""
            return
        f.director_option = ASSIGNED_LEADER_OPTION
        f.director_name = parsed.name
        f.director_calling = parsed.calling

    def _resolve_presider(self) -> str:
        f = self.form
        if f.presider_option == VISITING_AUTHORITY_OPTION:
            return compose_person_value(f.presider_name, f.presider_authority_type or f.presider_calling)
        member = self._reference.find_bishopric_member(f.presider_option)
        if member:
            return compose_person_value(member.name, member.calling)
        return ""

    def _resolve_director(self) -> str:
        f = self.form
        if f.director_option == ASSIGNED_LEADER_OPTION:
            return compose_person_value(f.director_name, f.director_calling)
        member = self._reference.find_bishopric_member(f.director_option)
        if member:
            return compose_person_value(member.name, member.calling)
        return ""

    def director_is_bishopric(self) -> bool:
        name = parse_person_value(self.form.director).name
        return self._reference.find_bishopric_member(name) is not None

    def _recompute(self) -> None:
        f = self.form
        f.presider = self._resolve_presider()
        f.director = self._resolve_director()
        if self.director_is_bishopric():
            roster = {comparable_name(m.name) for m in self._reference.bishopric()}
            f.visiting_authority = strip_names(f.visiting_authority, roster.__contains__)

    # ------------------------------------------------------------------
    # Hymns
    # ------------------------------------------------------------------
    def _check_hymn_field(self, field_name: str) -> None:
        if field_name not in HYMN_FIELDS:
            raise ValueError(f"Unknown hymn field: {field_name}")

    def set_hymn(self, field_name: str, raw: str) -> str:
        """Store a typed hymn value, normalized as on blur."""

        self._check_hymn_field(field_name)
        value = normalize_hymn(raw or "", self._reference)
        setattr(self.form, field_name, value)
        return value

    def choose_hymn(self, field_name: str, number: int) -> str:
        """Store a hymn picked from the suggestion list."""

        return self.set_hymn(field_name, str(number))

    def set_intermediate_hymn_type(self, value: Optional[str]) -> None:
        value = clean_text(value)
        valid = {t.value for t in IntermediateHymnType}
        self.form.intermediate_hymn_type = value if value in valid else ""

    # ------------------------------------------------------------------
    # Toggles and lists
    # ------------------------------------------------------------------
    def set_toggle(self, toggle: Toggle, enabled: bool) -> None:
        self.form.toggles[toggle] = bool(enabled)
        if not enabled:
            return
        for target in TOGGLE_COUPLINGS.get(toggle, ()):
            if not self.form.toggles.get(target):
                self.set_toggle(target, True)

    def is_enabled(self, toggle: Toggle) -> bool:
        return bool(self.form.toggles.get(toggle))

    def set_testimony_meeting(self, flag: bool) -> None:
        self.form.is_testimony_meeting = bool(flag)

    def calling_options(self, organization_id: Optional[int]) -> CallingVocabulary:
        return calling_descriptor(self._reference, organization_id)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def validate(self) -> None:
        raw = self.form.date.strip()
        if not raw:
            raise FormValidationError({"date": DATE_REQUIRED})
        try:
            parse_iso_date(raw)
        except ValueError:
            raise FormValidationError({"date": DATE_INVALID})

    def assemble(self) -> Dict[str, Any]:
        """Build the payload to persist from the current form state."""

        self.validate()
        self._recompute()
        f = self.form

        def gated(toggle: Toggle) -> bool:
            return bool(f.toggles.get(toggle))

        def names(field_name: str, toggle: Toggle) -> List[str]:
            return non_blank(getattr(f, field_name)) if gated(toggle) else []

        def changes(rows: List[CallingRow]) -> List[Dict[str, Any]]:
            if not gated(Toggle.RELEASES_SUSTAINMENTS):
                return []
            cleaned = [
                CallingRow(clean_text(r.name), clean_text(r.calling), r.organization_id)
                for r in rows
            ]
            return [_calling_row_dict(r) for r in cleaned if r.name and r.calling]

        discourses: List[Dict[str, str]] = []
        if not f.is_testimony_meeting:
            for row in f.discourses:
                speaker, topic = clean_text(row.speaker), clean_text(row.topic)
                if speaker or topic:
                    discourses.append({"speaker": speaker, "topic": topic})

        hymn_type = f.intermediate_hymn_type.strip()
        if hymn_type not in {t.value for t in IntermediateHymnType}:
            hymn_type = ""

        return {
            "date": format_iso_date(parse_iso_date(f.date.strip())),
            "presider": f.presider,
            "director": f.director,
            "musicDirector": clean_text(f.music_director),
            "pianist": clean_text(f.pianist),
            "visitingAuthority": clean_text(f.visiting_authority),
            "announcements": clean_text(f.announcements),
            "openingHymn": normalize_hymn(clean_text(f.opening_hymn), self._reference),
            "openingPrayer": clean_text(f.opening_prayer),
            "intermediateHymn": normalize_hymn(clean_text(f.intermediate_hymn), self._reference),
            "intermediateHymnType": hymn_type or None,
            "sacramentHymn": normalize_hymn(clean_text(f.sacrament_hymn), self._reference),
            "closingHymn": normalize_hymn(clean_text(f.closing_hymn), self._reference),
            "closingPrayer": clean_text(f.closing_prayer),
            "isTestimonyMeeting": bool(f.is_testimony_meeting),
            "discourses": discourses,
            "releases": changes(f.releases),
            "sustainments": changes(f.sustainments),
            "newMembers": names("new_members", Toggle.NEW_MEMBERS),
            "aaronicOrderings": names("aaronic_orderings", Toggle.ORDERINGS),
            "childBlessings": names("child_blessings", Toggle.CHILD_BLESSINGS),
            "confirmations": names("confirmations", Toggle.CONFIRMATIONS),
            "stakeBusiness": clean_text(f.stake_business) if gated(Toggle.STAKE_BUSINESS) else "",
        }

    def build_program(self, *, created_by: Optional[int] = None) -> MeetingProgram:
        return MeetingProgram.from_payload(self.assemble(), program_id=self.editing_id, created_by=created_by)
