from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.validators import clean_text, non_blank, parse_flag
from ..core.enums import IntermediateHymnType


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Stored values may carry a time part (e.g. '2025-03-02T00:00:00').
    return parse_iso_date(str(value).strip()[:10])


@dataclass(frozen=True)
class Discourse:
    speaker: str
    topic: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"speaker": self.speaker, "topic": self.topic}


@dataclass(frozen=True)
class CallingChange:
    """A release or sustainment line of the ward business section."""

    name: str
    calling: str
    organization_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "calling": self.calling}
        if self.organization_id is not None:
            out["organizationId"] = self.organization_id
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallingChange":
        # Releases were stored with 'oldCalling' before the key was unified.
        calling = data.get("calling")
        if calling is None:
            calling = data.get("oldCalling")
        return cls(
            name=clean_text(data.get("name")),
            calling=clean_text(calling),
            organization_id=_optional_int(data.get("organizationId")),
        )


@dataclass(frozen=True)
class MeetingProgram:
    """Domain entity: one sacramental meeting program (one per meeting date).

    List fields are tuples and never None; blank rows never reach this type.
    """

    program_id: Optional[int]
    date: date
    presider: str = ""
    director: str = ""
    music_director: str = ""
    pianist: str = ""
    visiting_authority: str = ""
    announcements: str = ""
    opening_hymn: str = ""
    opening_prayer: str = ""
    intermediate_hymn: str = ""
    intermediate_hymn_type: Optional[IntermediateHymnType] = None
    sacrament_hymn: str = ""
    closing_hymn: str = ""
    closing_prayer: str = ""
    is_testimony_meeting: bool = False
    discourses: Tuple[Discourse, ...] = ()
    releases: Tuple[CallingChange, ...] = ()
    sustainments: Tuple[CallingChange, ...] = ()
    new_members: Tuple[str, ...] = ()
    aaronic_orderings: Tuple[str, ...] = ()
    child_blessings: Tuple[str, ...] = ()
    confirmations: Tuple[str, ...] = ()
    stake_business: str = ""
    created_by: Optional[int] = None
    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape (camelCase) shared with the REST clients."""

        return {
            "date": format_iso_date(self.date),
            "presider": self.presider,
            "director": self.director,
            "musicDirector": self.music_director,
            "pianist": self.pianist,
            "visitingAuthority": self.visiting_authority,
            "announcements": self.announcements,
            "openingHymn": self.opening_hymn,
            "openingPrayer": self.opening_prayer,
            "intermediateHymn": self.intermediate_hymn,
            "intermediateHymnType": self.intermediate_hymn_type.value if self.intermediate_hymn_type else None,
            "sacramentHymn": self.sacrament_hymn,
            "closingHymn": self.closing_hymn,
            "closingPrayer": self.closing_prayer,
            "isTestimonyMeeting": self.is_testimony_meeting,
            "discourses": [d.to_dict() for d in self.discourses],
            "releases": [r.to_dict() for r in self.releases],
            "sustainments": [s.to_dict() for s in self.sustainments],
            "newMembers": list(self.new_members),
            "aaronicOrderings": list(self.aaronic_orderings),
            "childBlessings": list(self.child_blessings),
            "confirmations": list(self.confirmations),
            "stakeBusiness": self.stake_business,
        }

    def to_dict(self) -> Dict[str, Any]:
        out = {"id": self.program_id}
        out.update(self.to_payload())
        out["createdBy"] = self.created_by
        out["createdAt"] = self.created_at.isoformat() if self.created_at else None
        out["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        return out

    @classmethod
    def from_payload(
        cls,
        data: Dict[str, Any],
        *,
        program_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> "MeetingProgram":
        hymn_type = clean_text(data.get("intermediateHymnType"))
        try:
            intermediate_hymn_type = IntermediateHymnType(hymn_type) if hymn_type else None
        except ValueError:
            intermediate_hymn_type = None

        is_testimony = parse_flag(data.get("isTestimonyMeeting"))
        discourses: Tuple[Discourse, ...] = ()
        if not is_testimony:
            discourses = tuple(
                Discourse(speaker=clean_text(d.get("speaker")), topic=clean_text(d.get("topic")))
                for d in data.get("discourses") or []
                if isinstance(d, dict)
                and (clean_text(d.get("speaker")) or clean_text(d.get("topic")))
            )

        return cls(
            program_id=program_id if program_id is not None else _optional_int(data.get("id")),
            date=_coerce_date(data["date"]),
            presider=clean_text(data.get("presider")),
            director=clean_text(data.get("director")),
            music_director=clean_text(data.get("musicDirector")),
            pianist=clean_text(data.get("pianist")),
            visiting_authority=clean_text(data.get("visitingAuthority")),
            announcements=clean_text(data.get("announcements")),
            opening_hymn=clean_text(data.get("openingHymn")),
            opening_prayer=clean_text(data.get("openingPrayer")),
            intermediate_hymn=clean_text(data.get("intermediateHymn")),
            intermediate_hymn_type=intermediate_hymn_type,
            sacrament_hymn=clean_text(data.get("sacramentHymn")),
            closing_hymn=clean_text(data.get("closingHymn")),
            closing_prayer=clean_text(data.get("closingPrayer")),
            is_testimony_meeting=is_testimony,
            discourses=discourses,
            releases=_calling_changes(data.get("releases")),
            sustainments=_calling_changes(data.get("sustainments")),
            new_members=tuple(non_blank(data.get("newMembers") or [])),
            aaronic_orderings=tuple(non_blank(data.get("aaronicOrderings") or [])),
            child_blessings=tuple(non_blank(data.get("childBlessings") or [])),
            confirmations=tuple(non_blank(data.get("confirmations") or [])),
            stake_business=clean_text(data.get("stakeBusiness")),
            created_by=created_by if created_by is not None else _optional_int(data.get("createdBy")),
        )


def _calling_changes(rows: Any) -> Tuple[CallingChange, ...]:
    changes = (CallingChange.from_dict(r) for r in rows or [] if isinstance(r, dict))
    return tuple(c for c in changes if c.name and c.calling)
