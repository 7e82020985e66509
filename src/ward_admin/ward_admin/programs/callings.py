from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.enums import OrganizationType
from ..reference.lookups import ReferenceData

_PRESIDENCY = ("Presidenta", "1era. Consejera", "2da. Consejera", "Secretaria")


@dataclass(frozen=True)
class CallingVocabulary:
    """How the calling of a release/sustainment row is picked.

    ``free_text`` means there is no fixed list and the UI shows a text input.
    """

    callings: Tuple[str, ...] = ()
    free_text: bool = False

    def to_dict(self) -> dict:
        return {"callings": list(self.callings), "freeText": self.free_text}


NO_CALLINGS = CallingVocabulary()

CALLINGS_BY_ORG_TYPE: Dict[OrganizationType, CallingVocabulary] = {
    OrganizationType.HOMBRES_JOVENES: CallingVocabulary(
        ("Asesor de Hombres Jóvenes", "Ayudante del Asesor de Hombres Jóvenes")
    ),
    OrganizationType.MUJERES_JOVENES: CallingVocabulary(_PRESIDENCY),
    OrganizationType.SOCIEDAD_SOCORRO: CallingVocabulary(_PRESIDENCY),
    OrganizationType.PRIMARIA: CallingVocabulary(_PRESIDENCY),
    OrganizationType.ESCUELA_DOMINICAL: CallingVocabulary(_PRESIDENCY),
    OrganizationType.JAS: CallingVocabulary(("Líder de JAS del barrio",)),
    OrganizationType.BARRIO: CallingVocabulary(free_text=True),
}


def calling_descriptor(reference: ReferenceData, organization_id: Optional[int]) -> CallingVocabulary:
    org = reference.organization(organization_id)
    if org is None:
        return NO_CALLINGS
    return CALLINGS_BY_ORG_TYPE.get(org.type, NO_CALLINGS)


def calling_vocabulary(reference: ReferenceData, organization_id: Optional[int]) -> List[str]:
    return list(calling_descriptor(reference, organization_id).callings)
