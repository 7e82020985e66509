from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Ward user roles used for authorisation."""

    OBISPO = "obispo"
    CONSEJERO_OBISPO = "consejero_obispo"
    SECRETARIO = "secretario"
    SECRETARIO_EJECUTIVO = "secretario_ejecutivo"
    SECRETARIO_FINANCIERO = "secretario_financiero"
    PRESIDENTE_ORGANIZACION = "presidente_organizacion"
    CONSEJERO_ORGANIZACION = "consejero_organizacion"
    SECRETARIO_ORGANIZACION = "secretario_organizacion"


BISHOPRIC_ROLES = frozenset({Role.OBISPO, Role.CONSEJERO_OBISPO})

# Calling label used when a bishopric member presides or directs.
BISHOPRIC_CALLING_LABELS = {
    Role.OBISPO: "Obispo",
    Role.CONSEJERO_OBISPO: "Consejero del Obispado",
}


class OrganizationType(str, Enum):
    OBISPADO = "obispado"
    HOMBRES_JOVENES = "hombres_jovenes"
    MUJERES_JOVENES = "mujeres_jovenes"
    SOCIEDAD_SOCORRO = "sociedad_socorro"
    PRIMARIA = "primaria"
    ESCUELA_DOMINICAL = "escuela_dominical"
    JAS = "jas"
    CUORUM_ELDERES = "cuorum_elderes"
    BARRIO = "barrio"


class IntermediateHymnType(str, Enum):
    CONGREGATION = "congregation"
    CHOIR = "choir"


class Toggle(str, Enum):
    """Independent switches that gate the roster lists of a program."""

    RELEASES_SUSTAINMENTS = "releases_sustainments"
    NEW_MEMBERS = "new_members"
    ORDERINGS = "orderings"
    CHILD_BLESSINGS = "child_blessings"
    CONFIRMATIONS = "confirmations"
    STAKE_BUSINESS = "stake_business"
