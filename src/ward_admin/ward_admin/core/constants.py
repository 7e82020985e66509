"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SUGGESTION_LIMIT = 10
DEFAULT_LIST_LIMIT = 200

# Select values that reveal the free-text person inputs.
VISITING_AUTHORITY_OPTION = "autoridad_visitante"
ASSIGNED_LEADER_OPTION = "lider_asignado"

PERSON_SEPARATOR = " | "
VISITING_AUTHORITY_SEPARATOR = ", "

# Authority types offered for a visiting presider.
VISITING_AUTHORITY_TYPES = (
    "Presidente de Estaca",
    "Primer Consejero de la Presidencia de Estaca",
    "Segundo Consejero de la Presidencia de Estaca",
    "Sumo Consejero",
    "Setenta de Área",
    "Obispo",
)
