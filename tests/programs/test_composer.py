from __future__ import annotations

from datetime import date

import pytest

from src.ward_admin.ward_admin.core.constants import ASSIGNED_LEADER_OPTION, VISITING_AUTHORITY_OPTION
from src.ward_admin.ward_admin.core.enums import IntermediateHymnType, Role, Toggle
from src.ward_admin.ward_admin.core.exceptions import FormValidationError
from src.ward_admin.ward_admin.programs.composer import (
    DATE_REQUIRED,
    CallingRow,
    DiscourseRow,
    MeetingProgramComposer,
    ProgramForm,
)
from src.ward_admin.ward_admin.programs.model import CallingChange, Discourse, MeetingProgram
from src.ward_admin.ward_admin.reference.lookups import ReferenceData
from src.ward_admin.ward_admin.reference.model import WardUser


@pytest.fixture
def composer(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_create()
    c.form.date = "2026-11-01"
    return c


def _stored(**overrides) -> MeetingProgram:
    data = dict(
        program_id=7,
        date=date(2026, 11, 1),
        presider="Juan Pérez | Obispo",
        director="Carlos Ruiz | Consejero del Obispado",
    )
    data.update(overrides)
    return MeetingProgram(**data)


def test_open_for_create_resets_every_field(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(confirmations=("José Ramírez",), stake_business="Relevos de estaca"))
    c.open_for_create()

    assert c.form == ProgramForm()
    assert c.is_open is True
    assert c.is_editing is False
    assert not any(c.form.toggles.values())


def test_close_discards_local_edits(composer):
    composer.set_visiting_authority("Ana Gómez")
    composer.close()

    assert composer.is_open is False
    assert composer.form == ProgramForm()


def test_missing_date_is_rejected(composer):
    composer.form.date = "  "
    with pytest.raises(FormValidationError) as exc:
        composer.assemble()
    assert exc.value.errors == {"date": DATE_REQUIRED}
    assert str(exc.value) == "La fecha es requerida"


def test_malformed_date_is_rejected(composer):
    composer.form.date = "01/11/2026"
    with pytest.raises(FormValidationError) as exc:
        composer.assemble()
    assert set(exc.value.errors) == {"date"}


def test_testimony_meeting_forces_empty_discourses(composer):
    composer.form.discourses = [DiscourseRow("Ana Torres", "La fe")]
    composer.set_testimony_meeting(True)

    payload = composer.assemble()

    assert payload["isTestimonyMeeting"] is True
    assert payload["discourses"] == []


def test_discourse_rows_need_a_speaker_or_topic(composer):
    composer.form.discourses = [
        DiscourseRow(" Ana Torres ", " La fe "),
        DiscourseRow("", ""),
        DiscourseRow("   ", "El ayuno"),
    ]

    assert composer.assemble()["discourses"] == [
        {"speaker": "Ana Torres", "topic": "La fe"},
        {"speaker": "", "topic": "El ayuno"},
    ]


def test_disabled_toggle_clears_lists_even_with_text(composer):
    composer.form.releases = [CallingRow("María López", "Presidenta", 2)]
    composer.form.sustainments = [CallingRow("Ana Torres", "Presidenta", 2)]
    composer.form.new_members = ["José Ramírez"]
    composer.form.stake_business = "Sostenimiento del sumo consejo"

    payload = composer.assemble()

    assert payload["releases"] == []
    assert payload["sustainments"] == []
    assert payload["newMembers"] == []
    assert payload["stakeBusiness"] == ""


def test_enabled_toggles_keep_complete_rows_only(composer):
    composer.set_toggle(Toggle.RELEASES_SUSTAINMENTS, True)
    composer.set_toggle(Toggle.NEW_MEMBERS, True)
    composer.set_toggle(Toggle.STAKE_BUSINESS, True)
    composer.form.releases = [
        CallingRow("María López", "Presidenta", 2),
        CallingRow("  ", "Secretaria"),
        CallingRow("José Ramírez", ""),
    ]
    composer.form.sustainments = [CallingRow(" Ana Torres ", " Presidenta ")]
    composer.form.new_members = [" Ana Torres ", "", "   "]
    composer.form.stake_business = " Sostenimiento del sumo consejo "

    payload = composer.assemble()

    assert payload["releases"] == [{"name": "María López", "calling": "Presidenta", "organizationId": 2}]
    assert payload["sustainments"] == [{"name": "Ana Torres", "calling": "Presidenta"}]
    assert payload["newMembers"] == ["Ana Torres"]
    assert payload["stakeBusiness"] == "Sostenimiento del sumo consejo"


def test_enabling_confirmations_enables_new_members(composer):
    composer.set_toggle(Toggle.CONFIRMATIONS, True)

    assert composer.is_enabled(Toggle.NEW_MEMBERS)

    composer.set_toggle(Toggle.CONFIRMATIONS, False)
    assert composer.is_enabled(Toggle.NEW_MEMBERS)


def test_enabling_new_members_does_not_enable_confirmations(composer):
    composer.set_toggle(Toggle.NEW_MEMBERS, True)

    assert not composer.is_enabled(Toggle.CONFIRMATIONS)


def test_bishopric_director_strips_bishopric_from_visiting_authority(composer):
    composer.select_director("Carlos Ruiz")
    composer.set_visiting_authority("Juan Pérez, Ana Gómez | Setenta de Área, luis mendez, Pedro Soto")

    assert composer.form.director == "Carlos Ruiz | Consejero del Obispado"
    assert composer.form.visiting_authority == "Ana Gómez | Setenta de Área, Pedro Soto"


def test_assigned_leader_director_keeps_visiting_authority(composer):
    composer.select_director(ASSIGNED_LEADER_OPTION)
    composer.set_director_details(name="Pedro Soto", calling="Secretario")
    composer.set_visiting_authority("Juan Pérez, Ana Gómez")

    assert composer.form.director == "Pedro Soto | Secretario"
    assert composer.form.visiting_authority == "Juan Pérez, Ana Gómez"


def test_presider_options_are_roster_plus_escape_hatch(composer):
    assert composer.presider_options() == ["Juan Pérez", "Carlos Ruiz", "Luis Méndez", VISITING_AUTHORITY_OPTION]
    assert composer.director_options()[-1] == ASSIGNED_LEADER_OPTION


def test_visiting_presider_uses_matched_authority_type(composer):
    composer.select_presider(VISITING_AUTHORITY_OPTION)
    composer.set_presider_details(name="Ana Gómez", authority_type="presidente de estaca")

    assert composer.form.presider_authority_type == "Presidente de Estaca"
    assert composer.form.presider == "Ana Gómez | Presidente de Estaca"


def test_unknown_presider_selection_falls_back_to_visiting_authority(composer):
    composer.select_presider("Ana Gómez")

    assert composer.form.presider_option == VISITING_AUTHORITY_OPTION
    assert composer.form.presider == "Ana Gómez"


def test_edit_reclassifies_visiting_presider(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(presider="Ana Gómez | Obispo", director="Juan Pérez, Obispo"))

    f = c.form
    assert c.is_editing is True
    assert c.editing_id == 7
    assert f.presider_option == VISITING_AUTHORITY_OPTION
    assert f.presider_name == "Ana Gómez"
    assert f.presider_authority_type == "Obispo"
    assert f.presider == "Ana Gómez | Obispo"
    assert f.director_option == "Juan Pérez"
    assert f.director == "Juan Pérez | Obispo"


def test_edit_keeps_unmatched_calling_as_free_text(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(presider="Ana Gómez | Misionera de área"))

    assert c.form.presider_authority_type == ""
    assert c.form.presider_calling == "Misionera de área"
    assert c.form.presider == "Ana Gómez | Misionera de área"


def test_edit_sets_toggles_from_list_presence(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(
        _stored(
            releases=(CallingChange("María López", "Presidenta", 2),),
            confirmations=("José Ramírez",),
            discourses=(Discourse("Ana Torres", "La fe"),),
        )
    )

    assert c.is_enabled(Toggle.RELEASES_SUSTAINMENTS)
    assert c.is_enabled(Toggle.CONFIRMATIONS)
    assert not c.is_enabled(Toggle.NEW_MEMBERS)
    assert not c.is_enabled(Toggle.STAKE_BUSINESS)
    assert c.form.discourses == [DiscourseRow("Ana Torres", "La fe")]


def test_reclassification_is_idempotent(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(presider="Ana Gómez | Obispo", visiting_authority="Ana Gómez"))
    before = c.form.to_dict()

    c.set_reference(reference)
    c.set_reference(reference)

    assert c.form.to_dict() == before


def test_roster_change_reclassifies_presider(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(presider="Ana Gómez | Obispo"))

    roster = reference.users + (WardUser(9, "Ana Gómez", Role.OBISPO),)
    c.set_reference(ReferenceData.build(users=roster, hymns=reference.hymns))

    assert c.form.presider_option == "Ana Gómez"
    assert c.form.presider_name == ""
    assert c.form.presider == "Ana Gómez | Obispo"


def test_restore_rederives_stale_selection(reference):
    c = MeetingProgramComposer(reference)
    c.restore(ProgramForm.from_dict({"date": "2026-11-01", "presider": "Juan Pérez | Obispo", "presiderOption": "Nadie"}))

    assert c.form.presider_option == "Juan Pérez"
    assert c.form.presider == "Juan Pérez | Obispo"


def test_hymns_are_normalized_on_blur_and_on_assemble(composer):
    assert composer.set_hymn("opening_hymn", "2") == "2 - Oh, está todo bien"
    assert composer.choose_hymn("closing_hymn", 193) == "193 - Soy un hijo de Dios"
    composer.form.sacrament_hymn = "169"
    composer.form.intermediate_hymn = "Himno del coro"

    payload = composer.assemble()

    assert payload["openingHymn"] == "2 - Oh, está todo bien"
    assert payload["sacramentHymn"] == "169 - Mansos, reverentes hoy"
    assert payload["intermediateHymn"] == "Himno del coro"
    assert payload["closingHymn"] == "193 - Soy un hijo de Dios"


def test_unknown_hymn_field_is_rejected(composer):
    with pytest.raises(ValueError):
        composer.set_hymn("anthem", "2")


def test_intermediate_hymn_type_is_null_when_unset_or_invalid(composer):
    assert composer.assemble()["intermediateHymnType"] is None

    composer.form.intermediate_hymn_type = "solo"
    assert composer.assemble()["intermediateHymnType"] is None

    composer.set_intermediate_hymn_type("choir")
    assert composer.assemble()["intermediateHymnType"] == "choir"

    composer.set_intermediate_hymn_type("solo")
    assert composer.form.intermediate_hymn_type == ""


def test_assemble_is_deterministic(composer):
    composer.select_presider("Juan Pérez")
    composer.set_toggle(Toggle.CONFIRMATIONS, True)
    composer.form.confirmations = ["José Ramírez"]

    assert composer.assemble() == composer.assemble()


def test_build_program_carries_editing_id(reference):
    c = MeetingProgramComposer(reference)
    c.open_for_edit(_stored(intermediate_hymn_type=IntermediateHymnType.CHOIR))

    program = c.build_program(created_by=1)

    assert program.program_id == 7
    assert program.created_by == 1
    assert program.intermediate_hymn_type == IntermediateHymnType.CHOIR
    assert program.presider == "Juan Pérez | Obispo"


def test_calling_options_follow_organization(composer):
    assert composer.calling_options(9).free_text is True
    assert composer.calling_options(2).callings[0] == "Presidenta"


def test_form_without_toggles_enables_lists_that_have_rows():
    form = ProgramForm.from_dict(
        {"date": "2026-11-01", "confirmations": ["José Ramírez"], "stakeBusiness": "Relevos de estaca"}
    )

    assert form.toggles[Toggle.CONFIRMATIONS] is True
    assert form.toggles[Toggle.STAKE_BUSINESS] is True
    assert form.toggles[Toggle.NEW_MEMBERS] is False


def test_explicit_toggles_win_over_list_presence():
    form = ProgramForm.from_dict({"confirmations": ["José Ramírez"], "toggles": {"confirmations": "false"}})

    assert form.toggles[Toggle.CONFIRMATIONS] is False


@pytest.mark.parametrize("raw, expected", [("false", False), ("0", False), ("", False), ("true", True), ("on", True), (1, True)])
def test_testimony_flag_is_parsed_from_text(reference, raw, expected):
    c = MeetingProgramComposer(reference)
    c.restore(
        ProgramForm.from_dict(
            {"date": "2026-11-01", "isTestimonyMeeting": raw, "discourses": [{"speaker": "Ana Torres", "topic": "La fe"}]}
        )
    )

    payload = c.assemble()

    assert payload["isTestimonyMeeting"] is expected
    assert len(payload["discourses"]) == (0 if expected else 1)


def test_rows_that_are_not_objects_are_skipped():
    form = ProgramForm.from_dict(
        {
            "discourses": ["Ana Torres", {"speaker": "Ana Torres", "topic": "La fe"}],
            "releases": [None, "María López", {"name": "María López", "oldCalling": "Presidenta"}],
            "sustainments": [42],
        }
    )

    assert form.discourses == [DiscourseRow("Ana Torres", "La fe")]
    assert form.releases == [CallingRow("María López", "Presidenta", None)]
    assert form.sustainments == []


def test_stored_payload_skips_non_object_rows_and_reads_text_flags():
    program = MeetingProgram.from_payload(
        {
            "date": "2026-11-01",
            "isTestimonyMeeting": "false",
            "discourses": ["x", {"speaker": "Ana Torres", "topic": ""}],
            "releases": ["x", {"name": "María López", "calling": "Presidenta"}],
        }
    )

    assert program.is_testimony_meeting is False
    assert program.discourses == (Discourse("Ana Torres", ""),)
    assert program.releases == (CallingChange("María López", "Presidenta"),)
