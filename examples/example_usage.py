"""Example: compose a sacramental meeting program with the service layer (no Flask).

Controllers stay thin; the program rules live in the composer and the service.
"""

import importlib

from config import get_settings_module

from src.ward_admin.ward_admin.container import build_container
from src.ward_admin.ward_admin.core.enums import Role, Toggle


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    composer = container.program_service.new_form()
    composer.form.date = "2026-11-01"
    composer.set_hymn("opening_hymn", "2")
    composer.set_toggle(Toggle.CONFIRMATIONS, True)
    composer.form.confirmations = ["María López"]
    composer.form.new_members = ["María López"]
    print(composer.assemble())

    change = container.program_service.create(
        current_role=Role.OBISPO,
        user_id=1,
        form_state=composer.form.to_dict(),
    )
    for assignment in change.notify:
        print(assignment.name, assignment.lines)


if __name__ == "__main__":
    main()
