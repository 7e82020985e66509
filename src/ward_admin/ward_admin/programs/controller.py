from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, current_app, jsonify, request, session

from ..core.constants import VISITING_AUTHORITY_TYPES
from ..core.enums import BISHOPRIC_ROLES, IntermediateHymnType, Role
from ..core.exceptions import AuthorizationError, FormValidationError, NotFoundError, ValidationError
from ..container import Container
from .callings import calling_descriptor
from .composer import MeetingProgramComposer
from .service import ProgramChange


def _current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def _form_response(composer: MeetingProgramComposer):
    reference = composer.reference
    return jsonify(
        {
            "success": True,
            "id": composer.editing_id,
            "editing": composer.is_editing,
            "form": composer.form.to_dict(),
            "options": {
                "presider": composer.presider_options(),
                "director": composer.director_options(),
                "visitingAuthorityTypes": list(VISITING_AUTHORITY_TYPES),
                "intermediateHymnTypes": [t.value for t in IntermediateHymnType],
                "organizations": [
                    {
                        "id": o.organization_id,
                        "name": o.name,
                        "type": o.type.value,
                        **calling_descriptor(reference, o.organization_id).to_dict(),
                    }
                    for o in reference.organizations_for_releases()
                ],
            },
        }
    )


def _change_response(change: ProgramChange, status: int):
    body = {
        "success": True,
        "meeting": change.program.to_dict(),
        "notify": [p.to_dict() for p in change.notify],
    }
    return jsonify(body), status


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Debes iniciar sesión"}), 401
            return view(*args, **kwargs)

        return wrapper

    def bishopric_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Debes iniciar sesión"}), 401
            if _current_role() not in BISHOPRIC_ROLES:
                return jsonify({"success": False, "message": "No tienes permiso"}), 403
            return view(*args, **kwargs)

        return wrapper

    def handle_errors(action: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                try:
                    return view(*args, **kwargs)
                except FormValidationError as e:
                    return jsonify({"success": False, "message": str(e), "errors": e.errors}), 400
                except ValidationError as e:
                    return jsonify({"success": False, "message": str(e)}), 400
                except AuthorizationError as e:
                    return jsonify({"success": False, "message": str(e)}), 403
                except NotFoundError as e:
                    return jsonify({"success": False, "message": str(e)}), 404
                except Exception:
                    current_app.logger.exception("Error while trying to %s", action)
                    return jsonify({"success": False, "message": f"Error del sistema al {action}"}), 500

            return wrapper

        return decorator

    programs = container.program_service

    @app.route("/api/sacramental-meetings", methods=["GET"], endpoint="list_sacramental_meetings")
    @login_required
    @handle_errors("listar las reuniones")
    def list_sacramental_meetings():
        return jsonify([p.to_dict() for p in programs.list_programs()])

    @app.route("/api/sacramental-meetings/<int:program_id>", methods=["GET"], endpoint="get_sacramental_meeting")
    @login_required
    @handle_errors("cargar la reunión")
    def get_sacramental_meeting(program_id: int):
        return jsonify(programs.get(program_id).to_dict())

    @app.route("/api/sacramental-meetings/form", methods=["GET"], endpoint="new_sacramental_meeting_form")
    @bishopric_required
    @handle_errors("preparar el formulario")
    def new_sacramental_meeting_form():
        return _form_response(programs.new_form())

    @app.route(
        "/api/sacramental-meetings/<int:program_id>/form",
        methods=["GET"],
        endpoint="edit_sacramental_meeting_form",
    )
    @bishopric_required
    @handle_errors("preparar el formulario")
    def edit_sacramental_meeting_form(program_id: int):
        return _form_response(programs.edit_form(program_id))

    @app.route("/api/sacramental-meetings", methods=["POST"], endpoint="create_sacramental_meeting")
    @bishopric_required
    @handle_errors("crear la reunión")
    def create_sacramental_meeting():
        change = programs.create(
            current_role=_current_role(),
            user_id=session.get("user_id"),
            form_state=request.get_json(silent=True) or {},
        )
        return _change_response(change, 201)

    @app.route("/api/sacramental-meetings/<int:program_id>", methods=["PATCH"], endpoint="update_sacramental_meeting")
    @bishopric_required
    @handle_errors("actualizar la reunión")
    def update_sacramental_meeting(program_id: int):
        change = programs.update(
            current_role=_current_role(),
            program_id=program_id,
            form_state=request.get_json(silent=True) or {},
        )
        return _change_response(change, 200)

    @app.route("/api/sacramental-meetings/<int:program_id>", methods=["DELETE"], endpoint="delete_sacramental_meeting")
    @bishopric_required
    @handle_errors("eliminar la reunión")
    def delete_sacramental_meeting(program_id: int):
        programs.delete(current_role=_current_role(), program_id=program_id)
        return "", 204

    @app.route(
        "/api/sacramental-meetings/<int:program_id>/assignments",
        methods=["GET"],
        endpoint="sacramental_meeting_assignments",
    )
    @login_required
    @handle_errors("cargar las asignaciones")
    def sacramental_meeting_assignments(program_id: int):
        return jsonify([a.to_dict() for a in programs.assignments(program_id)])

    @app.route("/api/hymns", methods=["GET"], endpoint="list_hymns")
    @login_required
    @handle_errors("cargar los himnos")
    def list_hymns():
        reference = programs.reference_data()
        q = request.args.get("q")
        hymns = reference.suggest_hymns(q) if q else reference.hymns
        return jsonify([{"number": h.number, "title": h.title, "label": h.label} for h in hymns])

    @app.route("/api/members/suggest", methods=["GET"], endpoint="suggest_members")
    @login_required
    @handle_errors("buscar miembros")
    def suggest_members():
        members = programs.reference_data().suggest_members(request.args.get("q", ""))
        return jsonify([{"id": m.member_id, "name": m.name} for m in members])

    @app.route(
        "/api/organizations/<int:organization_id>/callings",
        methods=["GET"],
        endpoint="organization_callings",
    )
    @login_required
    @handle_errors("cargar los llamamientos")
    def organization_callings(organization_id: int):
        reference = programs.reference_data()
        if reference.organization(organization_id) is None:
            raise NotFoundError("Organización no encontrada")
        return jsonify(calling_descriptor(reference, organization_id).to_dict())
