"""
Routes for the assessment modules a client fills in.

Which modules a client sees depends on the population an admin has
assigned them. Module definitions come from the in-process registry;
answers are stored through the profile service, which merges each save
into the client's existing record for that module.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError as SchemaValidationError

from .. import db
from ..assessments import module_registry
from ..errors import NotFoundError, ValidationError
from ..models import AssessmentRecord, User
from ..schemas import ModuleDefinitionSchema, ModuleSaveSchema, ModuleSummarySchema
from ..services import save_module_to_profile


modules_bp = Blueprint("modules", __name__)


def _current_user() -> User:
    user = db.session.get(User, int(get_jwt_identity()))
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _applicable_module(user: User, module_id: str):
    """Return ``(module, None)`` or ``(None, error_response)``."""
    module = module_registry.get_module(module_id)
    if module is None:
        return None, ({"error": f"Assessment module '{module_id}' not found."}, 404)
    if not module.is_applicable(user.population):
        return None, ({"error": "Forbidden"}, 403)
    return module, None


@modules_bp.route("/modules", methods=["GET"])
@jwt_required()
def list_modules() -> tuple[dict, int]:
    """Return the modules for the caller's population.

    Responds with ``{"required": [...], "optional": [...]}``. Both lists
    are empty until a population has been assigned.
    """
    user = _current_user()
    schema = ModuleSummarySchema(many=True)
    return {
        "population": user.population.value if user.population else None,
        "required": schema.dump(module_registry.get_required_modules(user.population)),
        "optional": schema.dump(module_registry.get_optional_modules(user.population)),
    }, 200


@modules_bp.route("/modules/<module_id>", methods=["GET"])
@jwt_required()
def get_module(module_id: str) -> tuple[dict, int]:
    """Return the full definition of a module the caller may take."""
    module, error = _applicable_module(_current_user(), module_id)
    if error:
        return error
    return ModuleDefinitionSchema().dump(module), 200


@modules_bp.route("/modules/<module_id>/answers", methods=["GET"])
@jwt_required()
def get_module_answers(module_id: str) -> tuple[dict, int]:
    """Return the caller's stored answers and completion flag for a module."""
    user = _current_user()
    module, error = _applicable_module(user, module_id)
    if error:
        return error
    record = AssessmentRecord.query.filter_by(user_id=user.id, module_id=module.id).first()
    return {
        "module_id": module.id,
        "answers": dict(record.data or {}) if record else {},
        "completed": bool(record and record.completed),
        "updated_at": record.updated_at.isoformat() if record else None,
    }, 200


@modules_bp.route("/modules/<module_id>/answers", methods=["PUT"])
@jwt_required()
def save_module_answers(module_id: str) -> tuple[dict, int]:
    """Merge answers into the caller's record for a module.

    Expects ``answers`` (question id to value) and an optional
    ``completed`` flag. Passing ``completed: true`` completes the module
    and requires every visible required question to be answered.
    """
    user = _current_user()
    module, error = _applicable_module(user, module_id)
    if error:
        return error
    try:
        data = ModuleSaveSchema().load(request.get_json(silent=True) or {})
    except SchemaValidationError as err:
        raise ValidationError("Invalid request.", err.messages) from err
    record = save_module_to_profile(user.id, module.id, data["answers"], completed=data["completed"])
    return {
        "module_id": record.module_id,
        "answers": dict(record.data or {}),
        "completed": record.completed,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }, 200
