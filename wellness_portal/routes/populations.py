"""
Routes describing client populations.

Any authenticated user can read the population catalogue. Admins use the
classify endpoint after a discovery call to get a suggested population,
which they then assign through the clients blueprint.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt
from marshmallow import ValidationError as SchemaValidationError

from ..models import Role
from ..schemas import ClassifySchema
from ..services import all_populations, classify_population, population_info


populations_bp = Blueprint("populations", __name__)


def _is_admin() -> bool:
    return get_jwt().get("role") == Role.ADMIN.value


@populations_bp.route("/populations", methods=["GET"])
@jwt_required()
def list_populations() -> tuple[list[dict], int]:
    """List every population with its required and optional module counts."""
    return all_populations(), 200


@populations_bp.route("/populations/classify", methods=["POST"])
@jwt_required()
def classify() -> tuple[dict, int]:
    """Suggest a population from discovery-call answers.

    Accepts ``age`` and the boolean flags ``is_athlete``, ``is_youth``,
    ``has_injury``, ``is_pregnant``, ``is_postpartum`` and
    ``has_chronic_condition``. Only admins may call it.
    """
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    try:
        data = ClassifySchema().load(request.get_json(silent=True) or {})
    except SchemaValidationError as err:
        return {"error": "Invalid request.", "fields": err.messages}, 400
    population = classify_population(**data)
    return {"suggested": population_info(population)}, 200
