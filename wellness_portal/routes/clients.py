"""
Routes for viewing clients and managing their classification.

Clients are represented by the ``User`` model with a role of
``client``. Admins can list every client, assign a population and see
any client's progress, while clients themselves can only view their own
record and progress.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError as SchemaValidationError

from .. import db
from ..models import User, Role, Population
from ..schemas import UserSchema, PopulationAssignSchema
from ..services import assign_population, get_progress


clients_bp = Blueprint("clients", __name__)


def _is_admin() -> bool:
    """Helper to determine if the current user is an admin."""
    return get_jwt().get("role") == Role.ADMIN.value


def _is_self(user_id: int) -> bool:
    """Return True if the current user matches the given ``user_id``."""
    try:
        return int(get_jwt_identity()) == user_id
    except (TypeError, ValueError):
        return False


def _get_client(client_id: int) -> User | None:
    user = db.session.get(User, client_id)
    if user is None or user.role != Role.CLIENT:
        return None
    return user


@clients_bp.route("/clients", methods=["GET"])
@jwt_required()
def list_clients() -> tuple[list[dict], int]:
    """Return a list of all clients.

    Only admins may list all clients. Supports ``limit``/``offset``
    pagination and an optional ``population`` filter.
    """
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    query = User.query.filter_by(role=Role.CLIENT)
    population = request.args.get("population")
    if population:
        resolved = Population.coerce(population)
        if resolved is None:
            return {"error": "Invalid population."}, 400
        query = query.filter_by(population=resolved)
    try:
        limit = int(request.args.get("limit", 25))
        offset = int(request.args.get("offset", 0))
    except ValueError:
        return {"error": "Invalid pagination parameters."}, 400
    clients_page = query.order_by(User.id.asc()).limit(limit).offset(offset).all()
    return UserSchema(many=True).dump(clients_page), 200


@clients_bp.route("/clients/<int:client_id>", methods=["GET"])
@jwt_required()
def get_client(client_id: int) -> tuple[dict, int]:
    """Retrieve an individual client's record.

    Admins can view any client; clients can only view their own record.
    """
    if not (_is_admin() or _is_self(client_id)):
        return {"error": "Forbidden"}, 403
    user = _get_client(client_id)
    if not user:
        return {"error": "Client not found."}, 404
    return UserSchema().dump(user), 200


@clients_bp.route("/clients/<int:client_id>/population", methods=["PUT"])
@jwt_required()
def set_client_population(client_id: int) -> tuple[dict, int]:
    """Assign a population to a client.

    Only admins may classify clients. Expects ``population`` and an
    optional ``notes`` string.
    """
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    try:
        data = PopulationAssignSchema().load(request.get_json(silent=True) or {})
    except SchemaValidationError as err:
        return {"error": "Invalid request.", "fields": err.messages}, 400
    user = assign_population(client_id, data["population"], data.get("notes"))
    return UserSchema().dump(user), 200


@clients_bp.route("/clients/<int:client_id>/progress", methods=["GET"])
@jwt_required()
def get_client_progress(client_id: int) -> tuple[dict, int]:
    """Return a client's assessment progress summary."""
    if not (_is_admin() or _is_self(client_id)):
        return {"error": "Forbidden"}, 403
    if not _get_client(client_id):
        return {"error": "Client not found."}, 404
    return get_progress(client_id), 200
