"""
Routes for the exercise and nutrition content library.

Library items are the raw material packets are assembled from. Any
authenticated user may browse the library; only admins may add to it.
"""

from __future__ import annotations

import logging

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt
from marshmallow import ValidationError as SchemaValidationError

from .. import db
from ..errors import ConflictError, ValidationError
from ..models import ExerciseItem, NutritionItem, Population, Role
from ..schemas import ExerciseItemSchema, NutritionItemSchema


library_bp = Blueprint("library", __name__)
logger = logging.getLogger(__name__)


def _is_admin() -> bool:
    return get_jwt().get("role") == Role.ADMIN.value


def _population_filter(items: list, population: str | None) -> list:
    if not population:
        return items
    resolved = Population.coerce(population)
    if resolved is None:
        raise ValidationError("Invalid population.", {"population": f"Unknown population {population!r}"})
    return [
        item for item in items
        if resolved.value in (item.populations or []) and resolved.value not in (item.contraindicated_for or [])
    ]


def _create_item(model, schema):
    try:
        data = schema.load(request.get_json(silent=True) or {})
    except SchemaValidationError as err:
        raise ValidationError("Invalid request.", err.messages) from err
    if model.query.filter_by(name=data["name"].strip()).first():
        raise ConflictError(f"An item named '{data['name'].strip()}' already exists.")
    data["name"] = data["name"].strip()
    item = model(**data)
    db.session.add(item)
    db.session.commit()
    logger.info("Added %s '%s' to the library", model.__tablename__, item.name)
    return item


@library_bp.route("/library/exercises", methods=["GET"])
@jwt_required()
def list_exercises() -> tuple[list[dict], int]:
    """List exercises, optionally only those suited to ``?population=``."""
    items = ExerciseItem.query.order_by(ExerciseItem.name.asc()).all()
    category = request.args.get("category")
    if category:
        items = [item for item in items if item.category == category]
    items = _population_filter(items, request.args.get("population"))
    return ExerciseItemSchema(many=True).dump(items), 200


@library_bp.route("/library/exercises", methods=["POST"])
@jwt_required()
def create_exercise() -> tuple[dict, int]:
    """Add an exercise. Requires ``name`` and ``category``."""
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    item = _create_item(ExerciseItem, ExerciseItemSchema())
    return ExerciseItemSchema().dump(item), 201


@library_bp.route("/library/nutrition", methods=["GET"])
@jwt_required()
def list_nutrition() -> tuple[list[dict], int]:
    items = NutritionItem.query.order_by(NutritionItem.name.asc()).all()
    category = request.args.get("category")
    if category:
        items = [item for item in items if item.category == category]
    items = _population_filter(items, request.args.get("population"))
    return NutritionItemSchema(many=True).dump(items), 200


@library_bp.route("/library/nutrition", methods=["POST"])
@jwt_required()
def create_nutrition_item() -> tuple[dict, int]:
    """Add a food. Requires ``name`` and ``category``."""
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    item = _create_item(NutritionItem, NutritionItemSchema())
    return NutritionItemSchema().dump(item), 201
