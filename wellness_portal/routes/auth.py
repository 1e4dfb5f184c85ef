"""
Authentication routes for the wellness portal.

Provides endpoints for registering client accounts, creating admin
accounts (admins only) and logging in to obtain JSON Web Tokens (JWTs).
These tokens are required for accessing protected resources throughout
the API.
"""

from __future__ import annotations

import logging

from flask import Blueprint, request
from flask_jwt_extended import create_access_token, get_jwt, jwt_required

from .. import db
from ..models import User, Role
from ..schemas import UserSchema


auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)


def _create_user(data: dict, role: Role) -> tuple[dict, int]:
    required_fields = {"first_name", "last_name", "email", "password"}
    missing = sorted(field for field in required_fields if not data.get(field))
    if missing:
        return {"error": f"Missing fields: {', '.join(missing)}"}, 400

    email = data.get("email").strip().lower()
    if User.query.filter_by(email=email).first():
        return {"error": "A user with that email already exists."}, 409

    user = User(
        first_name=data.get("first_name").strip(),
        last_name=data.get("last_name").strip(),
        email=email,
        role=role,
    )
    user.set_password(data.get("password"))
    db.session.add(user)
    db.session.commit()
    logger.info("Registered %s account %s", role.value, email)
    return UserSchema().dump(user), 201


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new client account.

    Expects JSON with ``first_name``, ``last_name``, ``email`` and
    ``password``. Self-registration always creates a ``client``; a
    ``role`` other than ``client`` is refused with 403. Admin accounts
    come from the seed script or from ``POST /admins``. Emails must be
    unique.
    """
    data = request.get_json(silent=True) or {}
    role_str = str(data.get("role", Role.CLIENT.value)).lower()
    if role_str != Role.CLIENT.value:
        logger.warning("Refused self-registration with role %r for %s", role_str, data.get("email"))
        return {"error": "Only client accounts can be registered."}, 403
    return _create_user(data, Role.CLIENT)


@auth_bp.route("/admins", methods=["POST"])
@jwt_required()
def create_admin() -> tuple[dict, int]:
    """Create another admin account. Only an existing admin may do this."""
    if get_jwt().get("role") != Role.ADMIN.value:
        return {"error": "Forbidden"}, 403
    return _create_user(request.get_json(silent=True) or {}, Role.ADMIN)


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate a user and return a JWT.

    Expects JSON with ``email`` and ``password``. Returns a JWT
    containing the user's ID and role. Invalid credentials return 401.
    """
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        logger.warning("Failed login attempt for %s", email or "<blank>")
        return {"error": "Invalid email or password."}, 401

    additional_claims = {"role": user.role.value}
    access_token = create_access_token(identity=str(user.id), additional_claims=additional_claims)
    return {"access_token": access_token, "user": UserSchema().dump(user)}, 200
