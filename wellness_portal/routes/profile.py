"""
Routes for the caller's unified profile and progress.

The unified profile is assembled on request from every module the client
has answered. Marking the profile complete is a separate, explicit step
that a client takes once they are happy with their answers.
"""

from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from ..services import get_progress, get_unified_profile, mark_profile_complete


profile_bp = Blueprint("profile", __name__)


def _current_user_id() -> int:
    return int(get_jwt_identity())


@profile_bp.route("/progress", methods=["GET"])
@jwt_required()
def my_progress() -> tuple[dict, int]:
    """Return completed and required module ids plus a percentage."""
    return get_progress(_current_user_id()), 200


@profile_bp.route("/profile", methods=["GET"])
@jwt_required()
def my_profile() -> tuple[dict, int]:
    profile = get_unified_profile(_current_user_id())
    return {
        "user_id": profile.user_id,
        "population": profile.population,
        "modules": profile.modules,
        "completed_modules": profile.completed_modules,
        "attributes": profile.attributes,
        "completed_at": profile.completed_at.isoformat() if profile.completed_at else None,
    }, 200


@profile_bp.route("/profile/complete", methods=["POST"])
@jwt_required()
def complete_profile() -> tuple[dict, int]:
    """Mark the caller's profile complete. Repeating the call changes nothing."""
    user = mark_profile_complete(_current_user_id())
    return {"profile_completed_at": user.profile_completed_at.isoformat()}, 200
