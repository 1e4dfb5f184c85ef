"""
Routes for generating and publishing client packets.

Admins generate draft packets for a client and publish them when ready.
Clients can read their own packets; drafts stay visible to admins only.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError as SchemaValidationError

from .. import db
from ..errors import ValidationError
from ..models import Packet, PacketStatus, Role, User
from ..schemas import PacketRequestSchema, PacketSchema
from ..services import create_draft_packet, publish_packet


packets_bp = Blueprint("packets", __name__)


def _is_admin() -> bool:
    return get_jwt().get("role") == Role.ADMIN.value


def _is_self(user_id: int) -> bool:
    try:
        return int(get_jwt_identity()) == user_id
    except (TypeError, ValueError):
        return False


@packets_bp.route("/clients/<int:client_id>/packets", methods=["POST"])
@jwt_required()
def generate_packet(client_id: int) -> tuple[dict, int]:
    """Generate a draft packet for a client.

    Accepts an optional ``packet_type``; by default the type follows the
    client's population.
    """
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    user = db.session.get(User, client_id)
    if user is None or user.role != Role.CLIENT:
        return {"error": "Client not found."}, 404
    try:
        data = PacketRequestSchema().load(request.get_json(silent=True) or {})
    except SchemaValidationError as err:
        raise ValidationError("Invalid request.", err.messages) from err
    packet = create_draft_packet(client_id, data.get("packet_type"))
    return PacketSchema().dump(packet), 201


@packets_bp.route("/clients/<int:client_id>/packets", methods=["GET"])
@jwt_required()
def list_packets(client_id: int) -> tuple[list[dict], int]:
    """List a client's packets, newest first."""
    admin = _is_admin()
    if not (admin or _is_self(client_id)):
        return {"error": "Forbidden"}, 403
    query = Packet.query.filter_by(user_id=client_id)
    if not admin:
        query = query.filter_by(status=PacketStatus.PUBLISHED)
    packets = query.order_by(Packet.created_at.desc(), Packet.id.desc()).all()
    return PacketSchema(many=True).dump(packets), 200


@packets_bp.route("/packets/<int:packet_id>", methods=["GET"])
@jwt_required()
def get_packet(packet_id: int) -> tuple[dict, int]:
    packet = db.session.get(Packet, packet_id)
    if packet is None:
        return {"error": "Packet not found."}, 404
    if not _is_admin():
        if not _is_self(packet.user_id):
            return {"error": "Forbidden"}, 403
        if packet.status != PacketStatus.PUBLISHED:
            return {"error": "Packet not found."}, 404
    return PacketSchema().dump(packet), 200


@packets_bp.route("/packets/<int:packet_id>/publish", methods=["POST"])
@jwt_required()
def publish(packet_id: int) -> tuple[dict, int]:
    """Publish a draft packet so the client can see it."""
    if not _is_admin():
        return {"error": "Forbidden"}, 403
    packet = publish_packet(packet_id)
    return PacketSchema().dump(packet), 200
