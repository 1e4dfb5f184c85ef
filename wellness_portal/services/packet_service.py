"""Client packet assembly.

A packet is the personalised document handed to a client once their
profile is complete. This module only builds the JSON payload; rendering
it into a printable document happens elsewhere. Content is chosen from
the exercise and nutrition libraries using the client's population and
the attributes collected in their unified profile.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..errors import ConflictError, NotFoundError, StorageError, ValidationError
from ..models import ExerciseItem, NutritionItem, Packet, PacketStatus, PacketType, Population, User
from .profile_service import UnifiedProfile, get_unified_profile

logger = logging.getLogger(__name__)

NO_EQUIPMENT = "None (bodyweight only)"
NO_ALLERGENS = "None"

_POPULATION_PACKETS = {
    Population.GENERAL: PacketType.GENERAL,
    Population.ATHLETE: PacketType.ATHLETE_PERFORMANCE,
    Population.YOUTH: PacketType.YOUTH,
    Population.RECOVERY: PacketType.RECOVERY,
    Population.PREGNANCY: PacketType.PREGNANCY,
    Population.POSTPARTUM: PacketType.POSTPARTUM,
    Population.OLDER_ADULT: PacketType.OLDER_ADULT,
}

# Packet types that leave out one of the two content lists
_WITHOUT_EXERCISES = {PacketType.NUTRITION}
_WITHOUT_NUTRITION = {PacketType.TRAINING, PacketType.RECOVERY}


def packet_type_for_population(population) -> PacketType:
    return _POPULATION_PACKETS.get(Population.coerce(population), PacketType.GENERAL)


def _resolve_packet_type(packet_type, population) -> PacketType:
    if packet_type is None:
        return packet_type_for_population(population)
    if isinstance(packet_type, PacketType):
        return packet_type
    try:
        return PacketType(str(packet_type).strip().lower())
    except ValueError:
        raise ValidationError("Invalid packet type.", {"packet_type": f"Unknown packet type {packet_type!r}"})


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _suits(item, population: Optional[Population]) -> bool:
    """True when the item targets the population and is not ruled out for it."""
    if population is None:
        return False
    return population.value in (item.populations or []) and population.value not in (item.contraindicated_for or [])


def select_exercises(
    items: Iterable[ExerciseItem],
    population: Optional[Population],
    profile: UnifiedProfile,
) -> list[ExerciseItem]:
    """Filter library exercises for a client.

    Items must suit the population. When the client has told us what
    equipment they own, items needing anything else are dropped; items
    with no equipment always pass. Items matching the client's fitness
    level are listed first.
    """
    available = {name for name in _as_list(profile.get("equipment.available")) if name != NO_EQUIPMENT}
    equipment_known = profile.get("equipment.available") is not None
    level = profile.get("movement.fitness_level")

    selected = []
    for item in items:
        if not _suits(item, population):
            continue
        needed = set(item.equipment or [])
        if equipment_known and not needed.issubset(available):
            continue
        selected.append(item)
    selected.sort(key=lambda item: (item.difficulty != level, item.name))
    return selected


def select_nutrition(
    items: Iterable[NutritionItem],
    population: Optional[Population],
    profile: UnifiedProfile,
) -> list[NutritionItem]:
    allergies = {name for name in _as_list(profile.get("dietary.allergies")) if name != NO_ALLERGENS}
    return sorted(
        (
            item for item in items
            if _suits(item, population) and not allergies.intersection(item.allergens or [])
        ),
        key=lambda item: item.name,
    )


def _exercise_entry(item: ExerciseItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "difficulty": item.difficulty,
        "description": item.description,
        "instructions": item.instructions,
        "equipment": list(item.equipment or []),
    }


def _nutrition_entry(item: NutritionItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "serving_size": item.serving_size,
        "calories": item.calories,
        "protein": item.protein,
        "carbs": item.carbs,
        "fats": item.fats,
        "allergens": list(item.allergens or []),
    }


def _next_version(user_id: int, packet_type: PacketType) -> int:
    latest = (
        Packet.query.filter_by(user_id=user_id, packet_type=packet_type)
        .order_by(Packet.version.desc())
        .first()
    )
    return latest.version + 1 if latest else 1


def generate_packet_content(user_id: int, packet_type=None, version: int = 1) -> dict:
    """Assemble the packet payload for a client.

    Parameters
    ----------
    user_id: int
        The client the packet is for.
    packet_type: PacketType | str | None, optional
        Overrides the type derived from the client's population.
    version: int, optional
        Version number recorded in the header.

    Returns
    -------
    dict
        ``header``, ``profile`` and, depending on the packet type,
        ``exercises`` and ``nutrition`` lists.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    population = user.population
    resolved = _resolve_packet_type(packet_type, population)
    profile = get_unified_profile(user_id)

    content = {
        "header": {
            "client_name": f"{user.first_name} {user.last_name}",
            "email": user.email,
            "population": population.value if population else None,
            "packet_type": resolved.value,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "version": version,
        },
        "profile": {
            "completed_modules": sorted(profile.completed_modules),
            "attributes": profile.attributes,
        },
    }
    try:
        if resolved not in _WITHOUT_EXERCISES:
            exercises = select_exercises(ExerciseItem.query.all(), population, profile)
            content["exercises"] = [_exercise_entry(item) for item in exercises]
        if resolved not in _WITHOUT_NUTRITION:
            foods = select_nutrition(NutritionItem.query.all(), population, profile)
            content["nutrition"] = [_nutrition_entry(item) for item in foods]
    except SQLAlchemyError as exc:
        logger.exception("Failed to read library content for packet user=%s", user_id)
        raise StorageError("Could not read library content.") from exc
    return content


def create_draft_packet(user_id: int, packet_type=None) -> Packet:
    """Generate and store a new draft packet.

    The first packet of a given type is version 1; each further draft of
    the same type for the same client bumps the version.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    resolved = _resolve_packet_type(packet_type, user.population)
    version = _next_version(user_id, resolved)
    content = generate_packet_content(user_id, resolved, version=version)
    packet = Packet(
        user_id=user_id,
        packet_type=resolved,
        status=PacketStatus.DRAFT,
        version=version,
        data=content,
    )
    db.session.add(packet)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to store packet for user %s", user_id)
        raise StorageError("Could not store the packet.") from exc
    logger.info("Created %s packet v%d for user %s", resolved.value, version, user_id)
    return packet


def publish_packet(packet_id: int) -> Packet:
    packet = db.session.get(Packet, packet_id)
    if packet is None:
        raise NotFoundError("Packet not found.")
    if packet.status == PacketStatus.PUBLISHED:
        raise ConflictError("Packet is already published.")
    packet.status = PacketStatus.PUBLISHED
    packet.published_at = datetime.now(timezone.utc)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to publish packet %s", packet_id)
        raise StorageError("Could not publish the packet.") from exc
    logger.info("Published packet %s for user %s", packet_id, packet.user_id)
    return packet
