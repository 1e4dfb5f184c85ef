"""Population classification and assignment.

Admins classify each client after the discovery call. The suggested
classification follows a fixed priority order, and the display
information for each population is derived from the module registry so
the counts shown to admins always match what clients are asked to
complete.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..assessments import ModuleRegistry, module_registry
from ..errors import NotFoundError, StorageError, ValidationError
from ..models import Population, Role, User

logger = logging.getLogger(__name__)

POPULATION_DESCRIPTIONS = {
    Population.GENERAL: "General wellness and health optimization",
    Population.ATHLETE: "Athletic performance and training optimization",
    Population.YOUTH: "Age-appropriate wellness for young athletes",
    Population.RECOVERY: "Injury recovery and rehabilitation",
    Population.PREGNANCY: "Prenatal wellness and fitness",
    Population.POSTPARTUM: "Postpartum recovery and wellness",
    Population.OLDER_ADULT: "Age-appropriate wellness for older adults",
    Population.CHRONIC_CONDITION: "Wellness management for chronic conditions",
}

POPULATION_NAMES = {
    Population.GENERAL: "General Wellness",
    Population.ATHLETE: "Athlete",
    Population.YOUTH: "Youth",
    Population.RECOVERY: "Recovery",
    Population.PREGNANCY: "Pregnancy",
    Population.POSTPARTUM: "Postpartum",
    Population.OLDER_ADULT: "Older Adult",
    Population.CHRONIC_CONDITION: "Chronic Condition",
}


def classify_population(
    age: Optional[int] = None,
    is_athlete: bool = False,
    is_youth: bool = False,
    has_injury: bool = False,
    is_pregnant: bool = False,
    is_postpartum: bool = False,
    has_chronic_condition: bool = False,
) -> Population:
    """Suggest a population from discovery-call answers.

    The first matching rule wins: pregnancy, postpartum, youth (flag or
    under 18), older adult (65 and over), chronic condition, recovery,
    athlete, and finally general.
    """
    if is_pregnant:
        return Population.PREGNANCY
    if is_postpartum:
        return Population.POSTPARTUM
    if is_youth or (age is not None and age < 18):
        return Population.YOUTH
    if age is not None and age >= 65:
        return Population.OLDER_ADULT
    if has_chronic_condition:
        return Population.CHRONIC_CONDITION
    if has_injury:
        return Population.RECOVERY
    if is_athlete:
        return Population.ATHLETE
    return Population.GENERAL


def population_info(population: Population, registry: Optional[ModuleRegistry] = None) -> dict:
    registry = registry if registry is not None else module_registry
    required = registry.get_required_modules(population)
    optional = registry.get_optional_modules(population)
    return {
        "value": population.value,
        "name": POPULATION_NAMES[population],
        "description": POPULATION_DESCRIPTIONS[population],
        "required_modules": len(required),
        "optional_modules": len(optional),
        "total_modules": len(required) + len(optional),
    }


def all_populations(registry: Optional[ModuleRegistry] = None) -> list[dict]:
    return [population_info(population, registry) for population in Population]


def assign_population(user_id: int, population, notes: Optional[str] = None) -> User:
    """Set a client's population.

    ``population`` may be a ``Population`` or its string value. Raises
    ``ValidationError`` for an unknown tag and ``NotFoundError`` when the
    user does not exist or is not a client.
    """
    resolved = Population.coerce(population)
    if resolved is None:
        raise ValidationError("Invalid population.", {"population": f"Unknown population {population!r}"})
    user = db.session.get(User, user_id)
    if user is None or user.role != Role.CLIENT:
        raise NotFoundError("Client not found.")
    previous = user.population
    user.population = resolved
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to assign population for user %s", user_id)
        raise StorageError("Could not update the client's population.") from exc
    logger.info(
        "Population for user %s changed from %s to %s%s",
        user_id,
        previous.value if previous else "none",
        resolved.value,
        f" ({notes})" if notes else "",
    )
    return user
