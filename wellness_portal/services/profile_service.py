"""Unified client profile: saving module answers and reporting progress.

Each (user, module) pair owns one ``AssessmentRecord`` whose payload is
merged on every save, so autosaving one page of a form never erases the
answers on another page. The unified profile is not stored separately;
it is rebuilt from the records whenever it is read.

These functions assume the caller has already authenticated the user.
Reads that involve a population fail closed (an unset population means
nothing is required), while writes fail loud: any database error is
rolled back and re-raised as ``StorageError``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import db
from ..assessments import ModuleDefinition, ModuleRegistry, module_registry
from ..assessments.definitions import is_answer_value
from ..errors import NotFoundError, StorageError, ValidationError
from ..models import AssessmentRecord, User
from ..util.sanitization import sanitize_answers

logger = logging.getLogger(__name__)


@dataclass
class UnifiedProfile:
    """Everything a user has answered, keyed by module id."""

    user_id: int
    population: Optional[str]
    modules: dict[str, dict[str, Any]] = field(default_factory=dict)
    completed_modules: list[str] = field(default_factory=list)
    attributes: dict[str, dict[str, Any]] = field(default_factory=dict)
    completed_at: Optional[datetime] = None

    def get(self, path: str, default: Any = None) -> Any:
        """Look up an attribute by dotted path, e.g. ``"dietary.allergies"``."""
        group, _, name = path.partition(".")
        return self.attributes.get(group, {}).get(name, default)


def _registry(registry: Optional[ModuleRegistry]) -> ModuleRegistry:
    return registry if registry is not None else module_registry


def _get_user(user_id: int) -> User:
    try:
        user = db.session.get(User, user_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to load user %s", user_id)
        raise StorageError("Could not read user record.") from exc
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _get_record(user_id: int, module_id: str) -> Optional[AssessmentRecord]:
    try:
        return AssessmentRecord.query.filter_by(user_id=user_id, module_id=module_id).first()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load assessment record user=%s module=%s", user_id, module_id)
        raise StorageError("Could not read assessment record.") from exc


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database write failed while trying to %s", action)
        raise StorageError(f"Could not {action}.") from exc


def _merge_answers(module: ModuleDefinition, existing: dict, answers: dict, completed: bool) -> dict:
    merged = {**existing, **answers}
    if completed:
        errors = module.validate(merged)
        if errors:
            raise ValidationError("Module cannot be completed until all required questions are answered.", errors)
    return merged


def _insert_record(
    user_id: int, module: ModuleDefinition, answers: dict, completed: bool
) -> Optional[AssessmentRecord]:
    """Create the first record for a module.

    Returns None when the (user, module) row already exists, which happens
    when another save inserted it after our lookup.
    """
    merged = _merge_answers(module, {}, answers, completed)
    record = AssessmentRecord(user_id=user_id, module_id=module.id, data=merged, completed=bool(completed))
    db.session.add(record)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning("Record for user %s module %s already exists, saving as an update", user_id, module.id)
        return None
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database write failed while trying to insert module %s", module.id)
        raise StorageError(f"Could not save answers for module '{module.id}'.") from exc
    return record


def _update_record(record: AssessmentRecord, module: ModuleDefinition, answers: dict, completed: bool) -> None:
    merged = _merge_answers(module, dict(record.data or {}), answers, completed)
    # assign a new dict so SQLAlchemy sees the JSON column change
    record.data = merged
    record.completed = record.completed or bool(completed)
    record.updated_at = datetime.now(timezone.utc)
    _commit(f"save answers for module '{module.id}'")


def save_module_to_profile(
    user_id: int,
    module_id: str,
    answers: dict,
    completed: bool = False,
    registry: Optional[ModuleRegistry] = None,
) -> AssessmentRecord:
    """Merge ``answers`` into the user's record for ``module_id``.

    New keys overwrite stored keys of the same name; stored keys missing
    from ``answers`` are kept. Passing ``completed=True`` is the explicit
    complete action: the merged payload must then pass the module's full
    validation. Completion is never undone by a later partial save.

    Raises
    ------
    NotFoundError
        If the module id or the user is unknown.
    ValidationError
        If a value has the wrong shape for its question, or required
        questions are unanswered when completing.
    StorageError
        If the database write fails.
    """
    module = _registry(registry).get_module(module_id)
    if module is None:
        raise NotFoundError(f"Assessment module '{module_id}' not found.")
    _get_user(user_id)

    answers = answers or {}
    errors = {
        str(key): "Unsupported answer value"
        for key, value in answers.items()
        if not isinstance(key, str) or not is_answer_value(value)
    }
    if errors:
        raise ValidationError("Some answers are invalid.", errors)
    answers = sanitize_answers(answers)
    errors = module.check_values(answers)
    if errors:
        raise ValidationError("Some answers are invalid.", errors)

    record = _get_record(user_id, module_id)
    if record is None:
        record = _insert_record(user_id, module, answers, completed)
        if record is None:
            # a concurrent first save created the row; merge into that one
            record = _get_record(user_id, module_id)
            if record is None:
                raise StorageError(f"Could not save answers for module '{module_id}'.")
            _update_record(record, module, answers, completed)
    else:
        _update_record(record, module, answers, completed)
    logger.info(
        "Saved module %s for user %s (%d keys, completed=%s)",
        module_id, user_id, len(answers), record.completed,
    )
    return record


def get_module_answers(user_id: int, module_id: str) -> dict:
    """Return the stored answers for one module, or an empty dict."""
    record = _get_record(user_id, module_id)
    return dict(record.data or {}) if record is not None else {}


def get_completed_modules(user_id: int) -> set[str]:
    try:
        rows = AssessmentRecord.query.filter_by(user_id=user_id, completed=True).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load completed modules for user %s", user_id)
        raise StorageError("Could not read assessment records.") from exc
    return {row.module_id for row in rows}


def get_required_modules_for_user(user_id: int, registry: Optional[ModuleRegistry] = None) -> list[str]:
    """Ids of the modules the user's population must complete, in display order."""
    user = _get_user(user_id)
    return [module.id for module in _registry(registry).get_required_modules(user.population)]


def has_completed_required_modules(user_id: int, registry: Optional[ModuleRegistry] = None) -> bool:
    required = get_required_modules_for_user(user_id, registry)
    completed = get_completed_modules(user_id)
    return all(module_id in completed for module_id in required)


def completion_percentage(completed: set[str], required: list[str]) -> int:
    """Share of required modules completed, rounded half up to an integer.

    Nothing required counts as fully complete.
    """
    if not required:
        return 100
    done = len(completed.intersection(required))
    return int(math.floor(100 * done / len(required) + 0.5))


def get_profile_completion_percentage(user_id: int, registry: Optional[ModuleRegistry] = None) -> int:
    required = get_required_modules_for_user(user_id, registry)
    return completion_percentage(get_completed_modules(user_id), required)


def mark_profile_complete(user_id: int) -> User:
    """Set the profile-level completion marker. Calling it again is a no-op."""
    user = _get_user(user_id)
    if user.profile_completed_at is None:
        user.profile_completed_at = datetime.now(timezone.utc)
        _commit("mark the profile complete")
        logger.info("Profile marked complete for user %s", user_id)
    return user


def get_unified_profile(user_id: int, registry: Optional[ModuleRegistry] = None) -> UnifiedProfile:
    """Assemble the unified profile from every stored record for the user."""
    user = _get_user(user_id)
    registry = _registry(registry)
    try:
        records = (
            AssessmentRecord.query.filter_by(user_id=user_id)
            .order_by(AssessmentRecord.module_id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to load assessment records for user %s", user_id)
        raise StorageError("Could not read assessment records.") from exc

    profile = UnifiedProfile(
        user_id=user.id,
        population=user.population.value if user.population else None,
        completed_at=user.profile_completed_at,
    )
    for record in records:
        answers = dict(record.data or {})
        profile.modules[record.module_id] = answers
        if record.completed:
            profile.completed_modules.append(record.module_id)
        module = registry.get_module(record.module_id)
        if module is None:
            continue
        for group, values in module.extract_attributes(answers).items():
            profile.attributes.setdefault(group, {}).update(values)
    return profile


def get_progress(user_id: int, registry: Optional[ModuleRegistry] = None) -> dict:
    """Progress summary used by the dashboard and the admin client view."""
    user = _get_user(user_id)
    required = [module.id for module in _registry(registry).get_required_modules(user.population)]
    completed = get_completed_modules(user_id)
    return {
        "completed_modules": sorted(completed),
        "required_modules": required,
        "all_completed": all(module_id in completed for module_id in required),
        "percentage": completion_percentage(completed, required),
        "profile_completed_at": user.profile_completed_at.isoformat() if user.profile_completed_at else None,
    }
