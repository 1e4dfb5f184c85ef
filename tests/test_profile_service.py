"""Tests for saving module answers and computing profile progress."""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from wellness_portal.assessments import ModuleDefinition, ModuleRegistry, TextQuestion
from wellness_portal.assessments.definitions import ALL_POPULATIONS, only_for, section
from wellness_portal.errors import NotFoundError, StorageError, ValidationError
from wellness_portal.models import AssessmentRecord, Population
from wellness_portal.services import profile_service
from wellness_portal.services import (
    completion_percentage,
    get_completed_modules,
    get_module_answers,
    get_profile_completion_percentage,
    get_progress,
    get_required_modules_for_user,
    get_unified_profile,
    has_completed_required_modules,
    mark_profile_complete,
    save_module_to_profile,
)
from wellness_portal.util.sanitization import sanitize_answers

DIETARY_DONE = {"dietary_pattern": "None", "food_allergies": ["Peanuts"]}


@pytest.fixture
def youth_registry():
    def build(module_id, priority, required_for=frozenset()):
        return ModuleDefinition(
            id=module_id, name=module_id, description="", category="core", priority=priority,
            sections=(section("main", "Main", TextQuestion(id="note", prompt="Note")),),
            populations=ALL_POPULATIONS, required_for=required_for,
        )
    return ModuleRegistry([build("youth-basic", 1, only_for(Population.YOUTH)), build("nutrition", 5)])


def test_save_merges_answers(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", {"dietary_pattern": "Vegan", "disliked_foods": "olives"})
    save_module_to_profile(user.id, "dietary", {"dietary_pattern": "Keto", "food_allergies": ["Soy"]})
    assert get_module_answers(user.id, "dietary") == {
        "dietary_pattern": "Keto",
        "disliked_foods": "olives",
        "food_allergies": ["Soy"],
    }
    assert AssessmentRecord.query.filter_by(user_id=user.id, module_id="dietary").count() == 1


def test_unknown_keys_are_kept(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", {"free_note": "call after 5pm"})
    assert get_module_answers(user.id, "dietary")["free_note"] == "call after 5pm"


def test_text_answers_are_stripped_of_tags(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", {"disliked_foods": "<b>olives</b>"})
    assert get_module_answers(user.id, "dietary")["disliked_foods"] == "olives"


def test_sanitize_answers_cleans_every_string() -> None:
    cleaned = sanitize_answers({
        "dietary_pattern": " <i>Vegan</i> ",
        "food_allergies": ["<b>Soy</b>", " Dairy"],
        "sleep_hours": 7.5,
        "smoker": False,
    })
    assert cleaned == {
        "dietary_pattern": "Vegan",
        "food_allergies": ["Soy", "Dairy"],
        "sleep_hours": 7.5,
        "smoker": False,
    }


def test_no_record_means_empty_answers(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    assert get_module_answers(user.id, "dietary") == {}


def test_completion_is_monotonic(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", DIETARY_DONE, completed=True)
    record = save_module_to_profile(user.id, "dietary", {"disliked_foods": "kale"}, completed=False)
    assert record.completed is True
    assert "dietary" in get_completed_modules(user.id)


def test_completing_requires_required_answers(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    with pytest.raises(ValidationError) as excinfo:
        save_module_to_profile(user.id, "dietary", {"dietary_pattern": "None"}, completed=True)
    assert set(excinfo.value.fields) == {"food_allergies"}
    assert get_completed_modules(user.id) == set()


def test_completing_validates_merged_payload(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", {"dietary_pattern": "None"})
    record = save_module_to_profile(user.id, "dietary", {"food_allergies": ["None"]}, completed=True)
    assert record.completed is True


def test_wrong_shapes_are_rejected(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    with pytest.raises(ValidationError) as excinfo:
        save_module_to_profile(user.id, "lifestyle", {"sleep_hours": "eight", "smoking": "Always"})
    assert set(excinfo.value.fields) == {"sleep_hours", "smoking"}
    with pytest.raises(ValidationError):
        save_module_to_profile(user.id, "lifestyle", {"occupation": {"title": "nurse"}})
    assert get_module_answers(user.id, "lifestyle") == {}


def test_non_finite_numbers_are_rejected(make_user) -> None:
    user = make_user(population=Population.RECOVERY)
    with pytest.raises(ValidationError) as excinfo:
        save_module_to_profile(user.id, "recovery", {"pain_level": float("nan")})
    assert set(excinfo.value.fields) == {"pain_level"}
    assert get_module_answers(user.id, "recovery") == {}


def test_unknown_module_or_user(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    with pytest.raises(NotFoundError):
        save_module_to_profile(user.id, "astrology", {})
    with pytest.raises(NotFoundError):
        save_module_to_profile(9999, "dietary", {})
    with pytest.raises(NotFoundError):
        get_progress(9999)


def test_storage_failure_is_surfaced(make_user, monkeypatch) -> None:
    user = make_user(population=Population.GENERAL)

    def broken_commit(self):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(Session, "commit", broken_commit)
    with pytest.raises(StorageError):
        save_module_to_profile(user.id, "dietary", {"dietary_pattern": "None"})
    monkeypatch.undo()
    assert get_module_answers(user.id, "dietary") == {}


def test_concurrent_first_save_updates_existing_record(make_user, monkeypatch) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", {"disliked_foods": "olives"})

    real_get_record = profile_service._get_record
    lookups = []

    def stale_then_real(user_id, module_id):
        lookups.append(module_id)
        # the first lookup misses the row another request has just inserted
        if len(lookups) == 1:
            return None
        return real_get_record(user_id, module_id)

    monkeypatch.setattr(profile_service, "_get_record", stale_then_real)
    record = save_module_to_profile(user.id, "dietary", dict(DIETARY_DONE), completed=True)
    monkeypatch.undo()

    assert len(lookups) == 2
    assert record.completed is True
    assert get_module_answers(user.id, "dietary") == {**DIETARY_DONE, "disliked_foods": "olives"}
    assert AssessmentRecord.query.filter_by(user_id=user.id, module_id="dietary").count() == 1


def test_required_modules_follow_population(make_user) -> None:
    user = make_user(population=Population.ATHLETE)
    assert get_required_modules_for_user(user.id) == ["athlete", "dietary", "movement"]


def test_unset_population_requires_nothing(make_user) -> None:
    user = make_user(population=None)
    assert get_required_modules_for_user(user.id) == []
    assert has_completed_required_modules(user.id) is True
    assert get_profile_completion_percentage(user.id) == 100


def test_percentage_counts_required_modules_only(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    # general requires dietary and lifestyle; equipment is optional
    save_module_to_profile(user.id, "equipment", {"primary_location": "Home", "equipment_access": ["Dumbbells"]},
                           completed=True)
    assert get_profile_completion_percentage(user.id) == 0
    save_module_to_profile(user.id, "dietary", DIETARY_DONE, completed=True)
    assert get_profile_completion_percentage(user.id) == 50
    assert has_completed_required_modules(user.id) is False


@pytest.mark.parametrize(
    "done, required, expected",
    [
        (set(), [], 100),
        ({"a"}, ["a", "b", "c"], 33),
        ({"a", "b"}, ["a", "b", "c"], 67),
        ({"a"}, ["a", "b"], 50),
        ({"a", "x"}, ["a"], 100),
        ({"a"}, ["a", "b", "c", "d", "e", "f", "g", "h"], 13),
    ],
)
def test_completion_percentage_rounds_half_up(done, required, expected) -> None:
    assert completion_percentage(done, required) == expected


def test_youth_scenario(make_user, youth_registry) -> None:
    user = make_user(population=Population.YOUTH)
    assert get_required_modules_for_user(user.id, youth_registry) == ["youth-basic"]
    save_module_to_profile(user.id, "youth-basic", {"note": "ok"}, completed=True, registry=youth_registry)
    assert has_completed_required_modules(user.id, youth_registry) is True
    assert get_profile_completion_percentage(user.id, youth_registry) == 100


def test_mark_profile_complete_is_idempotent(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    first = mark_profile_complete(user.id).profile_completed_at
    second = mark_profile_complete(user.id).profile_completed_at
    assert first is not None
    assert first == second


def test_unified_profile_collects_attributes(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", DIETARY_DONE, completed=True)
    save_module_to_profile(user.id, "equipment", {"equipment_access": ["Dumbbells"]})
    profile = get_unified_profile(user.id)
    assert profile.population == "general"
    assert profile.completed_modules == ["dietary"]
    assert set(profile.modules) == {"dietary", "equipment"}
    assert profile.get("dietary.allergies") == ["Peanuts"]
    assert profile.get("equipment.available") == ["Dumbbells"]
    assert profile.get("movement.fitness_level") is None


def test_progress_summary(make_user) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "dietary", DIETARY_DONE, completed=True)
    progress = get_progress(user.id)
    assert progress == {
        "completed_modules": ["dietary"],
        "required_modules": ["dietary", "lifestyle"],
        "all_completed": False,
        "percentage": 50,
        "profile_completed_at": None,
    }
