"""Shared fixtures for the wellness portal tests.

Each test gets a fresh application bound to an in-memory SQLite
database. The application context stays pushed for the duration of the
test, so service functions can be called directly and the Flask test
client shares the same session.
"""
from __future__ import annotations

import pytest
from flask_jwt_extended import create_access_token

from wellness_portal import create_app, db
from wellness_portal.models import ExerciseItem, NutritionItem, Population, Role, User


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
        "LOG_LEVEL": "WARNING",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(role: Role = Role.CLIENT, population: Population | None = None, **kwargs) -> User:
        counter["n"] += 1
        user = User(
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", f"User{counter['n']}"),
            email=kwargs.pop("email", f"user{counter['n']}@example.com"),
            role=role,
            population=population,
        )
        user.set_password(kwargs.pop("password", "password"))
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers(app):
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def library(app):
    """A small content library covering the packet filtering rules."""
    exercises = [
        ExerciseItem(name="Bodyweight Squat", category="Strength", difficulty="Beginner",
                     equipment=[], populations=["general", "athlete", "pregnancy"], contraindicated_for=[]),
        ExerciseItem(name="Goblet Squat", category="Strength", difficulty="Intermediate",
                     equipment=["Dumbbells"], populations=["general", "athlete"], contraindicated_for=[]),
        ExerciseItem(name="Barbell Deadlift", category="Strength", difficulty="Advanced",
                     equipment=["Barbell"], populations=["general", "athlete"], contraindicated_for=[]),
        ExerciseItem(name="Glute Bridge", category="Strength", difficulty="Beginner",
                     equipment=[], populations=["general", "pregnancy"], contraindicated_for=["pregnancy"]),
    ]
    foods = [
        NutritionItem(name="Peanut Oats", category="Breakfast", allergens=["Peanuts"],
                      populations=["general", "athlete"], contraindicated_for=[]),
        NutritionItem(name="Lentil Soup", category="Lunch", allergens=[],
                      populations=["general", "athlete", "pregnancy"], contraindicated_for=[]),
        NutritionItem(name="Tuna Salad", category="Lunch", allergens=["Fish"],
                      populations=["general", "pregnancy"], contraindicated_for=["pregnancy"]),
    ]
    db.session.add_all(exercises + foods)
    db.session.commit()
    return {"exercises": exercises, "foods": foods}
