"""Seed script for initial data.

Running this script will populate the database with a starter content
library (exercises and foods tagged by population) plus a demo admin and
a demo client for demonstration purposes. Invoke it with
``python -m seed.seed`` from the repository root.
"""
from __future__ import annotations

import logging

from wellness_portal import create_app, db
from wellness_portal.models import ExerciseItem, NutritionItem, Population, Role, User

logger = logging.getLogger("wellness_portal.seed")

EVERYONE = [p.value for p in Population]

EXERCISES = [
    dict(name="Bodyweight Squat", category="Strength", difficulty="Beginner",
         description="Foundational lower-body pattern",
         instructions="Feet shoulder-width apart, sit back and down, drive up through the heels.",
         equipment=[], populations=EVERYONE, contraindicated_for=[]),
    dict(name="Glute Bridge", category="Strength", difficulty="Beginner",
         description="Hip extension from the floor",
         instructions="Lie on your back, knees bent, lift the hips until the body forms a straight line.",
         equipment=[], populations=EVERYONE, contraindicated_for=[Population.PREGNANCY.value]),
    dict(name="Wall Push-up", category="Strength", difficulty="Beginner",
         description="Upper-body push with reduced load",
         instructions="Hands on the wall at shoulder height, lower the chest toward the wall and press away.",
         equipment=[], populations=EVERYONE, contraindicated_for=[]),
    dict(name="Goblet Squat", category="Strength", difficulty="Intermediate",
         description="Loaded squat holding a weight at the chest",
         instructions="Hold a dumbbell vertically at the chest and squat to a comfortable depth.",
         equipment=["Dumbbells"],
         populations=[Population.GENERAL.value, Population.ATHLETE.value, Population.POSTPARTUM.value],
         contraindicated_for=[]),
    dict(name="Kettlebell Swing", category="Power", difficulty="Advanced",
         description="Explosive hip hinge",
         instructions="Hinge at the hips and snap them forward to swing the bell to chest height.",
         equipment=["Kettlebells"], populations=[Population.GENERAL.value, Population.ATHLETE.value],
         contraindicated_for=[Population.RECOVERY.value]),
    dict(name="Band Pull-apart", category="Mobility", difficulty="Beginner",
         description="Upper-back activation",
         instructions="Hold a band at shoulder height and pull it apart by squeezing the shoulder blades.",
         equipment=["Resistance bands"], populations=EVERYONE, contraindicated_for=[]),
    dict(name="Single-leg Balance", category="Balance", difficulty="Beginner",
         description="Static balance drill",
         instructions="Stand near a support, lift one foot and hold for 20-30 seconds.",
         equipment=[], populations=[Population.OLDER_ADULT.value, Population.GENERAL.value,
                                    Population.RECOVERY.value, Population.YOUTH.value],
         contraindicated_for=[]),
    dict(name="Pelvic Floor Breathing", category="Core", difficulty="Beginner",
         description="Diaphragmatic breathing with pelvic floor engagement",
         instructions="Inhale to relax the pelvic floor, exhale to gently lift and engage.",
         equipment=[], populations=[Population.PREGNANCY.value, Population.POSTPARTUM.value],
         contraindicated_for=[]),
]

FOODS = [
    dict(name="Greek Yogurt with Berries", category="Breakfast", serving_size="1 cup",
         calories=220, protein=18, carbs=25, fats=5, allergens=["Dairy"],
         populations=EVERYONE, contraindicated_for=[]),
    dict(name="Oatmeal with Peanut Butter", category="Breakfast", serving_size="1 bowl",
         calories=350, protein=12, carbs=45, fats=14, allergens=["Peanuts", "Gluten"],
         populations=EVERYONE, contraindicated_for=[]),
    dict(name="Grilled Salmon", category="Protein", serving_size="5 oz",
         calories=280, protein=34, carbs=0, fats=15, allergens=["Fish"],
         populations=EVERYONE, contraindicated_for=[]),
    dict(name="Lentil Soup", category="Lunch", serving_size="1.5 cups",
         calories=260, protein=16, carbs=40, fats=4, allergens=[],
         populations=EVERYONE, contraindicated_for=[]),
    dict(name="Chicken and Rice Bowl", category="Dinner", serving_size="1 bowl",
         calories=520, protein=40, carbs=60, fats=12, allergens=[],
         populations=[Population.GENERAL.value, Population.ATHLETE.value, Population.YOUTH.value,
                      Population.RECOVERY.value],
         contraindicated_for=[]),
    dict(name="Tuna Salad", category="Lunch", serving_size="1 cup",
         calories=300, protein=28, carbs=6, fats=18, allergens=["Fish", "Eggs"],
         populations=EVERYONE, contraindicated_for=[Population.PREGNANCY.value]),
]


def seed_library() -> int:
    """Insert library items that are not already present. Returns the count added."""
    added = 0
    for model, rows in ((ExerciseItem, EXERCISES), (NutritionItem, FOODS)):
        for row in rows:
            if model.query.filter_by(name=row["name"]).first():
                continue
            db.session.add(model(**row))
            added += 1
    return added


def seed_accounts() -> None:
    """Add a demo admin and client if they are missing."""
    accounts = [
        ("Admin", "User", "admin@example.com", Role.ADMIN, None),
        ("Demo", "Client", "client@example.com", Role.CLIENT, Population.GENERAL),
    ]
    for first_name, last_name, email, role, population in accounts:
        if User.query.filter_by(email=email).first():
            continue
        user = User(first_name=first_name, last_name=last_name, email=email, role=role, population=population)
        user.set_password("password")
        db.session.add(user)


def run_seeds() -> None:
    """Create tables if needed and insert the starter data."""
    app = create_app()
    with app.app_context():
        db.create_all()
        added = seed_library()
        seed_accounts()
        db.session.commit()
        logger.info("Seed data inserted successfully (%d library items added).", added)


if __name__ == "__main__":
    run_seeds()
