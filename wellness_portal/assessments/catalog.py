"""Built-in assessment modules.

Population modules (pregnancy, postpartum, older adult, athlete, youth,
recovery) apply only to their own population and are required for it.
Lifestyle modules apply to everyone; which populations must complete
them follows the population routing table in
``services.population_service``.
"""
from __future__ import annotations

from ..models import Population as P
from .definitions import (
    ALL_POPULATIONS,
    DateQuestion,
    ModuleDefinition,
    MultiSelectQuestion,
    NumberQuestion,
    RadioQuestion,
    SelectQuestion,
    TextQuestion,
    TextareaQuestion,
    everyone_except,
    only_for,
    options,
    section,
    when,
)

YES_NO = options("No", "Yes")
FITNESS_LEVELS = options("Beginner", "Intermediate", "Advanced", "Elite")
EQUIPMENT = options(
    "None (bodyweight only)",
    "Dumbbells",
    "Kettlebells",
    "Resistance bands",
    "Barbell",
    "Bench",
    "Pull-up bar",
    "Stability ball",
    "Treadmill/bike",
)
ALLERGENS = options("None", "Peanuts", "Tree nuts", "Dairy", "Eggs", "Gluten", "Soy", "Fish", "Shellfish")


PREGNANCY = ModuleDefinition(
    id="pregnancy",
    name="Pregnancy Assessment",
    description="Trimester-specific health and fitness assessment",
    category="population",
    priority=10,
    populations=only_for(P.PREGNANCY),
    required_for=only_for(P.PREGNANCY),
    sections=(
        section(
            "pregnancy_basics", "Pregnancy Information",
            SelectQuestion(id="trimester", prompt="Which trimester are you currently in?", required=True,
                           options=options("First (Weeks 1-12)", "Second (Weeks 13-26)", "Third (Weeks 27-40)"),
                           maps_to="population.trimester"),
            DateQuestion(id="due_date", prompt="What is your due date?", required=True,
                         maps_to="population.due_date"),
            NumberQuestion(id="previous_pregnancies", prompt="How many previous pregnancies have you had?",
                           required=True, min_value=0),
            MultiSelectQuestion(id="pregnancy_complications",
                                prompt="Are you experiencing any pregnancy complications?",
                                options=options("None", "Gestational diabetes", "High blood pressure",
                                                "Preeclampsia", "Placenta previa", "Multiple pregnancy", "Other"),
                                maps_to="population.complications"),
            TextareaQuestion(id="complications_other", prompt="Please describe other complications",
                             condition=when("pregnancy_complications", includes="Other")),
            description="Tell us about your pregnancy",
        ),
        section(
            "pregnancy_activity", "Physical Activity During Pregnancy",
            SelectQuestion(id="pre_pregnancy_activity", prompt="What was your activity level before pregnancy?",
                           required=True,
                           options=options("Sedentary", "Lightly active", "Moderately active", "Very active")),
            RadioQuestion(id="provider_clearance",
                          prompt="Has your healthcare provider cleared you for exercise?",
                          required=True, options=YES_NO, maps_to="medical.doctor_clearance"),
        ),
    ),
)

POSTPARTUM = ModuleDefinition(
    id="postpartum",
    name="Postpartum Assessment",
    description="Recovery and wellness assessment for postpartum period",
    category="population",
    priority=10,
    populations=only_for(P.POSTPARTUM),
    required_for=only_for(P.POSTPARTUM),
    sections=(
        section(
            "delivery_info", "Delivery Information",
            DateQuestion(id="delivery_date", prompt="When did you give birth?", required=True,
                         maps_to="population.delivery_date"),
            RadioQuestion(id="delivery_type", prompt="What type of delivery did you have?", required=True,
                          options=options("Vaginal", "Cesarean"), maps_to="population.delivery_type"),
            RadioQuestion(id="breastfeeding", prompt="Are you currently breastfeeding?", required=True,
                          options=YES_NO, maps_to="population.breastfeeding"),
        ),
        section(
            "postpartum_recovery", "Recovery Status",
            MultiSelectQuestion(id="postpartum_symptoms", prompt="Are you experiencing any of the following?",
                                options=options("None", "Diastasis recti", "Pelvic floor weakness",
                                                "Back pain", "Incision pain", "Fatigue")),
            RadioQuestion(id="six_week_clearance", prompt="Have you had your six-week postpartum check-up?",
                          required=True, options=YES_NO, maps_to="medical.doctor_clearance"),
        ),
    ),
)

OLDER_ADULT = ModuleDefinition(
    id="elderly",
    name="Older Adult Functional Assessment",
    description="Functional screening and wellness assessment for older adults",
    category="population",
    priority=10,
    populations=only_for(P.OLDER_ADULT),
    required_for=only_for(P.OLDER_ADULT),
    sections=(
        section(
            "functional_screening", "Functional Screening",
            SelectQuestion(id="mobility", prompt="How would you describe your current mobility?", required=True,
                           options=options("Fully mobile", "Mobile with some difficulty",
                                           "Use a cane or walker", "Limited mobility"),
                           maps_to="population.mobility"),
            SelectQuestion(id="balance", prompt="How is your balance?", required=True,
                           options=options("Excellent", "Good", "Fair", "Poor"), maps_to="population.balance"),
            RadioQuestion(id="fall_history", prompt="Have you experienced any falls in the past year?",
                          required=True, options=YES_NO, maps_to="population.fall_history"),
            NumberQuestion(id="fall_count", prompt="How many falls?", min_value=1,
                           condition=when("fall_history", equals="Yes")),
        ),
        section(
            "health_conditions", "Health Conditions",
            MultiSelectQuestion(id="chronic_conditions", prompt="Do you have any of the following conditions?",
                                options=options("None", "Arthritis", "Osteoporosis", "Heart disease",
                                                "Diabetes", "High blood pressure", "COPD", "Other"),
                                maps_to="medical.conditions"),
            TextareaQuestion(id="medications", prompt="List any medications you take regularly",
                             maps_to="medical.medications"),
        ),
    ),
)

ATHLETE = ModuleDefinition(
    id="athlete",
    name="Athlete Performance Assessment",
    description="Sport-specific performance and training assessment",
    category="population",
    priority=10,
    populations=only_for(P.ATHLETE),
    required_for=only_for(P.ATHLETE),
    sections=(
        section(
            "sport_info", "Sport Information",
            TextQuestion(id="primary_sport", prompt="What is your primary sport?", required=True,
                         maps_to="population.sport"),
            TextQuestion(id="position", prompt="What position do you play (if applicable)?",
                         maps_to="population.position"),
            SelectQuestion(id="competition_level", prompt="What is your competition level?", required=True,
                           options=options("Recreational", "High school", "Collegiate", "Semi-professional",
                                           "Professional", "Masters"),
                           maps_to="population.competition_level"),
            SelectQuestion(id="season_status", prompt="What is your current season status?",
                           options=options("Off-season", "Pre-season", "In-season", "Post-season")),
        ),
        section(
            "training_schedule", "Training Schedule",
            NumberQuestion(id="training_hours", prompt="How many hours per week do you train (total)?",
                           required=True, min_value=0, max_value=60, unit="hours"),
            MultiSelectQuestion(id="performance_goals", prompt="What are your primary performance goals?",
                                options=options("Speed", "Strength", "Power", "Endurance", "Agility",
                                                "Injury prevention"),
                                maps_to="population.performance_goals"),
        ),
        section(
            "injury_history", "Injury History",
            RadioQuestion(id="injury_history", prompt="Have you had any significant injuries?", required=True,
                          options=options("No", "Yes, fully recovered", "Yes, still recovering")),
            MultiSelectQuestion(id="past_injuries", prompt="What injuries have you experienced?",
                                options=options("Ankle sprain", "ACL/knee ligament", "Hamstring strain",
                                                "Shoulder", "Concussion", "Stress fracture", "Other"),
                                condition=when("injury_history", not_equals="No"),
                                maps_to="movement.injuries"),
        ),
    ),
)

YOUTH = ModuleDefinition(
    id="youth",
    name="Youth Assessment",
    description="Age-appropriate wellness assessment for youth",
    category="population",
    priority=10,
    populations=only_for(P.YOUTH),
    required_for=only_for(P.YOUTH),
    sections=(
        section(
            "youth_basics", "Basic Information",
            NumberQuestion(id="age", prompt="What is the participant's age?", required=True,
                           min_value=5, max_value=18, maps_to="demographics.age"),
            SelectQuestion(id="age_group", prompt="Age group", required=True,
                           options=options("Child (5-10 years)", "Pre-teen (11-12 years)", "Teen (13-18 years)"),
                           maps_to="population.age_group"),
            MultiSelectQuestion(id="parental_consent",
                                prompt="I confirm that I am the parent/legal guardian and consent to this assessment",
                                required=True, options=options("I consent"),
                                maps_to="population.parental_consent"),
            description="Tell us about the youth participant",
        ),
        section(
            "activity_level", "Activity Level",
            MultiSelectQuestion(id="school_sports", prompt="Does the participant play any school sports?",
                                options=options("None", "Basketball", "Soccer", "Football", "Baseball/Softball",
                                                "Track & Field", "Swimming", "Volleyball", "Other"),
                                maps_to="population.school_sports"),
            SelectQuestion(id="activity_frequency",
                           prompt="How many days per week is the participant physically active?",
                           required=True, options=options("0-1", "2-3", "4-5", "6-7")),
            SelectQuestion(id="screen_time", prompt="How many hours per day does the participant spend on screens?",
                           required=True,
                           options=options("Less than 1 hour", "1-2 hours", "3-4 hours", "5-6 hours",
                                           "More than 6 hours")),
        ),
        section(
            "youth_goals", "Goals & Interests",
            SelectQuestion(id="primary_goal", prompt="What is the primary goal?", required=True,
                           options=options("Improve sports performance", "Get more active", "Build confidence",
                                           "Learn new skills", "Have fun"),
                           maps_to="goals.primary"),
            TextareaQuestion(id="additional_info", prompt="Is there anything else you'd like us to know?"),
        ),
    ),
)

RECOVERY = ModuleDefinition(
    id="recovery",
    name="Recovery & Injury Assessment",
    description="Assessment for injury recovery and rehabilitation",
    category="population",
    priority=10,
    populations=only_for(P.RECOVERY, P.CHRONIC_CONDITION),
    required_for=only_for(P.RECOVERY, P.CHRONIC_CONDITION),
    sections=(
        section(
            "injury_details", "Injury or Condition Details",
            SelectQuestion(id="injury_type", prompt="What are you recovering from or managing?", required=True,
                           options=options("Sprain/strain", "Fracture", "Ligament tear", "Tendinitis",
                                           "Post-surgical", "Chronic pain", "Other"),
                           maps_to="population.injury_type"),
            DateQuestion(id="injury_date", prompt="When did the injury or diagnosis occur?",
                         maps_to="population.injury_date"),
            RadioQuestion(id="surgery", prompt="Did you have surgery?", required=True, options=YES_NO),
            DateQuestion(id="surgery_date", prompt="When was the surgery?", required=True,
                         condition=when("surgery", equals="Yes"), maps_to="population.surgery_date"),
        ),
        section(
            "current_status", "Current Status",
            NumberQuestion(id="pain_level", prompt="What is your current pain level at rest?", required=True,
                           min_value=0, max_value=10, step=1, maps_to="population.current_pain_level"),
            MultiSelectQuestion(id="current_treatment", prompt="What treatments are you currently receiving?",
                                options=options("None", "Physical therapy", "Chiropractic", "Massage",
                                                "Medication", "Other")),
            SelectQuestion(id="pt_frequency", prompt="If doing physical therapy, how often?",
                           options=options("Once a week", "Twice a week", "Three or more times a week"),
                           condition=when("current_treatment", includes="Physical therapy")),
            SelectQuestion(id="clearance_status",
                           prompt="What is your clearance status from your healthcare provider?", required=True,
                           options=options("Fully cleared", "Cleared with restrictions", "Not yet cleared",
                                           "Have not seen a provider"),
                           maps_to="population.clearance_status"),
            TextareaQuestion(id="restrictions", prompt="What restrictions has your provider given you?",
                             condition=when("clearance_status", includes="restrictions"),
                             maps_to="movement.mobility_limitations"),
        ),
    ),
)

DIETARY = ModuleDefinition(
    id="dietary",
    name="Dietary Preferences & Restrictions",
    description="Food preferences, allergies, and dietary patterns",
    category="lifestyle",
    priority=20,
    populations=ALL_POPULATIONS,
    required_for=ALL_POPULATIONS,
    sections=(
        section(
            "dietary_pattern", "Dietary Pattern",
            SelectQuestion(id="dietary_pattern", prompt="Do you follow any specific dietary pattern?",
                           required=True,
                           options=options("None", "Vegetarian", "Vegan", "Pescatarian", "Keto", "Paleo",
                                           "Mediterranean", "Low-carb", "Other"),
                           maps_to="dietary.pattern"),
            MultiSelectQuestion(id="cultural_preferences",
                                prompt="Do you have any cultural or religious dietary preferences?",
                                options=options("None", "Halal", "Kosher", "Hindu vegetarian", "Other"),
                                maps_to="dietary.cultural_preferences"),
        ),
        section(
            "allergies", "Allergies & Intolerances",
            MultiSelectQuestion(id="food_allergies", prompt="Do you have any food allergies?", required=True,
                                options=ALLERGENS, maps_to="dietary.allergies"),
            MultiSelectQuestion(id="intolerances", prompt="Do you have any food intolerances?",
                                options=options("None", "Lactose", "Gluten", "FODMAPs", "Other"),
                                maps_to="dietary.intolerances"),
            TextQuestion(id="disliked_foods", prompt="Are there foods you dislike or won't eat?",
                         maps_to="dietary.dislikes"),
        ),
    ),
)

LIFESTYLE = ModuleDefinition(
    id="lifestyle",
    name="Lifestyle Habits",
    description="Sleep, stress, hydration, and daily habits",
    category="lifestyle",
    priority=30,
    populations=ALL_POPULATIONS,
    required_for=everyone_except(P.ATHLETE),
    sections=(
        section(
            "sleep", "Sleep",
            NumberQuestion(id="sleep_hours", prompt="How many hours of sleep do you get per night on average?",
                           required=True, min_value=0, max_value=24, step=0.5, unit="hours",
                           maps_to="lifestyle.sleep_hours"),
            SelectQuestion(id="sleep_quality", prompt="How would you rate your sleep quality?", required=True,
                           options=options("Excellent", "Good", "Fair", "Poor"),
                           maps_to="lifestyle.sleep_quality"),
        ),
        section(
            "stress", "Stress",
            NumberQuestion(id="stress_level", prompt="On a scale of 0-10, what is your average stress level?",
                           required=True, min_value=0, max_value=10, step=1, maps_to="lifestyle.stress_level"),
            NumberQuestion(id="water_intake", prompt="How much water do you drink daily (in ounces)?",
                           min_value=0, max_value=300, unit="oz", maps_to="lifestyle.hydration"),
        ),
        section(
            "daily_habits", "Daily Habits",
            TextQuestion(id="occupation", prompt="What is your occupation or primary daily activity?",
                         maps_to="lifestyle.occupation"),
            RadioQuestion(id="smoking", prompt="Do you smoke or use tobacco products?", required=True,
                          options=options("Never", "Former smoker", "Occasionally", "Regularly"),
                          maps_to="lifestyle.smoking"),
            SelectQuestion(id="alcohol", prompt="How often do you consume alcohol?",
                           options=options("Never", "Rarely", "1-2 drinks per week", "3-7 drinks per week",
                                           "More than 7 drinks per week"),
                           maps_to="lifestyle.alcohol"),
        ),
    ),
)

MOVEMENT = ModuleDefinition(
    id="movement",
    name="Movement Readiness",
    description="Current fitness level, activity, and movement capabilities",
    category="lifestyle",
    priority=40,
    populations=ALL_POPULATIONS,
    required_for=only_for(P.ATHLETE),
    sections=(
        section(
            "current_activity", "Current Activity",
            SelectQuestion(id="exercise_frequency", prompt="How many days per week do you currently exercise?",
                           required=True, options=options("0", "1", "2", "3", "4", "5", "6", "7"),
                           maps_to="movement.exercise_frequency"),
            SelectQuestion(id="exercise_duration", prompt="How long is a typical exercise session?",
                           options=options("Under 20 minutes", "20-40 minutes", "40-60 minutes", "Over 60 minutes"),
                           condition=when("exercise_frequency", not_equals="0")),
            SelectQuestion(id="fitness_level", prompt="How would you rate your current fitness level?",
                           required=True, options=FITNESS_LEVELS, maps_to="movement.fitness_level"),
        ),
        section(
            "movement_quality", "Movement Quality",
            MultiSelectQuestion(id="pain_areas", prompt="Do you experience pain in any areas during movement?",
                                options=options("None", "Neck", "Shoulders", "Lower back", "Hips", "Knees",
                                                "Ankles", "Wrists"),
                                maps_to="movement.pain_areas"),
            SelectQuestion(id="primary_goal", prompt="What is your primary fitness goal?", required=True,
                           options=options("Lose weight", "Build muscle", "Improve endurance",
                                           "Improve flexibility", "General health", "Sport performance"),
                           maps_to="goals.primary"),
        ),
    ),
)

EQUIPMENT_MODULE = ModuleDefinition(
    id="equipment",
    name="Equipment & Environment",
    description="Available equipment and training environment",
    category="equipment",
    priority=50,
    populations=ALL_POPULATIONS,
    sections=(
        section(
            "training_location", "Training Location",
            SelectQuestion(id="primary_location", prompt="Where do you primarily plan to exercise?", required=True,
                           options=options("Home", "Gym", "Both", "Outdoor"), maps_to="equipment.location"),
            SelectQuestion(id="space_available", prompt="How much space do you have available for exercise?",
                           options=options("Very limited", "Small room", "Large room", "Unlimited"),
                           maps_to="equipment.space_constraints"),
        ),
        section(
            "available_equipment", "Available Equipment",
            MultiSelectQuestion(id="equipment_access", prompt="What equipment do you have access to?",
                                required=True, options=EQUIPMENT, maps_to="equipment.available"),
            SelectQuestion(id="equipment_weight_range", prompt="If you have dumbbells, what weight range?",
                           options=options("Up to 10 lbs", "10-25 lbs", "25-50 lbs", "Over 50 lbs"),
                           condition=when("equipment_access", includes="Dumbbells")),
        ),
    ),
)


DEFAULT_MODULES = (
    PREGNANCY,
    POSTPARTUM,
    OLDER_ADULT,
    ATHLETE,
    YOUTH,
    RECOVERY,
    DIETARY,
    LIFESTYLE,
    MOVEMENT,
    EQUIPMENT_MODULE,
)
