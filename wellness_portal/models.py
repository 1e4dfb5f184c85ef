"""
Database models for the wellness portal.

Users are either clients or admins. Clients carry an optional
``population`` tag that decides which assessment modules they must
complete. Each answered module is stored as one ``AssessmentRecord`` per
(user, module) pair whose JSON payload is merged on every save. Library
tables hold the exercise and nutrition content that packets are
assembled from, and ``Packet`` stores the generated payloads.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional, List

from werkzeug.security import generate_password_hash, check_password_hash

from . import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(enum.Enum):
    """Enumeration of user roles."""
    CLIENT = "client"
    ADMIN = "admin"


class Population(enum.Enum):
    """Client classification driving which assessment modules apply."""
    GENERAL = "general"
    ATHLETE = "athlete"
    YOUTH = "youth"
    RECOVERY = "recovery"
    PREGNANCY = "pregnancy"
    POSTPARTUM = "postpartum"
    OLDER_ADULT = "older-adult"
    CHRONIC_CONDITION = "chronic-condition"

    @classmethod
    def coerce(cls, value) -> Optional["Population"]:
        """Return the matching member for ``value`` or ``None``.

        Accepts a member, its value (``"older-adult"``) or its name
        (``"OLDER_ADULT"``, any case). Anything else, including ``None``,
        yields ``None``.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        text = value.strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        return cls.__members__.get(text.upper().replace("-", "_"))


class PacketType(enum.Enum):
    GENERAL = "general"
    NUTRITION = "nutrition"
    TRAINING = "training"
    ATHLETE_PERFORMANCE = "athlete-performance"
    YOUTH = "youth"
    RECOVERY = "recovery"
    PREGNANCY = "pregnancy"
    POSTPARTUM = "postpartum"
    OLDER_ADULT = "older-adult"


class PacketStatus(enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class User(db.Model):
    __allow_unmapped__ = True  # allow unmapped type annotations for SQLAlchemy 2.0
    """A user of the portal.

    Passwords are stored as salted hashes. ``population`` stays empty
    until an admin classifies the client after the discovery call.
    """
    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    first_name: str = db.Column(db.String(50), nullable=False)
    last_name: str = db.Column(db.String(50), nullable=False)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: Role = db.Column(db.Enum(Role), default=Role.CLIENT, nullable=False)
    population: Optional[Population] = db.Column(db.Enum(Population), nullable=True)
    # Profile-level completion marker, independent of per-module flags
    profile_completed_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=_utcnow)

    assessments: List[AssessmentRecord] = db.relationship(
        "AssessmentRecord", back_populates="user", cascade="all, delete-orphan"
    )
    packets: List[Packet] = db.relationship("Packet", back_populates="user", cascade="all, delete-orphan")

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"


class AssessmentRecord(db.Model):
    __allow_unmapped__ = True
    """Answers a user has saved for one assessment module."""
    __tablename__ = "assessment_records"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    module_id: str = db.Column(db.String(64), nullable=False)
    data: dict = db.Column(db.JSON, nullable=False, default=dict)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    user: User = db.relationship("User", back_populates="assessments")

    # One record per user per module
    __table_args__ = (
        db.UniqueConstraint("user_id", "module_id", name="uix_user_module"),
    )

    def __repr__(self) -> str:
        return f"<AssessmentRecord user={self.user_id} module={self.module_id} completed={self.completed}>"


class ExerciseItem(db.Model):
    __allow_unmapped__ = True
    """An exercise in the content library."""
    __tablename__ = "exercise_items"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(120), unique=True, nullable=False)
    description: Optional[str] = db.Column(db.String(500))
    category: str = db.Column(db.String(50), nullable=False)
    difficulty: str = db.Column(db.String(30), nullable=False, default="Beginner")
    instructions: Optional[str] = db.Column(db.Text)
    # Lists of equipment names; empty means body weight only
    equipment: list = db.Column(db.JSON, nullable=False, default=list)
    # Lists of population values
    populations: list = db.Column(db.JSON, nullable=False, default=list)
    contraindicated_for: list = db.Column(db.JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<ExerciseItem {self.name}>"


class NutritionItem(db.Model):
    __allow_unmapped__ = True
    """A food or meal in the content library."""
    __tablename__ = "nutrition_items"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(120), unique=True, nullable=False)
    category: str = db.Column(db.String(50), nullable=False)
    serving_size: Optional[str] = db.Column(db.String(50))
    calories: Optional[int] = db.Column(db.Integer)
    protein: Optional[float] = db.Column(db.Float)
    carbs: Optional[float] = db.Column(db.Float)
    fats: Optional[float] = db.Column(db.Float)
    allergens: list = db.Column(db.JSON, nullable=False, default=list)
    populations: list = db.Column(db.JSON, nullable=False, default=list)
    contraindicated_for: list = db.Column(db.JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<NutritionItem {self.name}>"


class Packet(db.Model):
    __allow_unmapped__ = True
    """A generated client packet. ``data`` is the assembled payload."""
    __tablename__ = "packets"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    packet_type: PacketType = db.Column(db.Enum(PacketType), nullable=False)
    status: PacketStatus = db.Column(db.Enum(PacketStatus), nullable=False, default=PacketStatus.DRAFT)
    version: int = db.Column(db.Integer, nullable=False, default=1)
    data: dict = db.Column(db.JSON, nullable=False, default=dict)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=_utcnow)
    published_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)

    user: User = db.relationship("User", back_populates="packets")

    def __repr__(self) -> str:
        return f"<Packet {self.id} {self.packet_type.value} ({self.status.value})>"
