"""
Serialization schemas using Marshmallow for the wellness portal.

Model schemas convert SQLAlchemy rows to JSON-friendly dictionaries;
sensitive fields such as password hashes are excluded. Module
definitions are plain dataclasses, so they get hand-written schemas that
read the attributes each question kind carries. Input schemas validate
request bodies before they reach the service layer.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from .assessments.definitions import is_answer_value
from .models import (
    ExerciseItem,
    NutritionItem,
    Packet,
    PacketStatus,
    PacketType,
    Population,
    Role,
    User,
)


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``User`` objects."""

    role = fields.Enum(Role, by_value=True)
    population = fields.Enum(Population, by_value=True, allow_none=True)

    class Meta:
        model = User
        include_fk = True
        # Exclude password_hash from the serialised output
        exclude = ("password_hash",)


def _string_list(**kwargs):
    return fields.List(fields.String(), load_default=list, **kwargs)


class ExerciseItemSchema(SQLAlchemyAutoSchema):
    """Schema for library exercises. Loads to a dict of column values."""

    name = auto_field(validate=validate.Length(min=1, max=120))
    description = auto_field(validate=validate.Length(max=500), allow_none=True)
    equipment = _string_list()
    populations = _string_list(validate=validate.ContainsOnly([p.value for p in Population]))
    contraindicated_for = _string_list(validate=validate.ContainsOnly([p.value for p in Population]))

    class Meta:
        model = ExerciseItem
        dump_only = ("id",)


class NutritionItemSchema(SQLAlchemyAutoSchema):
    """Schema for library foods. Loads to a dict of column values."""

    name = auto_field(validate=validate.Length(min=1, max=120))
    calories = auto_field(validate=validate.Range(min=0), allow_none=True)
    allergens = _string_list()
    populations = _string_list(validate=validate.ContainsOnly([p.value for p in Population]))
    contraindicated_for = _string_list(validate=validate.ContainsOnly([p.value for p in Population]))

    class Meta:
        model = NutritionItem
        dump_only = ("id",)


class PacketSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Packet`` objects."""

    packet_type = fields.Enum(PacketType, by_value=True)
    status = fields.Enum(PacketStatus, by_value=True)

    class Meta:
        model = Packet
        include_fk = True


class ConditionSchema(Schema):
    question_id = fields.String()
    op = fields.String()
    value = fields.Raw()


class QuestionSchema(Schema):
    """Schema for any question kind.

    Kind-specific attributes (``options``, ``min_value`` and so on) are
    only present on the kinds that define them and are omitted otherwise.
    """

    id = fields.String()
    kind = fields.String()
    prompt = fields.String()
    required = fields.Boolean()
    help_text = fields.String(allow_none=True)
    placeholder = fields.String(allow_none=True)
    condition = fields.Nested(ConditionSchema, allow_none=True)
    maps_to = fields.String(allow_none=True)
    options = fields.List(fields.String())
    min_value = fields.Float(allow_none=True)
    max_value = fields.Float(allow_none=True)
    step = fields.Float(allow_none=True)
    unit = fields.String(allow_none=True)


class SectionSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    condition = fields.Nested(ConditionSchema, allow_none=True)
    questions = fields.List(fields.Nested(QuestionSchema))


class ModuleSummarySchema(Schema):
    """Short form used by module listings."""

    id = fields.String()
    name = fields.String()
    description = fields.String()
    category = fields.String()
    priority = fields.Integer()


class ModuleDefinitionSchema(ModuleSummarySchema):
    """Full definition, including sections, used to render a module form."""

    sections = fields.List(fields.Nested(SectionSchema))
    populations = fields.Method("get_populations")
    required_for = fields.Method("get_required_for")

    def get_populations(self, module) -> list[str]:
        return sorted(population.value for population in module.populations)

    def get_required_for(self, module) -> list[str]:
        return sorted(population.value for population in module.required_for)


class AnswerValue(fields.Field):
    """Accepts only the answer value union: str, number, bool or list of str."""

    def _deserialize(self, value, attr, data, **kwargs):
        if not is_answer_value(value):
            raise ValidationError("Unsupported answer value.")
        return value


class ModuleSaveSchema(Schema):
    """Request body for saving a module's answers."""

    answers = fields.Dict(keys=fields.String(), values=AnswerValue(), required=True)
    completed = fields.Boolean(load_default=False)


class PopulationAssignSchema(Schema):
    population = fields.String(required=True, validate=validate.OneOf([p.value for p in Population]))
    notes = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))


class ClassifySchema(Schema):
    """Discovery-call answers used to suggest a population."""

    age = fields.Integer(load_default=None, allow_none=True, validate=validate.Range(min=0, max=120))
    is_athlete = fields.Boolean(load_default=False)
    is_youth = fields.Boolean(load_default=False)
    has_injury = fields.Boolean(load_default=False)
    is_pregnant = fields.Boolean(load_default=False)
    is_postpartum = fields.Boolean(load_default=False)
    has_chronic_condition = fields.Boolean(load_default=False)


class PacketRequestSchema(Schema):
    packet_type = fields.String(
        load_default=None, allow_none=True, validate=validate.OneOf([t.value for t in PacketType])
    )
