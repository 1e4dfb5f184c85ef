"""Declarative building blocks for assessment modules.

A module is a named set of sections, each holding an ordered list of
questions. Every question kind is its own frozen dataclass with a
``kind`` discriminator, so the fields a kind needs (``options`` for the
choice kinds, bounds for numbers) are checked when the definition is
built rather than when a form is rendered.

Answers travel as a flat ``dict`` mapping question ids to a small value
union: ``str``, ``int``, finite ``float``, ``bool`` or a list of ``str``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional

from dateutil.parser import parse as parse_date  # type: ignore

from ..models import Population

ALL_POPULATIONS = frozenset(Population)

MODULE_CATEGORIES = ("core", "population", "lifestyle", "medical", "equipment")


def is_answer_value(value: Any) -> bool:
    """Return True if ``value`` belongs to the answer value union."""
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, list):
        return all(isinstance(item, str) for item in value)
    return False


def is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


@dataclass(frozen=True)
class Condition:
    """Visibility predicate over previously answered values.

    ``equals`` and ``not_equals`` compare the stored answer. ``includes``
    tests list membership, or substring containment for text answers. An
    unanswered question never ``equals`` or ``includes`` anything and is
    always ``not_equals``.
    """

    OPERATORS: ClassVar[tuple[str, ...]] = ("equals", "not_equals", "includes")

    question_id: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in self.OPERATORS:
            raise ValueError(f"Unknown condition operator {self.op!r}")

    def evaluate(self, answers: Mapping[str, Any]) -> bool:
        current = answers.get(self.question_id)
        if self.op == "equals":
            return current is not None and current == self.value
        if self.op == "not_equals":
            return current != self.value
        if isinstance(current, list):
            return self.value in current
        if isinstance(current, str):
            return str(self.value) in current
        return False


def when(question_id: str, *, equals: Any = None, not_equals: Any = None, includes: Any = None) -> Condition:
    """Shorthand used by the catalogue: ``when("surgery", equals="Yes")``."""
    if equals is not None:
        return Condition(question_id, "equals", equals)
    if not_equals is not None:
        return Condition(question_id, "not_equals", not_equals)
    if includes is not None:
        return Condition(question_id, "includes", includes)
    raise ValueError("when() needs one of equals, not_equals or includes")


@dataclass(frozen=True, kw_only=True)
class Question:
    """Fields shared by every question kind."""

    kind: ClassVar[str] = ""

    id: str
    prompt: str
    required: bool = False
    help_text: Optional[str] = None
    placeholder: Optional[str] = None
    condition: Optional[Condition] = None
    # Dotted path into the unified profile attributes, e.g. "dietary.allergies"
    maps_to: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Question id must not be empty")

    def is_visible(self, answers: Mapping[str, Any]) -> bool:
        return self.condition is None or self.condition.evaluate(answers)

    def check_value(self, value: Any) -> Optional[str]:
        """Return an error message if ``value`` is unacceptable, else None."""
        if not isinstance(value, str):
            return "Expected a text answer"
        return None


@dataclass(frozen=True, kw_only=True)
class TextQuestion(Question):
    kind: ClassVar[str] = "text"


@dataclass(frozen=True, kw_only=True)
class TextareaQuestion(Question):
    kind: ClassVar[str] = "textarea"


@dataclass(frozen=True, kw_only=True)
class DateQuestion(Question):
    kind: ClassVar[str] = "date"

    def check_value(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return "Expected a date"
        try:
            parse_date(value)
        except (ValueError, OverflowError):
            return "Invalid date. Use ISO format YYYY-MM-DD."
        return None


@dataclass(frozen=True, kw_only=True)
class NumberQuestion(Question):
    kind: ClassVar[str] = "number"

    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None
    unit: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError(f"Question {self.id}: min_value exceeds max_value")

    def check_value(self, value: Any) -> Optional[str]:
        # bool is an int subclass; a checkbox value is not a number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return "Expected a number"
        # NaN compares false against both bounds
        if isinstance(value, float) and not math.isfinite(value):
            return "Expected a finite number"
        if self.min_value is not None and value < self.min_value:
            return f"Must be at least {self.min_value:g}"
        if self.max_value is not None and value > self.max_value:
            return f"Must be at most {self.max_value:g}"
        return None


@dataclass(frozen=True, kw_only=True)
class ChoiceQuestion(Question):
    """Base for kinds that pick from a fixed option list."""

    options: tuple[str, ...]

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.options:
            raise ValueError(f"Question {self.id}: {self.kind} questions need options")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"Question {self.id}: duplicate options")

    def check_value(self, value: Any) -> Optional[str]:
        if value not in self.options:
            return "Not one of the available options"
        return None


@dataclass(frozen=True, kw_only=True)
class SelectQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "select"


@dataclass(frozen=True, kw_only=True)
class RadioQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "radio"


@dataclass(frozen=True, kw_only=True)
class MultiSelectQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "multi-select"

    def check_value(self, value: Any) -> Optional[str]:
        if not isinstance(value, list):
            return "Expected a list of options"
        unknown = [item for item in value if item not in self.options]
        if unknown:
            return f"Unknown options: {', '.join(map(str, unknown))}"
        return None


@dataclass(frozen=True)
class SectionDefinition:
    id: str
    title: str
    questions: tuple[Question, ...]
    description: Optional[str] = None
    condition: Optional[Condition] = None

    def is_visible(self, answers: Mapping[str, Any]) -> bool:
        return self.condition is None or self.condition.evaluate(answers)


@dataclass(frozen=True)
class ModuleDefinition:
    """One self-contained assessment.

    ``populations`` lists who may take the module at all;
    ``required_for`` lists who must. The two are kept separate so a
    module can be optional for populations it is not required for.
    """

    id: str
    name: str
    description: str
    category: str
    priority: int
    sections: tuple[SectionDefinition, ...]
    populations: frozenset = ALL_POPULATIONS
    required_for: frozenset = frozenset()
    _questions: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Module id must not be empty")
        if self.category not in MODULE_CATEGORIES:
            raise ValueError(f"Module {self.id}: unknown category {self.category!r}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "populations", frozenset(self.populations))
        object.__setattr__(self, "required_for", frozenset(self.required_for))
        if not self.required_for <= self.populations:
            raise ValueError(f"Module {self.id}: required_for must be a subset of populations")

        section_ids = [section.id for section in self.sections]
        if len(set(section_ids)) != len(section_ids):
            raise ValueError(f"Module {self.id}: duplicate section ids")
        questions: dict[str, Question] = {}
        for section in self.sections:
            for question in section.questions:
                if question.id in questions:
                    raise ValueError(f"Module {self.id}: duplicate question id {question.id!r}")
                questions[question.id] = question
        object.__setattr__(self, "_questions", questions)

    @property
    def questions(self) -> Mapping[str, Question]:
        return dict(self._questions)

    def get_question(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def is_applicable(self, population) -> bool:
        return Population.coerce(population) in self.populations

    def is_required_for(self, population) -> bool:
        return Population.coerce(population) in self.required_for

    def get_active_sections(self, answers: Mapping[str, Any]) -> list[SectionDefinition]:
        return [section for section in self.sections if section.is_visible(answers)]

    def check_values(self, answers: Mapping[str, Any]) -> dict[str, str]:
        """Type-check the answers that belong to known questions.

        Unknown keys are ignored; blank values are allowed so a partial
        save can clear a field.
        """
        errors: dict[str, str] = {}
        for key, value in answers.items():
            question = self._questions.get(key)
            if question is None or is_blank(value):
                continue
            message = question.check_value(value)
            if message:
                errors[key] = message
        return errors

    def validate(self, answers: Mapping[str, Any]) -> dict[str, str]:
        """Full validation used when a module is completed.

        Hidden sections and questions are skipped. Returns a mapping of
        question id to error message; empty when the answers are valid.
        """
        errors: dict[str, str] = {}
        for section in self.get_active_sections(answers):
            for question in section.questions:
                if not question.is_visible(answers):
                    continue
                value = answers.get(question.id)
                if is_blank(value):
                    if question.required:
                        errors[question.id] = f"{question.prompt} is required"
                    continue
                message = question.check_value(value)
                if message:
                    errors[question.id] = message
        return errors

    def extract_attributes(self, answers: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        """Project answered questions with ``maps_to`` into profile attributes."""
        attributes: dict[str, dict[str, Any]] = {}
        for question in self._questions.values():
            if not question.maps_to or is_blank(answers.get(question.id)):
                continue
            group, _, name = question.maps_to.partition(".")
            attributes.setdefault(group, {})[name or question.id] = answers[question.id]
        return attributes


def only_for(*members: Population) -> frozenset:
    return frozenset(members)


def everyone_except(*members: Population) -> frozenset:
    return ALL_POPULATIONS - frozenset(members)


def section(id: str, title: str, *questions: Question, description: str | None = None,
            condition: Condition | None = None) -> SectionDefinition:
    return SectionDefinition(id=id, title=title, questions=tuple(questions),
                             description=description, condition=condition)


def options(*values: str) -> tuple[str, ...]:
    return tuple(values)

