"""Modular assessment framework.

``module_registry`` is the process-wide registry of built-in modules.
It is created once at import time and never modified afterwards.
"""
from .catalog import DEFAULT_MODULES
from .definitions import (
    Condition,
    DateQuestion,
    ModuleDefinition,
    MultiSelectQuestion,
    NumberQuestion,
    Question,
    RadioQuestion,
    SectionDefinition,
    SelectQuestion,
    TextQuestion,
    TextareaQuestion,
)
from .registry import ModuleRegistry

module_registry = ModuleRegistry(DEFAULT_MODULES)

__all__ = [
    "Condition",
    "DateQuestion",
    "ModuleDefinition",
    "ModuleRegistry",
    "MultiSelectQuestion",
    "NumberQuestion",
    "Question",
    "RadioQuestion",
    "SectionDefinition",
    "SelectQuestion",
    "TextQuestion",
    "TextareaQuestion",
    "module_registry",
]
