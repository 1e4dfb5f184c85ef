"""Read-only lookup table of assessment modules.

The registry is built once from a fixed list of module definitions and
has no mutation API afterwards. Every query is a pure function of that
list and the population passed in. Population lookups fail closed: an
unset or unknown population yields empty lists rather than an error,
because new clients have no population until an admin assigns one.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from ..models import Population
from .definitions import ModuleDefinition


def _ordering(module: ModuleDefinition) -> tuple[int, str]:
    # priority ascending, id breaks ties so ordering is stable
    return module.priority, module.id


class ModuleRegistry:
    """Holds every assessment module definition, keyed by id."""

    def __init__(self, modules: Iterable[ModuleDefinition] = ()) -> None:
        table: dict[str, ModuleDefinition] = {}
        for module in modules:
            if module.id in table:
                raise ValueError(f"Duplicate assessment module id {module.id!r}")
            table[module.id] = module
        self._modules = MappingProxyType(table)
        self._ordered = tuple(sorted(table.values(), key=_ordering))

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[ModuleDefinition]:
        return iter(self._ordered)

    def get_module(self, module_id: str) -> Optional[ModuleDefinition]:
        """Exact-match lookup; ``None`` when the id is unknown."""
        return self._modules.get(module_id)

    def all_modules(self) -> list[ModuleDefinition]:
        return list(self._ordered)

    @staticmethod
    def is_applicable(module: ModuleDefinition, population) -> bool:
        return module.is_applicable(population)

    def get_modules_for_population(self, population) -> list[ModuleDefinition]:
        """All modules a population may take, required or not."""
        resolved = Population.coerce(population)
        if resolved is None:
            return []
        return [module for module in self._ordered if module.is_applicable(resolved)]

    def get_required_modules(self, population) -> list[ModuleDefinition]:
        resolved = Population.coerce(population)
        if resolved is None:
            return []
        return [module for module in self._ordered if module.is_required_for(resolved)]

    def get_optional_modules(self, population) -> list[ModuleDefinition]:
        resolved = Population.coerce(population)
        if resolved is None:
            return []
        return [
            module
            for module in self._ordered
            if module.is_applicable(resolved) and not module.is_required_for(resolved)
        ]
