"""Boundary to the external collaborator that picks a skill for a task."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from instruction_engine.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkillCatalogEntry:
    """What a selector is allowed to see about one skill."""

    source_id: str
    name: str
    description: str
    size: int


class SkillSelector(Protocol):
    """Chooses at most one skill for a task description.

    Implementations are free to be nondeterministic; callers must not rely on
    the same task always producing the same choice.
    """

    def __call__(self, task_description: str, catalog: Sequence[SkillCatalogEntry]) -> str | None:
        """Return the source id of the chosen skill, or None."""
        ...


class StaticSkillSelector:
    """Select a skill by name, for callers that already know which one they want."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, task_description: str, catalog: Sequence[SkillCatalogEntry]) -> str | None:
        for entry in catalog:
            if entry.name == self.name:
                return entry.source_id
        return None


class SkillGate:
    """Expose the skill catalog to a selector and accept back one skill id."""

    def __init__(self, registry: SourceRegistry, selector: SkillSelector) -> None:
        self.registry = registry
        self.selector = selector

    def catalog(self) -> tuple[SkillCatalogEntry, ...]:
        """Return name, description and size for every registered skill."""
        return tuple(
            SkillCatalogEntry(
                source_id=source.id,
                name=source.name or source.id,
                description=source.description or "",
                size=source.size,
            )
            for source in self.registry.skills()
        )

    def select(self, task_description: str) -> str | None:
        """Ask the selector for a skill; ids outside the catalog are discarded."""
        catalog = self.catalog()
        if not catalog:
            return None
        chosen = self.selector(task_description, catalog)
        if chosen is None:
            return None
        if all(entry.source_id != chosen for entry in catalog):
            logger.warning("Skill selector returned unknown skill id '%s'", chosen)
            return None
        logger.debug("Skill selector chose %s", chosen)
        return chosen
