"""Path-based eligibility: nearest directory-scoped source and glob matches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from instruction_engine.diagnostics import Diagnostic, excluded_for_agent
from instruction_engine.errors import AmbiguousScopeConflictError
from instruction_engine.paths import is_ancestor, normalize_path, parent_segments
from instruction_engine.sources.models import InstructionSource, Scope, Tier

if TYPE_CHECKING:
    from collections.abc import Mapping

    from instruction_engine.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeResolution:
    """Sources made eligible by the target path."""

    nearest_by_tier: Mapping[Tier, InstructionSource] = field(
        default_factory=lambda: MappingProxyType({})
    )
    matched_path_specific: frozenset[InstructionSource] = frozenset()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def nearest_directory_scoped(self) -> InstructionSource | None:
        """Nearest repository-tier directory-scoped source, if any."""
        return self.nearest_by_tier.get(Tier.REPOSITORY)


class PathScopeResolver:
    """Determine which directory-scoped and path-specific sources apply to a path."""

    def __init__(self, registry: SourceRegistry) -> None:
        self.registry = registry
        self._directory_sources = registry.by_scope(Scope.DIRECTORY_SCOPED)
        self._path_sources = registry.by_scope(Scope.PATH_SPECIFIC)

    def resolve_scopes(self, target_path: str, agent_id: str) -> ScopeResolution:
        """Resolve nearest-wins directory sources and the union of glob matches."""
        diagnostics: list[Diagnostic] = []
        nearest = self._nearest_directory_sources(target_path, agent_id, diagnostics)
        matched = self._matching_path_sources(target_path, agent_id, diagnostics)
        return ScopeResolution(
            nearest_by_tier=MappingProxyType(nearest),
            matched_path_specific=frozenset(matched),
            diagnostics=tuple(diagnostics),
        )

    def _nearest_directory_sources(
        self, target_path: str, agent_id: str, diagnostics: list[Diagnostic]
    ) -> dict[Tier, InstructionSource]:
        directory = parent_segments(target_path)
        ancestors = [
            source
            for source in self._directory_sources
            if is_ancestor(source.origin_segments, directory)
        ]

        nearest: dict[Tier, InstructionSource] = {}
        for tier in Tier:
            in_tier = [source for source in ancestors if source.tier is tier]
            _check_unique_origins(in_tier)
            # Deepest first; an excluded source yields to the next ancestor up.
            for source in sorted(in_tier, key=lambda item: item.depth, reverse=True):
                if source.applies_to(agent_id):
                    nearest[tier] = source
                    logger.debug(
                        "Nearest %s directory source for %s is %s",
                        tier.value,
                        target_path,
                        source.id,
                    )
                    break
                diagnostics.append(excluded_for_agent(source.id, agent_id))
        return nearest

    def _matching_path_sources(
        self, target_path: str, agent_id: str, diagnostics: list[Diagnostic]
    ) -> list[InstructionSource]:
        normalized = normalize_path(target_path)
        matched: list[InstructionSource] = []
        for source in self._path_sources:
            if not self.registry.pattern_for(source.id).matches(normalized):
                continue
            if not source.applies_to(agent_id):
                diagnostics.append(excluded_for_agent(source.id, agent_id))
                continue
            matched.append(source)
        logger.debug("%d path-specific sources match %s", len(matched), target_path)
        return matched


def _check_unique_origins(sources: list[InstructionSource]) -> None:
    by_origin: dict[str, list[str]] = {}
    for source in sources:
        by_origin.setdefault(source.normalized_origin, []).append(source.id)
    for origin, source_ids in by_origin.items():
        if len(source_ids) > 1:
            raise AmbiguousScopeConflictError(origin, sorted(source_ids))
