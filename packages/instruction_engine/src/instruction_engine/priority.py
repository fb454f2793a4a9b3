"""Tier-aware ordering of eligible sources into one candidate list."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from operator import attrgetter
from typing import TYPE_CHECKING

from instruction_engine.globs import pattern_specificity
from instruction_engine.sources.models import InstructionSource, Scope, Tier

if TYPE_CHECKING:
    from instruction_engine.scoping import ScopeResolution

TierOf = Callable[[InstructionSource], Tier]
Specificity = Callable[[InstructionSource], int]

_SCOPE_ORDER = {
    Scope.DIRECTORY_SCOPED: 0,
    Scope.PATH_SPECIFIC: 1,
    Scope.SKILL: 2,
    Scope.REPOSITORY_WIDE: 3,
}


def _default_specificity(source: InstructionSource) -> int:
    return pattern_specificity(source.match_pattern) if source.match_pattern else 0


def _nearest_directory_only(sources: list[InstructionSource]) -> list[InstructionSource]:
    """Keep the deepest directory-scoped source of a bracket and every other scope."""
    directory = [item for item in sources if item.scope is Scope.DIRECTORY_SCOPED]
    if len(directory) < 2:
        return sources
    nearest = min(directory, key=lambda item: (-item.depth, item.id))
    return [
        item for item in sources if item.scope is not Scope.DIRECTORY_SCOPED or item is nearest
    ]


class TierPriorityMerger:
    """Merge scope results and tiers into a priority-ordered candidate list.

    Highest priority first:

    1. personal tier, any scope, deeper origin first
    2. nearest repository directory-scoped source
    3. repository path-specific sources, fewer wildcard segments first, then id
    4. the active skill, if any
    5. repository-wide sources
    6. organization tier, ordered like the repository bracket

    Each bracket keeps only its deepest directory-scoped source, also when a custom
    ``tier_of`` moves sources between brackets.
    """

    def __init__(
        self, tier_of: TierOf | None = None, specificity: Specificity | None = None
    ) -> None:
        self.tier_of: TierOf = tier_of or attrgetter("tier")
        self.specificity: Specificity = specificity or _default_specificity

    def merge(
        self,
        scopes: ScopeResolution,
        repository_wide: Sequence[InstructionSource],
        skill: InstructionSource | None = None,
    ) -> tuple[InstructionSource, ...]:
        """Return eligible sources ordered from highest to lowest priority."""
        pool: list[InstructionSource] = [
            *scopes.nearest_by_tier.values(),
            *scopes.matched_path_specific,
            *repository_wide,
        ]
        brackets: dict[Tier, list[InstructionSource]] = {tier: [] for tier in Tier}
        for source in pool:
            brackets[self.tier_of(source)].append(source)

        personal = sorted(
            _nearest_directory_only(brackets[Tier.PERSONAL]),
            key=lambda item: (-item.depth, _SCOPE_ORDER[item.scope], self._path_key(item)),
        )
        candidates = (
            *personal,
            *self._bracket(brackets[Tier.REPOSITORY]),
            *self._bracket(brackets[Tier.ORGANIZATION]),
        )
        if skill is None:
            return candidates
        return self.inject_skill(candidates, skill)

    def inject_skill(
        self, candidates: Sequence[InstructionSource], skill: InstructionSource
    ) -> tuple[InstructionSource, ...]:
        """Insert a skill between repository path-specific and repository-wide sources."""
        remaining = [source for source in candidates if source.scope is not Scope.SKILL]
        index = len(remaining)
        for position, source in enumerate(remaining):
            tier = self.tier_of(source)
            if tier is Tier.ORGANIZATION or (
                tier is Tier.REPOSITORY and source.scope is Scope.REPOSITORY_WIDE
            ):
                index = position
                break
        return (*remaining[:index], skill, *remaining[index:])

    def _bracket(self, sources: list[InstructionSource]) -> list[InstructionSource]:
        sources = _nearest_directory_only(sources)
        directory = [item for item in sources if item.scope is Scope.DIRECTORY_SCOPED]
        path_specific = [item for item in sources if item.scope is Scope.PATH_SPECIFIC]
        repository_wide = [item for item in sources if item.scope is Scope.REPOSITORY_WIDE]
        return [
            *directory,
            *sorted(path_specific, key=self._path_key),
            *sorted(repository_wide, key=attrgetter("id")),
        ]

    def _path_key(self, source: InstructionSource) -> tuple[int, str]:
        if source.scope is Scope.PATH_SPECIFIC:
            return (self.specificity(source), source.id)
        return (0, source.id)
