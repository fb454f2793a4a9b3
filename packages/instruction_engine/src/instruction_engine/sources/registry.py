"""Immutable registry of instruction sources for one resolution session."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from instruction_engine.diagnostics import Diagnostic, DiagnosticCode
from instruction_engine.errors import DuplicateSourceIdError, InvalidGlobPatternError
from instruction_engine.globs import GlobPattern, compile_glob
from instruction_engine.paths import normalize_path
from instruction_engine.sources.models import InstructionSource, Scope, Tier

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


def _malformed_reason(source: InstructionSource) -> str | None:
    if source.size < 0:
        return "size must not be negative"
    if source.scope is Scope.PATH_SPECIFIC and not source.match_pattern:
        return "path-specific source has no match pattern"
    if source.scope is not Scope.PATH_SPECIFIC and source.match_pattern is not None:
        return f"{source.scope.value} source must not declare a match pattern"
    try:
        normalize_path(source.origin_path)
    except ValueError as exc:
        return str(exc)
    return None


class SourceRegistry:
    """Read-only snapshot of every known instruction source.

    Sources are validated once at construction. Duplicate ids are fatal; malformed
    sources and unparseable match patterns are excluded and kept as diagnostics.
    Diagnostics passed in, such as loader warnings, are kept ahead of these.
    Nothing is mutated afterwards, so one registry can serve concurrent resolutions.
    """

    def __init__(
        self,
        sources: Iterable[InstructionSource],
        diagnostics: Iterable[Diagnostic] = (),
    ) -> None:
        seen: set[str] = set()
        accepted: list[InstructionSource] = []
        patterns: dict[str, GlobPattern] = {}
        recorded: list[Diagnostic] = list(diagnostics)

        for source in sources:
            if source.id in seen:
                raise DuplicateSourceIdError(source.id)
            seen.add(source.id)

            reason = _malformed_reason(source)
            if reason:
                logger.warning("Ignoring malformed source %s: %s", source.id, reason)
                recorded.append(
                    Diagnostic(DiagnosticCode.MALFORMED_SOURCE, reason, source_id=source.id)
                )
                continue

            if source.scope is Scope.PATH_SPECIFIC and source.match_pattern is not None:
                try:
                    patterns[source.id] = compile_glob(source.match_pattern)
                except InvalidGlobPatternError as exc:
                    logger.warning("Ignoring source %s: %s", source.id, exc)
                    recorded.append(
                        Diagnostic(DiagnosticCode.INVALID_GLOB_PATTERN, str(exc), source.id)
                    )
                    continue

            accepted.append(source)

        self._sources = tuple(accepted)
        self._by_id = MappingProxyType({source.id: source for source in accepted})
        self._patterns = MappingProxyType(patterns)
        self._diagnostics = tuple(recorded)
        logger.debug(
            "Built source registry with %d sources (%d diagnostics)",
            len(self._sources),
            len(self._diagnostics),
        )

    def __iter__(self) -> Iterator[InstructionSource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._by_id

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Diagnostics recorded while building the registry."""
        return self._diagnostics

    def get(self, source_id: str) -> InstructionSource | None:
        """Return a source by id, or None if it is unknown."""
        return self._by_id.get(source_id)

    def by_scope(self, scope: Scope) -> tuple[InstructionSource, ...]:
        """Return every source of a scope in registration order."""
        return tuple(source for source in self._sources if source.scope is scope)

    def by_tier(self, tier: Tier) -> tuple[InstructionSource, ...]:
        """Return every source of a tier in registration order."""
        return tuple(source for source in self._sources if source.tier is tier)

    def skills(self) -> tuple[InstructionSource, ...]:
        return self.by_scope(Scope.SKILL)

    def pattern_for(self, source_id: str) -> GlobPattern:
        """Return the compiled match pattern of a path-specific source."""
        return self._patterns[source_id]
