"""Resolution result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from instruction_engine.diagnostics import Diagnostic


@dataclass(frozen=True)
class ResolutionEntry:
    """Outcome for one candidate source, in candidate order."""

    source_id: str
    included: bool
    truncated: bool
    size: int = 0


@dataclass(frozen=True)
class ResolutionResult:
    """Assembled context for one resolution request."""

    entries: tuple[ResolutionEntry, ...]
    content: str
    budget_limit: int
    total_size: int
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def included_ids(self) -> tuple[str, ...]:
        return tuple(entry.source_id for entry in self.entries if entry.included)

    @property
    def dropped_ids(self) -> tuple[str, ...]:
        return tuple(entry.source_id for entry in self.entries if not entry.included)

    def with_diagnostics(self, diagnostics: tuple[Diagnostic, ...]) -> ResolutionResult:
        """Return a copy with extra diagnostics placed ahead of the allocator's."""
        if not diagnostics:
            return self
        return ResolutionResult(
            entries=self.entries,
            content=self.content,
            budget_limit=self.budget_limit,
            total_size=self.total_size,
            diagnostics=(*diagnostics, *self.diagnostics),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result to a JSON-compatible dict."""
        return {
            "entries": [
                {
                    "source_id": entry.source_id,
                    "included": entry.included,
                    "truncated": entry.truncated,
                    "size": entry.size,
                }
                for entry in self.entries
            ],
            "content": self.content,
            "budget_limit": self.budget_limit,
            "total_size": self.total_size,
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }
