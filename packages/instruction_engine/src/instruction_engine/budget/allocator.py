"""Budget allocation over an ordered candidate list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from instruction_engine.budget.models import ResolutionEntry, ResolutionResult
from instruction_engine.budget.sizing import LineMeter, SizeMeter
from instruction_engine.diagnostics import Diagnostic, DiagnosticCode
from instruction_engine.sources.models import Scope

if TYPE_CHECKING:
    from collections.abc import Sequence

    from instruction_engine.budget.sizing import TruncationResult
    from instruction_engine.sources.models import InstructionSource

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "\n\n"


class BudgetAllocator:
    """Select candidate content that fits a size budget.

    Candidates are walked once in priority order. Each one is included whole while
    it fits; the first one that does not fit closes the budget and every later
    candidate is dropped, so the included set only grows as the budget grows.
    Skill content is the only scope that may be cut down to the remaining space.
    """

    def __init__(self, meter: SizeMeter | None = None, separator: str = DEFAULT_SEPARATOR) -> None:
        self.meter = meter or LineMeter()
        self.separator = separator

    def allocate(
        self, candidates: Sequence[InstructionSource], budget_limit: int
    ) -> ResolutionResult:
        """Assemble the candidates that fit within budget_limit."""
        if budget_limit < 0:
            msg = f"budget_limit must not be negative, got {budget_limit}"
            raise ValueError(msg)

        entries: list[ResolutionEntry] = []
        parts: list[str] = []
        diagnostics: list[Diagnostic] = []
        running = 0
        closed = False

        for source in candidates:
            if not closed and running + source.size <= budget_limit:
                running += source.size
                parts.append(source.content)
                entries.append(ResolutionEntry(source.id, True, False, source.size))
                continue

            remaining = budget_limit - running
            if not closed and source.scope is Scope.SKILL and remaining > 0:
                cut = self.meter.truncate(source.content, remaining)
                running += cut.truncated_size
                parts.append(cut.text)
                entries.append(ResolutionEntry(source.id, True, cut.truncated, cut.truncated_size))
                diagnostics.append(self._skill_diagnostic(source, cut))
                closed = True
                continue

            entries.append(ResolutionEntry(source.id, False, False, 0))
            diagnostics.append(self._drop_diagnostic(source, budget_limit, remaining, closed))
            closed = True

        if closed:
            logger.info(
                "Budget of %d %s exhausted: %d of %d sources included",
                budget_limit,
                self.meter.unit,
                sum(1 for entry in entries if entry.included),
                len(entries),
            )

        return ResolutionResult(
            entries=tuple(entries),
            content=self.separator.join(part for part in parts if part),
            budget_limit=budget_limit,
            total_size=running,
            diagnostics=tuple(diagnostics),
        )

    def _drop_diagnostic(
        self, source: InstructionSource, budget_limit: int, remaining: int, closed: bool
    ) -> Diagnostic:
        unit = self.meter.unit
        if source.size > budget_limit:
            logger.debug("Source %s exceeds the whole budget", source.id)
            return Diagnostic(
                DiagnosticCode.SOURCE_EXCEEDS_BUDGET,
                f"Source size {source.size} {unit} exceeds the budget of {budget_limit} {unit}",
                source.id,
            )
        if closed:
            message = "Dropped because the budget closed at a higher-priority source"
        else:
            message = f"Source size {source.size} {unit} exceeds the remaining {remaining} {unit}"
        logger.debug("Dropped source %s for budget", source.id)
        return Diagnostic(DiagnosticCode.DROPPED_FOR_BUDGET, message, source.id)

    def _skill_diagnostic(self, source: InstructionSource, cut: TruncationResult) -> Diagnostic:
        unit = self.meter.unit
        if cut.truncated:
            logger.debug("Truncated skill %s to %d %s", source.id, cut.truncated_size, unit)
            return Diagnostic(
                DiagnosticCode.SKILL_TRUNCATED,
                f"Skill truncated from {source.size} to {cut.truncated_size} {unit} "
                "to fit the budget",
                source.id,
            )
        # Declared size missed but the measured content fits; the budget still closes.
        logger.warning(
            "Skill %s declares %d %s but measures %d",
            source.id,
            source.size,
            unit,
            cut.original_size,
        )
        return Diagnostic(
            DiagnosticCode.SIZE_MISMATCH,
            f"Skill declares {source.size} {unit} but its content measures "
            f"{cut.original_size} {unit}; included whole and the budget closed after it",
            source.id,
        )
