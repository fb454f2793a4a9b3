"""Budget allocation, sizing, and resolution results."""

from instruction_engine.budget.allocator import BudgetAllocator
from instruction_engine.budget.models import ResolutionEntry, ResolutionResult
from instruction_engine.budget.sizing import (
    LineMeter,
    SizeMeter,
    TokenMeter,
    TruncationResult,
    estimate_tokens,
    meter_for_unit,
)

__all__ = [
    "BudgetAllocator",
    "LineMeter",
    "ResolutionEntry",
    "ResolutionResult",
    "SizeMeter",
    "TokenMeter",
    "TruncationResult",
    "estimate_tokens",
    "meter_for_unit",
]
