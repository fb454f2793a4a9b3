"""Non-fatal diagnostics attached to registries and resolution results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiagnosticCode(str, Enum):
    """Kind of non-fatal outcome recorded during construction or resolution."""

    DROPPED_FOR_BUDGET = "DroppedForBudget"
    SOURCE_EXCEEDS_BUDGET = "SourceExceedsBudget"
    SKILL_TRUNCATED = "SkillTruncated"
    SIZE_MISMATCH = "SizeMismatch"
    INVALID_GLOB_PATTERN = "InvalidGlobPattern"
    MALFORMED_SOURCE = "MalformedSource"
    EXCLUDED_FOR_AGENT = "ExcludedForAgent"
    UNKNOWN_SKILL = "UnknownSkill"


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message, optionally tied to a source."""

    code: DiagnosticCode
    message: str
    source_id: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Serialize the diagnostic to a JSON-compatible dict."""
        return {"code": self.code.value, "message": self.message, "source_id": self.source_id}


def excluded_for_agent(source_id: str, agent_id: str) -> Diagnostic:
    """Diagnostic for a source skipped because it excludes the requesting agent."""
    return Diagnostic(
        DiagnosticCode.EXCLUDED_FOR_AGENT,
        f"Source excludes agent '{agent_id}'",
        source_id,
    )
