"""Instruction source models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from instruction_engine.paths import normalize_path, path_segments


class Scope(str, Enum):
    """Where and how a source is eligible."""

    REPOSITORY_WIDE = "repository-wide"
    DIRECTORY_SCOPED = "directory-scoped"
    PATH_SPECIFIC = "path-specific"
    SKILL = "skill"


class Tier(str, Enum):
    """Authorship tier of a source."""

    PERSONAL = "personal"
    REPOSITORY = "repository"
    ORGANIZATION = "organization"


@dataclass(frozen=True)
class InstructionSource:
    """A named unit of instruction content with scope and tier metadata."""

    id: str
    scope: Scope
    content: str
    size: int
    origin_path: str = ""
    tier: Tier = Tier.REPOSITORY
    match_pattern: str | None = None
    excluded_agents: frozenset[str] = field(default_factory=frozenset)
    name: str | None = None
    description: str | None = None

    @property
    def normalized_origin(self) -> str:
        """Repository-relative origin path without leading or trailing slashes."""
        return normalize_path(self.origin_path)

    @property
    def origin_segments(self) -> tuple[str, ...]:
        return path_segments(self.origin_path)

    @property
    def depth(self) -> int:
        """Nesting depth of the origin path; the repository root is 0."""
        return len(self.origin_segments)

    def applies_to(self, agent_id: str) -> bool:
        """Return False if the agent is excluded from this source."""
        return agent_id not in self.excluded_agents
