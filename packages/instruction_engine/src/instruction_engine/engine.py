"""Resolution facade: registry to assembled, budgeted context."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from instruction_engine.budget.allocator import DEFAULT_SEPARATOR, BudgetAllocator
from instruction_engine.diagnostics import Diagnostic, DiagnosticCode, excluded_for_agent
from instruction_engine.logging_utils import resolution_scope
from instruction_engine.priority import TierPriorityMerger
from instruction_engine.scoping import PathScopeResolver
from instruction_engine.sources.models import InstructionSource, Scope

if TYPE_CHECKING:
    from instruction_engine.budget.models import ResolutionResult
    from instruction_engine.budget.sizing import SizeMeter
    from instruction_engine.config.settings import Settings
    from instruction_engine.skills.gate import SkillGate
    from instruction_engine.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionRequest:
    """A single query against a registry snapshot."""

    target_path: str
    agent_id: str
    budget_limit: int
    active_skill: str | None = None

    @classmethod
    def from_settings(
        cls, target_path: str, settings: Settings, active_skill: str | None = None
    ) -> ResolutionRequest:
        """Build a request using the configured agent id and budget."""
        return cls(
            target_path=target_path,
            agent_id=settings.agent_id,
            budget_limit=settings.budget_limit,
            active_skill=active_skill,
        )


class InstructionResolver:
    """Resolve, order, and budget the instruction sources that apply to a file.

    One resolver wraps one registry snapshot and holds no per-request state, so
    it may serve concurrent requests. Build a new registry to observe changed files.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        meter: SizeMeter | None = None,
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        self.registry = registry
        self.scope_resolver = PathScopeResolver(registry)
        self.merger = TierPriorityMerger(
            specificity=lambda source: registry.pattern_for(source.id).wildcard_segments
        )
        self.allocator = BudgetAllocator(meter=meter, separator=separator)

    @classmethod
    def from_settings(cls, registry: SourceRegistry, settings: Settings) -> InstructionResolver:
        """Build a resolver using the configured size unit and separator."""
        return cls(registry, meter=settings.meter(), separator=settings.separator)

    def resolve(
        self,
        target_path: str,
        agent_id: str,
        budget_limit: int,
        active_skill: str | None = None,
    ) -> ResolutionResult:
        """Return the budgeted context for a target path and agent."""
        return self.resolve_request(
            ResolutionRequest(
                target_path=target_path,
                agent_id=agent_id,
                budget_limit=budget_limit,
                active_skill=active_skill,
            )
        )

    def resolve_request(self, request: ResolutionRequest) -> ResolutionResult:
        """Run scope resolution, priority merge, skill injection, and allocation."""
        with resolution_scope(request.target_path, request.agent_id):
            diagnostics: list[Diagnostic] = list(self.registry.diagnostics)

            scopes = self.scope_resolver.resolve_scopes(request.target_path, request.agent_id)
            diagnostics.extend(scopes.diagnostics)

            repository_wide: list[InstructionSource] = []
            for source in self.registry.by_scope(Scope.REPOSITORY_WIDE):
                if source.applies_to(request.agent_id):
                    repository_wide.append(source)
                else:
                    diagnostics.append(excluded_for_agent(source.id, request.agent_id))

            skill = self._active_skill(request, diagnostics)
            candidates = self.merger.merge(scopes, repository_wide, skill=skill)
            logger.debug(
                "Ordered %d candidates for %s: %s",
                len(candidates),
                request.target_path,
                ", ".join(source.id for source in candidates),
            )

            result = self.allocator.allocate(candidates, request.budget_limit)
            return result.with_diagnostics(tuple(diagnostics))

    def resolve_for_task(
        self,
        target_path: str,
        agent_id: str,
        budget_limit: int,
        task_description: str,
        gate: SkillGate,
    ) -> ResolutionResult:
        """Let the skill gate pick a skill for the task, then resolve with it."""
        return self.resolve(
            target_path,
            agent_id,
            budget_limit,
            active_skill=gate.select(task_description),
        )

    def _active_skill(
        self, request: ResolutionRequest, diagnostics: list[Diagnostic]
    ) -> InstructionSource | None:
        if request.active_skill is None:
            return None
        skill = self.registry.get(request.active_skill)
        if skill is None or skill.scope is not Scope.SKILL:
            diagnostics.append(
                Diagnostic(
                    DiagnosticCode.UNKNOWN_SKILL,
                    f"Active skill '{request.active_skill}' is not a registered skill",
                    request.active_skill,
                )
            )
            return None
        if not skill.applies_to(request.agent_id):
            diagnostics.append(excluded_for_agent(skill.id, request.agent_id))
            return None
        return skill
