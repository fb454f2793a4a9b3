"""Filesystem loader that turns instruction files into sources.

Repository conventions:

- ``.github/copilot-instructions.md`` is repository-wide
- every ``AGENTS.md`` is directory-scoped at its directory
- ``.github/instructions/**/*.instructions.md`` is path-specific (``applyTo``)
- ``.github/skills/<name>/SKILL.md`` is a skill

Personal and organization directories use ``AGENTS.md``, ``instructions/`` and
``skills/`` at their top level, with ``AGENTS.md`` acting as repository-wide guidance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from instruction_engine.budget.sizing import LineMeter, SizeMeter
from instruction_engine.diagnostics import Diagnostic, DiagnosticCode
from instruction_engine.markdown_utils import parse_frontmatter, parse_list
from instruction_engine.sources.models import InstructionSource, Scope, Tier
from instruction_engine.sources.registry import SourceRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from instruction_engine.config.settings import Settings

logger = logging.getLogger(__name__)

_SKIPPED_DIRS = frozenset({".git", "node_modules", ".venv", "__pycache__"})
_INSTRUCTIONS_GLOB = "*.instructions.md"


@dataclass
class LoaderDiagnostics:
    """Diagnostics collected during source discovery."""

    warnings: list[str] = field(default_factory=list)
    skipped: list[Diagnostic] = field(default_factory=list)

    def warn(self, message: str, source_id: str | None = None) -> None:
        """Record a warning message; with a source id the file was skipped."""
        logger.warning(message)
        self.warnings.append(message)
        if source_id is not None:
            self.skipped.append(Diagnostic(DiagnosticCode.MALFORMED_SOURCE, message, source_id))


@dataclass(frozen=True)
class LoadedSources:
    """Sources discovered on disk plus discovery warnings."""

    sources: list[InstructionSource]
    diagnostics: LoaderDiagnostics


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _is_valid_skill_name(name: str) -> bool:
    if not name:
        return False
    if name.startswith("-") or name.endswith("-"):
        return False
    if "--" in name:
        return False
    return all(ch.islower() or ch.isdigit() or ch == "-" for ch in name)


def _relative(path: Path, base: Path) -> str:
    return path.relative_to(base).as_posix()


def _walk_agents_files(base: Path) -> list[Path]:
    if not base.exists():
        return []
    return sorted(
        path
        for path in base.rglob("AGENTS.md")
        if not _SKIPPED_DIRS.intersection(path.relative_to(base).parts)
    )


class SourceLoader:
    """Discover instruction sources from a repository and optional tier directories."""

    def __init__(
        self,
        repo_root: str | Path,
        personal_dir: str | Path | None = None,
        organization_dir: str | Path | None = None,
        meter: SizeMeter | None = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.personal_dir = Path(personal_dir) if personal_dir else None
        self.organization_dir = Path(organization_dir) if organization_dir else None
        self.meter = meter or LineMeter()

    @classmethod
    def from_settings(cls, repo_root: str | Path, settings: Settings) -> SourceLoader:
        """Build a loader using the configured tier directories and size unit."""
        return cls(
            repo_root,
            personal_dir=settings.personal_dir,
            organization_dir=settings.organization_dir,
            meter=settings.meter(),
        )

    def load(self) -> LoadedSources:
        """Load every instruction source, highest tier first."""
        diagnostics = LoaderDiagnostics()
        sources: list[InstructionSource] = []
        skill_names: set[str] = set()

        if self.personal_dir is not None:
            sources += self._load_tier_dir(
                self.personal_dir, Tier.PERSONAL, skill_names, diagnostics
            )
        sources += self._load_repository(skill_names, diagnostics)
        if self.organization_dir is not None:
            sources += self._load_tier_dir(
                self.organization_dir, Tier.ORGANIZATION, skill_names, diagnostics
            )

        if not sources:
            diagnostics.warn(f"No instruction sources discovered under {self.repo_root}.")
        logger.info("Discovered %d instruction sources", len(sources))
        return LoadedSources(sources=sources, diagnostics=diagnostics)

    def load_registry(self) -> SourceRegistry:
        """Load sources and build a registry snapshot for a new session.

        Files skipped during discovery are carried as ``MalformedSource`` diagnostics.
        """
        loaded = self.load()
        return SourceRegistry(loaded.sources, diagnostics=loaded.diagnostics.skipped)

    def _load_repository(
        self, skill_names: set[str], diagnostics: LoaderDiagnostics
    ) -> list[InstructionSource]:
        root = self.repo_root
        github = root / ".github"
        sources: list[InstructionSource] = []

        repo_wide = github / "copilot-instructions.md"
        if repo_wide.is_file():
            sources.append(
                self._plain_source(repo_wide, root, Scope.REPOSITORY_WIDE, Tier.REPOSITORY)
            )

        for agents_file in _walk_agents_files(root):
            source = self._plain_source(agents_file, root, Scope.DIRECTORY_SCOPED, Tier.REPOSITORY)
            sources.append(source)

        sources += self._load_path_specific(
            github / "instructions", root, Tier.REPOSITORY, diagnostics, recursive=True
        )
        sources += self._load_skills(
            github / "skills", root, Tier.REPOSITORY, skill_names, diagnostics
        )
        return sources

    def _load_tier_dir(
        self, base: Path, tier: Tier, skill_names: set[str], diagnostics: LoaderDiagnostics
    ) -> list[InstructionSource]:
        if not base.exists():
            diagnostics.warn(f"{tier.value.capitalize()} instruction directory not found: {base}")
            return []

        sources: list[InstructionSource] = []
        agents_file = base / "AGENTS.md"
        if agents_file.is_file():
            sources.append(self._plain_source(agents_file, base, Scope.REPOSITORY_WIDE, tier))
        sources += self._load_path_specific(base / "instructions", base, tier, diagnostics)
        sources += self._load_skills(base / "skills", base, tier, skill_names, diagnostics)
        return sources

    def _plain_source(self, path: Path, base: Path, scope: Scope, tier: Tier) -> InstructionSource:
        _, body = parse_frontmatter(_read_text(path))
        content = body.strip()
        if scope is Scope.DIRECTORY_SCOPED:
            origin = _relative(path.parent, base) if path.parent != base else ""
        else:
            origin = ""
        return InstructionSource(
            id=f"{tier.value}:{_relative(path, base)}",
            scope=scope,
            tier=tier,
            origin_path=origin,
            content=content,
            size=self.meter.measure(content),
        )

    def _load_path_specific(
        self,
        directory: Path,
        base: Path,
        tier: Tier,
        diagnostics: LoaderDiagnostics,
        recursive: bool = False,
    ) -> list[InstructionSource]:
        if not directory.exists():
            return []
        paths: Iterable[Path] = (
            directory.rglob(_INSTRUCTIONS_GLOB) if recursive else directory.glob(_INSTRUCTIONS_GLOB)
        )

        sources: list[InstructionSource] = []
        for path in sorted(paths):
            source_id = f"{tier.value}:{_relative(path, base)}"
            meta, body = parse_frontmatter(_read_text(path))
            pattern = meta.get("applyTo", "")
            if not pattern:
                diagnostics.warn(f"Instructions file missing applyTo: {path}", source_id)
                continue
            content = body.strip()
            sources.append(
                InstructionSource(
                    id=source_id,
                    scope=Scope.PATH_SPECIFIC,
                    tier=tier,
                    origin_path=_relative(path.parent, base),
                    match_pattern=pattern,
                    excluded_agents=frozenset(parse_list(meta.get("excludeAgent"))),
                    content=content,
                    size=self.meter.measure(content),
                )
            )
        return sources

    def _load_skills(
        self,
        directory: Path,
        base: Path,
        tier: Tier,
        skill_names: set[str],
        diagnostics: LoaderDiagnostics,
    ) -> list[InstructionSource]:
        if not directory.exists():
            return []

        sources: list[InstructionSource] = []
        for path in sorted(directory.glob("*/SKILL.md")):
            source_id = f"{tier.value}:{_relative(path, base)}"
            text = _read_text(path)
            meta, body = parse_frontmatter(text)
            name = meta.get("name") or path.parent.name
            description = meta.get("description", "")

            if not description:
                diagnostics.warn(f"Skill missing description: {path}", source_id)
                continue
            if not _is_valid_skill_name(name):
                diagnostics.warn(f"Invalid skill name '{name}' in {path}", source_id)
                continue
            if name in skill_names:
                diagnostics.warn(f"Duplicate skill '{name}' ignored from {path}", source_id)
                continue

            skill_names.add(name)
            content = body.strip() or text.strip()
            sources.append(
                InstructionSource(
                    id=source_id,
                    scope=Scope.SKILL,
                    tier=tier,
                    origin_path=_relative(path.parent, base),
                    excluded_agents=frozenset(parse_list(meta.get("excludeAgent"))),
                    name=name,
                    description=description,
                    content=content,
                    size=self.meter.measure(content),
                )
            )
        return sources
