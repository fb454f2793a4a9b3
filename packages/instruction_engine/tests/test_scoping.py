from __future__ import annotations

import pytest

from instruction_engine.diagnostics import DiagnosticCode
from instruction_engine.errors import AmbiguousScopeConflictError
from instruction_engine.scoping import PathScopeResolver
from instruction_engine.sources import InstructionSource, Scope, SourceRegistry, Tier


def _directory(source_id: str, origin: str, **kwargs: object) -> InstructionSource:
    return InstructionSource(
        id=source_id,
        scope=Scope.DIRECTORY_SCOPED,
        origin_path=origin,
        content=source_id,
        size=1,
        **kwargs,  # type: ignore[arg-type]
    )


def _path_rule(source_id: str, pattern: str, **kwargs: object) -> InstructionSource:
    return InstructionSource(
        id=source_id,
        scope=Scope.PATH_SPECIFIC,
        origin_path=".github/instructions",
        match_pattern=pattern,
        content=source_id,
        size=1,
        **kwargs,  # type: ignore[arg-type]
    )


def test_nearest_directory_source_wins() -> None:
    registry = SourceRegistry(
        [
            _directory("root", "/"),
            _directory("src", "/src/"),
            _directory("backend", "/src/backend/"),
        ]
    )
    scopes = PathScopeResolver(registry).resolve_scopes("/src/backend/api/routes.x", "agent")

    assert scopes.nearest_directory_scoped is not None
    assert scopes.nearest_directory_scoped.id == "backend"


def test_no_ancestor_directory_source_is_not_an_error() -> None:
    registry = SourceRegistry([_directory("docs", "/docs/")])
    scopes = PathScopeResolver(registry).resolve_scopes("/src/main.py", "agent")

    assert scopes.nearest_directory_scoped is None
    assert scopes.diagnostics == ()


def test_root_source_applies_to_top_level_files() -> None:
    registry = SourceRegistry([_directory("root", "/"), _directory("src", "src")])
    scopes = PathScopeResolver(registry).resolve_scopes("README.md", "agent")

    assert scopes.nearest_directory_scoped is not None
    assert scopes.nearest_directory_scoped.id == "root"


def test_ancestry_is_segment_based() -> None:
    registry = SourceRegistry([_directory("root", ""), _directory("back", "src/back")])
    scopes = PathScopeResolver(registry).resolve_scopes("src/backend/app.py", "agent")

    assert scopes.nearest_directory_scoped is not None
    assert scopes.nearest_directory_scoped.id == "root"


def test_nearest_is_tracked_per_tier() -> None:
    registry = SourceRegistry(
        [
            _directory("repo-src", "src"),
            _directory("mine-root", "", tier=Tier.PERSONAL),
            _directory("org-src", "src", tier=Tier.ORGANIZATION),
        ]
    )
    scopes = PathScopeResolver(registry).resolve_scopes("src/app.py", "agent")

    assert {tier: source.id for tier, source in scopes.nearest_by_tier.items()} == {
        Tier.PERSONAL: "mine-root",
        Tier.REPOSITORY: "repo-src",
        Tier.ORGANIZATION: "org-src",
    }


def test_glob_matches_are_a_union() -> None:
    registry = SourceRegistry(
        [
            _path_rule("typescript", "**/*.ts"),
            _path_rule("api", "app/api/**/*"),
            _path_rule("python", "**/*.py"),
        ]
    )
    scopes = PathScopeResolver(registry).resolve_scopes("app/api/users.ts", "agent")

    assert {source.id for source in scopes.matched_path_specific} == {"typescript", "api"}


def test_excluded_agent_is_removed_from_matches() -> None:
    registry = SourceRegistry(
        [_path_rule("api", "app/api/**/*", excluded_agents=frozenset({"review-agent"}))]
    )
    resolver = PathScopeResolver(registry)

    excluded = resolver.resolve_scopes("app/api/users.ts", "review-agent")
    assert excluded.matched_path_specific == frozenset()
    assert [diag.code for diag in excluded.diagnostics] == [DiagnosticCode.EXCLUDED_FOR_AGENT]

    included = resolver.resolve_scopes("app/api/users.ts", "coding-agent")
    assert {source.id for source in included.matched_path_specific} == {"api"}


def test_excluded_nearest_falls_back_to_next_ancestor() -> None:
    registry = SourceRegistry(
        [
            _directory("root", ""),
            _directory("src", "src", excluded_agents=frozenset({"review-agent"})),
        ]
    )
    scopes = PathScopeResolver(registry).resolve_scopes("src/app.py", "review-agent")

    assert scopes.nearest_directory_scoped is not None
    assert scopes.nearest_directory_scoped.id == "root"
    assert scopes.diagnostics[0].source_id == "src"


def test_shared_origin_is_an_ambiguous_conflict() -> None:
    registry = SourceRegistry([_directory("a", "/src/"), _directory("b", "src")])
    resolver = PathScopeResolver(registry)

    with pytest.raises(AmbiguousScopeConflictError) as exc_info:
        resolver.resolve_scopes("src/app.py", "agent")
    assert exc_info.value.source_ids == ["a", "b"]

    # The conflict only matters for paths beneath the shared origin.
    scopes = resolver.resolve_scopes("docs/readme.md", "agent")
    assert scopes.nearest_directory_scoped is None


def test_shared_origin_across_tiers_is_allowed() -> None:
    registry = SourceRegistry(
        [_directory("repo", "src"), _directory("mine", "src", tier=Tier.PERSONAL)]
    )
    scopes = PathScopeResolver(registry).resolve_scopes("src/app.py", "agent")

    assert scopes.nearest_directory_scoped is not None
    assert scopes.nearest_directory_scoped.id == "repo"
    assert scopes.nearest_by_tier[Tier.PERSONAL].id == "mine"


def test_parent_segments_in_target_are_resolved() -> None:
    registry = SourceRegistry(
        [_directory("root", ""), _directory("src", "src"), _path_rule("src-rule", "src/**")]
    )
    resolver = PathScopeResolver(registry)

    escaped = resolver.resolve_scopes("src/../secret/x.py", "agent")
    assert escaped.nearest_directory_scoped is not None
    assert escaped.nearest_directory_scoped.id == "root"
    assert escaped.matched_path_specific == frozenset()

    entered = resolver.resolve_scopes("secret/../src/x.py", "agent")
    assert entered.nearest_directory_scoped is not None
    assert entered.nearest_directory_scoped.id == "src"
    assert {source.id for source in entered.matched_path_specific} == {"src-rule"}


def test_target_above_repository_root_is_rejected() -> None:
    resolver = PathScopeResolver(SourceRegistry([_directory("root", "")]))

    with pytest.raises(ValueError, match="escapes the repository root"):
        resolver.resolve_scopes("../elsewhere/x.py", "agent")
