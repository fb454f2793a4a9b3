from __future__ import annotations

from types import MappingProxyType

from instruction_engine.priority import TierPriorityMerger
from instruction_engine.scoping import ScopeResolution
from instruction_engine.sources import InstructionSource, Scope, Tier


def _source(
    source_id: str,
    scope: Scope,
    tier: Tier = Tier.REPOSITORY,
    origin: str = "",
    pattern: str | None = None,
) -> InstructionSource:
    return InstructionSource(
        id=source_id,
        scope=scope,
        tier=tier,
        origin_path=origin,
        match_pattern=pattern,
        content=source_id,
        size=1,
    )


MINE_DIR = _source("mine-dir", Scope.DIRECTORY_SCOPED, Tier.PERSONAL, origin="src")
MINE_WIDE = _source("mine-wide", Scope.REPOSITORY_WIDE, Tier.PERSONAL)
REPO_DIR = _source("repo-dir", Scope.DIRECTORY_SCOPED, origin="src")
API_RULE = _source("b-api", Scope.PATH_SPECIFIC, pattern="src/api/*.py")
PY_RULE = _source("a-python", Scope.PATH_SPECIFIC, pattern="**/*.py")
REPO_WIDE = _source("repo-wide", Scope.REPOSITORY_WIDE)
ORG_RULE = _source("org-rule", Scope.PATH_SPECIFIC, Tier.ORGANIZATION, pattern="**/*")
ORG_WIDE = _source("org-wide", Scope.REPOSITORY_WIDE, Tier.ORGANIZATION)
SKILL = _source("skill", Scope.SKILL)


def _scopes() -> ScopeResolution:
    return ScopeResolution(
        nearest_by_tier=MappingProxyType({Tier.PERSONAL: MINE_DIR, Tier.REPOSITORY: REPO_DIR}),
        matched_path_specific=frozenset({API_RULE, PY_RULE, ORG_RULE}),
    )


def _ids(candidates: tuple[InstructionSource, ...]) -> list[str]:
    return [source.id for source in candidates]


def test_merge_orders_by_tier_then_scope() -> None:
    merged = TierPriorityMerger().merge(_scopes(), [ORG_WIDE, REPO_WIDE, MINE_WIDE])

    assert _ids(merged) == [
        "mine-dir",
        "mine-wide",
        "repo-dir",
        "b-api",
        "a-python",
        "repo-wide",
        "org-rule",
        "org-wide",
    ]


def test_equal_specificity_breaks_ties_by_id() -> None:
    first = _source("alpha", Scope.PATH_SPECIFIC, pattern="**/*.ts")
    second = _source("beta", Scope.PATH_SPECIFIC, pattern="app/**/*")
    scopes = ScopeResolution(matched_path_specific=frozenset({second, first}))

    assert _ids(TierPriorityMerger().merge(scopes, [])) == ["alpha", "beta"]


def test_skill_sits_between_path_rules_and_repository_wide() -> None:
    merged = TierPriorityMerger().merge(_scopes(), [REPO_WIDE, ORG_WIDE], skill=SKILL)

    ids = _ids(merged)
    assert ids.index("a-python") < ids.index("skill") < ids.index("repo-wide")


def test_inject_skill_without_repository_wide_goes_before_organization() -> None:
    merger = TierPriorityMerger()
    injected = merger.inject_skill([MINE_WIDE, REPO_DIR, ORG_WIDE], SKILL)
    assert _ids(injected) == ["mine-wide", "repo-dir", "skill", "org-wide"]

    only_personal = merger.inject_skill([MINE_WIDE], SKILL)
    assert _ids(only_personal) == ["mine-wide", "skill"]


def test_inject_skill_replaces_existing_skill() -> None:
    other = _source("other-skill", Scope.SKILL)
    injected = TierPriorityMerger().inject_skill([REPO_DIR, other, REPO_WIDE], SKILL)
    assert _ids(injected) == ["repo-dir", "skill", "repo-wide"]


def test_custom_tier_function_moves_sources_between_brackets() -> None:
    def tier_of(source: InstructionSource) -> Tier:
        return Tier.ORGANIZATION if source.id == "repo-wide" else source.tier

    merged = TierPriorityMerger(tier_of=tier_of).merge(_scopes(), [REPO_WIDE, ORG_WIDE])

    assert _ids(merged)[-3:] == ["org-rule", "org-wide", "repo-wide"]


def test_personal_sources_deeper_first() -> None:
    shallow = _source("shallow", Scope.DIRECTORY_SCOPED, Tier.PERSONAL, origin="")
    deep_rule = _source("deep", Scope.PATH_SPECIFIC, Tier.PERSONAL, origin="a/b", pattern="**/*")
    scopes = ScopeResolution(
        nearest_by_tier=MappingProxyType({Tier.PERSONAL: shallow}),
        matched_path_specific=frozenset({deep_rule}),
    )

    assert _ids(TierPriorityMerger().merge(scopes, [])) == ["deep", "shallow"]


def test_rebracketed_directory_sources_keep_only_the_nearest() -> None:
    mine_deep = _source("mine-deep", Scope.DIRECTORY_SCOPED, Tier.PERSONAL, origin="src/api")
    scopes = ScopeResolution(
        nearest_by_tier=MappingProxyType({Tier.PERSONAL: mine_deep, Tier.REPOSITORY: REPO_DIR}),
        matched_path_specific=frozenset({API_RULE}),
    )

    merged = TierPriorityMerger(tier_of=lambda source: Tier.REPOSITORY).merge(scopes, [REPO_WIDE])

    assert _ids(merged) == ["mine-deep", "b-api", "repo-wide"]
