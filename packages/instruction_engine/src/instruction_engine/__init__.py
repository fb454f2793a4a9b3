from instruction_engine.budget import (
    BudgetAllocator,
    LineMeter,
    ResolutionEntry,
    ResolutionResult,
    SizeMeter,
    TokenMeter,
    meter_for_unit,
)
from instruction_engine.config import Settings, load_settings
from instruction_engine.diagnostics import Diagnostic, DiagnosticCode
from instruction_engine.engine import InstructionResolver, ResolutionRequest
from instruction_engine.errors import (
    AmbiguousScopeConflictError,
    DuplicateSourceIdError,
    InstructionEngineError,
    InvalidGlobPatternError,
)
from instruction_engine.globs import GlobPattern, compile_glob
from instruction_engine.logging_utils import install_resolution_log_filter
from instruction_engine.priority import TierPriorityMerger
from instruction_engine.scoping import PathScopeResolver, ScopeResolution
from instruction_engine.skills import (
    SkillCatalogEntry,
    SkillGate,
    SkillSelector,
    StaticSkillSelector,
)
from instruction_engine.sources import (
    InstructionSource,
    LoadedSources,
    Scope,
    SourceLoader,
    SourceRegistry,
    Tier,
)

__all__ = [
    "AmbiguousScopeConflictError",
    "BudgetAllocator",
    "Diagnostic",
    "DiagnosticCode",
    "DuplicateSourceIdError",
    "GlobPattern",
    "InstructionEngineError",
    "InstructionResolver",
    "InstructionSource",
    "InvalidGlobPatternError",
    "LineMeter",
    "LoadedSources",
    "PathScopeResolver",
    "ResolutionEntry",
    "ResolutionRequest",
    "ResolutionResult",
    "Scope",
    "ScopeResolution",
    "Settings",
    "SizeMeter",
    "SkillCatalogEntry",
    "SkillGate",
    "SkillSelector",
    "SourceLoader",
    "SourceRegistry",
    "StaticSkillSelector",
    "Tier",
    "TierPriorityMerger",
    "TokenMeter",
    "compile_glob",
    "install_resolution_log_filter",
    "load_settings",
    "meter_for_unit",
]
