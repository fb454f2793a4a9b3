"""Instruction sources, their registry, and the filesystem loader."""

from instruction_engine.sources.loader import LoadedSources, SourceLoader
from instruction_engine.sources.models import InstructionSource, Scope, Tier
from instruction_engine.sources.registry import SourceRegistry

__all__ = [
    "InstructionSource",
    "LoadedSources",
    "Scope",
    "SourceLoader",
    "SourceRegistry",
    "Tier",
]
