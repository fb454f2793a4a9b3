"""Skill selection boundary."""

from instruction_engine.skills.gate import (
    SkillCatalogEntry,
    SkillGate,
    SkillSelector,
    StaticSkillSelector,
)

__all__ = ["SkillCatalogEntry", "SkillGate", "SkillSelector", "StaticSkillSelector"]
