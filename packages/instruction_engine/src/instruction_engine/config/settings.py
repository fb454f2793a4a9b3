"""Pydantic models for engine settings."""

from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from instruction_engine.budget.sizing import DEFAULT_TRUNCATION_MARKER, SizeMeter, meter_for_unit

SizeUnit = Literal["lines", "tokens"]


class Settings(BaseModel, frozen=True):
    """Runtime configuration loaded from environment variables."""

    budget_limit: int = Field(default=400, ge=0)
    size_unit: SizeUnit = "lines"
    agent_id: str = "coding-agent"
    separator: str = "\n\n"
    truncation_marker: str = DEFAULT_TRUNCATION_MARKER
    personal_dir: str | None = None
    organization_dir: str | None = None

    def meter(self) -> SizeMeter:
        """Return the size meter matching the configured unit."""
        return meter_for_unit(self.size_unit, self.truncation_marker)


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got '{raw}'."
        raise ValueError(msg) from None


def load_settings() -> Settings:
    """Load settings from environment variables with defaults."""
    load_dotenv()

    budget_limit = _parse_int("INSTRUCTION_BUDGET_LIMIT", "400")
    if budget_limit < 0:
        msg = "INSTRUCTION_BUDGET_LIMIT must not be negative."
        raise ValueError(msg)

    size_unit = os.getenv("INSTRUCTION_SIZE_UNIT", "lines").strip().lower()
    if size_unit not in ("lines", "tokens"):
        msg = f"INSTRUCTION_SIZE_UNIT must be 'lines' or 'tokens', got '{size_unit}'."
        raise ValueError(msg)

    separator = os.getenv("INSTRUCTION_SEPARATOR")
    return Settings(
        budget_limit=budget_limit,
        size_unit=size_unit,  # type: ignore[arg-type]
        agent_id=os.getenv("INSTRUCTION_AGENT_ID", "coding-agent"),
        separator=separator.replace("\\n", "\n") if separator else "\n\n",
        truncation_marker=os.getenv("INSTRUCTION_TRUNCATION_MARKER", DEFAULT_TRUNCATION_MARKER),
        personal_dir=os.getenv("INSTRUCTION_PERSONAL_DIR") or None,
        organization_dir=os.getenv("INSTRUCTION_ORGANIZATION_DIR") or None,
    )
