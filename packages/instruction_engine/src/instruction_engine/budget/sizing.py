"""Content size measurement and truncation in line or token units."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

DEFAULT_TRUNCATION_MARKER = "[truncated]"
CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class TruncationResult:
    """Result of truncating content to a size limit."""

    text: str
    truncated: bool
    original_size: int
    truncated_size: int


class SizeMeter(Protocol):
    """Measures content and cuts it down to a limit in the same unit."""

    unit: str

    def measure(self, text: str) -> int:
        """Return the size of text in this meter's unit."""
        ...

    def truncate(self, text: str, limit: int) -> TruncationResult:
        """Return text cut so that measure(result.text) <= limit."""
        ...


def estimate_tokens(text: str) -> int:
    """Rough token estimate using 4 chars per token heuristic."""
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)


class LineMeter:
    """Sizes content by line count."""

    unit = "lines"

    def __init__(self, marker: str = DEFAULT_TRUNCATION_MARKER) -> None:
        self.marker = marker

    def measure(self, text: str) -> int:
        return len(text.splitlines())

    def truncate(self, text: str, limit: int) -> TruncationResult:
        lines = text.splitlines()
        original_size = len(lines)
        if original_size <= limit:
            return TruncationResult(text, False, original_size, original_size)
        if limit <= 0:
            return TruncationResult("", original_size > 0, original_size, 0)

        # The marker takes the last line of the allowance when there is room for it.
        if self.marker and limit >= 2:
            kept = [*lines[: limit - 1], self.marker]
        else:
            kept = lines[:limit]
        return TruncationResult("\n".join(kept), True, original_size, len(kept))


class TokenMeter:
    """Sizes content by estimated token count."""

    unit = "tokens"

    def __init__(self, marker: str = DEFAULT_TRUNCATION_MARKER) -> None:
        self.marker = marker

    def measure(self, text: str) -> int:
        return estimate_tokens(text)

    def truncate(self, text: str, limit: int) -> TruncationResult:
        original_size = estimate_tokens(text)
        if original_size <= limit:
            return TruncationResult(text, False, original_size, original_size)
        if limit <= 0:
            return TruncationResult("", original_size > 0, original_size, 0)

        max_chars = limit * CHARS_PER_TOKEN
        suffix = f"\n{self.marker}" if self.marker else ""
        if len(suffix) >= max_chars:
            truncated_text = text[:max_chars]
        else:
            truncated_text = f"{text[: max_chars - len(suffix)]}{suffix}"
        truncated_size = estimate_tokens(truncated_text)
        return TruncationResult(truncated_text, True, original_size, truncated_size)


def meter_for_unit(unit: str, marker: str = DEFAULT_TRUNCATION_MARKER) -> SizeMeter:
    """Return the size meter for a configured unit name."""
    if unit == LineMeter.unit:
        return LineMeter(marker)
    if unit == TokenMeter.unit:
        return TokenMeter(marker)
    msg = f"Unknown size unit '{unit}'. Expected 'lines' or 'tokens'."
    raise ValueError(msg)
