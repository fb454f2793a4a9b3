"""Exceptions raised by the instruction engine."""

from __future__ import annotations


class InstructionEngineError(Exception):
    """Base class for instruction engine failures."""


class DuplicateSourceIdError(InstructionEngineError, ValueError):
    """Two sources passed to a registry share the same id."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Duplicate instruction source id '{source_id}'")
        self.source_id = source_id


class AmbiguousScopeConflictError(InstructionEngineError):
    """Two directory-scoped sources of one tier share an origin path."""

    def __init__(self, origin_path: str, source_ids: list[str]) -> None:
        joined = ", ".join(source_ids)
        super().__init__(
            f"Directory-scoped sources {joined} share origin '/{origin_path}'; "
            "nearest source cannot be determined"
        )
        self.origin_path = origin_path
        self.source_ids = source_ids


class InvalidGlobPatternError(InstructionEngineError, ValueError):
    """A match pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason
