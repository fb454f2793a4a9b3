"""Logging helpers for resolution correlation."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_current_target: ContextVar[str | None] = ContextVar("resolution_target", default=None)
_current_agent: ContextVar[str | None] = ContextVar("resolution_agent", default=None)


@contextmanager
def resolution_scope(target_path: str, agent_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with the request being resolved."""
    target_token = _current_target.set(target_path)
    agent_token = _current_agent.set(agent_id)
    try:
        yield
    finally:
        _current_target.reset(target_token)
        _current_agent.reset(agent_token)


class ResolutionContextFilter(logging.Filter):
    """Attach the active resolution target and agent to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject resolution_target and resolution_agent into the log record."""
        record.resolution_target = _current_target.get() or "-"
        record.resolution_agent = _current_agent.get() or "-"
        return True


def install_resolution_log_filter(loggers: Iterable[logging.Logger] | None = None) -> None:
    """Install resolution context filters for structured logging.

    Args:
        loggers: Optional iterable of loggers to attach the filter to. Defaults to root logger.
    """
    targets = list(loggers) if loggers is not None else [logging.getLogger()]
    for logger in targets:
        if any(isinstance(flt, ResolutionContextFilter) for flt in logger.filters):
            continue
        logger.addFilter(ResolutionContextFilter())
