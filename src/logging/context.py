# src/logging/context.py - v1
"""Contextual logging support: attach domain, request_id and stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass
from typing import Any

# Set once per prediction request; isolated per asyncio task.
_domain: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "domain", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Snapshot of the current logging context."""

    domain: str | None = None
    request_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields for JSON log injection."""
        return {k: v for k, v in asdict(self).items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        domain=_domain.get(),
        request_id=_request_id.get(),
        stage=_stage.get(),
    )


def set_request_context(domain: str, request_id: str) -> None:
    """Set request-level context (called once per prediction)."""
    _domain.set(domain)
    _request_id.set(request_id)


def set_stage_context(stage: str | None) -> None:
    """Name the processing stage (e.g. 'match', 'fuse')."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _domain.set(None)
    _request_id.set(None)
    _stage.set(None)
