# src/logging/context.py - v1
"""Contextual logging support - attach project_id, actor, operation to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per mutation request.
_project_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "project_id", default=None
)
_actor: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "actor", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    project_id: str | None = None
    actor: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        project_id=_project_id.get(),
        actor=_actor.get(),
        operation=_operation.get(),
    )


def set_project_context(project_id: str, actor: str | None = None) -> None:
    """Set project-level context (called once per request)."""
    _project_id.set(project_id)
    _actor.set(actor)


def set_operation_context(operation: str | None) -> None:
    """Set the mutation or query currently being served."""
    _operation.set(operation)


def clear_context() -> None:
    """Reset all context variables."""
    _project_id.set(None)
    _actor.set(None)
    _operation.set(None)
