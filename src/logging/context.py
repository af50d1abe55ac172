# src/logging/context.py — v2
"""Contextual logging support: attach document_id, fingerprint and stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set once per processed document, read by the formatters.
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    document_id: str | None = None
    fingerprint: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        fingerprint=_fingerprint.get(),
        stage=_stage.get(),
    )


def set_document_context(document_id: str, fingerprint: str | None = None) -> None:
    """Set document-level context (called once per document)."""
    _document_id.set(document_id)
    _fingerprint.set(fingerprint)


def set_stage_context(stage: str) -> None:
    """Record the pipeline stage currently executing."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _fingerprint.set(None)
    _stage.set(None)
