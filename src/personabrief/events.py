"""Structured pipeline events and the observers that receive them.

The orchestrator never logs directly: it emits PipelineEvent records to an
injected observer. LoggingObserver turns them into log records; tests use
an observer that just collects them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol


class EventType(str, Enum):
    """Event types emitted while a pipeline runs."""

    STAGE_ENTERED = "stage_entered"
    STAGE_EXITED = "stage_exited"
    RETRY_SCHEDULED = "retry_scheduled"
    OPERATION_FAILED = "operation_failed"
    SCRIPT_TRUNCATED = "script_truncated"
    SCRIPT_REGENERATED = "script_regenerated"
    DEGRADE_APPLIED = "degrade_applied"
    PIPELINE_COMPLETED = "pipeline_completed"
    PIPELINE_FAILED = "pipeline_failed"


class Severity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class PipelineEvent:
    event_type: EventType
    severity: Severity = Severity.INFO
    stage: Optional[str] = None
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class PipelineObserver(Protocol):
    """Anything that can receive pipeline events."""

    def emit(self, event: PipelineEvent) -> None:
        ...


class NullObserver:
    """Discards every event."""

    def emit(self, event: PipelineEvent) -> None:
        return None


_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LoggingObserver:
    """Renders pipeline events as structured log records."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("personabrief.pipeline")

    def emit(self, event: PipelineEvent) -> None:
        extra: Dict[str, Any] = {"event_type": event.event_type.value, **event.data}
        if event.stage:
            extra["stage"] = event.stage
        self.logger.log(
            _LEVELS[event.severity],
            event.message or event.event_type.value,
            extra=extra,
        )


def emit_event(
    observer: Optional[PipelineObserver],
    event_type: EventType,
    message: str = "",
    severity: Severity = Severity.INFO,
    stage: Optional[str] = None,
    **data: Any,
) -> None:
    """Build and emit an event; a missing observer drops it."""
    if observer is None:
        return
    observer.emit(
        PipelineEvent(
            event_type=event_type,
            severity=severity,
            stage=stage,
            message=message,
            data=data,
        )
    )
