"""
Tests for logging_setup and the logging observer.

Verifies:
- JSON structured log format
- Extra fields carried through
- Pipeline events rendered as log records
"""

import json
import logging
from io import StringIO

import pytest

from personabrief.events import EventType, LoggingObserver, NullObserver, PipelineEvent, Severity, emit_event
from personabrief.logging_setup import JSONFormatter, setup_logging


@pytest.fixture
def capture_logs():
    """Capture log output to a string buffer."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger()
    saved = logger.handlers[:]
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)

    yield buffer

    logger.handlers = saved


def entries(buffer: StringIO):
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def test_json_formatter_basic(capture_logs):
    logging.getLogger("personabrief.test").info("Test message", extra={"stage": "analyzing"})

    (entry,) = entries(capture_logs)
    assert entry["severity"] == "info"
    assert entry["logger"] == "personabrief.test"
    assert entry["message"] == "Test message"
    assert entry["stage"] == "analyzing"
    assert "timestamp" in entry


def test_json_formatter_exception(capture_logs):
    try:
        raise ValueError("bad value")
    except ValueError:
        logging.getLogger("personabrief.test").exception("Failed")

    (entry,) = entries(capture_logs)
    assert entry["severity"] == "error"
    assert "ValueError: bad value" in entry["exception"]


def test_json_formatter_non_serialisable_extra(capture_logs):
    logging.getLogger("personabrief.test").info("Odd", extra={"payload": object()})

    (entry,) = entries(capture_logs)
    assert entry["payload"].startswith("<object object")


def test_logging_observer_renders_events(capture_logs):
    observer = LoggingObserver()

    emit_event(
        observer,
        EventType.RETRY_SCHEDULED,
        "Persona generation failed (attempt 1/3). Retrying in 1000ms...",
        severity=Severity.WARN,
        stage="persona_generating",
        attempt=1,
        delay_ms=1000,
    )

    (entry,) = entries(capture_logs)
    assert entry["severity"] == "warning"
    assert entry["logger"] == "personabrief.pipeline"
    assert entry["event_type"] == "retry_scheduled"
    assert entry["stage"] == "persona_generating"
    assert entry["attempt"] == 1
    assert entry["delay_ms"] == 1000


def test_logging_observer_without_message(capture_logs):
    LoggingObserver().emit(PipelineEvent(event_type=EventType.PIPELINE_COMPLETED))

    (entry,) = entries(capture_logs)
    assert entry["message"] == "pipeline_completed"
    assert "stage" not in entry


def test_emit_event_without_observer_is_noop():
    emit_event(None, EventType.STAGE_ENTERED, "ignored")
    NullObserver().emit(PipelineEvent(event_type=EventType.STAGE_ENTERED))


def test_setup_logging_levels():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging("debug", use_json=False)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging("nonsense")
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers, level = saved
        root.setLevel(level)
