"""Tests for logging setup and structured logging."""

import json
import logging

import pytest

from verify_proxy.infrastructure.logging.logger import JsonFormatter, StructuredLogger, setup_logging
from verify_proxy.utils.timing import timed_operation


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("verify_proxy.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    output = JsonFormatter().format(_record("GET /health 200", route="/health", status=200))
    data = json.loads(output)
    assert data["message"] == "GET /health 200"
    assert data["level"] == "INFO"
    assert data["logger"] == "verify_proxy.test"
    assert data["route"] == "/health"
    assert data["status"] == 200


def test_setup_logging_replaces_handlers():
    setup_logging(level="WARNING", json_output=True, silence_noisy_loggers=True)
    setup_logging(level="WARNING", json_output=True, silence_noisy_loggers=True)

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_plain_text():
    setup_logging(level="DEBUG", json_output=False)
    assert not isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


def test_structured_logger_event(caplog):
    caplog.set_level(logging.INFO, logger="events")
    StructuredLogger("events").log_event("queue_draining", {"queue_length": 3}, duration_ms=1.234)

    record = caplog.records[-1]
    assert record.getMessage() == "queue_draining"
    assert record.event == "queue_draining"
    assert record.state == {"queue_length": 3}
    assert record.duration_ms == 1.23


def test_structured_event_is_emitted_as_nested_json(caplog):
    caplog.set_level(logging.INFO, logger="events")
    StructuredLogger("events").log_event("batch_completed", {"total": 3, "failed": 1})

    data = json.loads(JsonFormatter().format(caplog.records[-1]))
    assert data["message"] == "batch_completed"
    assert data["event"] == "batch_completed"
    assert data["state"] == {"total": 3, "failed": 1}
    assert "duration_ms" not in data


def test_structured_logger_error(caplog):
    caplog.set_level(logging.ERROR, logger="events")
    StructuredLogger("events").log_error("queue_job_failed", ValueError("bad"), {"email": "a@example.com"})

    record = caplog.records[-1]
    assert record.getMessage() == "queue_job_failed: bad"
    assert record.exc_info is not None

    data = json.loads(JsonFormatter().format(record))
    assert data["error"] == "bad"
    assert data["error_type"] == "ValueError"
    assert data["context"] == {"email": "a@example.com"}
    assert "ValueError: bad" in data["exc_info"]


@pytest.mark.asyncio
async def test_timed_operation_logs_state(caplog):
    caplog.set_level(logging.INFO, logger="events")
    async with timed_operation("batch_completed", StructuredLogger("events")) as timer:
        timer.set_state(total=2)

    record = caplog.records[-1]
    assert record.event == "batch_completed"
    assert record.state == {"total": 2}
    assert record.duration_ms >= 0
    assert timer.elapsed_ms >= 0
