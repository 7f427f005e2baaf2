"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO

import pytest

from stackerr.models import Frame, Stack, Stacks
from stackerr.stack_error import StackError
from stackerr.utils.logging import (
    JSONFormatter,
    get_logger,
    log_error_with_context,
    setup_logging,
)


@pytest.fixture
def stream_logger():
    """Logger writing JSON records into a string buffer."""
    logger = get_logger("test_stackerr")
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.logger.addHandler(handler)
    logger.logger.setLevel(logging.DEBUG)
    yield logger, stream
    logger.logger.removeHandler(handler)


@pytest.fixture
def stack_error():
    """A StackError with a single stack and metadata."""
    stacks = Stacks([Stack((Frame(function="app.jobs.run_job", file="/srv/app/jobs.py", line=42),))])
    return StackError(ValueError("boom"), stacks, {"job_id": "job_1"})


def test_json_formatter(stream_logger):
    """Test JSON formatter produces valid JSON output."""
    logger, stream = stream_logger

    logger.info("Test message", extra={"job_id": "job_1"})

    log_data = json.loads(stream.getvalue())
    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test_stackerr"
    assert log_data["message"] == "Test message"
    assert log_data["context"]["job_id"] == "job_1"
    assert "source" in log_data


def test_json_formatter_plain_exception(stream_logger):
    """Test that ordinary exceptions are logged with their traceback."""
    logger, stream = stream_logger

    try:
        raise KeyError("missing")
    except KeyError:
        logger.error("Lookup failed", exc_info=True)

    log_data = json.loads(stream.getvalue())
    assert log_data["error"]["type"] == "KeyError"
    assert "Traceback" in log_data["error"]["stack_trace"]


def test_json_formatter_stack_error(stream_logger, stack_error):
    """Test that a StackError is logged with its stacks and fields."""
    logger, stream = stream_logger

    try:
        raise stack_error
    except StackError:
        logger.error("Job failed", exc_info=True)

    error = json.loads(stream.getvalue())["error"]
    assert error["type"] == "ValueError"
    assert error["message"] == "boom"
    assert error["stacks"] == [[{"function": "app.jobs.run_job", "file": "/srv/app/jobs.py", "line": 42}]]
    assert error["fields"] == {"job_id": "job_1"}


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", job_id="job_1")

    assert logger.extra["job_id"] == "job_1"
    assert logger.with_context(attempt=2).extra == {"job_id": "job_1", "attempt": 2}
    assert "attempt" not in logger.extra


def test_log_error_with_context_merges_fields(stream_logger, stack_error):
    """Test that StackError fields join the log context, explicit context wins."""
    logger, stream = stream_logger

    log_error_with_context(logger, "Job failed", stack_error.with_single("attempt", 1), attempt=2, worker="w1")

    log_data = json.loads(stream.getvalue())
    assert log_data["level"] == "ERROR"
    assert log_data["context"]["job_id"] == "job_1"
    assert log_data["context"]["attempt"] == 2
    assert log_data["context"]["worker"] == "w1"
    assert log_data["error"]["fields"] == {"job_id": "job_1", "attempt": 1}


def test_log_error_with_context_drops_reserved_keys(stream_logger, stack_error):
    """Test that fields shadowing LogRecord attributes don't break logging."""
    logger, stream = stream_logger

    log_error_with_context(logger, "Job failed", stack_error.with_single("message", "shadow"))

    log_data = json.loads(stream.getvalue())
    assert log_data["message"] == "Job failed"


def test_setup_logging_installs_json_handler():
    """Test that setup_logging configures the root logger."""
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    try:
        setup_logging("DEBUG")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
    finally:
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
