"""Unit tests for structured logging."""

import io
import json
import logging

from reachcheck.models.run_report import CheckRecord, RunSummary
from reachcheck.services.logger import (
    RUN_ID,
    log_check_result,
    log_run_summary,
    resolve_log_level,
    setup_logging,
)


def read_lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_resolve_log_level():
    assert resolve_log_level(False) == logging.WARNING
    assert resolve_log_level(True) == logging.INFO
    assert resolve_log_level(False, "debug") == logging.DEBUG
    assert resolve_log_level(True, "ERROR") == logging.ERROR


def test_setup_logging_json(restore_root_logger):
    """Test log lines are JSON with run_id, level and logger name."""
    stream = io.StringIO()
    setup_logging(logging.INFO, stream=stream)

    logging.getLogger("reachcheck.test").info("hello")

    (entry,) = read_lines(stream)
    assert entry["message"] == "hello"
    assert entry["run_id"] == RUN_ID
    assert entry["level"] == "INFO"
    assert entry["logger"] == "reachcheck.test"
    assert "timestamp" in entry


def test_setup_logging_replaces_handlers(restore_root_logger):
    """Test repeated setup does not duplicate output."""
    stream = io.StringIO()
    setup_logging(logging.INFO, stream=io.StringIO())
    setup_logging(logging.INFO, stream=stream)

    logging.getLogger("reachcheck.test").warning("once")

    assert len(read_lines(stream)) == 1


def test_log_check_result(restore_root_logger):
    stream = io.StringIO()
    setup_logging(logging.INFO, stream=stream)

    log_check_result("port", "192.0.2.1:443/tcp", True, {"latency": 0.4})

    (entry,) = read_lines(stream)
    assert entry["family"] == "port"
    assert entry["passed"] is True
    assert entry["detail"] == {"latency": 0.4}


def test_log_run_summary_level(restore_root_logger):
    """Test a failing run is logged at WARNING, visible at default level."""
    stream = io.StringIO()
    setup_logging(logging.WARNING, stream=stream)

    passing = RunSummary()
    passing.add(CheckRecord(family="ping", target="a", passed=True))
    log_run_summary(passing)
    assert read_lines(stream) == []

    failing = RunSummary()
    failing.add(CheckRecord(family="ping", target="a", passed=False))
    log_run_summary(failing)

    (entry,) = read_lines(stream)
    assert entry["level"] == "WARNING"
    assert entry["failed"] == 1
    assert entry["by_family"]["ping"] == {"passed": 0, "failed": 1}
