"""Structured JSON logging.

Diagnostics go to stderr as JSON lines; the human-readable verdicts are
written separately by the orchestrator.
"""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

from pythonjsonlogger import jsonlogger

from reachcheck.models.run_report import RunSummary


# Process-wide run ID for correlation across log entries
RUN_ID = str(uuid.uuid4())


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds run_id and standardized fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: The log record to modify.
            record: The original logging.LogRecord.
            message_dict: Additional fields from the logging call.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["run_id"] = RUN_ID
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def resolve_log_level(verbose: bool, log_level: str | None = None) -> int:
    """Pick the root log level.

    Args:
        verbose: Verbose mode requested.
        log_level: Explicit level name, wins over verbose.

    Returns:
        int: logging level constant.
    """
    if log_level:
        return logging.getLevelName(log_level.upper())
    return logging.INFO if verbose else logging.WARNING


def setup_logging(level: int = logging.WARNING, stream: TextIO | None = None) -> logging.Logger:
    """Configure structured JSON logging for the application.

    Args:
        level: Root log level.
        stream: Destination stream (defaults to stderr).

    Returns:
        logging.Logger: Configured root logger.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    json_handler = logging.StreamHandler(stream or sys.stderr)
    json_handler.setFormatter(CustomJsonFormatter("%(message)s"))
    logger.addHandler(json_handler)

    return logger


def log_check_result(family: str, target: str, passed: bool, detail: dict) -> None:
    """Log structured result of a single check.

    Args:
        family: Check family (resolve, port, ping).
        target: What was checked.
        passed: Whether the check passed.
        detail: Family-specific detail fields.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Check completed",
        extra={
            "family": family,
            "target": target,
            "passed": passed,
            "detail": detail,
        },
    )


def log_run_summary(summary: RunSummary) -> None:
    """Log run completion summary.

    Args:
        summary: Aggregated verdicts of the run.
    """
    logger = logging.getLogger(__name__)
    level = logging.INFO if summary.all_passed else logging.WARNING
    logger.log(
        level,
        "Run completed",
        extra={
            "total_checks": len(summary.checks),
            "passed": summary.passed,
            "failed": summary.failed,
            "by_family": summary.counts_by_family(),
            "duration_sec": summary.duration_sec,
        },
    )
