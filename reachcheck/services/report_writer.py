"""Run report writer.

Converts a RunSummary into the JSON document written by --json-report.
"""

import json
import logging
from pathlib import Path

from reachcheck.models.run_report import RunSummary


logger = logging.getLogger(__name__)


class ReportWriter:
    """Generates formatted run reports."""

    @staticmethod
    def generate_json_report(summary: RunSummary) -> str:
        """Generate JSON-formatted run report.

        Args:
            summary: RunSummary of a completed run.

        Returns:
            str: Pretty-printed JSON string with sorted keys for determinism.
        """
        return json.dumps(summary.to_json(), indent=2, sort_keys=True)

    @staticmethod
    def write_json_report(summary: RunSummary, path: Path) -> None:
        """Write the JSON report to a file.

        Args:
            summary: RunSummary of a completed run.
            path: Destination file, overwritten if it exists.

        Raises:
            OSError: If the file cannot be written.
        """
        Path(path).write_text(ReportWriter.generate_json_report(summary) + "\n", encoding="utf-8")
        logger.info(f"Run report written to {path}")
