"""Run summary data models.

Collects one record per executed check so the run can be summarized in the
logs and, optionally, written out as a JSON report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


CHECK_FAMILIES = ("resolve", "port", "ping")


@dataclass
class CheckRecord:
    """Verdict of a single executed check.

    Attributes:
        family: Check family ("resolve", "port" or "ping").
        target: What was checked (hostname list, host:port, ping target).
        passed: Whether the check passed.
        detail: Family-specific detail (latency, resolver, statistics, error).
    """

    family: str
    target: str
    passed: bool
    detail: dict = field(default_factory=dict)

    def to_json(self) -> dict:
        return {
            "family": self.family,
            "target": self.target,
            "passed": self.passed,
            "detail": self.detail,
        }


@dataclass
class RunSummary:
    """Aggregated verdicts of one invocation.

    Attributes:
        started_at: When the orchestrator started (UTC).
        duration_sec: Wall-clock duration of the run.
        checks: Per-check records, in execution order.

    Computed Properties:
        passed: Number of passing checks.
        failed: Number of failing checks.
        all_passed: True if no check failed.
    """

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_sec: float = 0.0
    checks: list[CheckRecord] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    @property
    def failed(self) -> int:
        return sum(1 for check in self.checks if not check.passed)

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def add(self, record: CheckRecord) -> None:
        """Append a check record.

        Raises:
            ValueError: If the record's family is not a known check family.
        """
        if record.family not in CHECK_FAMILIES:
            raise ValueError(f"Unknown check family: {record.family}")
        self.checks.append(record)

    def counts_by_family(self) -> dict[str, dict[str, int]]:
        """Count passed/failed checks per family.

        Returns:
            dict[str, dict[str, int]]: {"port": {"passed": 2, "failed": 1}, ...}
        """
        counts = {family: {"passed": 0, "failed": 0} for family in CHECK_FAMILIES}
        for check in self.checks:
            key = "passed" if check.passed else "failed"
            counts[check.family][key] += 1
        return counts

    def to_json(self) -> dict:
        """Serialize to JSON-compatible dict.

        Returns:
            dict: JSON-serializable representation of the run.
        """
        return {
            "run_summary": {
                "started_at": self.started_at.isoformat(),
                "duration_sec": self.duration_sec,
                "total_checks": len(self.checks),
                "passed": self.passed,
                "failed": self.failed,
                "by_family": self.counts_by_family(),
            },
            "checks": [check.to_json() for check in self.checks],
        }
