"""Port probe result models."""

from dataclasses import dataclass, field
from enum import Enum


class ScanStatus(Enum):
    """Port probe outcome classification."""

    AVAILABLE = "AVAILABLE"  # At least one responsive host reported
    NO_HOSTS = "NO_HOSTS"  # Scan completed but no host was up
    SETUP_FAILED = "SETUP_FAILED"  # Prober could not be started
    SCAN_FAILED = "SCAN_FAILED"  # Non-zero exit or unparseable output
    TIMEOUT = "TIMEOUT"  # Deadline elapsed, probe killed


@dataclass
class ScanReport:
    """Result of a single bounded port probe.

    Attributes:
        status: Classification of the probe outcome.
        latency: Elapsed scan time in seconds as reported by nmap (0.0 unless available).
        port_state: Port state reported by nmap (open, closed, filtered, ...), if any.
        warnings: Warning lines emitted by the prober.
        error: Human-readable error description for failed probes.
    """

    status: ScanStatus
    latency: float = 0.0
    port_state: str | None = None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def available(self) -> bool:
        """Check if the target answered the probe.

        Returns:
            bool: True if status is AVAILABLE, False otherwise.
        """
        return self.status == ScanStatus.AVAILABLE

    @classmethod
    def failed(
        cls, status: ScanStatus, error: str, warnings: list[str] | None = None
    ) -> "ScanReport":
        """Build a non-available report with zero latency."""
        return cls(status=status, latency=0.0, warnings=warnings or [], error=error)
