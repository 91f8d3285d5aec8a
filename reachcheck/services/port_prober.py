"""Bounded port prober built on the nmap binary."""

import logging
import os
import shlex
import subprocess
from typing import List, Sequence

from reachcheck.models.port_scan import ScanReport, ScanStatus
from reachcheck.utils.ip_utils import is_valid_port_spec
from reachcheck.utils.nmap_xml import parse_nmap_xml


logger = logging.getLogger(__name__)


def _supports_syn_scan() -> bool:
    if os.name == "nt":
        return False
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        return False
    return geteuid() == 0


def protocol_name(udp: bool) -> str:
    return "udp" if udp else "tcp"


class PortProber:
    """Runs one nmap port probe per call, never past its deadline."""

    def __init__(self, nmap_path: str = "nmap"):
        """Initialize the prober.

        Args:
            nmap_path: nmap executable name or path.
        """
        self.nmap_path = nmap_path
        self._syn_scan_supported = _supports_syn_scan()

    def build_command(self, address: str, port: str, udp: bool) -> List[str]:
        """Build the nmap command line for a single probe.

        Exactly one scan mode is selected: -sU for UDP, otherwise a TCP SYN
        scan when running as root and a TCP connect scan when not.

        Args:
            address: Target host or IP.
            port: nmap port expression.
            udp: Probe UDP instead of TCP.

        Returns:
            List[str]: Command and arguments.
        """
        if udp:
            mode = "-sU"
        elif self._syn_scan_supported:
            mode = "-sS"
        else:
            mode = "-sT"
        return [self.nmap_path, mode, "-p", port, "-oX", "-", address]

    def _run(self, command: Sequence[str], timeout: float) -> subprocess.CompletedProcess:
        logger.info(f"nmap cmd: {' '.join(shlex.quote(part) for part in command)}")
        return subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout,
            check=False,
        )

    def probe(self, address: str, port: str, udp: bool, timeout: float) -> ScanReport:
        """Probe one port on one target within a deadline.

        The nmap child process is killed when the timeout elapses, so this call
        returns no later than the deadline plus process teardown.

        Args:
            address: Target host or IP.
            port: nmap port expression (e.g. "443").
            udp: Probe UDP instead of TCP.
            timeout: Deadline in seconds.

        Returns:
            ScanReport: AVAILABLE with nmap's elapsed time as latency, or a
                failure status (NO_HOSTS, SETUP_FAILED, SCAN_FAILED, TIMEOUT).
        """
        if not address or not address.strip():
            return ScanReport.failed(ScanStatus.SETUP_FAILED, "empty target address")
        if address.startswith("-"):
            return ScanReport.failed(ScanStatus.SETUP_FAILED, f"invalid target address: {address!r}")
        if not is_valid_port_spec(port):
            return ScanReport.failed(ScanStatus.SETUP_FAILED, f"invalid port: {port!r}")
        if timeout <= 0:
            return ScanReport.failed(ScanStatus.SETUP_FAILED, f"invalid timeout: {timeout}")

        command = self.build_command(address, port, udp)

        try:
            completed = self._run(command, timeout)
        except subprocess.TimeoutExpired:
            logger.warning(
                f"nmap {protocol_name(udp)} probe of {address}:{port} timed out after {timeout}s"
            )
            return ScanReport.failed(ScanStatus.TIMEOUT, f"timed out after {timeout}s")
        except OSError as e:
            logger.error(f"Unable to start nmap ({self.nmap_path}): {e}")
            return ScanReport.failed(ScanStatus.SETUP_FAILED, f"unable to start nmap: {e}")

        warnings = [line.strip() for line in (completed.stderr or "").splitlines() if line.strip()]
        for warning in warnings:
            logger.warning(f"nmap warning for {address}:{port}: {warning}")

        if completed.returncode != 0:
            error = warnings[-1] if warnings else f"nmap exited with code {completed.returncode}"
            logger.error(f"nmap scan of {address}:{port} failed ({completed.returncode}): {error}")
            return ScanReport.failed(ScanStatus.SCAN_FAILED, error, warnings)

        try:
            run = parse_nmap_xml(completed.stdout)
        except ValueError as e:
            logger.error(f"nmap scan of {address}:{port} returned bad output: {e}")
            return ScanReport.failed(ScanStatus.SCAN_FAILED, str(e), warnings)

        if run.hosts_up == 0:
            return ScanReport.failed(ScanStatus.NO_HOSTS, "no hosts up", warnings)

        return ScanReport(
            status=ScanStatus.AVAILABLE,
            latency=run.elapsed,
            port_state=run.first_port_state(),
            warnings=warnings,
        )
