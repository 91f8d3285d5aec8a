"""Parsing of nmap XML output (-oX)."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


@dataclass
class NmapRunResult:
    """The parts of an nmap run the port prober needs.

    Attributes:
        hosts_up: Number of hosts reported with status "up".
        elapsed: Scan duration in seconds from runstats/finished@elapsed.
        port_states: Port state per "portid/protocol" of the first up host.
    """

    hosts_up: int = 0
    elapsed: float = 0.0
    port_states: dict[str, str] = field(default_factory=dict)

    def first_port_state(self) -> str | None:
        """Return the state of the first scanned port, if any."""
        for state in self.port_states.values():
            return state
        return None


def _safe_float(value: str | None) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_nmap_xml(xml_text: str) -> NmapRunResult:
    """Parse nmap XML output.

    Args:
        xml_text: Complete XML document written by nmap on stdout.

    Returns:
        NmapRunResult: Up host count, elapsed time and port states.

    Raises:
        ValueError: If the document is empty, not XML, or not an nmaprun document.
    """
    if not xml_text or not xml_text.strip():
        raise ValueError("nmap produced no XML output")

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValueError(f"Unparseable nmap XML output: {e}") from e

    if root.tag != "nmaprun":
        raise ValueError(f"Unexpected nmap XML root element: {root.tag}")

    result = NmapRunResult()

    for host in root.findall("host"):
        status = host.find("status")
        if status is not None and status.get("state") != "up":
            continue
        result.hosts_up += 1

        if result.port_states:
            continue
        for port in host.findall("ports/port"):
            state = port.find("state")
            if state is None:
                continue
            key = f"{port.get('portid')}/{port.get('protocol', 'tcp')}"
            result.port_states[key] = state.get("state", "unknown")

    finished = root.find("runstats/finished")
    if finished is not None:
        result.elapsed = _safe_float(finished.get("elapsed"))
    else:
        logger.debug("nmap XML has no runstats/finished element")

    return result
