"""Human-readable verdict lines for each check family."""

from reachcheck.models.ping import PacketEvent, PingStatistics
from reachcheck.models.port_scan import ScanReport
from reachcheck.models.resolution import ResolverCheckResult


def _ms(seconds: float) -> str:
    return f"{seconds * 1000:.3f}"


def format_resolution(result: ResolverCheckResult) -> str:
    """Format the resolver fallback verdict.

    Examples:
        >>> format_resolution(ResolverCheckResult(True, "8.8.8.8:53", "example.org", ["93.184.216.34"]))
        'successful resolved 8.8.8.8:53 example.org [93.184.216.34]'
    """
    if not result.resolved:
        return "resolving failed"
    return (
        f"successful resolved {result.resolver} {result.hostname} "
        f"[{', '.join(result.addresses)}]"
    )


def format_scan(protocol: str, target: str, port: str, report: ScanReport) -> str:
    """Format a port probe verdict.

    Examples:
        >>> from reachcheck.models.port_scan import ScanStatus
        >>> format_scan("tcp", "10.0.0.1", "443", ScanReport(ScanStatus.AVAILABLE, 0.25, "open"))
        'ok scan tcp 10.0.0.1 443 latency: 0.25 sec state: open'
    """
    if report.available:
        line = f"ok scan {protocol} {target} {port} latency: {report.latency:g} sec"
        if report.port_state:
            line += f" state: {report.port_state}"
        return line

    reason = report.status.value.lower()
    if report.error:
        reason += f": {report.error}"
    return f"fail scan {protocol} {target} {port} ({reason})"


def format_ping_header(address: str, ip: str) -> str:
    return f"PING {address} ({ip}):"


def format_packet(event: PacketEvent) -> str:
    line = f"{event.nbytes} bytes from {event.address}: icmp_seq={event.seq} time={_ms(event.rtt)} ms"
    if event.duplicate:
        line += f" ttl={event.ttl} (DUP!)"
    return line


def format_ping_statistics(stats: PingStatistics) -> list[str]:
    """Format the ping statistics block.

    Returns:
        list[str]: Lines of the block, starting with a blank separator line.
    """
    return [
        "",
        f"--- {stats.address} ping statistics ---",
        f"{stats.packets_sent} packets transmitted, {stats.packets_received} packets received, "
        f"{stats.packet_loss:g}% packet loss",
        f"round-trip min/avg/max/stddev = {_ms(stats.min_rtt)}/{_ms(stats.avg_rtt)}/"
        f"{_ms(stats.max_rtt)}/{_ms(stats.stddev_rtt)} ms",
        "",
    ]


def format_ping_failure(target: str, error: str) -> str:
    return f"ping failed {target}: {error}"
