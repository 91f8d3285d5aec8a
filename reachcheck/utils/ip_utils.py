"""Address, endpoint and port expression utilities."""

import ipaddress
import re


DEFAULT_DNS_PORT = 53

_PORT_RANGE_RE = re.compile(r"^(\d+)(?:-(\d+))?$")


def is_valid_ip(value: str) -> bool:
    """Validate if string is a valid IPv4 or IPv6 address.

    Args:
        value: Address string to validate.

    Returns:
        bool: True if valid IP address, False otherwise.

    Examples:
        >>> is_valid_ip("8.8.8.8")
        True
        >>> is_valid_ip("2001:4860:4860::8888")
        True
        >>> is_valid_ip("dns.google")
        False
    """
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def parse_endpoint(endpoint: str, default_port: int = DEFAULT_DNS_PORT) -> tuple[str, int]:
    """Split a resolver endpoint into host and port.

    Accepts "host:port", "[ipv6]:port", a bare IPv4/hostname or a bare IPv6
    address. A missing port falls back to default_port.

    Args:
        endpoint: Endpoint string from configuration.
        default_port: Port used when the endpoint has none.

    Returns:
        tuple[str, int]: (host, port)

    Raises:
        ValueError: If the endpoint is empty, malformed or the port is out of range.

    Examples:
        >>> parse_endpoint("8.8.8.8:53")
        ('8.8.8.8', 53)
        >>> parse_endpoint("[2001:4860:4860::8888]:5353")
        ('2001:4860:4860::8888', 5353)
        >>> parse_endpoint("1.1.1.1")
        ('1.1.1.1', 53)
    """
    value = endpoint.strip()
    if not value:
        raise ValueError("Resolver endpoint cannot be empty")

    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep or not host:
            raise ValueError(f"Invalid resolver endpoint: {endpoint}")
        if not rest:
            port_str = ""
        elif rest.startswith(":"):
            port_str = rest[1:]
        else:
            raise ValueError(f"Invalid resolver endpoint: {endpoint}")
    elif value.count(":") > 1:
        # Bare IPv6 address without port
        host, port_str = value, ""
    else:
        host, _, port_str = value.partition(":")

    if not host:
        raise ValueError(f"Invalid resolver endpoint: {endpoint}")

    if not port_str:
        return host, default_port

    if not port_str.isdigit():
        raise ValueError(f"Invalid port in resolver endpoint: {endpoint}")
    port = int(port_str)
    if not 1 <= port <= 65535:
        raise ValueError(f"Port out of range in resolver endpoint: {endpoint}")
    return host, port


def is_valid_port_spec(spec: str) -> bool:
    """Validate an nmap port expression.

    Accepts comma-separated single ports and ranges, each bound within
    1..65535 (e.g. "53", "80,443", "8000-8100").

    Args:
        spec: Port expression to validate.

    Returns:
        bool: True if every element is a valid port or ascending range.

    Examples:
        >>> is_valid_port_spec("80,443")
        True
        >>> is_valid_port_spec("0")
        False
        >>> is_valid_port_spec("100-90")
        False
    """
    if not spec or not spec.strip():
        return False

    for part in spec.split(","):
        match = _PORT_RANGE_RE.match(part.strip())
        if match is None:
            return False
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else start
        if not (1 <= start <= 65535 and 1 <= end <= 65535 and start <= end):
            return False
    return True
