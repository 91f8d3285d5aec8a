"""pytest fixtures for testing."""

import logging

import pytest
from unittest.mock import MagicMock


def build_nmap_xml(
    hosts_up: int = 1,
    port: str = "443",
    protocol: str = "tcp",
    state: str = "open",
    elapsed: str = "0.42",
) -> str:
    """Build a minimal nmap -oX document."""
    hosts = "".join(
        f"""
  <host>
    <status state="up" reason="syn-ack"/>
    <address addr="192.0.2.{10 + index}" addrtype="ipv4"/>
    <ports>
      <port protocol="{protocol}" portid="{port}">
        <state state="{state}" reason="syn-ack" reason_ttl="0"/>
      </port>
    </ports>
  </host>"""
        for index in range(hosts_up)
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<nmaprun scanner="nmap" args="nmap -oX -" version="7.94">{hosts}
  <runstats>
    <finished time="1700000000" elapsed="{elapsed}" exit="success"/>
    <hosts up="{hosts_up}" down="{0 if hosts_up else 1}" total="1"/>
  </runstats>
</nmaprun>
"""


@pytest.fixture
def nmap_xml():
    """Factory for nmap XML output documents."""
    return build_nmap_xml


@pytest.fixture
def mock_echo():
    """Echo primitive answering every request in 10, 20, 30, 40 ms."""
    return MagicMock(side_effect=[0.010, 0.020, 0.030, 0.040])


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
