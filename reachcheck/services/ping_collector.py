"""ICMP ping statistics collector built on ping3."""

import logging
import socket
import time
from typing import Callable, Iterator

import ping3
from ping3.errors import PingError

from reachcheck.models.ping import PacketEvent, PingStatistics


logger = logging.getLogger(__name__)

DEFAULT_PACKET_TIMEOUT = 2.0
DEFAULT_INTERVAL = 1.0
DEFAULT_PAYLOAD_SIZE = 56
ICMP_HEADER_SIZE = 8


class PingSetupError(Exception):
    """The ping run could not be constructed (bad target or parameters)."""


class PingRunError(Exception):
    """The ping run failed while exchanging packets."""


class PingRun:
    """A count-bounded, synchronous sequence of echo exchanges.

    Iterating the run sends the echo requests one after another and yields a
    PacketEvent for every reply. Lost packets yield nothing. Once iteration
    completes, statistics holds the aggregate record.

    Attributes:
        address: Target as configured.
        ip: Resolved IP address being pinged.
        count: Number of echo requests to send.
        statistics: Aggregate statistics, None until the run completes.
    """

    def __init__(
        self,
        address: str,
        ip: str,
        count: int,
        timeout: float,
        interval: float,
        size: int,
        echo: Callable,
        sleep: Callable[[float], None],
    ):
        self.address = address
        self.ip = ip
        self.count = count
        self.timeout = timeout
        self.interval = interval
        self.size = size
        self.statistics: PingStatistics | None = None
        self._echo = echo
        self._sleep = sleep
        self._started = False

    def __iter__(self) -> Iterator[PacketEvent]:
        if self._started:
            raise RuntimeError(f"Ping run for {self.address} already consumed")
        self._started = True

        stats = PingStatistics(address=self.address, ip=self.ip)
        for seq in range(self.count):
            if seq and self.interval > 0:
                self._sleep(self.interval)

            delay = self._send(seq)
            stats.packets_sent += 1

            if delay is None:
                logger.debug(f"No reply from {self.ip} for icmp_seq={seq}")
                continue

            stats.packets_received += 1
            stats.rtts.append(delay)
            yield PacketEvent(
                nbytes=self.size + ICMP_HEADER_SIZE,
                address=self.ip,
                seq=seq,
                rtt=delay,
            )

        self.statistics = stats
        logger.info(
            f"Ping {self.address} finished: {stats.packets_received}/{stats.packets_sent} received"
        )

    def _send(self, seq: int) -> float | None:
        """Send one echo request and wait for its reply.

        An ICMP error reply (destination unreachable, time exceeded) counts as
        a lost packet, like a timeout.

        Returns:
            float | None: Round-trip time in seconds, None if no echo reply arrived.

        Raises:
            PingRunError: If the ICMP socket cannot be used.
        """
        try:
            delay = self._echo(
                self.ip, timeout=self.timeout, unit="s", seq=seq, size=self.size
            )
        except PermissionError as e:
            raise PingRunError(
                f"permission denied sending ICMP to {self.ip} (raw sockets need privileges): {e}"
            ) from e
        except (PingError, OSError) as e:
            raise PingRunError(f"echo request to {self.ip} failed: {e}") from e

        # ping3 returns False on an ICMP error reply and None on timeout
        if delay is False:
            logger.debug(f"ICMP error reply from {self.ip} for icmp_seq={seq}")
            return None
        return delay


class PingCollector:
    """Builds ping runs with shared per-packet settings."""

    def __init__(
        self,
        timeout: float = DEFAULT_PACKET_TIMEOUT,
        interval: float = DEFAULT_INTERVAL,
        size: int = DEFAULT_PAYLOAD_SIZE,
        echo: Callable | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the collector.

        Args:
            timeout: Default seconds to wait for each reply.
            interval: Default seconds between echo requests.
            size: ICMP payload size in bytes.
            echo: Echo primitive with the ping3.ping signature (defaults to ping3.ping).
            sleep: Sleep function used between requests.
        """
        self.timeout = timeout
        self.interval = interval
        self.size = size
        self._echo = echo or ping3.ping
        self._sleep = sleep

    def start(
        self,
        address: str,
        count: int,
        timeout: float | None = None,
        interval: float | None = None,
    ) -> PingRun:
        """Construct a ping run bound to the target address.

        Args:
            address: Target host or IP.
            count: Number of echo requests to send.
            timeout: Per-packet timeout override in seconds.
            interval: Inter-packet interval override in seconds.

        Returns:
            PingRun: Run ready to be iterated.

        Raises:
            PingSetupError: If count is invalid or the target cannot be resolved.
        """
        if count < 1:
            raise PingSetupError(f"ping count must be at least 1, got {count}")

        try:
            ip = socket.gethostbyname(address)
        except (socket.gaierror, UnicodeError) as e:
            raise PingSetupError(f"unknown host {address}: {e}") from e

        return PingRun(
            address=address,
            ip=ip,
            count=count,
            timeout=self.timeout if timeout is None else timeout,
            interval=self.interval if interval is None else interval,
            size=self.size,
            echo=self._echo,
            sleep=self._sleep,
        )
