"""ICMP ping event and statistics models."""

import math
from dataclasses import dataclass, field


@dataclass
class PacketEvent:
    """A single echo reply received during a ping run.

    Attributes:
        nbytes: Size of the ICMP reply in bytes.
        address: Source IP address of the reply.
        seq: ICMP sequence number.
        rtt: Round-trip time in seconds.
        ttl: TTL of the reply, when the ping primitive reports it.
        duplicate: True if this sequence number was already answered.
    """

    nbytes: int
    address: str
    seq: int
    rtt: float
    ttl: int | None = None
    duplicate: bool = False


@dataclass
class PingStatistics:
    """Aggregate statistics of a completed ping run.

    Attributes:
        address: Target as configured.
        ip: Resolved IP address that was pinged.
        packets_sent: Echo requests sent.
        packets_received: Distinct echo replies received (duplicates excluded).
        packets_duplicate: Duplicate replies received.
        rtts: Round-trip times of distinct replies, in seconds.

    Computed Properties:
        packet_loss: Percentage of requests without a reply (0.0 to 100.0).
        min_rtt, avg_rtt, max_rtt, stddev_rtt: RTT aggregates in seconds,
            0.0 when nothing was received. stddev_rtt is the population
            standard deviation.

    Invariants:
        - packets_received <= packets_sent
        - min_rtt <= avg_rtt <= max_rtt
    """

    address: str
    ip: str
    packets_sent: int = 0
    packets_received: int = 0
    packets_duplicate: int = 0
    rtts: list[float] = field(default_factory=list)

    @property
    def packet_loss(self) -> float:
        if self.packets_sent == 0:
            return 0.0
        lost = self.packets_sent - self.packets_received
        return lost / self.packets_sent * 100.0

    @property
    def min_rtt(self) -> float:
        return min(self.rtts) if self.rtts else 0.0

    @property
    def max_rtt(self) -> float:
        return max(self.rtts) if self.rtts else 0.0

    @property
    def avg_rtt(self) -> float:
        if not self.rtts:
            return 0.0
        return sum(self.rtts) / len(self.rtts)

    @property
    def stddev_rtt(self) -> float:
        if not self.rtts:
            return 0.0
        avg = self.avg_rtt
        variance = sum((rtt - avg) ** 2 for rtt in self.rtts) / len(self.rtts)
        return math.sqrt(variance)

    def to_json(self) -> dict:
        """Serialize to JSON-compatible dict.

        Returns:
            dict: JSON-serializable representation with RTTs in seconds.
        """
        return {
            "address": self.address,
            "ip": self.ip,
            "packets_sent": self.packets_sent,
            "packets_received": self.packets_received,
            "packets_duplicate": self.packets_duplicate,
            "packet_loss": self.packet_loss,
            "min_rtt": self.min_rtt,
            "avg_rtt": self.avg_rtt,
            "max_rtt": self.max_rtt,
            "stddev_rtt": self.stddev_rtt,
        }


@dataclass
class PingOutcome:
    """Tagged result of a whole ping check.

    Attributes:
        target: Target as configured.
        events: Replies received, in arrival order.
        statistics: Aggregate statistics, None if the run failed.
        error: Failure description, None on success.
    """

    target: str
    events: list[PacketEvent] = field(default_factory=list)
    statistics: PingStatistics | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """A ping check passes when it ran and got at least one reply."""
        return (
            self.error is None
            and self.statistics is not None
            and self.statistics.packets_received > 0
        )
