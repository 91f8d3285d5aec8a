"""DNS resolution result models."""

from dataclasses import dataclass, field


@dataclass
class ResolutionResult:
    """Result of a single hostname lookup against one resolver.

    Attributes:
        hostname: Hostname that was looked up.
        addresses: Resolved IPv4/IPv6 addresses (empty on failure).
        resolver: Resolver endpoint ("host:port") that was queried.
        error: Exception class name when the lookup failed, None otherwise.
    """

    hostname: str
    addresses: list[str] = field(default_factory=list)
    resolver: str = ""
    error: str | None = None

    def is_resolved(self) -> bool:
        """Check if the lookup produced at least one address.

        Returns:
            bool: True if addresses is non-empty, False otherwise.
        """
        return bool(self.addresses)


@dataclass
class ResolverCheckResult:
    """Overall outcome of a resolver fallback trial.

    Attributes:
        resolved: True if any resolver returned addresses for any hostname.
        resolver: Winning resolver endpoint (None on failure).
        hostname: Hostname that resolved (None on failure).
        addresses: Addresses of the winning lookup.
        attempts: Every lookup performed, in trial order.

    Invariants:
        - resolved is True iff the last attempt is resolved.
        - No attempt follows the first resolved one.
    """

    resolved: bool
    resolver: str | None = None
    hostname: str | None = None
    addresses: list[str] = field(default_factory=list)
    attempts: list[ResolutionResult] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.resolved
