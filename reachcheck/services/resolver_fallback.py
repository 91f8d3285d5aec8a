"""Resolver fallback engine.

Tries DNS resolvers in priority order until one of them resolves any of the
configured hostnames.
"""

import logging
from typing import Sequence

import dns.exception
import dns.resolver

from reachcheck.models.resolution import ResolutionResult, ResolverCheckResult
from reachcheck.utils.ip_utils import is_valid_ip, parse_endpoint


logger = logging.getLogger(__name__)

# Forward lookup record types, queried in this order
RECORD_TYPES = ("A", "AAAA")


def build_resolver(endpoint: str, timeout: float) -> dns.resolver.Resolver:
    """Build a resolver bound to a single nameserver endpoint.

    The system resolver configuration is ignored so that every query goes to
    the given endpoint only.

    Args:
        endpoint: Resolver endpoint ("ip:port", "[ipv6]:port" or bare IP).
        timeout: Per-query and total lifetime in seconds.

    Returns:
        dns.resolver.Resolver: Configured resolver.

    Raises:
        ValueError: If the endpoint is malformed or its host is not an IP address.
    """
    host, port = parse_endpoint(endpoint)
    if not is_valid_ip(host):
        raise ValueError(f"Resolver endpoint must be an IP address: {endpoint}")

    resolver = dns.resolver.Resolver(configure=False)
    resolver.nameservers = [host]
    resolver.port = port
    resolver.timeout = timeout
    resolver.lifetime = timeout
    return resolver


def lookup_host(endpoint: str, hostname: str, timeout: float) -> ResolutionResult:
    """Resolve one hostname through one resolver endpoint.

    Queries A then AAAA records. Errors never propagate: a failed lookup is
    an empty result carrying the exception name.

    Args:
        endpoint: Resolver endpoint to query.
        hostname: Hostname to resolve.
        timeout: Query timeout in seconds.

    Returns:
        ResolutionResult: Addresses found (possibly empty).
    """
    result = ResolutionResult(hostname=hostname, resolver=endpoint)

    try:
        resolver = build_resolver(endpoint, timeout)
    except ValueError as e:
        logger.warning(f"Unusable resolver endpoint {endpoint}: {e}")
        result.error = type(e).__name__
        return result

    for rdtype in RECORD_TYPES:
        try:
            answers = resolver.resolve(hostname, rdtype)
            result.addresses.extend(str(rdata) for rdata in answers)
        except dns.resolver.NoAnswer:
            # Name exists but has no record of this type
            continue
        except (dns.resolver.NXDOMAIN, dns.exception.Timeout) as e:
            # Further record types would fail the same way
            result.error = type(e).__name__
            break
        except (dns.exception.DNSException, OSError) as e:
            result.error = type(e).__name__
            continue

    if result.addresses:
        result.error = None

    logger.debug(
        f"Lookup {hostname} via {endpoint}: "
        f"{result.addresses or result.error or 'no addresses'}"
    )
    return result


def lookup_hosts(
    endpoint: str,
    hostnames: Sequence[str],
    timeout: float,
    stop_on_success: bool = True,
) -> list[ResolutionResult]:
    """Resolve hostnames in order through a single resolver (one resolver trial).

    Args:
        endpoint: Resolver endpoint to query.
        hostnames: Hostnames to resolve, in order.
        timeout: Per-lookup timeout in seconds.
        stop_on_success: Stop at the first hostname that resolves.

    Returns:
        list[ResolutionResult]: One result per hostname looked up, in order. When
            stop_on_success ends the trial early the last element is the
            successful result.
    """
    results: list[ResolutionResult] = []
    for hostname in hostnames:
        result = lookup_host(endpoint, hostname, timeout)
        results.append(result)
        if stop_on_success and result.is_resolved():
            break
    return results


def check_resolving(
    resolvers: Sequence[str],
    hostnames: Sequence[str],
    timeout: float,
) -> ResolverCheckResult:
    """Try resolvers in order until one resolves any hostname.

    Each (resolver, hostname) pair is looked up at most once, sequentially.
    The first non-empty address set ends the trial.

    Args:
        resolvers: Resolver endpoints in priority order.
        hostnames: Hostnames to test, in order.
        timeout: Per-lookup timeout in seconds.

    Returns:
        ResolverCheckResult: Winning resolver/hostname/addresses, or resolved=False
            after every combination was exhausted.
    """
    outcome = ResolverCheckResult(resolved=False)

    if not resolvers or not hostnames:
        logger.info("Resolver check skipped: no resolvers or no hostnames configured")
        return outcome

    for endpoint in resolvers:
        results = lookup_hosts(endpoint, hostnames, timeout, stop_on_success=True)
        outcome.attempts.extend(results)

        if results and results[-1].is_resolved():
            winner = results[-1]
            outcome.resolved = True
            outcome.resolver = endpoint
            outcome.hostname = winner.hostname
            outcome.addresses = list(winner.addresses)
            logger.info(
                f"Resolved {winner.hostname} via {endpoint}: {', '.join(winner.addresses)}"
            )
            return outcome

        logger.info(f"Resolver {endpoint} failed for all hostnames, trying next")

    logger.warning(
        f"Resolving failed: {len(outcome.attempts)} lookups over {len(resolvers)} resolvers"
    )
    return outcome
