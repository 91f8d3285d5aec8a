"""Unit tests for the resolver fallback engine."""

import pytest
from unittest.mock import patch, MagicMock
import dns.resolver
import dns.exception

from reachcheck.models.resolution import ResolutionResult
from reachcheck.services.resolver_fallback import (
    build_resolver,
    check_resolving,
    lookup_host,
    lookup_hosts,
)


class TestBuildResolver:
    """Test build_resolver() endpoint handling."""

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_binds_single_nameserver(self, mock_resolver_class):
        """Test resolver ignores system config and targets one endpoint."""
        mock_resolver = MagicMock()
        mock_resolver_class.return_value = mock_resolver

        resolver = build_resolver("8.8.4.4:5353", timeout=3)

        mock_resolver_class.assert_called_once_with(configure=False)
        assert resolver is mock_resolver
        assert mock_resolver.nameservers == ["8.8.4.4"]
        assert mock_resolver.port == 5353
        assert mock_resolver.timeout == 3
        assert mock_resolver.lifetime == 3

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_hostname_endpoint_rejected(self, mock_resolver_class):
        """Test a resolver given by name is refused instead of looked up."""
        with pytest.raises(ValueError, match="must be an IP address"):
            build_resolver("dns.google:53", timeout=5)

        mock_resolver_class.assert_not_called()

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_ipv6_endpoint(self, mock_resolver_class):
        mock_resolver = MagicMock()
        mock_resolver_class.return_value = mock_resolver

        build_resolver("[2001:4860:4860::8888]:53", timeout=5)

        assert mock_resolver.nameservers == ["2001:4860:4860::8888"]
        assert mock_resolver.port == 53

    def test_invalid_endpoint_raises(self):
        """Test malformed endpoints raise ValueError."""
        with pytest.raises(ValueError):
            build_resolver("8.8.8.8:99999", timeout=5)


class TestLookupHost:
    """Test lookup_host() record handling."""

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_collects_a_and_aaaa(self, mock_resolver_class):
        """Test addresses from both record types are collected in order."""
        mock_resolver = MagicMock()
        mock_resolver.resolve.side_effect = [["93.184.216.34"], ["2606:2800:220:1::1"]]
        mock_resolver_class.return_value = mock_resolver

        result = lookup_host("8.8.8.8:53", "example.org", timeout=5)

        assert result.is_resolved() is True
        assert result.addresses == ["93.184.216.34", "2606:2800:220:1::1"]
        assert result.resolver == "8.8.8.8:53"
        assert result.error is None
        assert [c.args for c in mock_resolver.resolve.call_args_list] == [
            ("example.org", "A"),
            ("example.org", "AAAA"),
        ]

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_no_aaaa_record(self, mock_resolver_class):
        """Test NoAnswer for AAAA keeps the A addresses."""
        mock_resolver = MagicMock()
        mock_resolver.resolve.side_effect = [["10.0.0.1"], dns.resolver.NoAnswer()]
        mock_resolver_class.return_value = mock_resolver

        result = lookup_host("8.8.8.8:53", "ipv4only.example", timeout=5)

        assert result.addresses == ["10.0.0.1"]
        assert result.error is None

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_nxdomain_stops_lookup(self, mock_resolver_class):
        """Test NXDOMAIN is an empty result and AAAA is not queried."""
        mock_resolver = MagicMock()
        mock_resolver.resolve.side_effect = dns.resolver.NXDOMAIN()
        mock_resolver_class.return_value = mock_resolver

        result = lookup_host("8.8.8.8:53", "missing.example", timeout=5)

        assert result.is_resolved() is False
        assert result.addresses == []
        assert result.error == "NXDOMAIN"
        assert mock_resolver.resolve.call_count == 1

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_timeout_is_empty_result(self, mock_resolver_class):
        """Test a timeout never propagates out of the lookup."""
        mock_resolver = MagicMock()
        mock_resolver.resolve.side_effect = dns.exception.Timeout()
        mock_resolver_class.return_value = mock_resolver

        result = lookup_host("192.0.2.53:53", "example.org", timeout=1)

        assert result.is_resolved() is False
        assert result.error == "Timeout"
        assert mock_resolver.resolve.call_count == 1

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_other_dns_error_tries_next_type(self, mock_resolver_class):
        """Test generic DNS errors move on to the next record type."""
        mock_resolver = MagicMock()
        mock_resolver.resolve.side_effect = [
            dns.resolver.NoNameservers(),
            ["2001:db8::1"],
        ]
        mock_resolver_class.return_value = mock_resolver

        result = lookup_host("8.8.8.8:53", "example.org", timeout=5)

        assert result.addresses == ["2001:db8::1"]
        assert result.error is None

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_unusable_endpoint(self, mock_resolver_class):
        """Test a malformed endpoint yields an empty result without querying."""
        result = lookup_host("8.8.8.8:notaport", "example.org", timeout=5)

        assert result.is_resolved() is False
        assert result.error == "ValueError"
        mock_resolver_class.assert_not_called()

    @patch("reachcheck.services.resolver_fallback.dns.resolver.Resolver")
    def test_hostname_endpoint_is_empty_result(self, mock_resolver_class):
        """Test a named resolver endpoint fails the lookup without blocking on it."""
        result = lookup_host("dns.google:53", "example.org", timeout=5)

        assert result.is_resolved() is False
        assert result.error == "ValueError"
        mock_resolver_class.assert_not_called()


def _fake_lookup(resolvable):
    """Build a lookup_host replacement resolving only the given pairs."""

    def lookup(endpoint, hostname, timeout):
        addresses = list(resolvable.get((endpoint, hostname), []))
        return ResolutionResult(hostname=hostname, addresses=addresses, resolver=endpoint)

    return lookup


class TestLookupHosts:
    """Test lookup_hosts() single resolver trial."""

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_stops_on_first_success(self, mock_lookup):
        """Test later hostnames are skipped after a success."""
        mock_lookup.side_effect = _fake_lookup({("r1", "b.example"): ["10.0.0.2"]})

        results = lookup_hosts("r1", ["a.example", "b.example", "c.example"], timeout=5)

        assert [r.hostname for r in results] == ["a.example", "b.example"]
        assert results[-1].is_resolved() is True

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_all_hosts_without_stop(self, mock_lookup):
        """Test every hostname is looked up when stop_on_success is off."""
        mock_lookup.side_effect = _fake_lookup({("r1", "a.example"): ["10.0.0.1"]})

        results = lookup_hosts("r1", ["a.example", "b.example"], timeout=5, stop_on_success=False)

        assert [r.is_resolved() for r in results] == [True, False]


class TestCheckResolving:
    """Test check_resolving() fallback order."""

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_first_pair_wins(self, mock_lookup):
        """Test a success on the first pair ends the trial immediately."""
        mock_lookup.side_effect = _fake_lookup({("r1", "a.example"): ["10.0.0.1"]})

        result = check_resolving(["r1", "r2"], ["a.example", "b.example"], timeout=5)

        assert result.resolved is True
        assert result.resolver == "r1"
        assert result.hostname == "a.example"
        assert result.addresses == ["10.0.0.1"]
        assert mock_lookup.call_count == 1

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_falls_back_to_next_resolver(self, mock_lookup):
        """Test the next resolver is tried after all hostnames failed."""
        mock_lookup.side_effect = _fake_lookup({("r2", "b.example"): ["10.0.0.2"]})

        result = check_resolving(["r1", "r2", "r3"], ["a.example", "b.example"], timeout=5)

        assert result.resolved is True
        assert result.resolver == "r2"
        assert result.hostname == "b.example"
        assert [(a.resolver, a.hostname) for a in result.attempts] == [
            ("r1", "a.example"),
            ("r1", "b.example"),
            ("r2", "a.example"),
            ("r2", "b.example"),
        ]

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_exhaustion(self, mock_lookup):
        """Test every pair is tried exactly once before failing."""
        mock_lookup.side_effect = _fake_lookup({})

        result = check_resolving(["r1", "r2"], ["a.example", "b.example", "c.example"], timeout=5)

        assert result.resolved is False
        assert bool(result) is False
        assert result.resolver is None
        assert result.addresses == []
        assert mock_lookup.call_count == 6

    @patch("reachcheck.services.resolver_fallback.lookup_host")
    def test_empty_lists(self, mock_lookup):
        """Test empty resolver or hostname lists fail without lookups."""
        assert check_resolving([], ["a.example"], timeout=5).resolved is False
        assert check_resolving(["r1"], [], timeout=5).resolved is False
        mock_lookup.assert_not_called()
