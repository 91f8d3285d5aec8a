"""Check orchestrator.

Runs every configured check sequentially (resolution, port scans, ping) and
writes one verdict per check.
"""

import logging
import sys
import time
from typing import Callable, TextIO

from reachcheck.config import Config, PingCheckSpec, PortCheckSpec, ResolverCheckSpec
from reachcheck.models.ping import PingOutcome
from reachcheck.models.run_report import CheckRecord, RunSummary
from reachcheck.services.logger import log_check_result, log_run_summary
from reachcheck.services.ping_collector import PingCollector, PingRunError, PingSetupError
from reachcheck.services.port_prober import PortProber
from reachcheck.services.resolver_fallback import check_resolving
from reachcheck.services import verdicts


logger = logging.getLogger(__name__)


class CheckOrchestrator:
    """Sequences the three check families and reports verdicts.

    Attributes:
        prober: Port prober used for nmap checks.
        collector: Ping collector used for ping checks.
        out: Stream receiving the verdict text.
    """

    def __init__(
        self,
        prober: PortProber | None = None,
        collector: PingCollector | None = None,
        out: TextIO | None = None,
    ):
        self.prober = prober or PortProber()
        self.collector = collector or PingCollector()
        self.out = out or sys.stdout

    def run(self, config: Config) -> RunSummary:
        """Run all configured checks and print results.

        Args:
            config: Loaded check list.

        Returns:
            RunSummary: One record per executed check.
        """
        start = time.time()
        summary = RunSummary()

        summary.add(
            self._guarded(
                "resolve",
                ",".join(config.resolver_check.hostnames),
                lambda: self.run_resolver_check(config.resolver_check),
            )
        )

        self._emit("")
        self._emit("Start scanning by nmap")
        self._emit("")
        for check in config.port_checks:
            summary.add(
                self._guarded(
                    "port",
                    f"{check.url}:{check.port}/{check.protocol}",
                    lambda check=check: self.run_port_check(check),
                )
            )

        self._emit("")
        self._emit("Start scanning with ping")
        self._emit("")
        for check in config.ping_checks:
            summary.add(
                self._guarded(
                    "ping",
                    check.url,
                    lambda check=check: self._ping_record(check, self.run_ping_check(check)),
                )
            )

        summary.duration_sec = time.time() - start
        log_run_summary(summary)
        return summary

    def run_resolver_check(self, spec: ResolverCheckSpec) -> CheckRecord:
        result = check_resolving(spec.dns_servers, spec.hostnames, spec.timeout_sec)
        self._emit(verdicts.format_resolution(result))

        record = CheckRecord(
            family="resolve",
            target=",".join(spec.hostnames),
            passed=result.resolved,
            detail={
                "resolver": result.resolver,
                "hostname": result.hostname,
                "addresses": result.addresses,
                "attempts": len(result.attempts),
            },
        )
        log_check_result(record.family, record.target, record.passed, record.detail)
        return record

    def run_port_check(self, spec: PortCheckSpec) -> CheckRecord:
        report = self.prober.probe(spec.url, spec.port, spec.udp, spec.timeout_sec)
        self._emit(verdicts.format_scan(spec.protocol, spec.url, spec.port, report))

        record = CheckRecord(
            family="port",
            target=f"{spec.url}:{spec.port}/{spec.protocol}",
            passed=report.available,
            detail={
                "status": report.status.value,
                "latency": report.latency,
                "port_state": report.port_state,
                "error": report.error,
            },
        )
        log_check_result(record.family, record.target, record.passed, record.detail)
        return record

    def run_ping_check(self, spec: PingCheckSpec) -> PingOutcome:
        """Run one ping check, streaming packet lines as replies arrive.

        Setup and run failures are captured in the outcome instead of being
        raised, so later checks still run.

        Args:
            spec: Ping check to run.

        Returns:
            PingOutcome: Events and statistics, or the error that stopped the run.
        """
        outcome = PingOutcome(target=spec.url)

        try:
            run = self.collector.start(
                spec.url, spec.count, timeout=spec.timeout_sec, interval=spec.interval_sec
            )
        except PingSetupError as e:
            logger.error(f"Unable to create pinger for {spec.url}: {e}")
            outcome.error = str(e)
            self._emit(verdicts.format_ping_failure(spec.url, outcome.error))
            return outcome

        self._emit(verdicts.format_ping_header(run.address, run.ip))
        try:
            for event in run:
                outcome.events.append(event)
                self._emit(verdicts.format_packet(event))
        except PingRunError as e:
            logger.error(f"Ping run for {spec.url} failed: {e}")
            outcome.error = str(e)
            self._emit(verdicts.format_ping_failure(spec.url, outcome.error))
            return outcome

        outcome.statistics = run.statistics
        for line in verdicts.format_ping_statistics(outcome.statistics):
            self._emit(line)
        return outcome

    def _ping_record(self, spec: PingCheckSpec, outcome: PingOutcome) -> CheckRecord:
        detail: dict = {"error": outcome.error}
        if outcome.statistics is not None:
            detail.update(outcome.statistics.to_json())

        record = CheckRecord(family="ping", target=spec.url, passed=outcome.ok, detail=detail)
        log_check_result(record.family, record.target, record.passed, record.detail)
        return record

    def _guarded(
        self, family: str, target: str, check: Callable[[], CheckRecord]
    ) -> CheckRecord:
        """Run one check, turning unexpected errors into a failed record."""
        try:
            return check()
        except Exception as e:
            logger.error(f"Unexpected error in {family} check {target}: {e}", exc_info=True)
            self._emit(f"{family} check {target} failed: {e}")
            return CheckRecord(family=family, target=target, passed=False, detail={"error": str(e)})

    def _emit(self, line: str) -> None:
        print(line, file=self.out, flush=True)
