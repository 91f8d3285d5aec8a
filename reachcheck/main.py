"""Main entry point for reachcheck."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from reachcheck.config import Config, ConfigError, Settings
from reachcheck.services.logger import resolve_log_level, setup_logging
from reachcheck.services.orchestrator import CheckOrchestrator
from reachcheck.services.ping_collector import PingCollector
from reachcheck.services.port_prober import PortProber
from reachcheck.services.report_writer import ReportWriter


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CHECKS_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reachcheck",
        description="Check DNS resolution, port availability and ping reachability of configured targets.",
    )
    parser.add_argument("file", help="config file path")
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="print default config to config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log progress at INFO level",
    )
    parser.add_argument(
        "--json-report",
        metavar="PATH",
        help="write a JSON report of the run to PATH",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main execution function.

    Returns:
        int: Exit code (0 all checks passed, 1 fatal error, 2 some check failed).
    """
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        setup_logging()
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL

    setup_logging(resolve_log_level(args.verbose or settings.verbose, settings.log_level))

    if args.print_config:
        try:
            Config.default().write_template(Path(args.file))
        except ConfigError as e:
            logger.error(f"Fatal error: {e}")
            return EXIT_FATAL
        return EXIT_OK

    try:
        config = Config.from_yaml(Path(args.file))
    except ConfigError as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL

    orchestrator = CheckOrchestrator(
        prober=PortProber(nmap_path=settings.nmap_path),
        collector=PingCollector(),
    )
    summary = orchestrator.run(config)

    if args.json_report:
        try:
            ReportWriter.write_json_report(summary, Path(args.json_report))
        except OSError as e:
            logger.error(f"Fatal error: failed to write report {args.json_report}: {e}")
            return EXIT_FATAL

    return EXIT_OK if summary.all_passed else EXIT_CHECKS_FAILED


if __name__ == "__main__":
    sys.exit(main())
