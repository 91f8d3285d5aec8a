"""Configuration module for reachcheck.

Loads the YAML check list, validates it against CONFIG_SCHEMA and maps it onto
immutable dataclasses. Operational settings come from environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from reachcheck.utils.ip_utils import is_valid_ip, is_valid_port_spec, parse_endpoint


logger = logging.getLogger(__name__)

MAX_TIMEOUT_SEC = 300
MAX_PING_COUNT = 1000
MAX_PING_INTERVAL_SEC = 60

DEFAULT_PING_TIMEOUT_SEC = 2.0
DEFAULT_PING_INTERVAL_SEC = 1.0

_NUMBER = {"type": "number"}

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "nslookup_check": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "dns_servers": {"type": "array", "items": {"type": "string"}},
                "dns_timeout_sec": _NUMBER,
                "dns_timout_sec": _NUMBER,
                "urls_to_check": {"type": "array", "items": {"type": "string"}},
            },
        },
        "nmap_checks": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["url", "port"],
                "properties": {
                    "url": {"type": "string", "minLength": 1},
                    "port": {"type": ["string", "integer"]},
                    "udp": {"type": "boolean"},
                    "timeout_sec": _NUMBER,
                },
            },
        },
        "ping_checks": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["url"],
                "properties": {
                    "url": {"type": "string", "minLength": 1},
                    "count": {"type": "integer"},
                    "timeout_sec": _NUMBER,
                    "interval_sec": _NUMBER,
                },
            },
        },
    },
}


class ConfigError(ValueError):
    """Configuration could not be read or is invalid."""


def _is_true(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _check_timeout(value: float, name: str) -> float:
    if not 0 < value <= MAX_TIMEOUT_SEC:
        raise ConfigError(f"{name} must be greater than 0 and at most {MAX_TIMEOUT_SEC} seconds")
    return float(value)


def _check_target(url: str, section: str) -> str:
    target = url.strip()
    if not target:
        raise ConfigError(f"{section} url cannot be empty")
    # nmap would read a leading dash as an option
    if target.startswith("-"):
        raise ConfigError(f"{section} url {target!r} must not start with '-'")
    return target


@dataclass(frozen=True)
class ResolverCheckSpec:
    """Resolver fallback check: resolvers in trial order and hostnames to test."""

    dns_servers: tuple[str, ...] = ()
    timeout_sec: float = 10.0
    hostnames: tuple[str, ...] = ()


@dataclass(frozen=True)
class PortCheckSpec:
    """One port probe."""

    url: str
    port: str
    udp: bool = False
    timeout_sec: float = 10.0

    @property
    def protocol(self) -> str:
        return "udp" if self.udp else "tcp"


@dataclass(frozen=True)
class PingCheckSpec:
    """One ping run."""

    url: str
    count: int = 4
    timeout_sec: float = DEFAULT_PING_TIMEOUT_SEC
    interval_sec: float = DEFAULT_PING_INTERVAL_SEC


@dataclass(frozen=True)
class Config:
    """Check list for one invocation."""

    resolver_check: ResolverCheckSpec = field(default_factory=ResolverCheckSpec)
    port_checks: tuple[PortCheckSpec, ...] = ()
    ping_checks: tuple[PingCheckSpec, ...] = ()

    @classmethod
    def default(cls) -> "Config":
        """Build the default check list written by --print-config.

        Returns:
            Config: Template configuration.
        """
        return cls(
            resolver_check=ResolverCheckSpec(
                dns_servers=("8.8.8.8:53", "8.8.4.4:53", "77.88.8.8:53", "77.88.8.1:53"),
                timeout_sec=10.0,
                hostnames=("www.rbc.ru", "www.news.ru"),
            ),
            port_checks=(
                PortCheckSpec(url="178.248.234.119", port="53", udp=True, timeout_sec=10.0),
                PortCheckSpec(url="178.248.234.119", port="443", timeout_sec=10.0),
                PortCheckSpec(url="178.248.234.119", port="80", timeout_sec=10.0),
                PortCheckSpec(url="www.rbc.ru", port="80", timeout_sec=10.0),
            ),
            ping_checks=(
                PingCheckSpec(url="178.248.234.119", count=4),
                PingCheckSpec(url="www.rbc.ru", count=4),
            ),
        )

    @classmethod
    def from_dict(cls, document: dict | None) -> "Config":
        """Validate a parsed configuration document and build a Config.

        Args:
            document: Parsed YAML document (None is treated as empty).

        Raises:
            ConfigError: If the document violates the schema or a value is out of range.

        Returns:
            Config: Validated configuration instance.
        """
        if document is None:
            document = {}

        try:
            validate(instance=document, schema=CONFIG_SCHEMA)
        except ValidationError as e:
            location = "/".join(str(part) for part in e.absolute_path) or "<root>"
            raise ConfigError(f"Invalid configuration at {location}: {e.message}") from e

        return cls(
            resolver_check=cls._parse_resolver_check(document.get("nslookup_check") or {}),
            port_checks=tuple(
                cls._parse_port_check(entry) for entry in document.get("nmap_checks") or []
            ),
            ping_checks=tuple(
                cls._parse_ping_check(entry) for entry in document.get("ping_checks") or []
            ),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: Configuration file path.

        Raises:
            ConfigError: If the file cannot be read, is not valid YAML, or is invalid.

        Returns:
            Config: Validated configuration instance.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config {path}: {e}") from e

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config {path}: {e}") from e

        if document is not None and not isinstance(document, dict):
            raise ConfigError(f"Config {path} must contain a mapping at the top level")

        config = cls.from_dict(document)
        logger.info(
            f"Configuration loaded from {path}: "
            f"{len(config.resolver_check.dns_servers)} resolvers, "
            f"{len(config.port_checks)} port checks, {len(config.ping_checks)} ping checks"
        )
        return config

    def to_dict(self) -> dict:
        """Serialize to the YAML document layout.

        Returns:
            dict: Document accepted by from_dict.
        """
        return {
            "nslookup_check": {
                "dns_servers": list(self.resolver_check.dns_servers),
                "dns_timeout_sec": self.resolver_check.timeout_sec,
                "urls_to_check": list(self.resolver_check.hostnames),
            },
            "nmap_checks": [
                {
                    "url": check.url,
                    "port": check.port,
                    "udp": check.udp,
                    "timeout_sec": check.timeout_sec,
                }
                for check in self.port_checks
            ],
            "ping_checks": [
                {
                    "url": check.url,
                    "count": check.count,
                    "timeout_sec": check.timeout_sec,
                    "interval_sec": check.interval_sec,
                }
                for check in self.ping_checks
            ],
        }

    def write_template(self, path: Path) -> None:
        """Write this configuration as YAML.

        Args:
            path: Destination file, overwritten if it exists.

        Raises:
            ConfigError: If the file cannot be written.
        """
        text = yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        try:
            Path(path).write_text(text, encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write config template {path}: {e}") from e
        logger.info(f"Default configuration written to {path}")

    @staticmethod
    def _parse_resolver_check(section: dict) -> ResolverCheckSpec:
        timeout = section.get("dns_timeout_sec", section.get("dns_timout_sec", 10))
        dns_servers = tuple(server.strip() for server in section.get("dns_servers", []))
        for server in dns_servers:
            try:
                host, _ = parse_endpoint(server)
            except ValueError as e:
                raise ConfigError(str(e)) from e
            if not is_valid_ip(host):
                raise ConfigError(
                    f"dns_servers entry {server!r} must be an IP address with an optional port"
                )

        return ResolverCheckSpec(
            dns_servers=dns_servers,
            timeout_sec=_check_timeout(timeout, "dns_timeout_sec"),
            hostnames=tuple(
                name.strip() for name in section.get("urls_to_check", []) if name.strip()
            ),
        )

    @staticmethod
    def _parse_port_check(entry: dict) -> PortCheckSpec:
        port = str(entry["port"]).strip()
        if not is_valid_port_spec(port):
            raise ConfigError(
                f"nmap_checks port {port!r} for {entry['url']} must be ports 1-65535 joined by ',' or '-'"
            )
        return PortCheckSpec(
            url=_check_target(entry["url"], "nmap_checks"),
            port=port,
            udp=entry.get("udp", False),
            timeout_sec=_check_timeout(entry.get("timeout_sec", 10), "nmap_checks timeout_sec"),
        )

    @staticmethod
    def _parse_ping_check(entry: dict) -> PingCheckSpec:
        # jsonschema accepts integral floats such as 4.0 as integers
        count = int(entry.get("count", 4))
        if not 1 <= count <= MAX_PING_COUNT:
            raise ConfigError(f"ping_checks count must be between 1 and {MAX_PING_COUNT}")

        interval = entry.get("interval_sec", DEFAULT_PING_INTERVAL_SEC)
        if not 0 <= interval <= MAX_PING_INTERVAL_SEC:
            raise ConfigError(
                f"ping_checks interval_sec must be between 0 and {MAX_PING_INTERVAL_SEC} seconds"
            )

        return PingCheckSpec(
            url=_check_target(entry["url"], "ping_checks"),
            count=count,
            timeout_sec=_check_timeout(
                entry.get("timeout_sec", DEFAULT_PING_TIMEOUT_SEC), "ping_checks timeout_sec"
            ),
            interval_sec=float(interval),
        )


@dataclass
class Settings:
    """Operational settings loaded from environment variables."""

    verbose: bool
    log_level: str | None
    nmap_path: str

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Raises:
            ConfigError: If LOG_LEVEL is not a known logging level.

        Returns:
            Settings: Settings instance.
        """
        log_level = os.getenv("LOG_LEVEL") or None
        if log_level is not None:
            log_level = log_level.upper()
            if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
                raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level}")

        return cls(
            verbose=_is_true(os.getenv("VERBOSE", "false")),
            log_level=log_level,
            nmap_path=os.getenv("NMAP_PATH", "nmap"),
        )
