"""
Exporter configuration.

Values come from environment variables, with CLI options taking
precedence. Read once at startup; the host list never changes while
the process runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, List, Mapping, Optional, Union

import httpx


DEFAULT_HOSTS = "http://localhost:4444"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# field name -> environment variable
ENV_VARS = {
    "port": "PORT",
    "metrics_endpoint": "METRICS_ENDPOINT",
    "health_check_endpoint": "HEALTH_CHECK_ENDPOINT",
    "kafka_connect_hosts": "KAFKA_CONNECT_HOSTS",
    "request_timeout": "REQUEST_TIMEOUT",
    "log_level": "LOG_LEVEL",
}


def parse_hosts(value: Union[str, Iterable[str]]) -> List[str]:
    """Clean a comma-separated (or already split) host list.

    Drops blanks, trailing slashes and repeats, keeping first-seen order.
    """
    parts = value.split(",") if isinstance(value, str) else value
    hosts = [h.strip().rstrip("/") for h in parts]
    return list(dict.fromkeys(h for h in hosts if h))


@dataclass
class ExporterConfig:
    port: int = 9113
    metrics_endpoint: str = "/metrics"
    health_check_endpoint: str = "/health"
    kafka_connect_hosts: List[str] = field(default_factory=lambda: parse_hosts(DEFAULT_HOSTS))
    request_timeout: float = 10.0
    log_level: str = "INFO"

    def __post_init__(self):
        self.kafka_connect_hosts = parse_hosts(self.kafka_connect_hosts)
        self.port = int(self.port)
        self.request_timeout = float(self.request_timeout)
        self.log_level = self.log_level.upper()
        self.validate()

    def validate(self):
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.request_timeout <= 0:
            raise ValueError(f"request timeout must be positive: {self.request_timeout}")
        if not self.kafka_connect_hosts:
            raise ValueError("no Kafka Connect hosts configured")
        for host in self.kafka_connect_hosts:
            if not host.startswith(("http://", "https://")):
                raise ValueError(f"Kafka Connect host must be an http(s) URL: {host!r}")
            try:
                httpx.URL(host)
            except httpx.InvalidURL as e:
                raise ValueError(f"invalid Kafka Connect host {host!r}: {e}") from e
        for name in ("metrics_endpoint", "health_check_endpoint"):
            if not getattr(self, name).startswith("/"):
                raise ValueError(f"{name} must start with '/': {getattr(self, name)!r}")
        if self.metrics_endpoint == self.health_check_endpoint:
            raise ValueError("metrics and health check endpoints must differ")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> ExporterConfig:
        """
        Resolve configuration.

        Priority (highest to lowest):
        1. Keyword overrides that are not None (CLI options)
        2. Environment variables
        3. Defaults

        Raises ValueError for malformed values.
        """
        environ = os.environ if environ is None else environ
        known = {f.name for f in fields(cls)}

        values: dict = {}
        for name, env_var in ENV_VARS.items():
            if env_var in environ:
                values[name] = environ[env_var]

        for name, value in overrides.items():
            if name not in known:
                raise TypeError(f"unknown config option: {name}")
            if value is not None:
                values[name] = value

        return cls(**values)
