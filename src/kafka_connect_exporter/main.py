"""
Kafka Connect exporter entry point.

Usage:
    kafka-connect-exporter                                   Serve /metrics (config from env)
    kafka-connect-exporter serve --hosts http://connect:8083 Serve with explicit hosts
    kafka-connect-exporter status --hosts http://connect:8083  One-shot table of task states
"""

from __future__ import annotations

import logging
import sys
import time
from typing import List, Optional

import click
from prometheus_client import CollectorRegistry

from kafka_connect_exporter import __version__
from kafka_connect_exporter.collector.connect_client import ConnectClient
from kafka_connect_exporter.collector.connect_collector import ConnectCollector
from kafka_connect_exporter.collector.errors import ConnectAPIError
from kafka_connect_exporter.config import ExporterConfig
from kafka_connect_exporter.exporter import ConnectExporter
from kafka_connect_exporter.server import ExporterServer


log = logging.getLogger("kafka_connect_exporter")


def utc_formatter() -> logging.Formatter:
    formatter = logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    # UTC timestamps, matching what log shippers expect
    formatter.converter = time.gmtime
    return formatter


def configure_logging(level: str, verbose: bool = False):
    handler = logging.StreamHandler()
    handler.setFormatter(utc_formatter())
    logging.basicConfig(level=logging.DEBUG if verbose else level, handlers=[handler])


def _load_config(**overrides) -> ExporterConfig:
    try:
        return ExporterConfig.load(**overrides)
    except ValueError as e:
        raise click.UsageError(f"Invalid configuration: {e}")


_hosts_option = click.option(
    "--hosts", default=None,
    help="Comma-separated Kafka Connect base URLs (env: KAFKA_CONNECT_HOSTS)",
)
_timeout_option = click.option(
    "--timeout", type=float, default=None,
    help="Per-request timeout in seconds (env: REQUEST_TIMEOUT, default 10)",
)
_verbose_option = click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kafka-connect-exporter")
@click.pass_context
def cli(ctx):
    """Kafka Connect exporter - connector and task states for Prometheus."""
    # If no subcommand, serve (env-only configuration)
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option("--port", type=int, default=None, help="Listen port (env: PORT, default 9113)")
@click.option("--metrics-endpoint", default=None, help="Metrics path (env: METRICS_ENDPOINT, default /metrics)")
@click.option("--health-endpoint", default=None, help="Health path (env: HEALTH_CHECK_ENDPOINT, default /health)")
@_hosts_option
@_timeout_option
@_verbose_option
def serve(port: Optional[int] = None, metrics_endpoint: Optional[str] = None,
          health_endpoint: Optional[str] = None, hosts: Optional[str] = None,
          timeout: Optional[float] = None, verbose: bool = False):
    """Serve Prometheus metrics until SIGINT/SIGTERM."""
    config = _load_config(
        port=port,
        metrics_endpoint=metrics_endpoint,
        health_check_endpoint=health_endpoint,
        kafka_connect_hosts=hosts,
        request_timeout=timeout,
    )
    configure_logging(config.log_level, verbose)

    client = ConnectClient(timeout_seconds=config.request_timeout)
    collector = ConnectCollector(config.kafka_connect_hosts, client)

    registry = CollectorRegistry()
    registry.register(ConnectExporter(collector))

    server = ExporterServer(
        registry,
        port=config.port,
        metrics_path=config.metrics_endpoint,
        health_path=config.health_check_endpoint,
    )

    log.info("Starting Kafka Connect Exporter v%s for %s", __version__, collector.name())
    try:
        server.serve_until_signalled()
    except OSError as e:
        log.error("HTTP server error: %s", e)
        raise SystemExit(1)
    finally:
        client.close()


@cli.command()
@_hosts_option
@_timeout_option
@click.option("--output", type=click.Choice(["table", "jsonl"]), default="table",
              help="Output mode: table (Rich) or jsonl (one JSON line per connector)")
@_verbose_option
def status(hosts: Optional[str], timeout: Optional[float], output: str, verbose: bool):
    """Collect once and print connector task states."""
    from kafka_connect_exporter.dashboard.terminal import print_status, write_jsonl

    config = _load_config(kafka_connect_hosts=hosts, request_timeout=timeout)
    configure_logging("DEBUG" if verbose else "WARNING")

    errors: List[str] = []

    def _record(host: str, connector: Optional[str], error: ConnectAPIError):
        log.debug("upstream error host=%s connector=%s: %s", host, connector, error)
        where = host if connector is None else f"{host} {connector}"
        errors.append(f"{where}: [{error.status_code}] {error}")

    with ConnectClient(timeout_seconds=config.request_timeout) as client:
        collector = ConnectCollector(config.kafka_connect_hosts, client, on_error=_record)
        samples = list(collector.collect())

    if output == "jsonl":
        write_jsonl(samples, errors, sys.stdout)
    else:
        print_status(samples, errors)

    if errors:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
