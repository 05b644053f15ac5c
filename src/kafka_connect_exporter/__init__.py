"""Prometheus exporter for Kafka Connect connector and task states."""

__version__ = "0.1.0"
