"""
Base collector interface.

A collector is anything that can produce a fresh stream of Samples on
demand. This keeps the Prometheus exporter and the terminal status
command decoupled from where the data actually comes from.
"""

from abc import ABC, abstractmethod
from typing import Iterator

from kafka_connect_exporter.metrics import Sample


class SampleCollector(ABC):
    """Interface for all sample sources."""

    @abstractmethod
    def collect(self) -> Iterator[Sample]:
        """Run one full collection pass and yield its samples."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
