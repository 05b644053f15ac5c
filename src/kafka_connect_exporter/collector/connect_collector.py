"""
Collector that walks every configured Kafka Connect host and turns
connector/task states into Samples.

Each host gets its own worker thread. Within a host, connectors are
fetched one after another in the order the API lists them. Workers push
samples into a shared queue as they go; collect() drains that queue and
only returns once every host has finished, successfully or not.

Upstream failures are reported through the error callback and never
raised: a host whose connector list fails contributes nothing, and a
connector whose status fails only loses its own five samples.
"""

from __future__ import annotations

import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Optional, Sequence

from kafka_connect_exporter.collector.base import SampleCollector
from kafka_connect_exporter.collector.connect_client import ConnectClient
from kafka_connect_exporter.collector.errors import ConnectAPIError
from kafka_connect_exporter.collector.tally import tally
from kafka_connect_exporter.metrics import CONNECTOR_COUNT, Sample


log = logging.getLogger(__name__)

# (host, connector or None for the listing call, error)
ErrorReporter = Callable[[str, Optional[str], ConnectAPIError], None]

# Marks the end of one host's samples on the queue
_HOST_DONE = object()


def log_error(host: str, connector: Optional[str], error: ConnectAPIError) -> None:
    if connector is None:
        log.error("host=%s status=%d: %s", host, error.status_code, error)
    else:
        log.error("host=%s connector=%s status=%d: %s", host, connector, error.status_code, error)


class ConnectCollector(SampleCollector):

    def __init__(
        self,
        hosts: Sequence[str],
        client: ConnectClient,
        on_error: ErrorReporter = log_error,
    ):
        self._hosts = tuple(hosts)
        self._client = client
        self._on_error = on_error

    @property
    def hosts(self) -> tuple:
        return self._hosts

    def collect(self) -> Iterator[Sample]:
        """Yield samples from all hosts as they arrive.

        Every call is a fresh pass against the upstream APIs. The generator
        finishes only after all host workers have completed.
        """
        if not self._hosts:
            return

        started = time.monotonic()
        results: queue.Queue = queue.Queue()
        emitted = 0

        with ThreadPoolExecutor(
            max_workers=len(self._hosts), thread_name_prefix="connect-host"
        ) as executor:
            futures = [executor.submit(self._run_host, host, results) for host in self._hosts]

            remaining = len(futures)
            while remaining:
                item = results.get()
                if item is _HOST_DONE:
                    remaining -= 1
                    continue
                emitted += 1
                yield item

            # Re-raise anything that wasn't an upstream error
            for future in futures:
                future.result()

        log.debug(
            "Collected %d samples from %d hosts in %.3fs",
            emitted, len(self._hosts), time.monotonic() - started,
        )

    def _run_host(self, host: str, results: queue.Queue):
        try:
            self._collect_host(host, results.put)
        finally:
            results.put(_HOST_DONE)

    def _collect_host(self, host: str, emit: Callable[[Sample], None]):
        try:
            connectors = self._client.list_connectors(host)
        except ConnectAPIError as e:
            # Count is unknown, not zero -- emit nothing for this host
            self._on_error(host, None, e)
            return

        emit(Sample(CONNECTOR_COUNT, {"host": host}, float(len(connectors))))

        for connector in connectors:
            try:
                status = self._client.get_connector_status(host, connector)
            except ConnectAPIError as e:
                self._on_error(host, connector, e)
                continue

            metric = tally(status.tasks)
            metric.connector = connector
            metric.host = host

            for sample in metric.samples():
                emit(sample)

    def name(self) -> str:
        return f"Kafka Connect ({', '.join(self._hosts)})"
