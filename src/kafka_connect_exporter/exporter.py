"""
Bridges the sample stream into prometheus_client.

ConnectExporter is registered as a custom collector, so the registry
calls collect() on every scrape and we run one fresh pass against the
Kafka Connect hosts each time. Nothing is cached between scrapes.
"""

from __future__ import annotations

from typing import Dict, Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from kafka_connect_exporter.collector.connect_collector import ConnectCollector
from kafka_connect_exporter.metrics import METRIC_HELP, METRIC_LABELS


class ConnectExporter(Collector):

    def __init__(self, collector: ConnectCollector):
        self._collector = collector

    def describe(self) -> Iterator[Metric]:
        # Series are only known at scrape time. Returning nothing here also
        # stops register() from running a collection to discover names.
        return iter(())

    def collect(self) -> Iterator[Metric]:
        host_order = {host: i for i, host in enumerate(self._collector.hosts)}

        # Hosts finish in any order; sort (stable) so identical upstream
        # state always renders the same exposition text.
        samples = sorted(
            self._collector.collect(),
            key=lambda s: host_order.get(s.labels["host"], len(host_order)),
        )

        families: Dict[str, GaugeMetricFamily] = {
            name: GaugeMetricFamily(name, help_text, labels=METRIC_LABELS[name])
            for name, help_text in METRIC_HELP.items()
        }
        for sample in samples:
            label_values = [sample.labels[label] for label in METRIC_LABELS[sample.name]]
            families[sample.name].add_metric(label_values, sample.value)

        for family in families.values():
            if family.samples:
                yield family
