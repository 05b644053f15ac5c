"""Tests for the prometheus_client bridge and the text exposition it produces."""

import httpx
from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.parser import text_string_to_metric_families

from kafka_connect_exporter.collector.connect_client import ConnectClient
from kafka_connect_exporter.collector.connect_collector import ConnectCollector
from kafka_connect_exporter.exporter import ConnectExporter


def _handler(request):
    if request.url.host == "down":
        return httpx.Response(500, text="boom")
    if request.url.path == "/connectors":
        return httpx.Response(200, json=["sink-a", "source-b"])
    if request.url.path == "/connectors/sink-a/status":
        return httpx.Response(200, json={"name": "sink-a", "tasks": [
            {"id": 0, "state": "RUNNING"}, {"id": 1, "state": "FAILED"}, {"id": 2, "state": "RESTARTING"},
        ]})
    if request.url.path == "/connectors/source-b/status":
        return httpx.Response(200, json={"name": "source-b", "tasks": [{"id": 0, "state": "PAUSED"}]})
    return httpx.Response(404)


def _registry(hosts):
    client = ConnectClient(client=httpx.Client(transport=httpx.MockTransport(_handler)))
    collector = ConnectCollector(hosts, client, on_error=lambda *args: None)
    registry = CollectorRegistry()
    registry.register(ConnectExporter(collector))
    return registry


def _samples(text):
    result = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            result[(sample.name, tuple(sorted(sample.labels.items())))] = sample.value
    return result


def test_exposition_contains_expected_series():
    text = generate_latest(_registry(["http://connect1"])).decode()
    samples = _samples(text)

    host = ("host", "http://connect1")
    assert samples[("kafka_connect_connector_total", (host,))] == 2
    sink = (("connector", "sink-a"), host)
    assert samples[("kafka_connect_connector_running_total", sink)] == 1
    assert samples[("kafka_connect_connector_failed_total", sink)] == 1
    assert samples[("kafka_connect_connector_paused_total", sink)] == 0
    assert samples[("kafka_connect_connector_unassigned_total", sink)] == 1
    assert samples[("kafka_connect_connector_task_total", sink)] == 3
    assert len(samples) == 11


def test_metrics_are_gauges_with_total_suffix():
    text = generate_latest(_registry(["http://connect1"])).decode()

    assert "# TYPE kafka_connect_connector_total gauge" in text
    assert "# TYPE kafka_connect_connector_running_total gauge" in text
    assert 'kafka_connect_connector_running_total{connector="sink-a",host="http://connect1"} 1.0' in text


def test_down_host_disappears_instead_of_zero():
    text = generate_latest(_registry(["http://down", "http://connect1"])).decode()
    samples = _samples(text)

    assert all(dict(labels)["host"] == "http://connect1" for _, labels in samples)
    assert "http://down" not in text


def test_all_hosts_down_gives_empty_exposition():
    assert generate_latest(_registry(["http://down"])) == b""


def test_repeated_scrapes_are_byte_identical():
    registry = _registry(["http://connect1", "http://connect2", "http://connect3"])
    assert generate_latest(registry) == generate_latest(registry)


def test_register_does_not_collect():
    calls = []

    class CountingCollector(ConnectCollector):
        def collect(self):
            calls.append(1)
            return iter(())

    registry = CollectorRegistry(auto_describe=True)
    registry.register(ConnectExporter(CountingCollector([], ConnectClient())))
    assert calls == []

    generate_latest(registry)
    assert calls == [1]


def test_malformed_host_does_not_break_the_scrape():
    text = generate_latest(_registry(["http://connect:80x3", "http://connect1"])).decode()
    samples = _samples(text)

    assert {dict(labels)["host"] for _, labels in samples} == {"http://connect1"}
    assert len(samples) == 11
