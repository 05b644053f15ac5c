"""
End-to-end tests: fake Kafka Connect server in a thread, the exporter's
HTTP listener in another, and real HTTP between them.
"""

import threading

import httpx
from prometheus_client import CollectorRegistry
from prometheus_client.parser import text_string_to_metric_families

from kafka_connect_exporter.collector.connect_client import ConnectClient
from kafka_connect_exporter.collector.connect_collector import ConnectCollector
from kafka_connect_exporter.exporter import ConnectExporter
from kafka_connect_exporter.mock.fake_connect_server import FakeConnectServer
from kafka_connect_exporter.mock.generator import MockConnectCluster
from kafka_connect_exporter.server import ExporterServer


def _start_fake_connect(cluster: MockConnectCluster) -> FakeConnectServer:
    server = FakeConnectServer(("127.0.0.1", 0), cluster)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


def _url(server: FakeConnectServer) -> str:
    return f"http://127.0.0.1:{server.server_address[1]}"


def _start_exporter(hosts):
    client = ConnectClient(timeout_seconds=2.0)
    registry = CollectorRegistry()
    registry.register(ConnectExporter(ConnectCollector(hosts, client, on_error=lambda *a: None)))
    exporter = ExporterServer(registry, port=0, metrics_path="/metrics", health_path="/health",
                              host="127.0.0.1")
    exporter.start()
    return exporter, client


def _scrape(exporter: ExporterServer, path: str = "/metrics") -> httpx.Response:
    return httpx.get(f"http://127.0.0.1:{exporter.port}{path}", timeout=5.0)


def _task_totals(text: str) -> dict:
    totals = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name == "kafka_connect_connector_task_total":
                totals[(sample.labels["host"], sample.labels["connector"])] = sample.value
    return totals


def test_metrics_from_fake_cluster():
    cluster = MockConnectCluster(seed=7, connectors=4)
    connect = _start_fake_connect(cluster)
    exporter, client = _start_exporter([_url(connect)])
    try:
        response = _scrape(exporter)

        assert response.status_code == 200
        assert response.headers["Content-Type"].startswith("text/plain")
        totals = _task_totals(response.text)
        assert len(totals) == 4
        for name in cluster.connector_names():
            assert totals[(_url(connect), name)] == len(cluster.task_states(name))
        assert f'kafka_connect_connector_total{{host="{_url(connect)}"}} 4.0' in response.text
    finally:
        exporter.stop()
        client.close()
        connect.shutdown()
        connect.server_close()


def test_escaped_connector_name_round_trips():
    cluster = MockConnectCluster(seed=1, connectors=2)
    connect = _start_fake_connect(cluster)
    exporter, client = _start_exporter([_url(connect)])
    try:
        odd = [n for n in cluster.connector_names() if "/" in n]
        assert odd, "mock cluster should include a name needing escaping"

        totals = _task_totals(_scrape(exporter).text)
        assert (_url(connect), odd[0]) in totals
    finally:
        exporter.stop()
        client.close()
        connect.shutdown()
        connect.server_close()


def test_failures_are_isolated_across_hosts():
    healthy = MockConnectCluster(seed=3, connectors=3)
    broken = MockConnectCluster(seed=4, connectors=3)
    broken.fail_listing = True
    partial = MockConnectCluster(seed=5, connectors=3)
    partial.failing_connectors.add(partial.connector_names()[0])

    servers = [_start_fake_connect(c) for c in (healthy, broken, partial)]
    urls = [_url(s) for s in servers]
    exporter, client = _start_exporter(urls)
    try:
        response = _scrape(exporter)
        assert response.status_code == 200

        totals = _task_totals(response.text)
        hosts = {host for host, _ in totals}
        assert urls[1] not in hosts
        assert len([h for h, _ in totals if h == urls[0]]) == 3
        assert len([h for h, _ in totals if h == urls[2]]) == 2
        assert (urls[2], partial.connector_names()[0]) not in totals
    finally:
        exporter.stop()
        client.close()
        for s in servers:
            s.shutdown()
            s.server_close()


def test_unreachable_host_still_returns_200():
    # Nothing listens on this port once the socket is closed
    connect = _start_fake_connect(MockConnectCluster())
    dead_url = _url(connect)
    connect.shutdown()
    connect.server_close()

    exporter, client = _start_exporter([dead_url])
    try:
        response = _scrape(exporter)
        assert response.status_code == 200
        assert response.text == ""
    finally:
        exporter.stop()
        client.close()


def test_health_endpoint():
    exporter, client = _start_exporter(["http://127.0.0.1:1"])
    try:
        response = _scrape(exporter, "/health")
        assert response.status_code == 200
        assert response.text == "OK"
    finally:
        exporter.stop()
        client.close()


def test_unknown_path_is_404():
    exporter, client = _start_exporter(["http://127.0.0.1:1"])
    try:
        assert _scrape(exporter, "/nope").status_code == 404
    finally:
        exporter.stop()
        client.close()


def test_stop_is_idempotent():
    exporter, client = _start_exporter(["http://127.0.0.1:1"])
    exporter.stop()
    exporter.stop()
    client.close()
