"""
Fake Kafka Connect REST server for testing without a cluster.

    python -m kafka_connect_exporter.mock.fake_connect_server
    kafka-connect-exporter --hosts http://localhost:4444
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote, urlsplit

from kafka_connect_exporter.mock.generator import MockConnectCluster


class FakeConnectServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, cluster: MockConnectCluster):
        self.cluster = cluster
        super().__init__(address, _ConnectHandler)


class _ConnectHandler(BaseHTTPRequestHandler):
    server: FakeConnectServer

    def do_GET(self):
        cluster = self.server.cluster
        # Split before unquoting so an escaped "/" stays inside the name
        parts = urlsplit(self.path).path.strip("/").split("/")

        if parts == ["connectors"]:
            if cluster.fail_listing:
                self._send(500, {"error_code": 500, "message": "simulated listing failure"})
            else:
                self._send(200, cluster.connector_names())
            return

        if len(parts) == 3 and parts[0] == "connectors" and parts[2] == "status":
            name = unquote(parts[1])
            if name in cluster.failing_connectors:
                self._send(500, {"error_code": 500, "message": f"simulated failure for {name}"})
            elif not cluster.has_connector(name):
                self._send(404, {"error_code": 404, "message": f"Connector {name} not found"})
            else:
                self._send(200, cluster.status(name))
            return

        self._send(404, {"error_code": 404, "message": "HTTP 404 Not Found"})

    def _send(self, status: int, payload):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 4444, seed: int = 42):
    server = FakeConnectServer((host, port), MockConnectCluster(seed=seed))
    print(f"Fake Kafka Connect REST API running at http://{host}:{port}/connectors")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
