"""
HTTP listener: Prometheus exposition on the metrics path, a plain "OK"
on the health path, 404 for everything else.

Runs a ThreadingHTTPServer so a slow scrape doesn't block health checks.
"""

from __future__ import annotations

import logging
import signal
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional
from urllib.parse import urlsplit

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest


log = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_SECONDS = 5.0


class _ExporterHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, registry: CollectorRegistry, metrics_path: str, health_path: str):
        self.registry = registry
        self.metrics_path = metrics_path
        self.health_path = health_path
        super().__init__(address, _ExporterHandler)


class _ExporterHandler(BaseHTTPRequestHandler):
    server: _ExporterHTTPServer

    def do_GET(self):
        path = urlsplit(self.path).path

        if path == self.server.metrics_path:
            self._reply(200, generate_latest(self.server.registry), CONTENT_TYPE_LATEST)
        elif path == self.server.health_path:
            self._reply(200, b"OK", "text/plain; charset=utf-8")
        else:
            self._reply(404, b"Not Found", "text/plain; charset=utf-8")

    def _reply(self, status: int, body: bytes, content_type: str):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        log.debug("%s %s", self.address_string(), format % args)


class ExporterServer:

    def __init__(
        self,
        registry: CollectorRegistry,
        port: int = 9113,
        metrics_path: str = "/metrics",
        health_path: str = "/health",
        host: str = "",
    ):
        self._registry = registry
        self._address = (host, port)
        self._metrics_path = metrics_path
        self._health_path = health_path
        self._httpd: Optional[_ExporterHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        """Bound port (useful when constructed with port 0)."""
        if self._httpd is None:
            return self._address[1]
        return self._httpd.server_address[1]

    def start(self):
        """Bind and serve in a background thread."""
        self._httpd = _ExporterHTTPServer(
            self._address, self._registry, self._metrics_path, self._health_path
        )
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="exporter-http", daemon=True
        )
        self._thread.start()
        log.info(
            "Listening on :%d (metrics=%s, health=%s)",
            self.port, self._metrics_path, self._health_path,
        )

    def stop(self, timeout: float = SHUTDOWN_TIMEOUT_SECONDS):
        if self._httpd is None:
            return

        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                log.error("Server did not stop within %.1fs", timeout)
            else:
                log.info("Server has been safely shut down")
        self._httpd = None
        self._thread = None

    def serve_until_signalled(self):
        """Start, block until SIGINT/SIGTERM, then shut down. Main thread only."""
        stop_requested = threading.Event()

        def _handle(signum, _frame):
            log.info("Received %s, server is shutting down...", signal.Signals(signum).name)
            stop_requested.set()

        previous = {
            sig: signal.signal(sig, _handle) for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            self.start()
            stop_requested.wait()
        finally:
            self.stop()
            for sig, handler in previous.items():
                signal.signal(sig, handler)
