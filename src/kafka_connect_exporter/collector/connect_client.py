"""
Client for the Kafka Connect REST API. Only the two read-only calls
the exporter needs: list connectors, and get one connector's status.

Every failure comes back as a ConnectAPIError subclass. There are no
retries -- a failed call is reported once and the scrape moves on.
"""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import quote

import httpx

from kafka_connect_exporter.collector.errors import DecodeError, TransportError, UpstreamError
from kafka_connect_exporter.metrics import ConnectorStatus


class ConnectClient:

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._timeout = timeout_seconds
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=self._timeout)

    def list_connectors(self, host: str) -> List[str]:
        """GET {host}/connectors -- a JSON array of connector names."""
        url = f"{host.rstrip('/')}/connectors"
        payload = self._get_json(url, "Failed to get connectors")

        if not isinstance(payload, list) or not all(isinstance(n, str) for n in payload):
            raise DecodeError(f"Unexpected connector list from {url}: expected a JSON array of strings")
        return payload

    def get_connector_status(self, host: str, connector: str) -> ConnectorStatus:
        """GET {host}/connectors/{connector}/status, name path-escaped."""
        try:
            escaped = quote(connector, safe="")
        except UnicodeEncodeError as e:
            raise DecodeError(f"Connector name {connector!r} from {host} can't be used in a URL: {e}") from e

        url = f"{host.rstrip('/')}/connectors/{escaped}/status"
        payload = self._get_json(url, "Failed to get connector status")

        try:
            return ConnectorStatus.from_dict(payload)
        except ValueError as e:
            raise DecodeError(f"Unexpected connector status from {url}: {e}") from e

    def _get_json(self, url: str, failure: str):
        try:
            response = self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransportError(f"GET {url}: {type(e).__name__}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise UpstreamError(
                response.status_code,
                f"{failure}. status: {response.status_code}, body: {response.text}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {url}: {e}") from e

    def name(self) -> str:
        return f"Kafka Connect REST (timeout {self._timeout:g}s)"

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ConnectClient:
        return self

    def __exit__(self, *exc_info):
        self.close()
