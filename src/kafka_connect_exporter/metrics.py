"""
Core data definitions for the Kafka Connect exporter.

Two groups live here: records decoded from the Kafka Connect REST API
(/connectors/{name}/status), and the derived values we expose to
Prometheus. Nothing in here survives longer than a single scrape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


METRIC_PREFIX = "kafka_connect_connector"

CONNECTOR_COUNT = f"{METRIC_PREFIX}_total"
TASK_COUNT = f"{METRIC_PREFIX}_task_total"
RUNNING_COUNT = f"{METRIC_PREFIX}_running_total"
FAILED_COUNT = f"{METRIC_PREFIX}_failed_total"
PAUSED_COUNT = f"{METRIC_PREFIX}_paused_total"
UNASSIGNED_COUNT = f"{METRIC_PREFIX}_unassigned_total"

# Exposition order, also the order families show up on /metrics
METRIC_HELP: Dict[str, str] = {
    CONNECTOR_COUNT: "Total number of connectors on the Kafka Connect host",
    TASK_COUNT: "Total number of tasks for the Kafka Connect connector",
    RUNNING_COUNT: "Total number of tasks in the `RUNNING` state",
    FAILED_COUNT: "Total number of tasks in the `FAILED` state (e.g., due to exceptions reported in status)",
    PAUSED_COUNT: "Total number of paused tasks for the Kafka Connect connector",
    UNASSIGNED_COUNT: "Total number of tasks in the `UNASSIGNED` state (i.e., not assigned to any worker, or in a state we don't track)",
}

METRIC_LABELS: Dict[str, List[str]] = {
    CONNECTOR_COUNT: ["host"],
    TASK_COUNT: ["connector", "host"],
    RUNNING_COUNT: ["connector", "host"],
    FAILED_COUNT: ["connector", "host"],
    PAUSED_COUNT: ["connector", "host"],
    UNASSIGNED_COUNT: ["connector", "host"],
}


class Category(str, Enum):
    """Task state buckets. Anything the API reports that isn't one of the
    first three lands in UNASSIGNED."""

    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    FAILED = "FAILED"
    UNASSIGNED = "UNASSIGNED"


def _field(data: Dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise ValueError(f"field {key!r}: expected {expected.__name__}, got {type(value).__name__}")
    return value


def _require_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what}: expected a JSON object, got {type(data).__name__}")
    return data


@dataclass
class TaskStatus:
    id: int
    state: str
    worker_id: str = ""
    trace: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> TaskStatus:
        data = _require_object(data, "task")
        return cls(
            id=_field(data, "id", int, 0),
            state=_field(data, "state", str, ""),
            worker_id=_field(data, "worker_id", str, ""),
            trace=_field(data, "trace", str, ""),
        )


@dataclass
class ConnectorState:
    state: str = ""
    worker_id: str = ""


@dataclass
class ConnectorStatus:
    """Decoded body of GET /connectors/{name}/status.

    Extra fields (e.g. "type") are ignored, missing ones fall back to
    empty values. A field with the wrong JSON type raises ValueError.
    """

    name: str
    connector: ConnectorState = field(default_factory=ConnectorState)
    tasks: List[TaskStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ConnectorStatus:
        data = _require_object(data, "connector status")

        connector = _require_object(data.get("connector") or {}, "connector")
        tasks = _field(data, "tasks", list, [])

        return cls(
            name=_field(data, "name", str, ""),
            connector=ConnectorState(
                state=_field(connector, "state", str, ""),
                worker_id=_field(connector, "worker_id", str, ""),
            ),
            tasks=[TaskStatus.from_dict(t) for t in tasks],
        )


@dataclass
class ConnectorStatusMetric:
    """Task counts for one connector on one host, for one scrape."""

    connector: str = ""
    host: str = ""
    counts: Dict[Category, int] = field(default_factory=dict)
    total: int = 0

    @property
    def running(self) -> int:
        return self.counts.get(Category.RUNNING, 0)

    @property
    def paused(self) -> int:
        return self.counts.get(Category.PAUSED, 0)

    @property
    def failed(self) -> int:
        return self.counts.get(Category.FAILED, 0)

    @property
    def unassigned(self) -> int:
        return self.counts.get(Category.UNASSIGNED, 0)

    def samples(self) -> List[Sample]:
        """The five per-connector samples, in emission order."""
        labels = {"connector": self.connector, "host": self.host}
        return [
            Sample(UNASSIGNED_COUNT, dict(labels), float(self.unassigned)),
            Sample(RUNNING_COUNT, dict(labels), float(self.running)),
            Sample(FAILED_COUNT, dict(labels), float(self.failed)),
            Sample(PAUSED_COUNT, dict(labels), float(self.paused)),
            Sample(TASK_COUNT, dict(labels), float(self.total)),
        ]


@dataclass
class Sample:
    """One (name, labels, value) point handed to the exposition layer."""

    name: str
    labels: Dict[str, str]
    value: float
