"""
Mock Kafka Connect cluster state.

Produces fake but plausible connector/task states so we can develop and
test without a Connect cluster. Mostly healthy connectors, with the odd
failed, paused or rebalancing task, and one connector name that needs
escaping in a URL path.
"""

import random
from typing import Dict, List, Set

# Weighted toward RUNNING, like a mostly-healthy cluster
_TASK_STATES = ["RUNNING"] * 6 + ["PAUSED", "FAILED", "UNASSIGNED", "RESTARTING"]

_CONNECTOR_KINDS = ["jdbc-source", "s3-sink", "debezium-mysql", "elasticsearch-sink", "mirror-source"]


class MockConnectCluster:

    def __init__(self, seed: int = 42, connectors: int = 4, worker_count: int = 3):
        self._rng = random.Random(seed)
        self._workers = [f"connect-{i}:8083" for i in range(worker_count)]
        self._statuses: Dict[str, dict] = {}

        # Failure injection, flipped by tests
        self.fail_listing = False
        self.failing_connectors: Set[str] = set()

        for i in range(connectors):
            name = f"{_CONNECTOR_KINDS[i % len(_CONNECTOR_KINDS)]}-{i}"
            if i == connectors - 1 and connectors > 1:
                name = f"orders/{name} v2"  # needs path escaping
            self.add_connector(name, self._random_states())

    def _random_states(self) -> List[str]:
        return [self._rng.choice(_TASK_STATES) for _ in range(self._rng.randint(1, 4))]

    def add_connector(self, name: str, task_states: List[str]):
        """Add (or replace) a connector with tasks in the given states."""
        tasks = []
        for task_id, state in enumerate(task_states):
            task = {"id": task_id, "state": state, "worker_id": self._rng.choice(self._workers)}
            if state == "FAILED":
                task["trace"] = "org.apache.kafka.connect.errors.ConnectException: simulated failure"
            tasks.append(task)

        connector_state = "FAILED" if task_states and all(s == "FAILED" for s in task_states) else "RUNNING"
        self._statuses[name] = {
            "name": name,
            "connector": {"state": connector_state, "worker_id": self._workers[0]},
            "tasks": tasks,
            "type": "source" if "source" in name else "sink",
        }

    def connector_names(self) -> List[str]:
        return list(self._statuses)

    def has_connector(self, name: str) -> bool:
        return name in self._statuses

    def status(self, name: str) -> dict:
        return self._statuses[name]

    def task_states(self, name: str) -> List[str]:
        return [t["state"] for t in self._statuses[name]["tasks"]]
