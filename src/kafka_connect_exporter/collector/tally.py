"""
Task state tallying.

Kafka Connect reports a free-form state string per task. We only track
three of them by name; everything else (UNASSIGNED, RESTARTING, empty,
states added in future Connect versions) is counted as unassigned so
the task still shows up in the total.
"""

from __future__ import annotations

from typing import Iterable

from kafka_connect_exporter.metrics import Category, ConnectorStatusMetric, TaskStatus


def classify(state: str) -> Category:
    if state == Category.RUNNING.value:
        return Category.RUNNING
    if state == Category.PAUSED.value:
        return Category.PAUSED
    if state == Category.FAILED.value:
        return Category.FAILED
    return Category.UNASSIGNED


def tally(tasks: Iterable[TaskStatus]) -> ConnectorStatusMetric:
    """Count tasks per category. connector/host are left for the caller."""
    counts = {category: 0 for category in Category}
    total = 0

    for task in tasks:
        counts[classify(task.state)] += 1
        total += 1

    return ConnectorStatusMetric(counts=counts, total=total)
