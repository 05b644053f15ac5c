"""Terminal rendering for the one-shot `status` command, using Rich."""

from __future__ import annotations

import json
from collections import OrderedDict
from dataclasses import dataclass
from typing import IO, Dict, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

from kafka_connect_exporter import metrics as m


@dataclass
class ConnectorRow:
    host: str
    connector: str
    running: int = 0
    paused: int = 0
    failed: int = 0
    unassigned: int = 0
    total: int = 0

    def summary(self) -> dict:
        return {
            "host": self.host,
            "connector": self.connector,
            "running": self.running,
            "paused": self.paused,
            "failed": self.failed,
            "unassigned": self.unassigned,
            "total": self.total,
        }


_FIELD_FOR_METRIC = {
    m.RUNNING_COUNT: "running",
    m.PAUSED_COUNT: "paused",
    m.FAILED_COUNT: "failed",
    m.UNASSIGNED_COUNT: "unassigned",
    m.TASK_COUNT: "total",
}


def group_samples(samples: Iterable[m.Sample]) -> Tuple[Dict[str, int], List[ConnectorRow]]:
    """Fold a flat sample stream back into per-host counts and per-connector rows."""
    connector_counts: Dict[str, int] = OrderedDict()
    rows: Dict[Tuple[str, str], ConnectorRow] = OrderedDict()

    for sample in samples:
        host = sample.labels["host"]
        if sample.name == m.CONNECTOR_COUNT:
            connector_counts[host] = int(sample.value)
            continue

        key = (host, sample.labels["connector"])
        row = rows.get(key)
        if row is None:
            row = rows[key] = ConnectorRow(host=host, connector=key[1])
        setattr(row, _FIELD_FOR_METRIC[sample.name], int(sample.value))

    ordered = sorted(rows.values(), key=lambda r: (r.host, r.connector))
    return connector_counts, ordered


def _health_style(row: ConnectorRow) -> str:
    if row.failed:
        return "red"
    if row.unassigned or row.paused:
        return "yellow"
    return "green"


def build_table(connector_counts: Dict[str, int], rows: List[ConnectorRow]) -> Table:
    table = Table(show_header=True, header_style="bold", title="Kafka Connect task states")
    table.add_column("Host")
    table.add_column("Connector")
    table.add_column("Running", justify="right")
    table.add_column("Paused", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Unassigned", justify="right")
    table.add_column("Total", justify="right")

    for row in rows:
        style = _health_style(row)
        table.add_row(
            Text(row.host),
            Text(row.connector, style=style),
            str(row.running),
            str(row.paused),
            str(row.failed),
            str(row.unassigned),
            str(row.total),
        )

    for host, count in connector_counts.items():
        if not any(r.host == host for r in rows):
            table.add_row(Text(host), Text(f"({count} connectors, no task status)", style="dim"))

    return table


def print_status(
    samples: Iterable[m.Sample],
    errors: List[str],
    console: Optional[Console] = None,
):
    console = console or Console()
    connector_counts, rows = group_samples(samples)

    console.print(build_table(connector_counts, rows))
    for host, count in connector_counts.items():
        console.print(Text.assemble(f"  {host}: ", (str(count), "bold"), " connectors"))

    if errors:
        console.print(f"\n[bold red]{len(errors)} upstream error(s):[/bold red]")
        for error in errors:
            # Upstream bodies can contain "[...]", so no markup here
            console.print(f"  {error}", style="red", markup=False)
    console.print()


def write_jsonl(samples: Iterable[m.Sample], errors: List[str], stream: IO[str]):
    """One JSON object per connector, then one per reported error.

    Meant for scripts and log pipelines where a Rich table isn't useful.
    """
    connector_counts, rows = group_samples(samples)

    for host, count in connector_counts.items():
        stream.write(json.dumps({"host": host, "connectors": count}) + "\n")
    for row in rows:
        stream.write(json.dumps(row.summary()) + "\n")
    for error in errors:
        stream.write(json.dumps({"error": error}) + "\n")
    stream.flush()
