"""Table projection of the latest snapshot."""

import math

from energytop.models import DisplayRow, Entry, Snapshot

PLACEHOLDER = "—"


def format_energy(value: float | None) -> str:
    """Format a kWh value to 3 decimals, or the placeholder when absent."""
    if value is None or not math.isfinite(value):
        return PLACEHOLDER
    return f"{value:.3f}"


def _sort_value(entry: Entry) -> float:
    return entry.energy_converted if entry.has_energy else 0.0


def project(snapshot: Snapshot) -> list[DisplayRow]:
    """
    Project a snapshot into display rows.

    Rows are ordered by energy, highest first. Ties keep parse order.
    """
    # sorted() is stable, also with reverse=True
    entries = sorted(snapshot.entries, key=_sort_value, reverse=True)
    return [
        DisplayRow(pid=entry.pid, comm=entry.comm, energy=format_energy(entry.energy_converted))
        for entry in entries
    ]
